from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import pytest
from git import Actor, Commit, Repo

AUTHOR = Actor("Ada Lovelace", "ada@example.com")


class RepoBuilder:
    """Build small histories on a ``main`` branch for tests."""

    def __init__(self, path: Path):
        self.path = path
        self.repo = Repo.init(path, mkdir=True)
        self.repo.git.symbolic_ref("HEAD", "refs/heads/main")

    def write(self, name: str, content: Union[str, bytes], mode: Optional[int] = None) -> Path:
        target = self.path / name
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode("utf-8")
        target.write_bytes(content)
        if mode is not None:
            target.chmod(mode)
        return target

    def commit(
        self,
        message: str,
        files: Optional[Dict[str, Union[str, bytes]]] = None,
        remove: Iterable[str] = (),
        parents: Optional[List[Commit]] = None,
        date: str = "1700000000 +0000",
        author: Actor = AUTHOR,
    ) -> Commit:
        for name, content in (files or {}).items():
            self.write(name, content)
        for name in remove:
            (self.path / name).unlink()
        self.repo.git.add(all=True, force=True)
        return self.repo.index.commit(
            message,
            parent_commits=parents,
            author=author,
            committer=author,
            author_date=date,
            commit_date=date,
            head=True,
            skip_hooks=True,
        )


@pytest.fixture
def builder(tmp_path) -> RepoBuilder:
    return RepoBuilder(tmp_path / "source")


def relative_files(root: Path) -> Dict[str, bytes]:
    """Map every file below ``root`` to its content, keyed by POSIX path."""
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


def lock_index_after_clearing(monkeypatch) -> None:
    """Leave a stale ``index.lock`` behind so that staging during replay fails."""
    from gitrewrite.replay import replayer

    clear = replayer.clear_working_area

    def clear_and_lock(workdir: Path, keep: str) -> None:
        clear(workdir, keep)
        (Path(workdir) / keep / "index.lock").write_text("")

    monkeypatch.setattr(replayer, "clear_working_area", clear_and_lock)
