"""Replay exported commits into a fresh repository."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from git import Actor, Commit, Repo
from git.exc import GitCommandError

from ..config import DEFAULT_CONFIG, RewriteConfig
from ..errors import (
    CommitCreationError,
    DanglingParentReference,
    EmptyManifestError,
    ManifestDecodeError,
    TargetExistsError,
    WorkingAreaError,
)
from ..git.timecodec import to_engine_time
from ..manifest.model import CommitMeta, RepoManifest, read_manifest, resolve_folder
from .workdir import clear_working_area, copy_snapshot

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[CommitMeta, str], None]


@dataclass(slots=True)
class ReplayResult:
    """Outcome of a replay run.

    Attributes
    ----------
    sha_map:
        Original commit id to replayed commit id, for every replayed record.
    head:
        Id of the last replayed commit, where the branch now points.
    tree_mismatches:
        Original ids of commits whose replayed tree differs from the recorded
        one (symbolic links and submodules are not reproduced).
    """

    sha_map: Dict[str, str]
    head: str
    tree_mismatches: List[str] = field(default_factory=list)


class Replayer:
    """Recreate commits one record at a time in the working tree of ``repo``.

    The table from original to new commit ids lives as long as the instance;
    use one instance per replay run.
    """

    def __init__(
        self,
        repo: Repo,
        base_dir: Path,
        config: Optional[RewriteConfig] = None,
    ):
        if repo.working_tree_dir is None:
            raise WorkingAreaError(f"Repository {repo.git_dir} has no working tree")

        self.repo = repo
        self.workdir = Path(repo.working_tree_dir)
        self.base_dir = Path(base_dir)
        self.config = config or DEFAULT_CONFIG
        self.sha_map: Dict[str, str] = {}
        self.tree_mismatches: List[str] = []

    def replay(
        self, manifest: RepoManifest, progress: Optional[ProgressCallback] = None
    ) -> ReplayResult:
        """Replay every record of ``manifest`` in order and create its branch."""
        if not manifest.commits:
            raise EmptyManifestError(f"Manifest for {manifest.name} lists no commits")

        for meta in manifest.commits:
            new_sha = self.replay_commit(meta)
            if progress is not None:
                progress(meta, new_sha)

        head = self.sha_map[manifest.commits[-1].sha]
        try:
            self.repo.create_head(manifest.branch, head, force=True)
        except (GitCommandError, ValueError, OSError) as e:
            raise CommitCreationError(
                f"Cannot create branch {manifest.branch} at {head}: {e}",
                branch=manifest.branch,
            ) from e

        return ReplayResult(
            sha_map=dict(self.sha_map),
            head=head,
            tree_mismatches=list(self.tree_mismatches),
        )

    def replay_commit(self, meta: CommitMeta) -> str:
        """Recreate the commit described by ``meta`` and return its new id."""
        clear_working_area(self.workdir, self.config.engine_dir)
        copy_snapshot(
            resolve_folder(meta, self.base_dir), self.workdir, self.config.meta_filename
        )

        git_date = to_engine_time(meta.date).to_git_date()
        actor = Actor(meta.author_name, meta.author_email)

        try:
            self.repo.git.add(all=True, force=True)
        except GitCommandError as e:
            raise CommitCreationError(f"Cannot stage commit {meta.sha}: {e}", sha=meta.sha) from e

        parents = self._resolve_parents(meta)

        try:
            commit = self.repo.index.commit(
                meta.message,
                parent_commits=parents,
                author=actor,
                committer=actor,
                author_date=git_date,
                commit_date=git_date,
                head=True,
                skip_hooks=True,
            )
        except (GitCommandError, ValueError, OSError) as e:
            raise CommitCreationError(f"Cannot create commit {meta.sha}: {e}", sha=meta.sha) from e

        if commit.tree.hexsha != meta.tree_sha:
            logger.warning(
                "Tree of %s differs from the original (%s != %s)",
                meta.sha[:8],
                commit.tree.hexsha,
                meta.tree_sha,
            )
            self.tree_mismatches.append(meta.sha)

        self.sha_map[meta.sha] = commit.hexsha
        logger.info("Replayed commit %s -> %s", meta.sha[:8], commit.hexsha)
        return commit.hexsha

    def _resolve_parents(self, meta: CommitMeta) -> List[Commit]:
        parents: List[Commit] = []
        for parent in meta.parents:
            new_sha = self.sha_map.get(parent)
            if new_sha is None:
                if self.config.strict_parents:
                    raise DanglingParentReference(meta.sha, parent)
                logger.warning(
                    "Dropping parent %s of %s: it was not replayed earlier",
                    parent[:8],
                    meta.sha[:8],
                )
                continue
            parents.append(self.repo.commit(new_sha))
        return parents


def rebuild_repository(
    manifest_path: Path,
    target: Optional[Path] = None,
    config: Optional[RewriteConfig] = None,
    progress: Optional[ProgressCallback] = None,
) -> ReplayResult:
    """Create a new repository from an export and replay its history.

    Parameters
    ----------
    manifest_path:
        ``manifest.json`` inside the export directory. Relative snapshot
        folders are resolved against the export directory's parent.
    target:
        Directory of the new repository. Defaults to the manifest's ``name``
        in the current directory. It must be missing or empty.
    config:
        Replay settings
    progress:
        Called with each record and the id of its replayed commit

    Returns
    -------
    ReplayResult of the run
    """
    manifest_path = Path(manifest_path)
    manifest = read_manifest(manifest_path)
    if not manifest.commits:
        raise EmptyManifestError(f"Manifest {manifest_path} lists no commits", path=str(manifest_path))

    if target is None:
        name = Path(manifest.name)
        if name.name != manifest.name or name.name in ("", ".", ".."):
            raise ManifestDecodeError(f"Manifest name is not a directory name: {manifest.name!r}")
        target = name
    target = Path(target)

    if target.exists() and (not target.is_dir() or any(target.iterdir())):
        raise TargetExistsError(f"Target {target} already exists and is not empty", path=str(target))

    try:
        repo = Repo.init(target, mkdir=True)
        repo.git.symbolic_ref("HEAD", f"refs/heads/{manifest.branch}")
    except (GitCommandError, OSError) as e:
        raise WorkingAreaError(f"Cannot initialise repository at {target}: {e}", path=str(target)) from e

    base_dir = manifest_path.resolve().parent.parent
    logger.info("Replaying %d commits into %s", len(manifest.commits), target)
    return Replayer(repo, base_dir, config).replay(manifest, progress)
