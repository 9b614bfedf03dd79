"""Enumerate the history of a branch with parents ahead of children."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple

from git import Commit, Repo
from git.exc import InvalidGitRepositoryError, NoSuchPathError

from ..errors import RefNotFound, RepositoryNotFound


def open_repository(repo_path: Path) -> Repo:
    """Open the repository whose working tree is ``repo_path``."""
    try:
        return Repo(Path(repo_path).resolve())
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise RepositoryNotFound(
            f"Not a valid git repository: {repo_path}", path=str(repo_path)
        ) from e


def collect_commits(repo: Repo, branch: str) -> List[Commit]:
    """Return every commit reachable from ``branch``, oldest first.

    The list is a topological order: each commit comes after all of its
    parents. Commits with no ordering constraint between them come in the
    order ``git rev-list --topo-order`` gives, which is stable for a given
    history.
    """
    try:
        head = repo.heads[branch]
    except IndexError as e:
        raise RefNotFound(branch) from e

    return list(repo.iter_commits(head.path, topo_order=True, reverse=True))


def ordering_violations(
    records: Iterable[Tuple[str, Sequence[str]]]
) -> List[Tuple[str, str]]:
    """Return ``(parent, child)`` pairs where the parent is not listed first.

    Parents that never appear in ``records`` count as violations too, since a
    replay could not resolve them.
    """
    positions: Dict[str, int] = {}
    entries = list(records)
    for index, (sha, _) in enumerate(entries):
        positions.setdefault(sha, index)

    violations: List[Tuple[str, str]] = []
    for index, (sha, parents) in enumerate(entries):
        for parent in parents:
            if positions.get(parent, index) >= index:
                violations.append((parent, sha))
    return violations
