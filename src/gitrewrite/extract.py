"""Export the history of one branch as snapshot directories plus a manifest."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable, List, Optional

from .config import DEFAULT_CONFIG, RewriteConfig
from .errors import ExportIOError, OrderingError
from .git.tree import export_tree
from .git.walker import collect_commits, open_repository, ordering_violations
from .manifest.model import CommitMeta, RepoManifest, write_commit_meta, write_manifest

logger = logging.getLogger(__name__)


def snapshot_dir_name(index: int, sha: str) -> str:
    """Return the folder name of the ``index``-th commit (1-based)."""
    return f"{index:04d}_{sha}"


def extract_repository(
    repo_path: Path,
    config: Optional[RewriteConfig] = None,
    overwrite: bool = False,
    progress: Optional[Callable[[int, int, CommitMeta], None]] = None,
) -> RepoManifest:
    """Export every commit of ``config.branch`` and write the manifest.

    Parameters
    ----------
    repo_path:
        Working tree of the source repository
    config:
        Branch, export directory and file names to use
    overwrite:
        Remove an existing, non-empty export directory instead of failing
    progress:
        Called after each commit with its position, the total and its record

    Returns
    -------
    The manifest that was written
    """
    config = config or DEFAULT_CONFIG
    repo_path = Path(repo_path).resolve()
    repo = open_repository(repo_path)
    commits = collect_commits(repo, config.branch)

    violations = ordering_violations((c.hexsha, [p.hexsha for p in c.parents]) for c in commits)
    if violations:
        parent, child = violations[0]
        raise OrderingError(
            f"Commit {child} would be exported before its parent {parent}",
            sha=child,
            parent=parent,
        )

    export_dir = Path(config.export_dir)
    _prepare_export_dir(export_dir, overwrite)
    base_dir = export_dir.resolve().parent

    metas: List[CommitMeta] = []
    for index, commit in enumerate(commits, start=1):
        snapshot = export_dir.resolve() / snapshot_dir_name(index, commit.hexsha)
        count = export_tree(repo, commit.tree.hexsha, snapshot)

        meta = CommitMeta.capture(commit, snapshot.relative_to(base_dir))
        write_commit_meta(meta, snapshot / config.meta_filename)
        metas.append(meta)

        logger.debug("Exported %s with %d files to %s", commit.hexsha[:8], count, snapshot)
        if progress is not None:
            progress(index, len(commits), meta)

    manifest = RepoManifest(name=repo_path.name, branch=config.branch, commits=tuple(metas))
    write_manifest(manifest, export_dir / config.manifest_name)
    logger.info("Exported %d commits of %s to %s", len(metas), config.branch, export_dir)
    return manifest


def _prepare_export_dir(export_dir: Path, overwrite: bool) -> None:
    try:
        if export_dir.exists() and any(export_dir.iterdir()):
            if not overwrite:
                raise ExportIOError(
                    f"Export directory {export_dir} is not empty", path=str(export_dir)
                )
            logger.info("Removing previous export at %s", export_dir)
            shutil.rmtree(export_dir)
        export_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExportIOError(
            f"Cannot prepare export directory {export_dir}: {e}", path=str(export_dir)
        ) from e
