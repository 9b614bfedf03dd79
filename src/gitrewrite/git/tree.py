"""Materialise git tree objects as plain directories."""

from __future__ import annotations

import logging
import stat
from pathlib import Path
from typing import List, Tuple

from git import Blob, Repo, Tree
from git.util import hex_to_bin

from ..errors import ExportIOError

logger = logging.getLogger(__name__)

_EXECUTABLE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def export_tree(repo: Repo, tree_sha: str, output_dir: Path) -> int:
    """Write the files of a tree object below ``output_dir``.

    Parameters
    ----------
    repo:
        Repository holding the tree
    tree_sha:
        Hex id of the tree object
    output_dir:
        Directory receiving the snapshot; created when missing

    Returns
    -------
    Number of files written

    Blobs are written byte for byte and sub-trees become directories.
    Submodule entries are skipped. Symbolic links are written as regular files
    holding the link target. Any filesystem failure aborts the export with
    ``ExportIOError`` and leaves what was already written in place.
    """
    root = Tree(repo, hex_to_bin(tree_sha), path="")
    pending: List[Tuple[Tree, Path]] = [(root, Path(output_dir))]
    written = 0

    try:
        while pending:
            tree, target = pending.pop()
            target.mkdir(parents=True, exist_ok=True)

            for item in tree:
                path = target / item.name

                if item.type == "blob":
                    _write_blob(item, path)
                    written += 1
                elif item.type == "tree":
                    pending.append((item, path))
                else:
                    logger.debug("Skipping %s entry %s", item.type, item.path)
    except OSError as e:
        raise ExportIOError(
            f"Cannot export tree {tree_sha} to {output_dir}: {e}",
            tree_sha=tree_sha,
            path=str(output_dir),
        ) from e

    return written


def _write_blob(blob: Blob, path: Path) -> None:
    path.write_bytes(blob.data_stream.read())
    if blob.mode == Blob.executable_mode:
        path.chmod(path.stat().st_mode | _EXECUTABLE_BITS)
