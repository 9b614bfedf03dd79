"""Working area handling for replay: clearing it and filling it from a snapshot."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from ..errors import WorkingAreaError


def clear_working_area(workdir: Path, keep: str) -> None:
    """Delete every top-level entry of ``workdir`` except ``keep``."""
    try:
        for entry in Path(workdir).iterdir():
            if entry.name == keep:
                continue
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
    except OSError as e:
        raise WorkingAreaError(f"Cannot clear working area {workdir}: {e}", path=str(workdir)) from e


def copy_snapshot(snapshot_dir: Path, workdir: Path, skip_name: str) -> int:
    """Copy the files of ``snapshot_dir`` into ``workdir``.

    Relative paths and permission bits are kept. Files called ``skip_name``
    hold export metadata and are never copied.

    Returns
    -------
    Number of files copied
    """
    source = Path(snapshot_dir)
    if not source.is_dir():
        raise WorkingAreaError(f"Snapshot directory not found: {source}", path=str(source))

    copied = 0
    try:
        for root, dirs, files in os.walk(source):
            dirs.sort()
            relative = Path(root).relative_to(source)
            target = Path(workdir) / relative
            target.mkdir(parents=True, exist_ok=True)
            for name in sorted(files):
                if name == skip_name:
                    continue
                shutil.copy2(Path(root) / name, target / name)
                copied += 1
    except OSError as e:
        raise WorkingAreaError(
            f"Cannot copy snapshot {source} into {workdir}: {e}", path=str(source)
        ) from e
    return copied
