"""Configuration for extraction and replay runs."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict

from .errors import ConfigError


@dataclass(slots=True)
class RewriteConfig:
    """Runtime configuration shared by the extract and rebuild commands.

    Attributes
    ----------
    branch:
        Branch whose history is extracted. Defaults to ``main``.
    export_dir:
        Directory receiving the snapshots and the manifest. Relative paths are
        resolved against the current directory.
    manifest_name:
        File name of the aggregated manifest inside ``export_dir``.
    meta_filename:
        Reserved file name of the per-commit metadata copy. Files with this
        name are never treated as tracked content during replay.
    engine_dir:
        Name of git's internal state directory in a working tree. It survives
        the working area being cleared between replayed commits.
    strict_parents:
        When true, a record whose parent was not replayed earlier aborts the
        run. When false the parent is dropped from the new commit instead.
    """

    branch: str = "main"
    export_dir: Path = field(default_factory=lambda: Path("export"))
    manifest_name: str = "manifest.json"
    meta_filename: str = ".commit-meta.json"
    engine_dir: str = ".git"
    strict_parents: bool = True

    def manifest_path(self) -> Path:
        """Return the location of the manifest inside the export directory."""
        return self.export_dir / self.manifest_name

    def with_overrides(self, **overrides: Any) -> "RewriteConfig":
        """Return a copy with every non-``None`` override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if "export_dir" in changes:
            changes["export_dir"] = Path(changes["export_dir"])
        return replace(self, **changes)

    @classmethod
    def from_file(cls, path: Path) -> "RewriteConfig":
        """Load a configuration from a JSON object of field overrides.

        Parameters
        ----------
        path:
            JSON file, e.g. ``{"branch": "trunk", "strict_parents": false}``

        Returns
        -------
        Configuration with the defaults replaced by the values in the file
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read configuration {path}: {e}", path=str(path)) from e

        if not isinstance(data, dict):
            raise ConfigError(f"Configuration {path} must hold a JSON object", path=str(path))

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(
                f"Unknown configuration keys in {path}: {', '.join(unknown)}",
                path=str(path),
            )

        overrides: Dict[str, Any] = dict(data)
        return cls().with_overrides(**overrides)


DEFAULT_CONFIG = RewriteConfig()
