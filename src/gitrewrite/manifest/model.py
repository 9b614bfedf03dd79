"""Commit metadata records and the manifest aggregating them."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

from git import Commit

from ..errors import ExportIOError, ManifestDecodeError
from ..git.timecodec import EngineTime, from_engine_time

logger = logging.getLogger(__name__)

UNKNOWN_AUTHOR = "unknown"

_COMMIT_FIELDS = (
    "sha",
    "parents",
    "author_name",
    "author_email",
    "date",
    "message",
    "tree_sha",
    "folder",
)
_MANIFEST_FIELDS = ("name", "branch", "commits")


@dataclass(frozen=True, slots=True)
class CommitMeta:
    """Metadata about a single exported commit.

    Attributes
    ----------
    sha:
        Id of the original commit.
    parents:
        Ids of the original parents, first parent first.
    author_name, author_email:
        Author identity; ``"unknown"`` when the original left it empty.
    date:
        Authorship time with the author's own UTC offset.
    message:
        Commit message with trailing whitespace removed.
    tree_sha:
        Id of the original tree, used to verify the replayed tree.
    folder:
        Snapshot directory, relative to the directory holding the export.
    """

    sha: str
    parents: Tuple[str, ...]
    author_name: str
    author_email: str
    date: datetime
    message: str
    tree_sha: str
    folder: Path

    @classmethod
    def capture(cls, commit: Commit, folder: Path) -> "CommitMeta":
        """Read the fields of ``commit`` that replay needs.

        The repository is only read. ``folder`` is stored as given.
        """
        author = commit.author
        date = from_engine_time(
            EngineTime.from_altz(commit.authored_date, commit.author_tz_offset)
        )
        message = commit.message
        if isinstance(message, bytes):
            message = message.decode("utf-8", errors="replace")

        return cls(
            sha=commit.hexsha,
            parents=tuple(parent.hexsha for parent in commit.parents),
            author_name=author.name or UNKNOWN_AUTHOR,
            author_email=author.email or UNKNOWN_AUTHOR,
            date=date,
            message=message.rstrip(),
            tree_sha=commit.tree.hexsha,
            folder=Path(folder),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sha": self.sha,
            "parents": list(self.parents),
            "author_name": self.author_name,
            "author_email": self.author_email,
            "date": self.date.isoformat(),
            "message": self.message,
            "tree_sha": self.tree_sha,
            "folder": self.folder.as_posix(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CommitMeta":
        if not isinstance(data, Mapping):
            raise ManifestDecodeError("Commit record must be a JSON object")
        missing = [name for name in _COMMIT_FIELDS if name not in data]
        if missing:
            raise ManifestDecodeError(
                f"Commit record is missing {', '.join(missing)}",
                sha=data.get("sha"),
            )

        sha = _expect_str(data, "sha")
        parents = data["parents"]
        if not isinstance(parents, list) or not all(isinstance(p, str) for p in parents):
            raise ManifestDecodeError(f"Commit {sha}: parents must be a list of strings", sha=sha)

        return cls(
            sha=sha,
            parents=tuple(parents),
            author_name=_expect_str(data, "author_name"),
            author_email=_expect_str(data, "author_email"),
            date=_parse_date(_expect_str(data, "date"), sha),
            message=_expect_str(data, "message"),
            tree_sha=_expect_str(data, "tree_sha"),
            folder=Path(_expect_str(data, "folder")),
        )


@dataclass(frozen=True, slots=True)
class RepoManifest:
    """Everything one extraction run produced, in replay order."""

    name: str
    branch: str
    commits: Tuple[CommitMeta, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "branch": self.branch,
            "commits": [meta.to_dict() for meta in self.commits],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RepoManifest":
        if not isinstance(data, Mapping):
            raise ManifestDecodeError("Manifest must be a JSON object")
        missing = [name for name in _MANIFEST_FIELDS if name not in data]
        if missing:
            raise ManifestDecodeError(f"Manifest is missing {', '.join(missing)}")

        extra = sorted(set(data) - set(_MANIFEST_FIELDS))
        if extra:
            # Older exports carried a ``signing_keys`` table nothing reads.
            logger.debug("Ignoring manifest keys: %s", ", ".join(extra))

        commits = data["commits"]
        if not isinstance(commits, list):
            raise ManifestDecodeError("Manifest commits must be a list")

        return cls(
            name=_expect_str(data, "name"),
            branch=_expect_str(data, "branch"),
            commits=tuple(CommitMeta.from_dict(entry) for entry in commits),
        )


def write_manifest(manifest: RepoManifest, path: Path) -> None:
    """Save ``manifest`` as indented JSON."""
    _write_json(manifest.to_dict(), path)


def write_commit_meta(meta: CommitMeta, path: Path) -> None:
    """Save the per-commit copy of ``meta`` next to its snapshot."""
    _write_json(meta.to_dict(), path)


def read_manifest(path: Path) -> RepoManifest:
    """Load a manifest written by ``write_manifest``.

    Raises
    ------
    ManifestDecodeError
        If the file cannot be read, is not JSON, or has the wrong shape
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ManifestDecodeError(f"Cannot read manifest {path}: {e}", path=str(path)) from e
    except json.JSONDecodeError as e:
        raise ManifestDecodeError(f"Manifest {path} is not valid JSON: {e}", path=str(path)) from e

    return RepoManifest.from_dict(data)


def _write_json(data: Dict[str, Any], path: Path) -> None:
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
    except OSError as e:
        raise ExportIOError(f"Cannot write {path}: {e}", path=str(path)) from e


def _expect_str(data: Mapping[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise ManifestDecodeError(
            f"Field {key} must be a string, got {type(value).__name__}",
            field=key,
        )
    return value


def _parse_date(value: str, sha: str) -> datetime:
    # fromisoformat only accepts a trailing "Z" from Python 3.11 on
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    try:
        date = datetime.fromisoformat(value)
    except ValueError as e:
        raise ManifestDecodeError(f"Commit {sha}: invalid date {value!r}", sha=sha) from e
    if date.utcoffset() is None:
        raise ManifestDecodeError(f"Commit {sha}: date {value!r} has no UTC offset", sha=sha)
    return date


def resolve_folder(meta: CommitMeta, base_dir: Path) -> Path:
    """Return the snapshot directory of ``meta``, resolving relative paths."""
    if meta.folder.is_absolute():
        return meta.folder
    return Path(base_dir) / meta.folder
