"""Exceptions raised by extraction and replay.

Every failure is fatal to the run that raised it; nothing is retried. The CLI
maps each exception to its ``exit_code``.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ExitCode(IntEnum):
    """Process exit codes."""

    SUCCESS = 0
    FATAL_ERROR = 1
    CONFIG_ERROR = 2
    REF_ERROR = 3
    IO_ERROR = 4
    DATA_ERROR = 5
    GIT_ERROR = 6


class RewriteError(Exception):
    """Base exception for gitrewrite errors."""

    exit_code: ExitCode = ExitCode.FATAL_ERROR

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for JSON output."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "exit_code": int(self.exit_code),
            **self.context,
        }


class ConfigError(RewriteError):
    """Configuration file missing, malformed or with unknown keys."""

    exit_code = ExitCode.CONFIG_ERROR


class RepositoryNotFound(RewriteError):
    """The path is not a git repository."""

    exit_code = ExitCode.REF_ERROR


class RefNotFound(RewriteError):
    """The branch does not resolve to an existing head."""

    exit_code = ExitCode.REF_ERROR

    def __init__(self, branch: str, **context: Any) -> None:
        super().__init__(f"Branch not found: {branch}", branch=branch, **context)
        self.branch = branch


class OrderingError(RewriteError):
    """A commit was listed before one of its parents."""

    exit_code = ExitCode.DATA_ERROR


class ExportIOError(RewriteError):
    """Filesystem failure while writing snapshots or the manifest."""

    exit_code = ExitCode.IO_ERROR


class InvalidTimestamp(RewriteError):
    """Date or timezone offset that cannot be represented."""

    exit_code = ExitCode.DATA_ERROR


class ManifestDecodeError(RewriteError):
    """The manifest cannot be read or does not have the expected shape."""

    exit_code = ExitCode.DATA_ERROR


class EmptyManifestError(ManifestDecodeError):
    """The manifest lists no commits, so there is no branch head to create."""


class TargetExistsError(RewriteError):
    """The rebuild target already holds files."""

    exit_code = ExitCode.IO_ERROR


class WorkingAreaError(RewriteError):
    """Clearing or populating the replay working area failed."""

    exit_code = ExitCode.IO_ERROR


class CommitCreationError(RewriteError):
    """git refused to stage or create a replayed commit."""

    exit_code = ExitCode.GIT_ERROR


class DanglingParentReference(RewriteError):
    """A record names a parent that has not been replayed yet."""

    exit_code = ExitCode.DATA_ERROR

    def __init__(self, sha: str, parent: str, **context: Any) -> None:
        super().__init__(
            f"Commit {sha} refers to parent {parent} which was not replayed before it",
            sha=sha,
            parent=parent,
            **context,
        )
        self.sha = sha
        self.parent = parent
