"""Replay an export into a new repository."""

from .replayer import ReplayResult, Replayer, rebuild_repository

__all__ = [
    "ReplayResult",
    "Replayer",
    "rebuild_repository",
]
