"""Reading history and tree objects out of a git repository."""

from .timecodec import EngineTime, from_engine_time, to_engine_time
from .tree import export_tree
from .walker import collect_commits, open_repository, ordering_violations

__all__ = [
    "EngineTime",
    "collect_commits",
    "export_tree",
    "from_engine_time",
    "open_repository",
    "ordering_violations",
    "to_engine_time",
]
