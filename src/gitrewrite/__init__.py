"""gitrewrite package.

Exports the history of a git branch as plain snapshot directories and a JSON
manifest, and replays such an export into a fresh repository.
"""

__all__ = [
    "config",
    "errors",
    "extract",
    "git",
    "manifest",
    "replay",
]
