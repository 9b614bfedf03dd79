"""Commit records and the manifest file that carries them."""

from .model import CommitMeta, RepoManifest, read_manifest, write_commit_meta, write_manifest

__all__ = [
    "CommitMeta",
    "RepoManifest",
    "read_manifest",
    "write_commit_meta",
    "write_manifest",
]
