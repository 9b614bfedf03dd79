"""Command line entry points for exporting and rebuilding git history."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterable

from . import log
from .config import RewriteConfig
from .errors import ExitCode, RewriteError
from .extract import extract_repository
from .manifest.model import CommitMeta
from .replay.replayer import rebuild_repository


def _resolve_config(args: argparse.Namespace, **overrides) -> RewriteConfig:
    config = RewriteConfig.from_file(args.config) if args.config else RewriteConfig()
    return config.with_overrides(**overrides)


def _extract(args: argparse.Namespace) -> None:
    config = _resolve_config(args, branch=args.branch, export_dir=args.export_dir)

    def report(index: int, total: int, meta: CommitMeta) -> None:
        print(f"[{index}/{total}] Exported commit {meta.sha[:8]} to {meta.folder}")

    manifest = extract_repository(Path.cwd(), config, overwrite=args.force, progress=report)
    print(
        f"Exported {len(manifest.commits)} commits of '{manifest.branch}' to"
        f" {config.manifest_path()}"
    )


def _rebuild(args: argparse.Namespace) -> None:
    config = _resolve_config(args)
    if args.allow_dangling_parents:
        config.strict_parents = False
    manifest_path = args.manifest or config.manifest_path()

    def report(meta: CommitMeta, new_sha: str) -> None:
        print(f"Replayed commit {meta.sha[:8]} -> {new_sha}")

    result = rebuild_repository(manifest_path, target=args.target, config=config, progress=report)
    if result.tree_mismatches:
        print(f"Warning: {len(result.tree_mismatches)} commits have a different tree than the original")
    print(f"Reconstructed {len(result.sha_map)} commits, head at {result.head}")


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        help="JSON file overriding the default settings",
    )
    log.add_arguments(parser)


def _build_extract_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitrewrite-extract",
        description="Export every commit of a branch of the repository in the"
        " current directory as a snapshot folder plus a manifest.",
    )
    parser.add_argument("--branch", help="Branch to export (defaults to main)")
    parser.add_argument(
        "--export-dir",
        type=Path,
        help="Directory receiving the export (defaults to ./export)",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Replace an existing export directory",
    )
    _add_common_arguments(parser)
    parser.set_defaults(func=_extract)
    return parser


def _build_rebuild_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitrewrite-rebuild",
        description="Create a new repository from export/manifest.json by"
        " replaying every exported commit in order.",
    )
    parser.add_argument(
        "--manifest",
        type=Path,
        help="Manifest to replay (defaults to export/manifest.json)",
    )
    parser.add_argument(
        "--target",
        type=Path,
        help="Directory of the new repository (defaults to the manifest's name)",
    )
    parser.add_argument(
        "--allow-dangling-parents",
        action="store_true",
        help="Drop parents that were not replayed earlier instead of failing",
    )
    _add_common_arguments(parser)
    parser.set_defaults(func=_rebuild)
    return parser


def _run(parser: argparse.ArgumentParser, argv: Iterable[str] | None) -> int:
    args = parser.parse_args(list(argv) if argv is not None else None)
    log.setup(args, program=parser.prog)
    try:
        args.func(args)
    except RewriteError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return int(e.exit_code)
    return int(ExitCode.SUCCESS)


def extract_main(argv: Iterable[str] | None = None) -> int:
    return _run(_build_extract_parser(), argv)


def rebuild_main(argv: Iterable[str] | None = None) -> int:
    return _run(_build_rebuild_parser(), argv)
