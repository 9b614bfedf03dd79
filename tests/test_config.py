from __future__ import annotations

import json
from pathlib import Path

import pytest

from gitrewrite.config import RewriteConfig
from gitrewrite.errors import ConfigError, ExitCode, RefNotFound


def test_defaults() -> None:
    config = RewriteConfig()

    assert config.branch == "main"
    assert config.manifest_path() == Path("export") / "manifest.json"
    assert config.meta_filename == ".commit-meta.json"
    assert config.engine_dir == ".git"
    assert config.strict_parents is True


def test_overrides_skip_none_and_convert_paths() -> None:
    config = RewriteConfig().with_overrides(branch=None, export_dir="out")

    assert config.branch == "main"
    assert config.export_dir == Path("out")


def test_from_file(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"branch": "trunk", "strict_parents": False}), encoding="utf-8")

    config = RewriteConfig.from_file(path)

    assert config.branch == "trunk"
    assert config.strict_parents is False
    assert config.export_dir == Path("export")


@pytest.mark.parametrize("content", ["[]", "{oops", json.dumps({"unknown": 1})])
def test_from_file_rejects_bad_content(tmp_path, content) -> None:
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        RewriteConfig.from_file(path)


def test_error_to_dict() -> None:
    error = RefNotFound("main", path="/repo")

    assert error.to_dict() == {
        "error": "RefNotFound",
        "message": "Branch not found: main",
        "exit_code": int(ExitCode.REF_ERROR),
        "branch": "main",
        "path": "/repo",
    }
