from __future__ import annotations

import pytest

from gitrewrite.errors import RefNotFound, RepositoryNotFound
from gitrewrite.git.walker import collect_commits, open_repository, ordering_violations


def _records(commits):
    return [(c.hexsha, [p.hexsha for p in c.parents]) for c in commits]


def test_linear_history_is_oldest_first(builder) -> None:
    c1 = builder.commit("C1", files={"a.txt": "a"})
    c2 = builder.commit("C2", files={"b.txt": "b"})
    c3 = builder.commit("C3", files={"c.txt": "c"})

    commits = collect_commits(builder.repo, "main")

    assert [c.hexsha for c in commits] == [c1.hexsha, c2.hexsha, c3.hexsha]


def test_merge_history_lists_parents_first(builder) -> None:
    c1 = builder.commit("C1", files={"a.txt": "a"}, parents=[])
    c2 = builder.commit("C2", files={"b.txt": "b"}, remove=["a.txt"], parents=[])
    c3 = builder.commit("Merge", files={"a.txt": "a"}, parents=[c1, c2])
    c4 = builder.commit("After", files={"d.txt": "d"})

    commits = collect_commits(builder.repo, "main")
    shas = [c.hexsha for c in commits]

    assert sorted(shas) == sorted([c1.hexsha, c2.hexsha, c3.hexsha, c4.hexsha])
    assert shas[-2:] == [c3.hexsha, c4.hexsha]
    assert ordering_violations(_records(commits)) == []


def test_order_is_stable_across_runs(builder) -> None:
    c1 = builder.commit("C1", files={"a.txt": "a"}, parents=[])
    c2 = builder.commit("C2", files={"b.txt": "b"}, parents=[])
    builder.commit("Merge", files={"c.txt": "c"}, parents=[c1, c2])

    first = [c.hexsha for c in collect_commits(builder.repo, "main")]
    second = [c.hexsha for c in collect_commits(builder.repo, "main")]

    assert first == second


def test_missing_branch_raises(builder) -> None:
    builder.commit("C1", files={"a.txt": "a"})

    with pytest.raises(RefNotFound) as excinfo:
        collect_commits(builder.repo, "does-not-exist")

    assert excinfo.value.branch == "does-not-exist"


def test_open_repository_rejects_plain_directory(tmp_path) -> None:
    plain = tmp_path / "plain"
    plain.mkdir()

    with pytest.raises(RepositoryNotFound):
        open_repository(plain)


def test_ordering_violations_detects_child_before_parent() -> None:
    records = [("b", ["a"]), ("a", []), ("c", ["a", "b"])]

    assert ordering_violations(records) == [("a", "b")]


def test_ordering_violations_flags_unknown_parent() -> None:
    assert ordering_violations([("a", []), ("b", ["x"])]) == [("x", "b")]
