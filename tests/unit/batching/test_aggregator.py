"""Unit tests for token-budgeted grouping."""

from __future__ import annotations

import pytest

from patchpoint.batching.aggregator import (
    build_file_records,
    describe_group,
    group_by_category,
    group_by_module,
    group_files,
    module_of,
    records_from_diff,
)
from patchpoint.batching.classifier import classify_path
from patchpoint.constants import DEFAULT_FILE_TOKEN_ESTIMATE
from patchpoint.models.files import FileCategory, FileRecord, OversizedFile


def record(path: str, tokens: int, patch: str | None = "@@ -1 +1 @@\n+x") -> FileRecord:
    classification = classify_path(path)
    return FileRecord(
        path=path,
        patch=patch,
        tokens=tokens,
        category=classification.category,
        priority=classification.priority,
    )


def char_count(text: str) -> int:
    return len(text)


class TestBuildFileRecords:
    """Tests for build_file_records()."""

    def test_classifies_and_costs_entries(self) -> None:
        entries = [
            {
                "filename": "src/auth/login.py",
                "patch": "@@ -1 +1 @@\n+a",
                "status": "added",
            },
            {"filename": "logo.png", "patch": None, "status": "modified"},
        ]

        records = build_file_records(entries, estimator=char_count)

        assert [r.path for r in records] == ["src/auth/login.py", "logo.png"]
        assert records[0].category is FileCategory.SECURITY
        assert records[0].tokens == len("@@ -1 +1 @@\n+a")
        assert records[0].status == "added"

    def test_missing_patch_gets_default_estimate(self) -> None:
        records = build_file_records([{"filename": "logo.png"}], estimator=char_count)

        assert records[0].patch is None
        assert not records[0].has_patch
        assert records[0].tokens == DEFAULT_FILE_TOKEN_ESTIMATE
        assert records[0].status == "modified"

    def test_records_from_diff(self, git_diff: str) -> None:
        records = records_from_diff(git_diff, estimator=char_count)

        assert [r.path for r in records] == ["src/auth/login.py", "README.md"]
        assert all(r.has_patch for r in records)


class TestGroupFiles:
    """Tests for group_files()."""

    def test_groups_stay_within_budget(self) -> None:
        files = [record(f"src/mod{i}.py", 40) for i in range(7)]

        groups = group_files(files, 100)

        assert [len(g.files) for g in groups] == [2, 2, 2, 1]
        assert all(g.total_tokens <= 100 for g in groups)

    def test_every_file_lands_in_exactly_one_group(self) -> None:
        files = [record(f"src/mod{i}.py", t) for i, t in enumerate([30, 90, 10, 60, 5])]

        groups = group_files(files, 100)

        paths = [p for g in groups for p in g.paths]
        assert sorted(paths) == sorted(f.path for f in files)

    def test_greedy_fill_keeps_input_order(self) -> None:
        files = [record("src/a.py", 60), record("src/b.py", 60), record("src/c.py", 30)]

        groups = group_files(files, 100)

        assert [g.paths for g in groups] == [["src/a.py"], ["src/b.py", "src/c.py"]]

    def test_oversized_file_gets_its_own_group(self) -> None:
        files = [
            record("src/a.py", 30),
            record("src/huge.py", 500),
            record("src/b.py", 30),
        ]

        groups = group_files(files, 100)

        assert [g.paths for g in groups] == [
            ["src/a.py"],
            ["src/huge.py"],
            ["src/b.py"],
        ]
        oversized = groups[1]
        assert isinstance(oversized, OversizedFile)
        assert oversized.is_oversized
        assert oversized.record.path == "src/huge.py"
        assert not any(g.is_oversized for g in (groups[0], groups[2]))

    def test_only_oversized_groups_exceed_budget(self) -> None:
        costs = [80, 150, 20, 99, 101]
        files = [record(f"src/m{i}.py", t) for i, t in enumerate(costs)]

        for group in group_files(files, 100):
            assert group.total_tokens <= 100 or (
                group.is_oversized and len(group.files) == 1
            )

    def test_sorted_by_priority_with_stable_ties(self) -> None:
        files = [
            record("docs/a.md", 60),
            record("src/auth/a.py", 60),
            record("src/x.py", 60),
            record("src/y.py", 60),
        ]

        groups = group_files(files, 100)

        assert [g.paths[0] for g in groups] == [
            "src/auth/a.py",
            "src/x.py",
            "src/y.py",
            "docs/a.md",
        ]

    def test_group_takes_priority_of_top_member(self) -> None:
        files = [record("docs/a.md", 10), record("src/auth/b.py", 10)]

        (group,) = group_files(files, 100)

        assert group.priority == 100
        assert group.category is FileCategory.SECURITY
        assert group.total_tokens == 20

    def test_group_ids_use_prefix(self) -> None:
        files = [record("src/a.py", 60), record("src/b.py", 60)]

        groups = group_files(files, 100, prefix="review")

        assert [g.group_id for g in groups] == ["review-1", "review-2"]

    def test_deterministic(self) -> None:
        files = [record(f"src/m{i}.py", (i * 37) % 90 + 5) for i in range(20)]

        assert group_files(files, 120) == group_files(list(files), 120)

    def test_empty_input(self) -> None:
        assert group_files([], 100) == []

    @pytest.mark.parametrize("budget", [0, -5])
    def test_non_positive_budget_raises(self, budget: int) -> None:
        with pytest.raises(ValueError, match="must be positive"):
            group_files([record("src/a.py", 1)], budget)


class TestGroupByCategory:
    """Tests for group_by_category()."""

    def test_filters_to_category(self) -> None:
        files = [
            record("src/auth/a.py", 10),
            record("README.md", 10),
            record("src/auth/b.py", 10),
        ]

        groups = group_by_category(files, FileCategory.SECURITY, 100)

        assert len(groups) == 1
        assert groups[0].paths == ["src/auth/a.py", "src/auth/b.py"]
        assert groups[0].group_id == "security-1"

    def test_no_matching_files(self) -> None:
        files = [record("README.md", 10)]

        assert group_by_category(files, FileCategory.TESTS, 100) == []


class TestGroupByModule:
    """Tests for module_of() and group_by_module()."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [("src/billing/invoice.py", "src/billing"), ("setup.py", "root")],
    )
    def test_module_of(self, path: str, expected: str) -> None:
        assert module_of(path) == expected

    def test_keeps_directories_together(self) -> None:
        files = [
            record("src/billing/a.py", 10),
            record("src/orders/a.py", 10),
            record("src/billing/b.py", 10),
        ]

        groups = group_by_module(files, 100)

        assert [g.paths for g in groups] == [
            ["src/billing/a.py", "src/billing/b.py"],
            ["src/orders/a.py"],
        ]
        assert groups[0].group_id == "business-logic:src/billing-1"


class TestDescribeGroup:
    """Tests for describe_group()."""

    def test_lists_files_and_tokens(self) -> None:
        (group,) = group_files([record("src/a.py", 12), record("src/b.py", 8)], 100)

        text = describe_group(group)

        assert text.startswith("## group-1")
        assert "**Total Tokens**: 20" in text
        assert "- src/a.py (12 tokens)" in text
        assert "Oversized" not in text

    def test_marks_oversized(self) -> None:
        (group,) = group_files([record("src/a.py", 500)], 100)

        assert "**Oversized**" in describe_group(group)
