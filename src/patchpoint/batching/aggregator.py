"""Token-budgeted grouping of changed files.

Files are packed greedily, in input order, into groups whose estimated
token cost stays within a budget, then groups are ordered by priority.
The greedy pass never reorders files, so identical input always yields
identical groups.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from pathlib import PurePosixPath
from typing import Any

from patchpoint.batching.classifier import classify_path
from patchpoint.constants import DEFAULT_FILE_TOKEN_ESTIMATE, MAX_TOKENS_PER_GROUP
from patchpoint.diff.parser import split_unified_diff
from patchpoint.logging import get_logger
from patchpoint.models.files import FileCategory, FileGroup, FileRecord, OversizedFile
from patchpoint.utils.text import estimate_tokens

__all__ = [
    "build_file_records",
    "records_from_diff",
    "group_files",
    "group_by_category",
    "group_by_module",
    "describe_group",
]

logger = get_logger(__name__)


def build_file_records(
    entries: Iterable[Mapping[str, Any]],
    *,
    estimator: Callable[[str], int] = estimate_tokens,
) -> list[FileRecord]:
    """Classify and cost GitHub pull request file entries.

    Args:
        entries: Dicts with ``filename``, optional ``patch`` and ``status``,
            as returned by the pull request files API.
        estimator: Token estimator applied to each patch.

    Returns:
        One record per entry, in input order. Files without a patch keep
        ``patch=None`` and a flat default cost.
    """
    records: list[FileRecord] = []
    for entry in entries:
        path = entry["filename"]
        patch = entry.get("patch") or None
        classification = classify_path(path)
        tokens = estimator(patch) if patch else DEFAULT_FILE_TOKEN_ESTIMATE
        records.append(
            FileRecord(
                path=path,
                patch=patch,
                tokens=tokens,
                category=classification.category,
                priority=classification.priority,
                status=entry.get("status") or "modified",
            )
        )
    return records


def records_from_diff(
    diff_text: str,
    *,
    estimator: Callable[[str], int] = estimate_tokens,
) -> list[FileRecord]:
    """Build file records from a local multi-file ``git diff``."""
    patches = split_unified_diff(diff_text)
    return build_file_records(
        ({"filename": path, "patch": patch} for path, patch in patches.items()),
        estimator=estimator,
    )


def _check_budget(max_tokens_per_group: int) -> None:
    if max_tokens_per_group <= 0:
        raise ValueError(
            f"max_tokens_per_group must be positive, got {max_tokens_per_group}"
        )


def _split(files: list[FileRecord], budget: int, prefix: str) -> list[FileGroup]:
    """Greedy fill in input order. Returned groups are in creation order."""
    groups: list[FileGroup] = []
    current: list[FileRecord] = []
    current_tokens = 0

    def next_id() -> str:
        return f"{prefix}-{len(groups) + 1}"

    for record in files:
        if record.tokens > budget:
            if current:
                groups.append(FileGroup.from_files(next_id(), current))
                current, current_tokens = [], 0
            logger.warning(
                "oversized_file",
                file=record.path,
                tokens=record.tokens,
                budget=budget,
            )
            groups.append(OversizedFile.from_files(next_id(), [record]))
            continue

        if current and current_tokens + record.tokens > budget:
            groups.append(FileGroup.from_files(next_id(), current))
            current, current_tokens = [], 0

        current.append(record)
        current_tokens += record.tokens

    if current:
        groups.append(FileGroup.from_files(next_id(), current))
    return groups


def _by_priority(groups: list[FileGroup]) -> list[FileGroup]:
    # sorted() is stable, so equal priorities keep creation order
    return sorted(groups, key=lambda g: -g.priority)


def group_files(
    files: list[FileRecord],
    max_tokens_per_group: int = MAX_TOKENS_PER_GROUP,
    *,
    prefix: str = "group",
) -> list[FileGroup]:
    """Pack files into token-budgeted groups, highest priority first.

    Every group's ``total_tokens`` is at most ``max_tokens_per_group``,
    except :class:`OversizedFile` groups, which hold exactly one file whose
    own cost is over budget.

    Args:
        files: Records in the order they should be packed.
        max_tokens_per_group: Token ceiling per group.
        prefix: Prefix for generated group ids.

    Returns:
        Groups sorted by descending priority; ties keep creation order.

    Raises:
        ValueError: If the budget is not positive.
    """
    _check_budget(max_tokens_per_group)
    groups = _by_priority(_split(list(files), max_tokens_per_group, prefix))
    logger.debug(
        "files_grouped",
        files=len(files),
        groups=len(groups),
        oversized=sum(1 for g in groups if g.is_oversized),
    )
    return groups


def group_by_category(
    files: list[FileRecord],
    category: FileCategory,
    max_tokens_per_group: int = MAX_TOKENS_PER_GROUP,
) -> list[FileGroup]:
    """Group only the files of one category."""
    _check_budget(max_tokens_per_group)
    relevant = [f for f in files if f.category is category]
    return _by_priority(_split(relevant, max_tokens_per_group, category.value))


def module_of(path: str) -> str:
    """Directory a file lives in, or ``root`` for top-level files."""
    parent = PurePosixPath(path).parent.as_posix()
    return "root" if parent in ("", ".") else parent


def group_by_module(
    files: list[FileRecord],
    max_tokens_per_group: int = MAX_TOKENS_PER_GROUP,
) -> list[FileGroup]:
    """Group files by category and directory, so related code is reviewed together.

    Modules appear in first-seen order and each is packed under the budget
    on its own.
    """
    _check_budget(max_tokens_per_group)
    buckets: dict[tuple[FileCategory, str], list[FileRecord]] = {}
    for record in files:
        buckets.setdefault((record.category, module_of(record.path)), []).append(record)

    groups: list[FileGroup] = []
    for (category, module), members in buckets.items():
        prefix = f"{category.value}:{module}"
        groups.extend(_split(members, max_tokens_per_group, prefix))
    return _by_priority(groups)


def describe_group(group: FileGroup) -> str:
    """Render a short Markdown summary of a group."""
    lines = [
        f"## {group.group_id}",
        "",
        f"**Category**: {group.category.value}",
        f"**Priority**: {group.priority}",
        f"**Files**: {len(group.files)}",
        f"**Total Tokens**: {group.total_tokens}",
    ]
    if group.is_oversized:
        lines.append("**Oversized**: exceeds the per-group token budget")
    lines.extend(["", "### Files in this group:"])
    lines.extend(f"- {f.path} ({f.tokens} tokens)" for f in group.files)
    return "\n".join(lines)
