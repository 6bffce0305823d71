"""File classification and token-budgeted grouping."""

from __future__ import annotations

from patchpoint.batching.aggregator import (
    build_file_records,
    describe_group,
    group_by_category,
    group_by_module,
    group_files,
    records_from_diff,
)
from patchpoint.batching.classifier import categorize_path, classify_path

__all__ = [
    "build_file_records",
    "records_from_diff",
    "group_files",
    "group_by_category",
    "group_by_module",
    "describe_group",
    "classify_path",
    "categorize_path",
]
