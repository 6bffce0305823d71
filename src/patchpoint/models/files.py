"""Data models for classified files and token-budgeted groups."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FileCategory(str, Enum):
    """Review-relevance buckets a changed file can fall into.

    Examples:
        >>> FileCategory("business-logic")
        <FileCategory.BUSINESS_LOGIC: 'business-logic'>
    """

    SECURITY = "security"
    INFRASTRUCTURE = "infrastructure"
    BUSINESS_LOGIC = "business-logic"
    CONFIG = "config"
    TESTS = "tests"
    DOCS = "docs"


@dataclass(frozen=True, slots=True)
class FileClassification:
    """Category and priority assigned to a path. Higher priority is reviewed first."""

    category: FileCategory
    priority: int


@dataclass(frozen=True, slots=True)
class FileRecord:
    """A changed file ready for grouping.

    Attributes:
        path: Repository-relative path.
        patch: Unified diff for the file, or None when GitHub omits it.
        tokens: Estimated prompt cost of the file.
        category: Category from the classifier.
        priority: Priority from the classifier.
        status: GitHub file status (added, modified, removed, renamed).
    """

    path: str
    patch: str | None
    tokens: int
    category: FileCategory
    priority: int
    status: str = "modified"

    @property
    def has_patch(self) -> bool:
        return bool(self.patch)


@dataclass(frozen=True, slots=True)
class FileGroup:
    """Files that travel together in a single AI request.

    ``total_tokens`` never exceeds the budget the group was built with;
    see :class:`OversizedFile` for the one exception.

    Attributes:
        group_id: Stable identifier, unique within one grouping call.
        files: Member files in input order.
        total_tokens: Sum of member token estimates.
        category: Category of the highest-priority member.
        priority: Highest member priority.
    """

    group_id: str
    files: tuple[FileRecord, ...]
    total_tokens: int
    category: FileCategory
    priority: int

    @property
    def paths(self) -> list[str]:
        return [f.path for f in self.files]

    @property
    def is_oversized(self) -> bool:
        return False

    @classmethod
    def from_files(cls, group_id: str, files: list[FileRecord]) -> FileGroup:
        """Build a group, deriving its totals from ``files``.

        Raises:
            ValueError: If ``files`` is empty.
        """
        if not files:
            raise ValueError("A file group needs at least one file")
        lead = max(files, key=lambda f: f.priority)
        return cls(
            group_id=group_id,
            files=tuple(files),
            total_tokens=sum(f.tokens for f in files),
            category=lead.category,
            priority=lead.priority,
        )


@dataclass(frozen=True, slots=True)
class OversizedFile(FileGroup):
    """A single file whose own cost exceeds the group budget.

    It is sent alone and is the only group allowed over budget.
    """

    @property
    def is_oversized(self) -> bool:
        return True

    @property
    def record(self) -> FileRecord:
        return self.files[0]
