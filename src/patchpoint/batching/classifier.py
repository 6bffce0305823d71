"""Path-based file classification.

Assigns each changed file a category and a priority so the aggregator can
put security-sensitive code in front of the model first. Rules are checked
in order and the first match wins.
"""

from __future__ import annotations

from pathlib import PurePosixPath

from patchpoint.models.files import FileCategory, FileClassification

__all__ = [
    "CATEGORY_PRIORITY",
    "ENTRY_POINT_BOOST",
    "classify_path",
    "categorize_path",
]

#: Base priority per category; higher is reviewed first
CATEGORY_PRIORITY: dict[FileCategory, int] = {
    FileCategory.SECURITY: 100,
    FileCategory.INFRASTRUCTURE: 80,
    FileCategory.BUSINESS_LOGIC: 70,
    FileCategory.CONFIG: 60,
    FileCategory.TESTS: 40,
    FileCategory.DOCS: 20,
}

#: Added to files whose name marks an entry point (index.*, main.*, app.*)
ENTRY_POINT_BOOST = 10

_ENTRY_POINT_PREFIXES = ("index.", "main.", "app.")

_SECURITY_MARKERS = (
    "auth",
    "security",
    "crypto",
    "password",
    "token",
    "session",
    ".env",
    "secret",
)
_SECURITY_EXTENSIONS = frozenset({".pem", ".key"})

_TEST_MARKERS = ("test", "spec", "__tests__", "__mocks__")

_DOC_EXTENSIONS = frozenset({".md", ".mdx", ".rst"})
_DOC_MARKERS = ("docs", "documentation")

_CONFIG_EXTENSIONS = frozenset(
    {".json", ".yml", ".yaml", ".toml", ".ini", ".cfg", ".config"}
)
_CONFIG_MARKERS = ("config", "docker", ".github/workflows")

_INFRA_MARKERS = (
    "api",
    "server",
    "database",
    "cache",
    "storage",
    "queue",
    "middleware",
)


def categorize_path(path: str) -> FileCategory:
    """Return the category for ``path`` (case-insensitive)."""
    lowered = path.lower()
    suffix = PurePosixPath(lowered).suffix

    if suffix in _SECURITY_EXTENSIONS or any(m in lowered for m in _SECURITY_MARKERS):
        return FileCategory.SECURITY
    if any(m in lowered for m in _TEST_MARKERS):
        return FileCategory.TESTS
    if suffix in _DOC_EXTENSIONS or any(m in lowered for m in _DOC_MARKERS):
        return FileCategory.DOCS
    if (
        suffix in _CONFIG_EXTENSIONS
        or lowered.startswith(".")
        or any(m in lowered for m in _CONFIG_MARKERS)
    ):
        return FileCategory.CONFIG
    if any(m in lowered for m in _INFRA_MARKERS):
        return FileCategory.INFRASTRUCTURE
    return FileCategory.BUSINESS_LOGIC


def classify_path(path: str) -> FileClassification:
    """Classify ``path`` into a category and priority.

    Examples:
        >>> classify_path("src/auth/login.py")
        FileClassification(category=<FileCategory.SECURITY: 'security'>, priority=100)
        >>> classify_path("src/main.py").priority
        80
    """
    category = categorize_path(path)
    priority = CATEGORY_PRIORITY[category]
    if PurePosixPath(path).name.lower().startswith(_ENTRY_POINT_PREFIXES):
        priority += ENTRY_POINT_BOOST
    return FileClassification(category=category, priority=priority)
