"""Configuration management for patternbook.

Locations come from environment variables with filesystem discovery as a
fallback. Catalogue constants live here rather than being scattered
throughout the codebase.
"""

import os
from pathlib import Path
from typing import get_args

from .errors import ConfigurationError
from .models import Category

__all__ = [
    "CATEGORIES",
    "CATEGORY_LABELS",
    "ConfigurationError",
    "DOCUMENT_SUFFIX",
    "REGISTRY_FILENAME",
    "SITE_NAME",
    "category_label",
    "get_documents_root",
    "get_registry_path",
    "is_valid_category",
]

SITE_NAME = "Augmented Coding Patterns"

# Categories in display order
CATEGORIES: tuple[Category, ...] = get_args(Category)

CATEGORY_LABELS: dict[str, tuple[str, str]] = {
    "patterns": ("Pattern", "Patterns"),
    "anti-patterns": ("Anti-pattern", "Anti-patterns"),
    "obstacles": ("Obstacle", "Obstacles"),
}

DOCUMENT_SUFFIX = ".md"
REGISTRY_FILENAME = "relationships.yaml"

# Directories probed (relative to cwd) when no root is configured
DOCUMENTS_DIR_CANDIDATES = ("documents", "../documents")


def is_valid_category(value: str) -> bool:
    """Check whether a string names a known category."""
    return value in CATEGORIES


def category_label(category: str, plural: bool = False) -> str:
    """Human label for a category ("Anti-pattern", "Obstacles", ...)."""
    singular, plural_label = CATEGORY_LABELS[category]
    return plural_label if plural else singular


def get_documents_root() -> Path:
    """Get the documents root directory.

    Discovery order:
    1. PATTERNBOOK_DOCUMENTS_ROOT environment variable (explicit override)
    2. ./documents, then ../documents relative to the working directory
    3. Error with helpful message

    Raises:
        ConfigurationError: If no documents directory can be found.
    """
    root = os.environ.get("PATTERNBOOK_DOCUMENTS_ROOT")
    if root:
        return Path(root)

    cwd = Path.cwd()
    for candidate in DOCUMENTS_DIR_CANDIDATES:
        path = (cwd / candidate).resolve()
        if path.is_dir():
            return path

    raise ConfigurationError(
        "No documents directory found. Options:\n"
        "  1. Run from a directory containing documents/\n"
        "  2. Set PATTERNBOOK_DOCUMENTS_ROOT to the documents directory"
    )


def get_registry_path(documents_root: Path | None = None) -> Path:
    """Get the relationship registry file.

    Uses PATTERNBOOK_REGISTRY when set, otherwise relationships.yaml in the
    documents root.
    """
    explicit = os.environ.get("PATTERNBOOK_REGISTRY")
    if explicit:
        return Path(explicit)
    root = documents_root if documents_root is not None else get_documents_root()
    return root / REGISTRY_FILENAME
