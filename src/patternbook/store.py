"""Document storage backends.

A store answers two questions: which slugs exist in a category, and what is
the raw text of one document. Absence is reported as None, never raised.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from .config import DOCUMENT_SUFFIX

log = logging.getLogger(__name__)


class DocumentStore(Protocol):
    """Read-only access to catalogue documents keyed by (category, slug)."""

    def list(self, category: str) -> list[str]:
        """Slugs in the category, in a stable order."""
        ...

    def read(self, category: str, slug: str) -> str | None:
        """Raw document text, or None if the document is absent or unreadable."""
        ...


class FilesystemDocumentStore:
    """Documents stored as ``<root>/<category>/<slug>.md``.

    Callers are expected to validate slugs before calling read(); the store
    only builds paths.
    """

    def __init__(self, root: Path):
        self.root = root

    def category_path(self, category: str) -> Path:
        return self.root / category

    def document_path(self, category: str, slug: str) -> Path:
        return self.category_path(category) / f"{slug}{DOCUMENT_SUFFIX}"

    def list(self, category: str) -> list[str]:
        category_path = self.category_path(category)
        try:
            names = sorted(entry.name for entry in category_path.iterdir() if entry.is_file())
        except OSError as e:
            log.error("Failed to read documents directory %s: %s", category_path, e)
            return []

        return [
            name[: -len(DOCUMENT_SUFFIX)]
            for name in names
            if name.endswith(DOCUMENT_SUFFIX) and not name.startswith(".")
        ]

    def read(self, category: str, slug: str) -> str | None:
        path = self.document_path(category, slug)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            # Expected for alternative title slugs
            log.debug("No document at %s", path)
            return None
        except (OSError, UnicodeDecodeError) as e:
            log.warning("Skipping unreadable document %s: %s", path, e)
            return None
