"""Catalogue operations: look up, list, resolve and enumerate documents.

The Catalog ties a document store and a relationship registry together.
Both are passed in explicitly; ``Catalog.from_config()`` wires the
filesystem defaults for the CLI.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from .config import CATEGORIES, get_documents_root, get_registry_path, is_valid_category
from .errors import DocumentNotFoundError, InvalidSlugError
from .merge import merge_relationships
from .models import (
    RELATED_FIELDS,
    ContentRecord,
    DocumentId,
    LinkProblem,
    Resolution,
    StaticPath,
)
from .parser import parse_document
from .relationships import RelationshipRegistry, get_relationships_for_both
from .slugs import is_valid_slug, title_to_slug, validate_slug
from .store import DocumentStore, FilesystemDocumentStore

log = logging.getLogger(__name__)


class Catalog:
    """Read-only view over catalogue documents and their relationships."""

    def __init__(self, store: DocumentStore, registry: RelationshipRegistry | None = None):
        self.store = store
        self.registry = registry if registry is not None else RelationshipRegistry()

    @classmethod
    def from_config(
        cls, documents_root: Path | None = None, registry_path: Path | None = None
    ) -> Catalog:
        """Build a catalog from configured (or explicit) locations.

        Raises:
            ConfigurationError: If no documents root can be found.
            RegistryError: If the registry file exists but is malformed.
        """
        root = documents_root if documents_root is not None else get_documents_root()
        path = registry_path if registry_path is not None else get_registry_path(root)
        return cls(FilesystemDocumentStore(root), RelationshipRegistry.load(path))

    # ─────────────────────────────────────────────────────────────────────
    # Documents
    # ─────────────────────────────────────────────────────────────────────

    def list_slugs(self, category: str) -> list[str]:
        """Slugs of every document in a category, in store order."""
        return self.store.list(category)

    def get_document(self, category: str, slug: str) -> ContentRecord | None:
        """Parse one document and merge its relationships.

        Returns None when the document does not exist, which callers treat as
        a cue to search alternative titles.

        Raises:
            InvalidSlugError: Before any I/O, if the slug is not safe.
        """
        validate_slug(slug)

        raw_text = self.store.read(category, slug)
        if raw_text is None:
            return None

        parsed = parse_document(raw_text, category, slug)
        current_id = f"{category}/{slug}"
        merged = merge_relationships(
            parsed.frontmatter.related_slugs(),
            get_relationships_for_both(self.registry, slug, category),
            current_id,
        )

        related = {RELATED_FIELDS[target]: links for target, links in merged.items()}
        return ContentRecord(
            title=parsed.title,
            category=category,
            slug=slug,
            emoji_indicator=parsed.emoji_indicator,
            authors=parsed.frontmatter.authors or None,
            alternative_titles=parsed.frontmatter.alternative_titles or None,
            content=parsed.content,
            raw_content=parsed.raw_content,
            **related,
        )

    def _iter_documents(self, category: str) -> Iterable[ContentRecord]:
        for slug in self.list_slugs(category):
            if not is_valid_slug(slug):
                log.warning("Skipping document with invalid filename: %s/%s", category, slug)
                continue
            record = self.get_document(category, slug)
            if record is not None:
                yield record

    def get_all_documents(self, category: str) -> list[ContentRecord]:
        """Every readable document in a category, in store order."""
        return list(self._iter_documents(category))

    # ─────────────────────────────────────────────────────────────────────
    # Resolution
    # ─────────────────────────────────────────────────────────────────────

    def resolve(self, category: str, slug: str) -> Resolution:
        """Decide what to show for a URL segment.

        The slug is first tried as a canonical document slug. Otherwise each
        document's alternative titles are slugified and compared, in store
        order and then declaration order; the first match is a redirect to
        that document's canonical slug.

        Raises:
            InvalidSlugError: If the requested slug is not safe.
            DocumentNotFoundError: If nothing matches, or the category is unknown.
        """
        if not is_valid_category(category):
            raise DocumentNotFoundError(category, slug, f"Unknown category: {category}")

        validate_slug(slug)

        record = self.get_document(category, slug)
        if record is not None:
            return Resolution(content=record, canonical_slug=slug, is_alternative_title=False)

        for candidate in self._iter_documents(category):
            for alternative in candidate.alternative_titles or []:
                if title_to_slug(alternative) == slug:
                    log.debug("Alternative title %r maps %s to %s", alternative, slug, candidate.slug)
                    return Resolution(
                        content=candidate,
                        canonical_slug=candidate.slug,
                        is_alternative_title=True,
                    )

        raise DocumentNotFoundError(category, slug)

    def static_paths(self, categories: Iterable[str] = CATEGORIES) -> list[StaticPath]:
        """Every URL segment the site answers: canonical slugs, then alternatives.

        Alternative titles of documents that cannot be read are skipped; the
        canonical path is still listed.
        """
        paths: list[StaticPath] = []
        for category in categories:
            for slug in self.list_slugs(category):
                paths.append(StaticPath(category=category, slug=slug))
                try:
                    record = self.get_document(category, slug)
                except InvalidSlugError:
                    log.warning("Skipping alternative titles of %s/%s: invalid slug", category, slug)
                    continue
                if record is None:
                    continue
                for alternative in record.alternative_titles or []:
                    alternative_slug = title_to_slug(alternative)
                    if not alternative_slug:
                        log.debug("Alternative title %r of %s has an empty slug", alternative, slug)
                        continue
                    paths.append(
                        StaticPath(
                            category=category,
                            slug=alternative_slug,
                            is_alternative_title=True,
                        )
                    )
        return paths

    # ─────────────────────────────────────────────────────────────────────
    # Link checking
    # ─────────────────────────────────────────────────────────────────────

    def check_links(self) -> list[LinkProblem]:
        """Find cross-references that do not name an existing document."""
        existing: set[str] = set()
        for category in CATEGORIES:
            existing.update(f"{category}/{slug}" for slug in self.list_slugs(category))

        problems: list[LinkProblem] = []

        for category in CATEGORIES:
            for slug in self.list_slugs(category):
                if not is_valid_slug(slug):
                    continue
                raw_text = self.store.read(category, slug)
                if raw_text is None:
                    continue
                parsed = parse_document(raw_text, category, slug)
                for target_category, slugs in parsed.frontmatter.related_slugs().items():
                    for target_slug in slugs:
                        target = f"{target_category}/{target_slug}"
                        if target not in existing:
                            problems.append(
                                LinkProblem(
                                    source=f"{category}/{slug}",
                                    target=target,
                                    origin="frontmatter",
                                    reason="target document does not exist",
                                )
                            )

        for edge in self.registry:
            for endpoint in (edge.source, edge.target):
                if DocumentId.from_full_id(endpoint) is None:
                    reason = "unknown category"
                elif endpoint not in existing:
                    reason = "document does not exist"
                else:
                    continue
                problems.append(
                    LinkProblem(
                        source=edge.source,
                        target=endpoint,
                        origin="registry",
                        reason=f"{reason}: {endpoint}",
                    )
                )

        return problems
