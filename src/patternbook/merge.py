"""Merge frontmatter cross-references with registry relationships.

Links come from two places: bare slugs listed in a document's frontmatter
(``related_patterns`` and friends) and typed edges in the central registry.
Both are bucketed by target category, then de-duplicated by target slug.
The registry wins when both sources name the same target, because only the
registry records a type and a direction.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from .models import DocumentId, RelatedLink, RelationshipEdge
from .relation_types import DEFAULT_RELATIONSHIP_TYPE

log = logging.getLogger(__name__)


def registry_links(
    edges: Iterable[RelationshipEdge], current_id: str
) -> list[tuple[str, RelatedLink]]:
    """Turn registry edges into (target category, link) pairs seen from current_id.

    Edges whose other endpoint has no recognizable category are dropped.
    """
    links: list[tuple[str, RelatedLink]] = []
    for edge in edges:
        is_outgoing = edge.source == current_id
        other = DocumentId.from_full_id(edge.target if is_outgoing else edge.source)
        if other is None:
            log.debug("Dropping registry edge %s -> %s: unknown category", edge.source, edge.target)
            continue
        links.append(
            (
                other.category,
                RelatedLink(
                    slug=other.slug,
                    type=edge.type,
                    direction="outgoing" if is_outgoing else "incoming",
                ),
            )
        )
    return links


def frontmatter_links(related_slugs: Mapping[str, Sequence[str]]) -> list[tuple[str, RelatedLink]]:
    """Turn frontmatter slug lists into (target category, link) pairs.

    Frontmatter carries no type or direction; links default to an outgoing
    "related" relationship.
    """
    return [
        (category, RelatedLink(slug=slug, type=DEFAULT_RELATIONSHIP_TYPE, direction="outgoing"))
        for category, slugs in related_slugs.items()
        for slug in slugs
    ]


def dedupe_by_slug(
    frontmatter: Iterable[RelatedLink], registry: Iterable[RelatedLink]
) -> list[RelatedLink]:
    """Merge two link lists of one category into one list with unique slugs.

    Frontmatter links are inserted first; registry links then overwrite any
    entry with the same slug in place, or append when the slug is new.
    """
    by_slug: dict[str, RelatedLink] = {}
    for link in frontmatter:
        by_slug[link.slug] = link
    for link in registry:
        by_slug[link.slug] = link
    return list(by_slug.values())


def merge_relationships(
    related_slugs: Mapping[str, Sequence[str]],
    edges: Iterable[RelationshipEdge],
    current_id: str,
) -> dict[str, list[RelatedLink]]:
    """Merge frontmatter and registry links per target category.

    Args:
        related_slugs: Frontmatter slugs keyed by target category.
        edges: Registry edges touching the current document.
        current_id: Full id of the current document, e.g. "patterns/show-me".

    Returns:
        Target category -> merged links. Categories without links are absent.
    """
    from_frontmatter: dict[str, list[RelatedLink]] = {}
    for category, link in frontmatter_links(related_slugs):
        from_frontmatter.setdefault(category, []).append(link)

    from_registry: dict[str, list[RelatedLink]] = {}
    for category, link in registry_links(edges, current_id):
        from_registry.setdefault(category, []).append(link)

    merged: dict[str, list[RelatedLink]] = {}
    for category in dict.fromkeys([*from_frontmatter, *from_registry]):
        links = dedupe_by_slug(from_frontmatter.get(category, []), from_registry.get(category, []))
        if links:
            merged[category] = links
    return merged
