"""Central relationship registry.

The registry is a YAML (or JSON) file listing typed edges between documents,
identified by full ids such as ``patterns/active-partner``:

    relationships:
      - from: patterns/active-partner
        to: obstacles/black-box-ai
        type: solves
      - from: patterns/show-me
        to: patterns/chain-of-small-steps
        type: similar
        bidirectional: true

The registry is read-only; it is loaded fresh for every catalogue.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

import yaml
from pydantic import ValidationError

from .errors import RegistryError
from .models import RelationshipEdge, RelationshipGraph
from .relation_types import RELATIONSHIP_TYPES, is_relationship_type, normalize_relationship_type

log = logging.getLogger(__name__)


class RelationshipRegistry:
    """Ordered, read-only collection of relationship edges."""

    def __init__(self, edges: Iterable[RelationshipEdge] = ()):
        self._edges: tuple[RelationshipEdge, ...] = tuple(edges)

    def __len__(self) -> int:
        return len(self._edges)

    def __iter__(self) -> Iterator[RelationshipEdge]:
        return iter(self._edges)

    @property
    def edges(self) -> tuple[RelationshipEdge, ...]:
        return self._edges

    @classmethod
    def load(cls, path: Path) -> RelationshipRegistry:
        """Load a registry file.

        A missing file is an empty registry.

        Raises:
            RegistryError: If the file cannot be read or is malformed.
        """
        if not path.exists():
            log.debug("No relationship registry at %s", path)
            return cls()

        try:
            payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise RegistryError(f"Cannot read relationship registry {path}: {e}") from e
        except yaml.YAMLError as e:
            raise RegistryError(f"Relationship registry {path} is not valid YAML: {e}") from e

        return cls.from_payload(payload, source=str(path))

    @classmethod
    def from_payload(cls, payload: object, source: str = "<registry>") -> RelationshipRegistry:
        """Build a registry from parsed YAML/JSON data.

        Accepts ``{"relationships": [...]}``, a bare list of edges, or None.
        """
        if payload is None:
            return cls()
        if isinstance(payload, list):
            payload = {"relationships": payload}
        if not isinstance(payload, dict):
            raise RegistryError(f"Relationship registry {source} must be a mapping or a list")

        raw_edges = payload.get("relationships") or []
        if not isinstance(raw_edges, list):
            raise RegistryError(f"'relationships' in {source} must be a list")

        normalized = []
        for index, raw in enumerate(raw_edges):
            if isinstance(raw, dict) and isinstance(raw.get("type"), str):
                edge_type = normalize_relationship_type(raw["type"])
                if not is_relationship_type(edge_type):
                    raise RegistryError(
                        f"Unknown relationship type '{raw['type']}' at relationships.{index} in {source}. "
                        f"Valid types: {', '.join(RELATIONSHIP_TYPES)}"
                    )
                raw = {**raw, "type": edge_type}
            normalized.append(raw)

        try:
            graph = RelationshipGraph.model_validate({"relationships": normalized})
        except ValidationError as e:
            errors = []
            for error in e.errors():
                loc = ".".join(str(x) for x in error["loc"])
                errors.append(f"  - {loc}: {error['msg']}")
            raise RegistryError(
                f"Invalid relationship registry {source}:\n" + "\n".join(errors)
            ) from e

        return cls(graph.relationships)

    def edges_touching(self, full_id: str) -> list[RelationshipEdge]:
        """Every edge with ``full_id`` as an endpoint, in declaration order.

        A bidirectional edge seen from its ``to`` end is returned reversed,
        as if the reverse edge had been declared too.
        """
        touching: list[RelationshipEdge] = []
        for edge in self._edges:
            if edge.source == full_id:
                touching.append(edge)
            elif edge.target == full_id:
                touching.append(edge.reversed() if edge.bidirectional else edge)
        return touching


def get_relationships_for_both(
    registry: RelationshipRegistry, slug: str, category: str
) -> list[RelationshipEdge]:
    """Edges where ``category/slug`` is either endpoint."""
    return registry.edges_touching(f"{category}/{slug}")
