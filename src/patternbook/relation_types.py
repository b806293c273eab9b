"""Canonical relationship types and helpers for normalizing registry input."""

from __future__ import annotations

import re
from typing import get_args

from .models import RelationshipType

RELATIONSHIP_TYPE_DESCRIPTIONS: dict[str, str] = {
    "related": "A is generally related to B when no stronger type fits.",
    "solves": "A resolves or mitigates the problem described by B.",
    "similar": "A and B address the same concern in a comparable way.",
    "enables": "A makes B possible or easier to apply.",
    "uses": "A applies B as one of its steps.",
    "causes": "A leads to or produces B.",
    "alternative": "A can be used instead of B.",
}

RELATIONSHIP_TYPES: tuple[str, ...] = get_args(RelationshipType)

DEFAULT_RELATIONSHIP_TYPE = "related"


def normalize_relationship_type(value: str) -> str:
    """Normalize a relationship type for comparison ("Similar " -> "similar")."""
    cleaned = value.strip().lower()
    cleaned = re.sub(r"[\s_]+", "-", cleaned)
    cleaned = re.sub(r"[^a-z-]", "", cleaned)
    return cleaned.strip("-")


def is_relationship_type(value: str) -> bool:
    return value in RELATIONSHIP_TYPES
