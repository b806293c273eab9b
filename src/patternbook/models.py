"""Pydantic models for the pattern catalogue."""

from __future__ import annotations

from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator

Category = Literal["patterns", "anti-patterns", "obstacles"]

RelationshipType = Literal[
    "related",
    "solves",
    "similar",
    "enables",
    "uses",
    "causes",
    "alternative",
]

# outgoing = we point to them, incoming = they point to us
Direction = Literal["outgoing", "incoming"]

# ContentRecord field holding the related links for each target category
RELATED_FIELDS: dict[str, str] = {
    "patterns": "related_patterns",
    "anti-patterns": "related_anti_patterns",
    "obstacles": "related_obstacles",
}


class DocumentId(BaseModel):
    """A (category, slug) pair, serialized as ``category/slug``."""

    model_config = ConfigDict(frozen=True)

    category: Category
    slug: str

    @property
    def full_id(self) -> str:
        return f"{self.category}/{self.slug}"

    @classmethod
    def from_full_id(cls, full_id: str) -> DocumentId | None:
        """Parse a composite key; None when the category prefix is unknown."""
        category, sep, slug = full_id.partition("/")
        if not sep or not slug or category not in get_args(Category):
            return None
        return cls(category=category, slug=slug)

    def __str__(self) -> str:
        return self.full_id


class RelatedLink(BaseModel):
    """A cross-reference from the current document to another document."""

    model_config = ConfigDict(frozen=True)

    slug: str  # Target slug, without category prefix
    type: RelationshipType = "related"
    direction: Direction = "outgoing"


class RelationshipEdge(BaseModel):
    """A typed edge from the central relationship registry."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source: str = Field(alias="from")  # Full id, e.g. "patterns/active-partner"
    target: str = Field(alias="to")
    type: RelationshipType
    bidirectional: bool = False

    def reversed(self) -> RelationshipEdge:
        """The same edge seen from its other endpoint."""
        return self.model_copy(update={"source": self.target, "target": self.source})


class RelationshipGraph(BaseModel):
    """The central relationship registry file contents."""

    relationships: list[RelationshipEdge] = Field(default_factory=list)


class DocumentFrontmatter(BaseModel):
    """Recognized frontmatter keys of a catalogue document.

    Unknown keys are ignored. A single string is accepted where a list is
    expected.
    """

    model_config = ConfigDict(extra="ignore")

    authors: list[str] = Field(default_factory=list)
    alternative_titles: list[str] = Field(default_factory=list)
    related_patterns: list[str] = Field(default_factory=list)
    related_anti_patterns: list[str] = Field(default_factory=list)
    related_obstacles: list[str] = Field(default_factory=list)

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_to_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    def related_slugs(self) -> dict[str, list[str]]:
        """Frontmatter link slugs keyed by target category."""
        return {category: list(getattr(self, field)) for category, field in RELATED_FIELDS.items()}


class ParsedDocument(BaseModel):
    """One document split into frontmatter, title and displayable content."""

    model_config = ConfigDict(frozen=True)

    category: Category
    slug: str
    title: str
    emoji_indicator: str | None = None
    frontmatter: DocumentFrontmatter = Field(default_factory=DocumentFrontmatter)
    content: str  # Body without the title heading line
    raw_content: str  # Unmodified file text


class ContentRecord(BaseModel):
    """A parsed document with merged relationships, ready for rendering."""

    model_config = ConfigDict(frozen=True)

    title: str
    category: Category
    slug: str
    emoji_indicator: str | None = None
    authors: list[str] | None = None
    alternative_titles: list[str] | None = None
    related_patterns: list[RelatedLink] | None = None
    related_anti_patterns: list[RelatedLink] | None = None
    related_obstacles: list[RelatedLink] | None = None
    content: str
    raw_content: str

    @property
    def full_id(self) -> str:
        return f"{self.category}/{self.slug}"

    def related(self, category: str) -> list[RelatedLink]:
        """Related links targeting a category, empty when there are none."""
        return list(getattr(self, RELATED_FIELDS[category]) or [])


class Resolution(BaseModel):
    """Outcome of resolving a URL segment: show the content, or redirect."""

    content: ContentRecord
    canonical_slug: str
    is_alternative_title: bool = False

    @property
    def outcome(self) -> Literal["canonical", "redirect"]:
        return "redirect" if self.is_alternative_title else "canonical"

    @property
    def canonical_url(self) -> str:
        return f"/{self.content.category}/{self.canonical_slug}/"


class StaticPath(BaseModel):
    """A URL segment the site must answer, canonical or alternative."""

    model_config = ConfigDict(frozen=True)

    category: Category
    slug: str
    is_alternative_title: bool = False


class LinkProblem(BaseModel):
    """A cross-reference that does not point at an existing document."""

    source: str  # Full id of the declaring document, or registry edge source
    target: str
    origin: Literal["frontmatter", "registry"]
    reason: str
