"""Tests for catalogue operations: lookup, listing, resolution and enumeration."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from conftest import write_document, write_registry
from patternbook.core import Catalog
from patternbook.errors import ConfigurationError, DocumentNotFoundError, InvalidSlugError
from patternbook.models import RelatedLink, StaticPath
from patternbook.relationships import RelationshipRegistry
from patternbook.store import FilesystemDocumentStore

ACTIVE_PARTNER = "# 🎯 Active Partner\n\n## Problem\nAI defaults to silent compliance.\n"


@pytest.fixture
def show_me(docs_root: Path) -> Path:
    return write_document(
        docs_root,
        "patterns",
        "show-me",
        "# Show Me\n\nDemonstrate once, let the AI repeat.\n",
        alternative_titles=["Show Me, I'll Repeat", "Teach by Example"],
    )


# ─────────────────────────────────────────────────────────────────────────────
# Listing
# ─────────────────────────────────────────────────────────────────────────────


class TestListing:
    def test_lists_markdown_slugs_sorted(self, docs_root: Path, catalog_for):
        write_document(docs_root, "patterns", "pattern-two", "# Pattern Two")
        write_document(docs_root, "patterns", "pattern-one", "# Pattern One")
        (docs_root / "patterns" / ".DS_Store").write_text("")
        (docs_root / "patterns" / "README.txt").write_text("not a document")

        assert catalog_for().list_slugs("patterns") == ["pattern-one", "pattern-two"]

    def test_missing_category_directory_is_empty(self, tmp_path: Path, caplog):
        catalog = Catalog(FilesystemDocumentStore(tmp_path / "nowhere"))

        with caplog.at_level(logging.ERROR, logger="patternbook"):
            assert catalog.list_slugs("obstacles") == []
        assert "Failed to read documents directory" in caplog.text

    def test_get_all_documents(self, docs_root: Path, catalog_for):
        write_document(docs_root, "patterns", "pattern-one", "# Pattern One\n\n## Problem\nFirst.")
        write_document(docs_root, "patterns", "pattern-two", "# Pattern Two\n\n## Pattern\nSecond.")

        records = catalog_for().get_all_documents("patterns")

        assert [(r.slug, r.title) for r in records] == [
            ("pattern-one", "Pattern One"),
            ("pattern-two", "Pattern Two"),
        ]

    def test_get_all_documents_skips_invalid_filenames(self, docs_root: Path, catalog_for):
        write_document(docs_root, "patterns", "good", "# Good")
        (docs_root / "patterns" / "has space.md").write_text("# Bad name")

        records = catalog_for().get_all_documents("patterns")

        assert [r.slug for r in records] == ["good"]


# ─────────────────────────────────────────────────────────────────────────────
# Single documents
# ─────────────────────────────────────────────────────────────────────────────


class TestGetDocument:
    def test_content_record(self, docs_root: Path, catalog_for):
        write_document(
            docs_root, "patterns", "active-partner", ACTIVE_PARTNER, authors=["lexler"]
        )

        record = catalog_for().get_document("patterns", "active-partner")

        assert record is not None
        assert record.title == "Active Partner"
        assert record.emoji_indicator == "🎯"
        assert record.authors == ["lexler"]
        assert record.alternative_titles is None
        assert record.full_id == "patterns/active-partner"
        assert "Active Partner" not in record.content
        assert "## Problem" in record.content
        assert record.raw_content.startswith("---\n")

    def test_missing_document_is_none(self, catalog_for):
        assert catalog_for().get_document("patterns", "does-not-exist") is None

    def test_unreadable_document_is_none(self, docs_root: Path, catalog_for, caplog):
        (docs_root / "patterns" / "garbled.md").write_bytes(b"\xff\xfe# x")

        with caplog.at_level(logging.WARNING, logger="patternbook"):
            assert catalog_for().get_document("patterns", "garbled") is None

        assert "Skipping unreadable document" in caplog.text
        assert "garbled.md" in caplog.text

    @pytest.mark.parametrize("slug", ["../relationships", "a/b", "bad slug"])
    def test_invalid_slug_raises_before_reading(self, slug: str):
        class ExplodingStore:
            def list(self, category):
                raise AssertionError("list() must not be called")

            def read(self, category, slug):
                raise AssertionError("read() must not be called")

        with pytest.raises(InvalidSlugError):
            Catalog(ExplodingStore()).get_document("patterns", slug)

    def test_file_without_frontmatter(self, docs_root: Path, catalog_for):
        write_document(docs_root, "obstacles", "black-box-ai", "# Black Box AI (Obstacle)\n\nText")

        record = catalog_for().get_document("obstacles", "black-box-ai")

        assert record.title == "Black Box AI"
        assert record.authors is None
        assert record.related_patterns is None
        assert record.related_anti_patterns is None
        assert record.related_obstacles is None

    def test_explicitly_empty_lists_are_none(self, docs_root: Path, catalog_for):
        write_document(docs_root, "patterns", "bare", "# Bare", authors=[], alternative_titles=[])

        record = catalog_for().get_document("patterns", "bare")

        assert record.authors is None
        assert record.alternative_titles is None

    def test_frontmatter_relationships(self, docs_root: Path, catalog_for):
        write_document(
            docs_root,
            "patterns",
            "active-partner",
            ACTIVE_PARTNER,
            related_patterns=["chain-of-small-steps"],
            related_anti_patterns=["answer-injection"],
        )

        record = catalog_for().get_document("patterns", "active-partner")

        assert record.related_patterns == [RelatedLink(slug="chain-of-small-steps")]
        assert record.related_anti_patterns == [RelatedLink(slug="answer-injection")]
        assert record.related_obstacles is None
        assert record.related("obstacles") == []

    def test_registry_and_frontmatter_are_merged(self, docs_root: Path, catalog_for):
        write_document(
            docs_root,
            "patterns",
            "active-partner",
            ACTIVE_PARTNER,
            related_patterns=["chain-of-small-steps", "show-me", "check-alignment"],
        )
        write_registry(
            docs_root,
            [
                {"from": "patterns/active-partner", "to": "patterns/chain-of-small-steps", "type": "uses"},
                {"from": "patterns/active-partner", "to": "patterns/show-me", "type": "similar"},
                {"from": "patterns/active-partner", "to": "patterns/happy-to-delete", "type": "related"},
                {"from": "obstacles/black-box-ai", "to": "patterns/active-partner", "type": "causes"},
            ],
        )

        record = catalog_for().get_document("patterns", "active-partner")

        assert [(link.slug, link.type, link.direction) for link in record.related_patterns] == [
            ("chain-of-small-steps", "uses", "outgoing"),
            ("show-me", "similar", "outgoing"),
            ("check-alignment", "related", "outgoing"),
            ("happy-to-delete", "related", "outgoing"),
        ]
        assert record.related_obstacles == [
            RelatedLink(slug="black-box-ai", type="causes", direction="incoming")
        ]
        assert all("/" not in link.slug for link in record.related_patterns)

    def test_bidirectional_edge_is_outgoing_from_both_ends(self, docs_root: Path, catalog_for):
        write_document(docs_root, "patterns", "a", "# A")
        write_document(docs_root, "patterns", "b", "# B")
        write_registry(
            docs_root,
            [{"from": "patterns/a", "to": "patterns/b", "type": "similar", "bidirectional": True}],
        )
        catalog = catalog_for()

        assert catalog.get_document("patterns", "a").related_patterns == [
            RelatedLink(slug="b", type="similar", direction="outgoing")
        ]
        assert catalog.get_document("patterns", "b").related_patterns == [
            RelatedLink(slug="a", type="similar", direction="outgoing")
        ]

    def test_same_bytes_same_record(self, docs_root: Path, catalog_for):
        write_document(docs_root, "patterns", "active-partner", ACTIVE_PARTNER, authors=["x"])
        catalog = catalog_for()

        assert catalog.get_document("patterns", "active-partner") == catalog.get_document(
            "patterns", "active-partner"
        )


# ─────────────────────────────────────────────────────────────────────────────
# Resolution
# ─────────────────────────────────────────────────────────────────────────────


class TestResolve:
    def test_canonical_slug(self, show_me: Path, catalog_for):
        resolution = catalog_for().resolve("patterns", "show-me")

        assert resolution.is_alternative_title is False
        assert resolution.outcome == "canonical"
        assert resolution.canonical_slug == "show-me"
        assert resolution.content.title == "Show Me"

    @pytest.mark.parametrize("slug", ["show-me-ill-repeat", "teach-by-example"])
    def test_alternative_title_redirects(self, show_me: Path, catalog_for, slug: str):
        resolution = catalog_for().resolve("patterns", slug)

        assert resolution.is_alternative_title is True
        assert resolution.outcome == "redirect"
        assert resolution.canonical_slug == "show-me"
        assert resolution.canonical_url == "/patterns/show-me/"
        assert resolution.content.slug == "show-me"

    def test_no_match_raises_not_found(self, show_me: Path, catalog_for):
        with pytest.raises(DocumentNotFoundError) as exc_info:
            catalog_for().resolve("patterns", "nothing-like-this")

        assert exc_info.value.category == "patterns"
        assert exc_info.value.slug == "nothing-like-this"

    def test_alternative_titles_are_per_category(self, show_me: Path, catalog_for):
        with pytest.raises(DocumentNotFoundError):
            catalog_for().resolve("obstacles", "teach-by-example")

    def test_unknown_category_is_not_found(self, catalog_for):
        with pytest.raises(DocumentNotFoundError, match="Unknown category"):
            catalog_for().resolve("recipes", "pancakes")

    def test_invalid_requested_slug_raises(self, catalog_for):
        with pytest.raises(InvalidSlugError):
            catalog_for().resolve("patterns", "../../etc/passwd")

    def test_canonical_slug_beats_alternative_title(self, docs_root: Path, catalog_for):
        write_document(docs_root, "patterns", "alpha", "# Alpha", alternative_titles=["Beta"])
        write_document(docs_root, "patterns", "beta", "# Beta")

        resolution = catalog_for().resolve("patterns", "beta")

        assert resolution.is_alternative_title is False
        assert resolution.content.title == "Beta"

    def test_first_document_in_listing_order_wins(self, docs_root: Path, catalog_for):
        write_document(docs_root, "patterns", "zeta", "# Zeta", alternative_titles=["Shared Name"])
        write_document(docs_root, "patterns", "alpha", "# Alpha", alternative_titles=["shared  name"])

        resolution = catalog_for().resolve("patterns", "shared-name")

        assert resolution.canonical_slug == "alpha"

    def test_invalid_filenames_do_not_break_the_scan(self, docs_root: Path, catalog_for):
        (docs_root / "patterns" / "a bad name.md").write_text("# Bad")
        write_document(docs_root, "patterns", "show-me", "# Show Me", alternative_titles=["Demo"])

        assert catalog_for().resolve("patterns", "demo").canonical_slug == "show-me"

    def test_unreadable_document_does_not_break_the_scan(self, docs_root: Path, catalog_for):
        (docs_root / "patterns" / "aaa-garbled.md").write_bytes(b"\xff\xfe# x")
        write_document(docs_root, "patterns", "show-me", "# Show Me", alternative_titles=["Demo"])
        catalog = catalog_for()

        assert catalog.resolve("patterns", "demo").canonical_slug == "show-me"
        assert [r.slug for r in catalog.get_all_documents("patterns")] == ["show-me"]
        with pytest.raises(DocumentNotFoundError):
            catalog.resolve("patterns", "aaa-garbled")


# ─────────────────────────────────────────────────────────────────────────────
# Enumeration and link checks
# ─────────────────────────────────────────────────────────────────────────────


class TestStaticPaths:
    def test_canonical_then_alternatives(self, docs_root: Path, show_me: Path, catalog_for):
        write_document(docs_root, "obstacles", "black-box-ai", "# Black Box AI")

        paths = catalog_for().static_paths()

        assert paths == [
            StaticPath(category="patterns", slug="show-me"),
            StaticPath(category="patterns", slug="show-me-ill-repeat", is_alternative_title=True),
            StaticPath(category="patterns", slug="teach-by-example", is_alternative_title=True),
            StaticPath(category="obstacles", slug="black-box-ai"),
        ]

    def test_is_repeatable(self, show_me: Path, catalog_for):
        catalog = catalog_for()
        assert catalog.static_paths() == catalog.static_paths()

    def test_limited_to_categories(self, docs_root: Path, show_me: Path, catalog_for):
        write_document(docs_root, "obstacles", "black-box-ai", "# Black Box AI")

        paths = catalog_for().static_paths(["obstacles"])

        assert [p.slug for p in paths] == ["black-box-ai"]

    def test_unreadable_alternatives_are_skipped(self, docs_root: Path, catalog_for):
        (docs_root / "patterns" / "odd name.md").write_text("---\nalternative_titles: [X]\n---\n# Odd")

        paths = catalog_for().static_paths(["patterns"])

        assert paths == [StaticPath(category="patterns", slug="odd name")]

    def test_alternative_with_empty_slug_is_skipped(self, docs_root: Path, catalog_for):
        write_document(docs_root, "patterns", "show-me", "# Show Me", alternative_titles=["?!", "Demo"])

        paths = catalog_for().static_paths(["patterns"])

        assert [p.slug for p in paths] == ["show-me", "demo"]


class TestCheckLinks:
    def test_reports_missing_targets(self, docs_root: Path, catalog_for):
        write_document(
            docs_root,
            "patterns",
            "active-partner",
            "# Active Partner",
            related_patterns=["missing-pattern"],
            related_obstacles=["black-box-ai"],
        )
        write_document(docs_root, "obstacles", "black-box-ai", "# Black Box AI")
        write_registry(
            docs_root,
            [
                {"from": "patterns/active-partner", "to": "obstacles/black-box-ai", "type": "solves"},
                {"from": "patterns/active-partner", "to": "anti-patterns/gone", "type": "causes"},
                {"from": "recipes/pancakes", "to": "patterns/active-partner", "type": "uses"},
            ],
        )

        problems = catalog_for().check_links()

        assert [(p.origin, p.source, p.target) for p in problems] == [
            ("frontmatter", "patterns/active-partner", "patterns/missing-pattern"),
            ("registry", "patterns/active-partner", "anti-patterns/gone"),
            ("registry", "recipes/pancakes", "recipes/pancakes"),
        ]
        assert "unknown category" in problems[2].reason

    def test_clean_catalogue(self, show_me: Path, catalog_for):
        assert catalog_for().check_links() == []


class TestFromConfig:
    def test_uses_environment(self, docs_root: Path, show_me: Path):
        write_registry(docs_root, [{"from": "patterns/show-me", "to": "patterns/b", "type": "uses"}])

        catalog = Catalog.from_config()

        assert catalog.list_slugs("patterns") == ["show-me"]
        assert len(catalog.registry) == 1

    def test_explicit_registry_path(self, docs_root: Path, tmp_path: Path, monkeypatch):
        registry = tmp_path / "elsewhere.yaml"
        registry.write_text("- {from: patterns/a, to: patterns/b, type: enables}\n")
        monkeypatch.setenv("PATTERNBOOK_REGISTRY", str(registry))

        assert Catalog.from_config().registry.edges[0].type == "enables"

    def test_missing_root_raises(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("PATTERNBOOK_DOCUMENTS_ROOT", raising=False)
        monkeypatch.chdir(tmp_path)

        with pytest.raises(ConfigurationError):
            Catalog.from_config()

    def test_discovers_documents_directory(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("PATTERNBOOK_DOCUMENTS_ROOT", raising=False)
        monkeypatch.delenv("PATTERNBOOK_REGISTRY", raising=False)
        write_document(tmp_path / "documents", "patterns", "found-me", "# Found Me")
        website = tmp_path / "website"
        website.mkdir()
        monkeypatch.chdir(website)

        assert Catalog.from_config().list_slugs("patterns") == ["found-me"]

    def test_registry_object_passed_explicitly(self, docs_root: Path, show_me: Path):
        catalog = Catalog(FilesystemDocumentStore(docs_root), RelationshipRegistry())
        assert catalog.get_document("patterns", "show-me").related_patterns is None
