"""Shared test fixtures for the patternbook test suite.

Design:
- docs_root: isolated documents directory in a temp dir, exported through
  PATTERNBOOK_DOCUMENTS_ROOT
- runner / cli_invoke: CliRunner with proper isolation
- write_document / write_registry: helpers for building catalogue fixtures
"""

from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from patternbook.cli import cli
from patternbook.config import CATEGORIES
from patternbook.core import Catalog
from patternbook.relationships import RelationshipRegistry
from patternbook.store import FilesystemDocumentStore


# ─────────────────────────────────────────────────────────────────────────────
# Helper Functions (for test code, not fixtures)
# ─────────────────────────────────────────────────────────────────────────────


def write_document(
    root: Path,
    category: str,
    slug: str,
    body: str,
    **frontmatter,
) -> Path:
    """Create a catalogue document, with YAML frontmatter when keys are given.

    Usage in tests:
        from conftest import write_document
        write_document(docs_root, "patterns", "show-me", "# Show Me", authors=["ada"])
    """
    path = root / category / f"{slug}.md"
    path.parent.mkdir(parents=True, exist_ok=True)

    if frontmatter:
        header = yaml.safe_dump(frontmatter, sort_keys=False, allow_unicode=True)
        text = f"---\n{header}---\n{body}"
    else:
        text = body

    path.write_text(text, encoding="utf-8")
    return path


def write_registry(root: Path, edges: list[dict]) -> Path:
    """Write relationships.yaml with the given edges (using from/to keys)."""
    path = root / "relationships.yaml"
    path.write_text(yaml.safe_dump({"relationships": edges}, sort_keys=False), encoding="utf-8")
    return path


# ─────────────────────────────────────────────────────────────────────────────
# Core Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def docs_root(tmp_path: Path, monkeypatch) -> Path:
    """Create an isolated documents root with the three category directories."""
    root = tmp_path / "documents"
    for category in CATEGORIES:
        (root / category).mkdir(parents=True)

    monkeypatch.setenv("PATTERNBOOK_DOCUMENTS_ROOT", str(root))
    monkeypatch.delenv("PATTERNBOOK_REGISTRY", raising=False)
    return root


@pytest.fixture
def catalog_for(docs_root: Path):
    """Build a Catalog over docs_root, loading relationships.yaml if present.

    Usage:
        def test_something(docs_root, catalog_for):
            write_document(docs_root, ...)
            catalog = catalog_for()
    """

    def _build() -> Catalog:
        registry = RelationshipRegistry.load(docs_root / "relationships.yaml")
        return Catalog(FilesystemDocumentStore(docs_root), registry)

    return _build


@pytest.fixture
def runner() -> CliRunner:
    """CLI runner with isolated environment."""
    return CliRunner()


@pytest.fixture
def cli_invoke(runner: CliRunner, docs_root: Path):
    """Helper for invoking the CLI against docs_root.

    Usage:
        def test_list(cli_invoke):
            result = cli_invoke(["list", "patterns"])
            assert result.exit_code == 0
    """

    def _invoke(args: list[str]):
        return runner.invoke(
            cli,
            args,
            catch_exceptions=False,
            env={"PATTERNBOOK_DOCUMENTS_ROOT": str(docs_root)},
        )

    return _invoke
