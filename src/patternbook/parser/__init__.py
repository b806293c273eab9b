"""Markdown document parsing: frontmatter, title and displayable content."""

from ..models import DocumentFrontmatter, ParsedDocument
from .markdown import (
    extract_title_and_emoji,
    parse_document,
    remove_category_suffix,
    split_frontmatter,
)

__all__ = [
    "parse_document",
    "split_frontmatter",
    "extract_title_and_emoji",
    "remove_category_suffix",
    "DocumentFrontmatter",
    "ParsedDocument",
]
