"""Markdown parsing with YAML frontmatter support."""

from __future__ import annotations

import logging
import re

import frontmatter
import regex
import yaml
from pydantic import ValidationError

from ..models import DocumentFrontmatter, ParsedDocument

log = logging.getLogger(__name__)

# Only one marker is removed: "## Title" keeps "# Title"
_HEADING_MARKER = re.compile(r"^#\s*")
_CATEGORY_SUFFIX = re.compile(r"\s*\((Anti-pattern|Obstacle)\)\s*$", re.IGNORECASE)
# One pictographic code point (optionally with VS16) followed by whitespace
_LEADING_EMOJI = regex.compile(r"^((?:\p{Emoji_Presentation}|\p{Extended_Pictographic})\uFE0F?)\s+")
# Opening "---" on the first line, closing "---" on a line of its own
_FRONTMATTER_BLOCK = re.compile(
    r"\A---[ \t]*\r?\n(?P<yaml>.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE
)
_YAML_HANDLER = frontmatter.YAMLHandler()


def remove_category_suffix(title: str) -> str:
    """Strip a trailing "(Anti-pattern)" or "(Obstacle)" annotation."""
    return _CATEGORY_SUFFIX.sub("", title).strip()


def extract_emoji(title: str) -> tuple[str, str | None]:
    """Split a leading emoji off a title.

    Returns:
        Tuple of (title without emoji, emoji or None).
    """
    match = _LEADING_EMOJI.match(title)
    if not match:
        return title, None
    return title[match.end() :].strip(), match.group(1)


def extract_title_and_emoji(heading_line: str) -> tuple[str, str | None]:
    """Derive the display title and emoji indicator from a heading line."""
    without_marker = _HEADING_MARKER.sub("", heading_line, count=1).strip()
    return extract_emoji(remove_category_suffix(without_marker))


def split_frontmatter(raw_text: str) -> tuple[dict, str]:
    """Split raw document text into (frontmatter mapping, body).

    Malformed frontmatter is logged and treated as absent so that one bad
    document cannot break listing of the others. The YAML block is still
    removed from the body.

    The body is everything after the closing delimiter line, unstripped, so
    indentation and trailing newlines survive.
    """
    match = _FRONTMATTER_BLOCK.match(raw_text)
    if match is None:
        return {}, raw_text

    body = raw_text[match.end() :]
    try:
        metadata = _YAML_HANDLER.load(match.group("yaml"))
    except yaml.YAMLError as e:
        log.warning("Ignoring malformed frontmatter: %s", e)
        return {}, body

    return (metadata if isinstance(metadata, dict) else {}), body


def _validate_frontmatter(metadata: dict, label: str) -> DocumentFrontmatter:
    try:
        return DocumentFrontmatter.model_validate(metadata)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            errors.append(f"{loc}: {error['msg']}")
        log.warning("Ignoring invalid frontmatter in %s (%s)", label, "; ".join(errors))
        return DocumentFrontmatter()


def parse_document(raw_text: str, category: str, slug: str) -> ParsedDocument:
    """Parse one document's raw text.

    The title comes from the first line that starts with "#" once stripped.
    That line is removed from the content because it is shown as the page
    header. A document without any heading gets an empty title and keeps
    its whole body as content.

    Args:
        raw_text: Complete file contents, frontmatter included.
        category: Category the document belongs to.
        slug: Canonical slug of the document.

    Returns:
        ParsedDocument. Parsing is pure: the same text yields an equal result.
    """
    metadata, body = split_frontmatter(raw_text)
    label = f"{category}/{slug}"
    fm = _validate_frontmatter(metadata, label)

    lines = body.split("\n")
    heading_index = next(
        (i for i, line in enumerate(lines) if line.strip().startswith("#")),
        None,
    )

    if heading_index is None:
        log.debug("No heading found in %s", label)
        title, emoji = extract_title_and_emoji("")
        content = body
    else:
        title, emoji = extract_title_and_emoji(lines[heading_index])
        content = "\n".join(lines[:heading_index] + lines[heading_index + 1 :])

    return ParsedDocument(
        category=category,
        slug=slug,
        title=title,
        emoji_indicator=emoji,
        frontmatter=fm,
        content=content,
        raw_content=raw_text,
    )
