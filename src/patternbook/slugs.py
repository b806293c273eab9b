"""Conversion between human titles and URL slugs, and slug validation."""

from __future__ import annotations

import re

from .errors import InvalidSlugError

# Word characters are ASCII-only; whitespace is any Unicode whitespace
_DISALLOWED_TITLE_CHARS = re.compile(r"[^A-Za-z0-9_\s-]")
_WHITESPACE_RUN = re.compile(r"\s+")
_HYPHEN_RUN = re.compile(r"-+")
_VALID_SLUG = re.compile(r"[a-zA-Z0-9_-]+")


def title_to_slug(title: str) -> str:
    """Convert a title to a URL slug.

    Characters are removed before words are joined, so a separator that is
    not whitespace glues its neighbours together:
    "Show Me, I'll Repeat/Automate" -> "show-me-ill-repeatautomate".
    """
    slug = title.strip().lower()
    slug = _DISALLOWED_TITLE_CHARS.sub("", slug)
    slug = _WHITESPACE_RUN.sub("-", slug)
    slug = _HYPHEN_RUN.sub("-", slug)
    return slug.strip("-")


def slug_to_title_case(slug: str) -> str:
    """Convert a slug to a title by capitalizing each hyphen-separated word.

    Only the first character of each word changes; underscores are not word
    boundaries ("some_name" -> "Some_name").
    """
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-"))


def validate_slug(slug: str) -> None:
    """Reject slugs that could escape a category directory.

    Raises:
        InvalidSlugError: If the slug contains "..", "/" or "\\", or any
            character outside [a-zA-Z0-9_-].
    """
    if ".." in slug or "/" in slug or "\\" in slug:
        raise InvalidSlugError(slug, "Path traversal detected")
    if not _VALID_SLUG.fullmatch(slug):
        raise InvalidSlugError(
            slug, "Only alphanumeric characters, hyphens, and underscores allowed"
        )


def is_valid_slug(slug: str) -> bool:
    try:
        validate_slug(slug)
    except InvalidSlugError:
        return False
    return True
