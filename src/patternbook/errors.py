"""Error types for patternbook.

Every error raised on purpose by the package derives from PatternbookError
and carries a stable ErrorCode so that the CLI can emit structured errors
with --json-errors.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable, machine-readable error codes."""

    INVALID_SLUG = "INVALID_SLUG"
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    REGISTRY_INVALID = "REGISTRY_INVALID"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


def format_error_json(code: ErrorCode | str, message: str, details: dict | None = None) -> str:
    """Format an error payload as a JSON string."""
    error: dict[str, dict[str, Any]] = {
        "error": {"code": code.value if isinstance(code, ErrorCode) else code, "message": message}
    }
    if details:
        error["error"]["details"] = details
    return json.dumps(error)


class PatternbookError(Exception):
    """Base class for patternbook errors."""

    code: ErrorCode = ErrorCode.CONFIGURATION_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_json(self) -> str:
        return format_error_json(self.code, self.message, self.details)


class InvalidSlugError(PatternbookError, ValueError):
    """Raised when a slug could escape the category directory or has bad characters."""

    code = ErrorCode.INVALID_SLUG

    def __init__(self, slug: str, reason: str) -> None:
        self.slug = slug
        super().__init__(f"Invalid slug format: {reason}", {"slug": slug})


class DocumentNotFoundError(PatternbookError, LookupError):
    """Raised when neither a document nor an alternative title matches a request."""

    code = ErrorCode.DOCUMENT_NOT_FOUND

    def __init__(self, category: str, slug: str, message: str | None = None) -> None:
        self.category = category
        self.slug = slug
        super().__init__(
            message or f"No document or alternative title matches {category}/{slug}",
            {"category": category, "slug": slug},
        )


class RegistryError(PatternbookError):
    """Raised when the relationship registry file cannot be loaded."""

    code = ErrorCode.REGISTRY_INVALID


class ConfigurationError(PatternbookError):
    """Raised when required configuration is missing."""

    code = ErrorCode.CONFIGURATION_ERROR
