# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Pure validation and coercion helpers used by the repositories and routers.
# Each helper either returns the cleaned value or raises InvalidArgumentError,
# so validation always finishes before a write is attempted.
# =============================================================================

import math
from typing import Any
from urllib.parse import urlparse
from uuid import uuid4

from app.exceptions import InvalidArgumentError


ALLOWED_URL_SCHEMES = ("http", "https")


# =============================================================================
# Identifier Utilities
# =============================================================================

def new_id() -> str:
    """Mint an opaque, stable entity identifier."""
    return str(uuid4())


# =============================================================================
# Value Coercion
# =============================================================================

def empty_to_none(value: str | None) -> str | None:
    """Collapse empty/whitespace-only strings to None."""
    if value is None:
        return None
    return value if value.strip() else None


def is_blank(value: Any) -> bool:
    """True for None and empty strings (the form encodings of 'not sent')."""
    return value is None or (isinstance(value, str) and not value.strip())


def parse_order(value: Any) -> int:
    """
    Parse a display order value.

    Accepts ints, floats and numeric strings. The value must be finite and
    non-negative; it is floored to an int.

    Example:
        parse_order("2.9")  # 2
        parse_order(-1)     # InvalidArgumentError

    Raises:
        InvalidArgumentError: For non-numeric, non-finite or negative values
    """
    message = "Order must be a valid non-negative number"

    # bool is an int subclass; a checkbox value is never an order
    if isinstance(value, bool):
        raise InvalidArgumentError(message, field="order")

    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        raise InvalidArgumentError(message, field="order")

    if not math.isfinite(number) or number < 0:
        raise InvalidArgumentError(message, field="order")

    return math.floor(number)


def parse_tags(value: Any) -> list[str]:
    """
    Normalize tags from a list or a comma-separated string.

    Order and duplicates are preserved; blank entries are dropped.

    Example:
        parse_tags("python, fastapi,,python")  # ["python", "fastapi", "python"]
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [tag.strip() for tag in value.split(",") if tag.strip()]
    if isinstance(value, (list, tuple)):
        tags = []
        for tag in value:
            if not isinstance(tag, str):
                raise InvalidArgumentError("Tags must be strings", field="tags")
            tags.append(tag)
        return tags
    raise InvalidArgumentError(
        "Tags must be a list or a comma-separated string", field="tags"
    )


def validate_http_url(value: str, field: str) -> str:
    """
    Validate that a value is an absolute http(s) URL.

    Returns the trimmed URL unchanged otherwise.

    Raises:
        InvalidArgumentError: If it does not parse, has no host, or uses
            another scheme
    """
    candidate = value.strip()
    try:
        parsed = urlparse(candidate)
    except ValueError:
        raise InvalidArgumentError(f"Invalid URL provided for {field}", field=field)

    if parsed.scheme.lower() not in ALLOWED_URL_SCHEMES:
        raise InvalidArgumentError(
            f"Only HTTP and HTTPS URLs are allowed for {field}", field=field
        )
    if not parsed.netloc or not parsed.hostname:
        raise InvalidArgumentError(f"Invalid URL provided for {field}", field=field)

    return candidate


def optional_http_url(value: str | None, field: str) -> str | None:
    """Validate an optional URL field: blank becomes None."""
    if is_blank(value):
        return None
    return validate_http_url(value, field)


def validate_image_reference(value: str, field: str) -> str:
    """
    Validate a stored image reference: an absolute http(s) URL or a
    site-relative path such as /data/uploads/profile-1.png.
    """
    candidate = value.strip()
    if candidate.startswith("/") and not candidate.startswith("//"):
        return candidate
    return validate_http_url(candidate, field)


def validate_image_data(value: str, field: str = "imageData") -> str:
    """Validate an inline image payload of the form data:image/<type>;base64,<data>."""
    header, sep, payload = value.partition(",")
    if not sep or not payload or not header.startswith("data:image/") or not header.endswith(";base64"):
        raise InvalidArgumentError(
            "Image data must be a base64 data URI with an image media type",
            field=field,
        )
    return value
