# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - utils.py: Pure validation helpers (order, tags, URLs, image references)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.utils import (
    empty_to_none,
    is_blank,
    new_id,
    optional_http_url,
    parse_order,
    parse_tags,
    validate_http_url,
    validate_image_data,
    validate_image_reference,
)

__all__ = [
    "empty_to_none",
    "is_blank",
    "new_id",
    "optional_http_url",
    "parse_order",
    "parse_tags",
    "validate_http_url",
    "validate_image_data",
    "validate_image_reference",
]
