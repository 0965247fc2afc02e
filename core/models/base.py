# =============================================================================
# core/models/base.py - Shared Model Configuration
# =============================================================================
# The persisted document and the HTTP API both use camelCase keys
# (profileImage, longDescription, ...). Python code uses snake_case
# attributes; the alias generator maps between the two.
# =============================================================================

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        # Accept both profileImage and profile_image on input
        populate_by_name=True,
    )

    def to_json_dict(self) -> dict:
        """Dump with camelCase keys, as stored and served."""
        return self.model_dump(by_alias=True, mode="json")
