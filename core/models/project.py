# =============================================================================
# core/models/project.py - Project Schemas
# =============================================================================
# These models define the ordered project collection:
# - Project: The stored record
# - ProjectCreate: Input for POST /projects
# - ProjectUpdate: Input for PATCH /projects/{id} (partial merge)
#
# Input models accept the loose shapes the admin form sends (tags as a
# comma-separated string, order as a numeric string) and normalize them in
# to_project() / changes(), which raise InvalidArgumentError before any
# write is attempted.
# =============================================================================

from typing import Any

from pydantic import Field, field_validator

from app.exceptions import InvalidArgumentError
from lib.utils import (
    empty_to_none,
    is_blank,
    optional_http_url,
    parse_order,
    parse_tags,
    validate_image_data,
    validate_image_reference,
)

from .base import CamelModel


class Project(CamelModel):
    """
    A stored portfolio project.

    Example:
        {
            "id": "660e8400-e29b-41d4-a716-446655440001",
            "title": "Site generator",
            "description": "Static site generator",
            "longDescription": null,
            "image": "https://example.com/shot.png",
            "imageData": null,
            "tags": ["python", "cli"],
            "liveUrl": null,
            "githubUrl": "https://github.com/me/gen",
            "order": 0
        }
    """

    id: str = Field(..., description="Stable project identifier")
    title: str = Field(..., min_length=1, description="Project title")
    description: str = Field(..., min_length=1, description="Short description")
    long_description: str | None = Field(default=None, description="Long description")

    # image and image_data are never both set by the API
    image: str | None = Field(default=None, description="Image URL or path")
    image_data: str | None = Field(
        default=None,
        description="Inline image as a base64 data URI"
    )

    # Display order of tags is the insertion order; duplicates are allowed
    tags: list[str] = Field(default_factory=list, description="Ordered tags")

    live_url: str | None = Field(default=None, description="Live demo URL")
    github_url: str | None = Field(default=None, description="Source code URL")

    # Ascending display sort; ties keep storage order
    order: int = Field(default=0, ge=0, description="Display order")


def _clean_optional_fields(values: dict[str, Any]) -> dict[str, Any]:
    """Validate and normalize the optional string fields present in values."""
    cleaned: dict[str, Any] = {}

    if "long_description" in values:
        cleaned["long_description"] = empty_to_none(values["long_description"])
    if "image" in values:
        image = empty_to_none(values["image"])
        cleaned["image"] = validate_image_reference(image, "image") if image else None
    if "image_data" in values:
        image_data = empty_to_none(values["image_data"])
        cleaned["image_data"] = validate_image_data(image_data) if image_data else None
    if "live_url" in values:
        cleaned["live_url"] = optional_http_url(values["live_url"], "liveUrl")
    if "github_url" in values:
        cleaned["github_url"] = optional_http_url(values["github_url"], "githubUrl")

    if cleaned.get("image") and cleaned.get("image_data"):
        raise InvalidArgumentError(
            "Provide either an image URL or inline image data, not both",
            field="image",
        )

    # Setting one image source clears the other
    if cleaned.get("image"):
        cleaned["image_data"] = None
    elif cleaned.get("image_data"):
        cleaned["image"] = None

    return cleaned


class ProjectCreate(CamelModel):
    """
    Schema for creating a project.

    Example:
        {
            "title": "Site generator",
            "description": "Static site generator",
            "tags": "python, cli",
            "order": "2"
        }
    """

    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    long_description: str | None = None
    image: str | None = None
    image_data: str | None = None
    tags: list[str] | str | None = None
    live_url: str | None = None
    github_url: str | None = None
    order: int | float | str | None = None

    @field_validator("title", "description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    def to_project(self, project_id: str) -> Project:
        """
        Build the new Project with defaults applied.

        Raises:
            InvalidArgumentError: For a bad order, tags, URL or image value
        """
        order = 0 if is_blank(self.order) else parse_order(self.order)
        optional = _clean_optional_fields(
            self.model_dump(include={
                "long_description", "image", "image_data", "live_url", "github_url",
            })
        )
        return Project(
            id=project_id,
            title=self.title,
            description=self.description,
            tags=parse_tags(self.tags),
            order=order,
            **optional,
        )


class ProjectUpdate(CamelModel):
    """
    Schema for updating a project.

    Only the fields present in the request overwrite the stored project.
    An order sent as "" or null is ignored, keeping the previous value.
    """

    title: str | None = None
    description: str | None = None
    long_description: str | None = None
    image: str | None = None
    image_data: str | None = None
    tags: list[str] | str | None = None
    live_url: str | None = None
    github_url: str | None = None
    order: int | float | str | None = None

    def changes(self) -> dict[str, Any]:
        """
        Validate the fields present in the request and return the changes.

        Raises:
            InvalidArgumentError: For blank required fields or bad values
        """
        present = self.model_dump(include=self.model_fields_set)
        changes: dict[str, Any] = {}

        for field in ("title", "description"):
            if field in present:
                if is_blank(present[field]):
                    raise InvalidArgumentError(f"{field} must not be empty", field=field)
                changes[field] = present[field]

        if "tags" in present:
            changes["tags"] = parse_tags(present["tags"])

        if "order" in present and not is_blank(present["order"]):
            changes["order"] = parse_order(present["order"])

        changes.update(_clean_optional_fields(present))
        return changes
