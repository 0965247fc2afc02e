# =============================================================================
# core/models/document.py - Configuration Document Schema
# =============================================================================
# The single persisted document: { "profile": Profile | null, "projects": [] }.
# Profile and projects are independent collections that share one file, so
# every mutation of either is a full load-mutate-save of this document.
# =============================================================================

from pydantic import Field

from .base import CamelModel
from .profile import Profile
from .project import Project


class ConfigDocument(CamelModel):
    """
    Everything the site stores.

    Example:
        {"profile": null, "projects": []}
    """

    profile: Profile | None = Field(default=None, description="Singleton profile")
    projects: list[Project] = Field(
        default_factory=list,
        description="Projects in storage (creation) order"
    )

    @classmethod
    def empty(cls) -> "ConfigDocument":
        """The document used when nothing has been stored yet."""
        return cls(profile=None, projects=[])

    def find_project_index(self, project_id: str) -> int | None:
        """Position of a project in storage order, or None."""
        for index, project in enumerate(self.projects):
            if project.id == project_id:
                return index
        return None
