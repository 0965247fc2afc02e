# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - base.py: camelCase model base shared by all schemas
# - profile.py: Profile record and its write input
# - project.py: Project record, create and partial-update inputs
# - document.py: The persisted { profile, projects } document
#
# These models define the "contract" between API, storage and clients.
# =============================================================================

from .base import CamelModel

# -----------------------------------------------------------------------------
# Profile Models - Singleton site profile
# -----------------------------------------------------------------------------
from .profile import (
    Profile,
    ProfileInput,
    PublicProfile,
)

# -----------------------------------------------------------------------------
# Project Models - Ordered project collection
# -----------------------------------------------------------------------------
from .project import (
    Project,
    ProjectCreate,
    ProjectUpdate,
)

# -----------------------------------------------------------------------------
# Document Model - What is persisted on disk
# -----------------------------------------------------------------------------
from .document import ConfigDocument

__all__ = [
    "CamelModel",
    # Profile
    "Profile",
    "ProfileInput",
    "PublicProfile",
    # Project
    "Project",
    "ProjectCreate",
    "ProjectUpdate",
    # Document
    "ConfigDocument",
]
