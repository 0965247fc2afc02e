# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the storage and domain logic:
# - models/: Pydantic schemas for the profile, projects and stored document
# - services/: ConfigStore, the profile/project repositories, image
#   resolution and upload admission
#
# Code in this package should NOT import from FastAPI.
# This keeps the logic testable and reusable.
# =============================================================================
