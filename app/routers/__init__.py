# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - profile.py: Profile read/replace and the public config summary
# - projects.py: Project CRUD endpoints
# - upload.py: Project image upload (returns an inline data URI)
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import profile
from . import projects
from . import upload

__all__ = [
    "health",
    "profile",
    "projects",
    "upload",
]
