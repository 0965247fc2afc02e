# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .config_store import ConfigStore
from .profile_repository import ProfileRepository
from .project_repository import ProjectRepository
from .image_resolver import ImageResolution, ImageResolver
from .upload_guard import AdmittedUpload, UploadGuard

__all__ = [
    "ConfigStore",
    "ProfileRepository",
    "ProjectRepository",
    "ImageResolution",
    "ImageResolver",
    "AdmittedUpload",
    "UploadGuard",
]
