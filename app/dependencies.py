# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# Tests swap the store with:
#   app.dependency_overrides[get_config_store] = lambda: ConfigStore(tmp_path)
# =============================================================================

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from app.config import settings
from core.services.config_store import ConfigStore
from core.services.profile_repository import ProfileRepository
from core.services.project_repository import ProjectRepository
from core.services.upload_guard import UploadGuard


@lru_cache
def get_config_store() -> ConfigStore:
    """
    Get the ConfigStore instance.

    One instance per process: its writer lock is what serializes
    mutations, so it must never be duplicated.
    """
    return ConfigStore(
        data_dir=settings.data_path,
        config_filename=settings.CONFIG_FILENAME,
        uploads_dirname=settings.UPLOADS_DIRNAME,
        uploads_url_prefix=settings.UPLOADS_URL_PREFIX,
        timeout=settings.STORAGE_TIMEOUT_SECONDS,
    )


def get_profile_repository(
    store: ConfigStore = Depends(get_config_store),
) -> ProfileRepository:
    return ProfileRepository(store)


def get_project_repository(
    store: ConfigStore = Depends(get_config_store),
) -> ProjectRepository:
    return ProjectRepository(store)


@lru_cache
def get_upload_guard() -> UploadGuard:
    """Upload admission limits from settings."""
    return UploadGuard(
        max_bytes=settings.max_upload_size_bytes,
        allowed_extensions=settings.allowed_extensions_list,
        allowed_types=settings.allowed_types_list,
    )


# Type aliases for dependency injection
ConfigStoreDep = Annotated[ConfigStore, Depends(get_config_store)]
ProfileRepositoryDep = Annotated[ProfileRepository, Depends(get_profile_repository)]
ProjectRepositoryDep = Annotated[ProjectRepository, Depends(get_project_repository)]
UploadGuardDep = Annotated[UploadGuard, Depends(get_upload_guard)]
