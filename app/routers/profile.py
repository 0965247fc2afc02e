# =============================================================================
# app/routers/profile.py - Profile Endpoints
# =============================================================================
# GET is public. POST replaces the profile and requires an admin session
# plus CSRF token; it takes multipart form data so a profile image can be
# uploaded alongside the text fields.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile

from app.auth import SessionRecord, require_admin_write
from app.dependencies import (
    ConfigStoreDep,
    ProfileRepositoryDep,
    ProjectRepositoryDep,
    UploadGuardDep,
)
from app.exceptions import PortfolioException, ProfileNotFoundError
from app.routers.upload import has_file, read_image_upload
from core.models.profile import Profile, ProfileInput, PublicProfile
from core.services.image_resolver import ImageResolver

logger = logging.getLogger(__name__)

router = APIRouter()

FormText = Annotated[str | None, Form()]


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/profile", response_model=Profile)
async def get_profile(profiles: ProfileRepositoryDep):
    """
    Get the site profile.

    Raises:
        404: If the profile has never been saved
    """
    profile = await profiles.get()
    if profile is None:
        raise ProfileNotFoundError()
    return profile


@router.post("/profile", response_model=Profile)
async def update_profile(
    profiles: ProfileRepositoryDep,
    store: ConfigStoreDep,
    guard: UploadGuardDep,
    session: SessionRecord = Depends(require_admin_write),
    name: FormText = None,
    title: FormText = None,
    bio: FormText = None,
    email: FormText = None,
    phone: FormText = None,
    location: FormText = None,
    github: FormText = None,
    linkedin: FormText = None,
    twitter: FormText = None,
    profile_image_url: Annotated[str | None, Form(alias="profileImageUrl")] = None,
    profile_image: Annotated[UploadFile | None, File(alias="profileImage")] = None,
):
    """
    Create or replace the profile.

    Omitted text fields are cleared. The profile image is chosen in order:
    1. profileImageUrl (must be http/https)
    2. the uploaded profileImage file
    3. the image already stored
    """
    fields = ProfileInput(
        name=name,
        title=title,
        bio=bio,
        email=email,
        phone=phone,
        location=location,
        github=github,
        linkedin=linkedin,
        twitter=twitter,
    )

    uploaded_path = None
    if has_file(profile_image):
        upload = await read_image_upload(profile_image, guard)
        pending_path = f"{store.uploads_url_prefix}/{upload.storage_filename('profile')}"

        # Validate everything before any bytes hit the disk
        resolution = ImageResolver.resolve(profile_image_url, pending_path, None)
        fields.to_profile("pending", resolution.value)

        if resolution.uses_upload:
            uploaded_path = await store.save_upload(pending_path.rsplit("/", 1)[-1], upload.data)

    try:
        return await profiles.upsert(
            fields,
            explicit_url=profile_image_url,
            uploaded_path=uploaded_path,
        )
    except PortfolioException:
        if uploaded_path:
            await store.discard_upload(uploaded_path)
        raise


@router.get("/config")
async def get_public_config(
    profiles: ProfileRepositoryDep,
    projects: ProjectRepositoryDep,
):
    """
    Public site configuration: the profile without its id, plus the number
    of projects.
    """
    profile = await profiles.get()
    project_list = await projects.list()

    return {
        "profile": PublicProfile.from_profile(profile).to_json_dict() if profile else None,
        "projectCount": len(project_list),
    }
