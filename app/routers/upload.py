# =============================================================================
# app/routers/upload.py - Image Upload Pipeline
# =============================================================================
# Handles project image uploads: validate (type, size) and hand the image
# back as a data URI for the client to store in project.imageData.
# Also provides the upload reader shared with the profile endpoint.
# =============================================================================

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile

from app.auth import SessionRecord, require_admin_write
from app.config import settings
from app.dependencies import UploadGuardDep
from app.exceptions import InvalidArgumentError, StorageUnavailableError
from core.services.upload_guard import AdmittedUpload, UploadGuard

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Helper Functions
# =============================================================================

def has_file(file: UploadFile | None) -> bool:
    """Browsers send an empty, nameless part when no file is chosen."""
    return file is not None and bool(file.filename)


async def read_image_upload(file: UploadFile, guard: UploadGuard) -> AdmittedUpload:
    """
    Read an uploaded file and run it through UploadGuard.

    Reads at most one byte past the limit, so oversized files are rejected
    without being held in memory in full.

    Raises:
        PayloadRejectedError: Wrong type or too large
        StorageUnavailableError: Reading the upload timed out
    """
    try:
        content = await asyncio.wait_for(
            file.read(guard.max_bytes + 1),
            timeout=settings.STORAGE_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.warning(f"Timed out reading upload {file.filename!r}")
        raise StorageUnavailableError("upload", "timed out reading upload")

    upload = guard.admit(file.filename, file.content_type, content)
    logger.info(f"Admitted upload: {upload.filename} ({upload.size / 1024:.1f}KB)")
    return upload


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/upload-image")
async def upload_project_image(
    guard: UploadGuardDep,
    image: Annotated[UploadFile | None, File(description="Project image (JPG, PNG, GIF, WebP)")] = None,
    session: SessionRecord = Depends(require_admin_write),
):
    """
    Upload a project image.

    This endpoint:
    1. Validates the file (extension, MIME type, size <= 5MB)
    2. Encodes it as a base64 data URI

    Returns {"imageData": "data:image/png;base64,..."} for use as the
    project's imageData. Nothing is written to storage.
    """
    if not has_file(image):
        raise InvalidArgumentError("No image file provided", field="image")

    upload = await read_image_upload(image, guard)
    return {"imageData": upload.to_data_uri()}
