# =============================================================================
# core/services/upload_guard.py - Image Upload Admission
# =============================================================================
# Size/type admission control shared by profile and project image intake.
# An upload is admitted only if its declared MIME type AND its filename
# extension are both on the allow-list, and it is no larger than the ceiling.
# =============================================================================

import base64
import logging
import random
import time
from dataclasses import dataclass
from pathlib import PurePosixPath

from app.exceptions import PayloadRejectedError

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5 MiB

ALLOWED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")
ALLOWED_MIME_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")


@dataclass(frozen=True)
class AdmittedUpload:
    """An image payload that passed UploadGuard."""

    filename: str
    content_type: str
    extension: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    def storage_filename(self, prefix: str) -> str:
        """
        Unique filename for storing this upload.

        Example:
            upload.storage_filename("profile")  # "profile-1700000000000-123456789.png"
        """
        millis = int(time.time() * 1000)
        suffix = random.randint(0, 999_999_999)
        return f"{prefix}-{millis}-{suffix}{self.extension}"

    def to_data_uri(self) -> str:
        """Inline payload for Project.imageData: data:<mime>;base64,<data>."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"


class UploadGuard:
    """
    Admission control for inbound image bytes.

    Example:
        guard = UploadGuard()
        upload = guard.admit("me.png", "image/png", data)
    """

    def __init__(
        self,
        max_bytes: int = MAX_IMAGE_BYTES,
        allowed_extensions: tuple[str, ...] | list[str] = ALLOWED_EXTENSIONS,
        allowed_types: tuple[str, ...] | list[str] = ALLOWED_MIME_TYPES,
    ):
        self.max_bytes = max_bytes
        self.allowed_extensions = [ext.lower() for ext in allowed_extensions]
        self.allowed_types = [mime.lower() for mime in allowed_types]

    def admit(self, filename: str | None, content_type: str | None, data: bytes) -> AdmittedUpload:
        """
        Check an upload against the type and size constraints.

        Args:
            filename: Original client filename
            content_type: Declared MIME type
            data: Payload bytes

        Returns:
            AdmittedUpload

        Raises:
            PayloadRejectedError: constraint="type" or constraint="size"
        """
        filename = filename or ""
        extension = PurePosixPath(filename.replace("\\", "/")).suffix.lower()
        # Drop parameters such as "; charset=binary"
        mime = (content_type or "").split(";", 1)[0].strip().lower()

        if extension not in self.allowed_extensions or mime not in self.allowed_types:
            logger.warning(f"Rejected upload {filename!r}: type {mime or 'unknown'}")
            raise PayloadRejectedError(
                constraint="type",
                message="Only image files are allowed (JPG, PNG, GIF, WebP)",
                allowed=self.allowed_extensions,
            )

        if len(data) > self.max_bytes:
            size_mb = len(data) / (1024 * 1024)
            max_mb = self.max_bytes / (1024 * 1024)
            logger.warning(f"Rejected upload {filename!r}: {size_mb:.1f}MB")
            raise PayloadRejectedError(
                constraint="size",
                message=f"File too large: {size_mb:.1f}MB (max: {max_mb:g}MB)",
            )

        return AdmittedUpload(
            filename=filename,
            content_type=mime,
            extension=extension,
            data=data,
        )
