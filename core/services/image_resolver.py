# =============================================================================
# core/services/image_resolver.py - Profile Image Resolution
# =============================================================================
# Decides which value profile.profileImage receives on a profile write.
#
# Priority (first match wins):
#   1. explicit URL   - must be http(s); otherwise InvalidArgumentError
#   2. uploaded file  - the path assigned to the admitted upload
#   3. stored value   - kept unchanged
#   4. nothing        - None
# =============================================================================

from dataclasses import dataclass

from lib.utils import is_blank, validate_http_url


@dataclass(frozen=True)
class ImageResolution:
    """Outcome of a resolution: the value and where it came from."""

    value: str | None
    source: str  # "url" | "upload" | "existing" | "none"

    @property
    def uses_upload(self) -> bool:
        return self.source == "upload"


class ImageResolver:
    """Priority policy for the profile image field."""

    @staticmethod
    def resolve(
        explicit_url: str | None = None,
        uploaded_path: str | None = None,
        existing: str | None = None,
    ) -> ImageResolution:
        """
        Resolve the profile image.

        Args:
            explicit_url: profileImageUrl form value
            uploaded_path: Storage path assigned to an admitted upload
            existing: Currently stored profileImage

        Returns:
            ImageResolution with the chosen value

        Raises:
            InvalidArgumentError: If explicit_url is set but not an http(s) URL
        """
        if not is_blank(explicit_url):
            return ImageResolution(validate_http_url(explicit_url, "profileImageUrl"), "url")
        if uploaded_path:
            return ImageResolution(uploaded_path, "upload")
        if existing:
            return ImageResolution(existing, "existing")
        return ImageResolution(None, "none")
