# =============================================================================
# core/services/profile_repository.py - Profile Persistence
# =============================================================================
# Singleton profile on top of ConfigStore. Updates act on the existing
# profile if there is one, otherwise they create it.
# =============================================================================

import logging

from core.models.document import ConfigDocument
from core.models.profile import Profile, ProfileInput
from core.services.config_store import ConfigStore
from core.services.image_resolver import ImageResolver
from lib.utils import new_id

logger = logging.getLogger(__name__)


class ProfileRepository:
    """
    Repository for the singleton site profile.

    Writes are full replacements: fields missing from the input are reset to
    "" / None. The profile image is the exception: it goes through
    ImageResolver, which keeps the stored image when no new one is given.
    """

    def __init__(self, store: ConfigStore):
        self.store = store

    async def get(self) -> Profile | None:
        """
        Get the profile.

        Returns:
            The profile, or None if it has never been created
        """
        document = await self.store.load()
        return document.profile

    async def upsert(
        self,
        fields: ProfileInput,
        explicit_url: str | None = None,
        uploaded_path: str | None = None,
    ) -> Profile:
        """
        Create or replace the profile.

        The existing id is kept; a new one is minted on first write. The
        image is resolved against the stored value inside the write cycle.

        Args:
            fields: Profile fields (omitted fields are cleared)
            explicit_url: profileImageUrl from the request, if any
            uploaded_path: Path of an already stored upload, if any

        Returns:
            The stored profile

        Raises:
            InvalidArgumentError: For a non-http(s) image URL or social link
        """
        # Validate before queueing so a bad request never reaches the writer
        preview = ImageResolver.resolve(explicit_url, uploaded_path, None)
        fields.to_profile("pending", preview.value)

        def apply(document: ConfigDocument) -> Profile:
            existing = document.profile
            resolution = ImageResolver.resolve(
                explicit_url,
                uploaded_path,
                existing.profile_image if existing else None,
            )
            profile_id = existing.id if existing else new_id()
            profile = fields.to_profile(profile_id, resolution.value)
            document.profile = profile
            return profile

        profile = await self.store.mutate(apply)
        logger.info(f"Saved profile: {profile.id}")
        return profile
