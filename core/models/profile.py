# =============================================================================
# core/models/profile.py - Profile Schemas
# =============================================================================
# These models define the singleton site profile:
# - Profile: The stored record (at most one exists)
# - ProfileInput: Fields accepted by POST /profile
#
# Profile writes use full-replace semantics: a field omitted from the input
# is reset to "" (required strings) or None (optional URLs). Only
# profileImage survives, because the image resolver carries it forward.
# =============================================================================

from pydantic import Field

from lib.utils import empty_to_none, optional_http_url

from .base import CamelModel


class Profile(CamelModel):
    """
    The stored site profile.

    Example:
        {
            "id": "550e8400-e29b-41d4-a716-446655440000",
            "name": "Ada Lovelace",
            "title": "Engineer",
            "bio": "...",
            "profileImage": "/data/uploads/profile-1700000000000-42.png",
            "email": "ada@example.com",
            "phone": "",
            "location": "London",
            "github": "https://github.com/ada",
            "linkedin": null,
            "twitter": null
        }
    """

    # Minted on first write, never changed afterwards
    id: str = Field(..., description="Stable profile identifier")

    name: str = Field(default="", description="Display name")
    title: str = Field(default="", description="Headline / job title")
    bio: str = Field(default="", description="Short biography")

    # http(s) URL, a path under the uploads prefix, or None for "no image"
    profile_image: str | None = Field(
        default=None,
        description="Profile image URL or uploaded image path"
    )

    email: str = Field(default="", description="Contact email")
    phone: str = Field(default="", description="Contact phone")
    location: str = Field(default="", description="Location")

    github: str | None = Field(default=None, description="GitHub profile URL")
    linkedin: str | None = Field(default=None, description="LinkedIn profile URL")
    twitter: str | None = Field(default=None, description="Twitter/X profile URL")


class ProfileInput(CamelModel):
    """
    Fields accepted when creating or replacing the profile.

    Every field is optional on the wire; defaulting happens in to_profile().
    The profile image is not part of this model: it is resolved separately
    from the profileImageUrl field, the uploaded file and the stored value.
    """

    name: str | None = None
    title: str | None = None
    bio: str | None = None
    email: str | None = None
    phone: str | None = None
    location: str | None = None
    github: str | None = None
    linkedin: str | None = None
    twitter: str | None = None

    def to_profile(self, profile_id: str, profile_image: str | None) -> Profile:
        """
        Build the full replacement Profile.

        Raises:
            InvalidArgumentError: If a social link is not an http(s) URL
        """
        return Profile(
            id=profile_id,
            name=self.name or "",
            title=self.title or "",
            bio=self.bio or "",
            profile_image=empty_to_none(profile_image),
            email=self.email or "",
            phone=self.phone or "",
            location=self.location or "",
            github=optional_http_url(self.github, "github"),
            linkedin=optional_http_url(self.linkedin, "linkedin"),
            twitter=optional_http_url(self.twitter, "twitter"),
        )


class PublicProfile(CamelModel):
    """
    Safe public subset of the profile (no identifier).

    Returned by GET /config together with the project count.
    """

    name: str
    title: str
    bio: str
    profile_image: str | None = None
    email: str
    phone: str
    location: str
    github: str | None = None
    linkedin: str | None = None
    twitter: str | None = None

    @classmethod
    def from_profile(cls, profile: Profile) -> "PublicProfile":
        return cls(**profile.model_dump(exclude={"id"}))
