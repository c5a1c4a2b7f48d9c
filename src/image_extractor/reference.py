"""Image reference parsing."""

from pydantic import BaseModel, ConfigDict, Field

from .errors import ReferenceParseError

DEFAULT_TAG = "latest"


class ImageReference(BaseModel):
    """A container image reference split into repository and tag."""

    model_config = ConfigDict(frozen=True)

    raw: str = Field(..., description="Reference exactly as supplied by the user")
    repository: str = Field(..., min_length=1, description="Image repository")
    tag: str = Field(default=DEFAULT_TAG, description="Tag or digest")

    @property
    def is_digest(self) -> bool:
        """True when the reference pins a content digest."""
        return "@" in self.raw

    def __str__(self) -> str:
        separator = "@" if self.is_digest else ":"
        return f"{self.repository}{separator}{self.tag}"


def parse_reference(raw: str) -> ImageReference:
    """
    Split a raw image reference into repository and tag.

    Digest references ("repo@sha256:...") are split on the first "@", all
    others on the first ":". The right-hand side is kept verbatim, so a
    digest keeps its own colon. Without a delimiter the tag is "latest".

    Args:
        raw: Reference string (e.g., "quay.io/org/app:v1")

    Returns:
        Parsed ImageReference

    Raises:
        ReferenceParseError: If the repository segment is empty
    """
    image = raw.strip()
    delimiter = "@" if "@" in image else ":"
    repository, found, tag = image.partition(delimiter)

    if not repository:
        raise ReferenceParseError(
            f"could not split {raw!r} into repository and tag: repository is empty"
        )

    return ImageReference(
        raw=image, repository=repository, tag=tag if found else DEFAULT_TAG
    )
