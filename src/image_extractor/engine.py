"""Container engine capability shared by the Docker and Podman backends."""

import json
import logging
import tempfile
from abc import ABC, abstractmethod
from enum import Enum
from typing import BinaryIO, Dict, Iterable, Iterator, Optional, Union

from .errors import EngineError, ExtractionError
from .reference import ImageReference

logger = logging.getLogger(__name__)

# Archives larger than this are spooled to a temporary file instead of memory.
SPOOL_MAX_SIZE = 64 * 1024 * 1024

# Images built FROM scratch have no shell or executable to run; a blank
# command lets the engine create (never start) the container anyway.
NOOP_COMMAND = [""]


class EngineKind(str, Enum):
    """Container engines the extractor knows how to talk to."""

    DOCKER = "docker"
    PODMAN = "podman"


class ContainerEngine(ABC):
    """
    Operations the extraction pipeline needs from a container engine.

    Subclasses wrap one SDK client and translate its failures into
    EngineError; the pipeline never sees SDK exception types.
    """

    kind: EngineKind

    def present_locally(self, reference: ImageReference) -> bool:
        """
        Check whether the engine already has the image.

        The literal reference string is compared against every tag the
        engine reports, so "repo" does not match a stored "repo:latest".
        The reference string has already had surrounding whitespace
        stripped by parse_reference, so " repo:tag " matches "repo:tag".

        Args:
            reference: Parsed image reference

        Returns:
            True if the reference string is among the local image tags
        """
        logger.debug(f"📦 Searching for image {reference.raw} locally")
        try:
            for tag in self._image_tags():
                if tag == reference.raw:
                    logger.debug(f"📦 Found image {reference.raw} locally")
                    return True
        except EngineError as e:
            logger.error(f"Error occurred while searching for image locally: {e}")
        return False

    def pull(
        self,
        reference: ImageReference,
        username: str = "",
        password: str = "",
        force: bool = False,
    ) -> None:
        """
        Make sure the image is available to the engine, pulling it if needed.

        Args:
            reference: Parsed image reference
            username: Registry username
            password: Registry password
            force: Pull even if the image is present locally

        Raises:
            EngineError: If the pull request or its progress stream fails
        """
        if self.present_locally(reference):
            if not force:
                logger.debug("✅ Skipping the pull as the image was found locally")
                return
            logger.debug("🔧 Force was set, ignoring the local image")

        auth = registry_auth(username, password)
        self._consume_progress(self._stream_pull(reference, auth))
        logger.debug(f"✅ Successfully pulled {reference}")

    def copy_from(self, handle: str, source_path: str) -> BinaryIO:
        """
        Fetch a tar archive of a path inside the container.

        Args:
            handle: Container id returned by create()
            source_path: Path inside the container filesystem

        Returns:
            Readable binary file positioned at the start of the archive;
            the caller closes it

        Raises:
            ContentPathNotFoundError: If the path does not exist in the container
            EngineError: If the copy request fails
            ExtractionError: If the engine returned an empty archive
        """
        archive = tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_SIZE)
        try:
            for chunk in self._archive_chunks(handle, source_path):
                archive.write(chunk)
        except Exception:
            archive.close()
            raise

        if archive.tell() == 0:
            archive.close()
            raise ExtractionError(
                f"failed to retrieve {source_path} from container {handle}: empty archive"
            )

        archive.seek(0)
        return archive

    @abstractmethod
    def create(self, reference: ImageReference) -> str:
        """Create a stopped container from the image and return its id."""

    @abstractmethod
    def remove(self, handle: str) -> None:
        """Force-remove the container with the given id."""

    @abstractmethod
    def _image_tags(self) -> Iterator[str]:
        """Yield every repository tag of every local image."""

    @abstractmethod
    def _stream_pull(
        self, reference: ImageReference, auth: Optional[Dict[str, str]]
    ) -> Iterator[Union[dict, bytes]]:
        """Issue the pull and yield its progress events."""

    @abstractmethod
    def _archive_chunks(self, handle: str, source_path: str) -> Iterator[bytes]:
        """Yield the raw tar archive of source_path in chunks."""

    def _consume_progress(self, events: Iterable[Union[dict, bytes, str]]) -> None:
        """Drain a pull progress stream, failing on the first error event."""
        for event in events:
            if isinstance(event, (bytes, str)):
                event = _decode_event(event)
            if not event:
                continue
            if event.get("error"):
                raise EngineError("pull", str(event["error"]))
            logger.debug(f"🔧 {event}")


def registry_auth(username: str, password: str) -> Optional[Dict[str, str]]:
    """Build an auth config for a pull, or None for anonymous pulls."""
    if not username and not password:
        return None
    return {"username": username, "password": password}


def _decode_event(raw: Union[bytes, str]) -> Optional[dict]:
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    text = text.strip()
    if not text:
        return None
    try:
        event = json.loads(text)
    except json.JSONDecodeError:
        return {"status": text}
    return event if isinstance(event, dict) else {"status": event}
