"""Main extraction orchestration."""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .archive import unpack_archive
from .config import DEFAULT_SOCKET, ExtractionRequest
from .engine import ContainerEngine, EngineKind
from .errors import ConfigurationError, EngineError
from .reference import ImageReference, parse_reference
from .runtime import select_runtime

logger = logging.getLogger(__name__)


class ExtractionState(str, Enum):
    """Progress of a single extraction."""

    IDLE = "idle"
    PULLED = "pulled"
    CREATED = "created"
    COPIED = "copied"
    UNPACKED = "unpacked"
    REMOVED = "removed"
    FAILED = "failed"


@dataclass
class ExtractionResult:
    """Outcome of a successful extraction."""

    reference: ImageReference
    engine: EngineKind
    container_id: str
    destination: Path
    entries: int
    removed: bool
    cleanup_error: Optional[str] = None


def check_request(request: ExtractionRequest) -> None:
    """
    Reject requests the extractor cannot serve.

    Raises:
        ConfigurationError: If writing to stdout was requested
    """
    if request.to_stdout:
        raise ConfigurationError("writing to stdout is not currently implemented")


class ImageExtractor:
    """Copies content out of an image through an ephemeral container."""

    def __init__(self, engine: ContainerEngine) -> None:
        """
        Initialize image extractor.

        Args:
            engine: Engine backend returned by select_runtime()
        """
        self.engine = engine
        self.state = ExtractionState.IDLE

    def run(self, image: str, request: ExtractionRequest) -> ExtractionResult:
        """
        Pull the image, create a container, copy the content out and unpack it.

        Once the container exists it is removed on every exit path. Copy and
        unpack errors are raised after the removal attempt; a failed removal
        after a successful unpack is logged and reported in the result.

        Args:
            image: Raw image reference
            request: Validated extraction request

        Returns:
            ExtractionResult describing what was written

        Raises:
            ConfigurationError: If the request asks for stdout output
            ReferenceParseError: If the image reference is malformed
            EngineError: If an engine call fails
            ExtractionError: If the content is missing or cannot be unpacked
        """
        self.state = ExtractionState.IDLE
        try:
            check_request(request)
            reference = parse_reference(image)

            self.engine.pull(
                reference, request.username, request.password, request.force_pull
            )
            self.state = ExtractionState.PULLED

            container_id = self.engine.create(reference)
            self.state = ExtractionState.CREATED
        except Exception:
            self.state = ExtractionState.FAILED
            raise

        try:
            entries = self._copy_and_unpack(
                container_id, request.source_path, request.destination_path
            )
        except Exception:
            self.state = ExtractionState.FAILED
            self._cleanup(container_id)
            raise

        logger.info(
            f"✅ Copied {request.source_path} from {reference} "
            f"to {request.destination_path} successfully"
        )

        cleanup_error = self._cleanup(container_id)
        if cleanup_error is None:
            self.state = ExtractionState.REMOVED

        return ExtractionResult(
            reference=reference,
            engine=self.engine.kind,
            container_id=container_id,
            destination=request.destination_path,
            entries=entries,
            removed=cleanup_error is None,
            cleanup_error=cleanup_error,
        )

    def _copy_and_unpack(
        self, container_id: str, source_path: str, destination: Path
    ) -> int:
        archive = self.engine.copy_from(container_id, source_path)
        self.state = ExtractionState.COPIED
        with archive:
            entries = unpack_archive(archive, destination)
        self.state = ExtractionState.UNPACKED
        return entries

    def _cleanup(self, container_id: str) -> Optional[str]:
        """Remove the container, logging instead of raising on failure."""
        try:
            self.engine.remove(container_id)
        except EngineError as e:
            logger.warning(f"Failed to remove container {container_id}: {e}")
            return str(e)
        return None


def extract_image(
    image: str, request: ExtractionRequest, socket: str = DEFAULT_SOCKET
) -> ExtractionResult:
    """
    Extract content from an image using whichever engine is reachable.

    Args:
        image: Raw image reference
        request: Extraction request
        socket: Engine socket address

    Returns:
        ExtractionResult of the run
    """
    check_request(request)
    engine = select_runtime(socket)
    logger.debug(f"🔧 Using {engine.kind.value} runtime")
    return ImageExtractor(engine).run(image, request)
