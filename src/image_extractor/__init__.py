"""
Image Extractor - copy content out of container images.

Pulls an image through Docker or rootless Podman, creates a stopped
container from it, copies a path out as a tar archive, unpacks it onto
local disk and removes the container again.
"""

__version__ = "0.4.0"

from .config import ExtractionConfig, ExtractionRequest
from .engine import ContainerEngine, EngineKind
from .errors import (
    ConfigurationError,
    ContentPathNotFoundError,
    EngineError,
    ExtractionError,
    ImageExtractorError,
    ReferenceParseError,
    RuntimeDetectionError,
)
from .extractor import ExtractionResult, ExtractionState, ImageExtractor, extract_image
from .reference import ImageReference, parse_reference
from .runtime import select_runtime

__all__ = [
    "ExtractionConfig",
    "ExtractionRequest",
    "ContainerEngine",
    "EngineKind",
    "ConfigurationError",
    "ContentPathNotFoundError",
    "EngineError",
    "ExtractionError",
    "ImageExtractorError",
    "ReferenceParseError",
    "RuntimeDetectionError",
    "ExtractionResult",
    "ExtractionState",
    "ImageExtractor",
    "extract_image",
    "ImageReference",
    "parse_reference",
    "select_runtime",
]
