"""Error types raised by the image extractor."""


class ImageExtractorError(Exception):
    """Base class for all image extractor errors."""

    pass


class ConfigurationError(ImageExtractorError):
    """The requested configuration cannot be honoured."""

    pass


class RuntimeDetectionError(ImageExtractorError):
    """Neither container engine could be reached."""

    pass


class ReferenceParseError(ImageExtractorError):
    """An image reference could not be split into repository and tag."""

    pass


class EngineError(ImageExtractorError):
    """A container engine call failed.

    Args:
        operation: Engine operation that failed ("pull", "create", "copy", "remove")
        message: Description of the failure
    """

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.message = message


class ExtractionError(ImageExtractorError):
    """The container content could not be written to disk."""

    pass


class ContentPathNotFoundError(ExtractionError):
    """The requested content path does not exist in the container."""

    def __init__(self, path: str) -> None:
        super().__init__(f"content path not found in container: {path}")
        self.path = path
