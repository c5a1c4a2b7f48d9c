"""Configuration models with Pydantic validation."""

import sys
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

if sys.platform == "win32":
    DEFAULT_SOCKET = "tcp://localhost:2375"
else:
    DEFAULT_SOCKET = "unix:///var/run/docker.sock"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ExtractionRequest(BaseModel):
    """What to copy out of the image and how to fetch it."""

    source_path: str = Field(
        default="/", min_length=1, description="Path of the content inside the container"
    )
    destination_path: Path = Field(
        default=Path("."), description="Directory the content is written to"
    )
    username: str = Field(default="", description="Registry username for the pull")
    password: str = Field(
        default="", repr=False, description="Registry password for the pull"
    )
    force_pull: bool = Field(
        default=False, description="Pull even if the image is present locally"
    )
    to_stdout: bool = Field(
        default=False, description="Write the archive to stdout (not supported)"
    )


class ExtractionConfig(BaseModel):
    """Complete configuration for one invocation."""

    image: str = Field(..., min_length=1, description="Image reference to extract from")
    request: ExtractionRequest = Field(default_factory=ExtractionRequest)
    socket: str = Field(
        default=DEFAULT_SOCKET, description="Container engine socket address"
    )
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if v.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {set(LOG_LEVELS)}")
        return v.upper()
