"""Container runtime detection."""

import logging
import os
import sys
from typing import Optional, Union

from .config import DEFAULT_SOCKET
from .docker_engine import DockerEngine
from .errors import EngineError, RuntimeDetectionError
from .podman_engine import PodmanEngine

logger = logging.getLogger(__name__)

EngineHandle = Union[DockerEngine, PodmanEngine]


def podman_socket_path() -> Optional[str]:
    """
    Locate the rootless Podman socket under the user's runtime directory.

    Returns:
        Socket address, or None if XDG_RUNTIME_DIR is not set
    """
    runtime_dir = os.environ.get("XDG_RUNTIME_DIR")
    if not runtime_dir:
        return None
    return f"unix://{runtime_dir.rstrip('/')}/podman/podman.sock"


def select_runtime(socket: str = DEFAULT_SOCKET) -> EngineHandle:
    """
    Find a reachable container engine.

    Docker is tried on the given socket. If that fails and the socket is the
    platform default, the rootless Podman socket is tried next. Each engine
    is probed exactly once.

    Args:
        socket: Engine socket address

    Returns:
        Engine backend for the first engine that answered

    Raises:
        RuntimeDetectionError: If no engine could be reached
    """
    try:
        return DockerEngine.connect(socket)
    except EngineError as e:
        docker_error = e

    if socket != DEFAULT_SOCKET:
        raise RuntimeDetectionError(
            f"no container engine reachable at {socket}: {docker_error}"
        ) from docker_error

    if sys.platform == "win32":
        raise RuntimeDetectionError(
            f"docker socket was not found running at {socket}: {docker_error}"
        ) from docker_error

    logger.debug("🔧 Docker socket not found: falling back to podman")
    podman_socket = podman_socket_path()
    if podman_socket is None:
        raise RuntimeDetectionError(
            f"docker is not reachable at {socket} and XDG_RUNTIME_DIR is not "
            "set to locate a podman socket"
        ) from docker_error

    logger.debug(f"🔧 Podman socket at {podman_socket}")
    try:
        return PodmanEngine.connect(podman_socket)
    except EngineError as e:
        raise RuntimeDetectionError(
            f"neither docker ({socket}) nor podman ({podman_socket}) "
            f"is reachable on this host: {e}"
        ) from e
