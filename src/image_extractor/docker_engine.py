"""Docker Engine API backend with proper error handling."""

import logging
from typing import Dict, Iterator, Optional

import docker
from docker.errors import DockerException, NotFound
from requests.exceptions import RequestException

from .engine import NOOP_COMMAND, ContainerEngine, EngineKind
from .errors import ContentPathNotFoundError, EngineError
from .reference import ImageReference

logger = logging.getLogger(__name__)

DOCKER_ERRORS = (DockerException, RequestException)


class DockerEngine(ContainerEngine):
    """Talks to a docker-compatible daemon through the docker SDK."""

    kind = EngineKind.DOCKER

    def __init__(self, client: docker.DockerClient) -> None:
        """
        Initialize the backend.

        Args:
            client: Connected docker client
        """
        self._client = client

    @classmethod
    def connect(cls, socket: str) -> "DockerEngine":
        """
        Open a client on the socket and verify the daemon answers.

        Args:
            socket: Daemon address (e.g., "unix:///var/run/docker.sock")

        Returns:
            DockerEngine bound to the socket

        Raises:
            EngineError: If the daemon cannot be reached
        """
        try:
            client = docker.DockerClient(base_url=socket)
            version = client.version()
        except DOCKER_ERRORS as e:
            raise EngineError("version", str(e)) from e

        logger.debug(f"🔧 Docker {version.get('Version', 'unknown')} at {socket}")
        return cls(client)

    def create(self, reference: ImageReference) -> str:
        """
        Create a container without starting it.

        Args:
            reference: Image to create the container from

        Returns:
            Container ID
        """
        try:
            container = self._client.api.create_container(
                image=reference.raw, command=NOOP_COMMAND
            )
        except DOCKER_ERRORS as e:
            raise EngineError("create", str(e)) from e

        container_id = container["Id"]
        logger.debug(f"📦 Created container with id: {container_id}")
        return container_id

    def remove(self, handle: str) -> None:
        """
        Force-remove a container.

        Args:
            handle: ID of the container to remove
        """
        try:
            self._client.api.remove_container(handle, force=True)
        except DOCKER_ERRORS as e:
            raise EngineError("remove", str(e)) from e
        logger.debug(f"📦 Cleaned up container {handle} successfully")

    def _image_tags(self) -> Iterator[str]:
        try:
            images = self._client.images.list()
        except DOCKER_ERRORS as e:
            raise EngineError("list images", str(e)) from e
        for image in images:
            yield from image.tags

    def _stream_pull(
        self, reference: ImageReference, auth: Optional[Dict[str, str]]
    ) -> Iterator[dict]:
        try:
            yield from self._client.api.pull(
                reference.repository,
                tag=reference.tag,
                stream=True,
                decode=True,
                auth_config=auth,
            )
        except DOCKER_ERRORS as e:
            raise EngineError("pull", str(e)) from e

    def _archive_chunks(self, handle: str, source_path: str) -> Iterator[bytes]:
        try:
            stream, stat = self._client.api.get_archive(handle, source_path)
            logger.debug(f"📦 Copying {stat.get('name', source_path)} from {handle}")
            yield from stream
        except NotFound as e:
            raise ContentPathNotFoundError(source_path) from e
        except DOCKER_ERRORS as e:
            raise EngineError("copy", str(e)) from e
