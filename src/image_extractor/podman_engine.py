"""Podman libpod API backend."""

import logging
from typing import Dict, Iterator, Optional, Union

from podman import PodmanClient
from podman.api import encode_auth_header
from podman.errors import APIError, NotFound, PodmanError
from requests.exceptions import RequestException

from .engine import NOOP_COMMAND, ContainerEngine, EngineKind
from .errors import ContentPathNotFoundError, EngineError
from .reference import ImageReference

logger = logging.getLogger(__name__)

PODMAN_ERRORS = (APIError, PodmanError, RequestException)


class PodmanEngine(ContainerEngine):
    """Talks to a (usually rootless) Podman service through the podman SDK."""

    kind = EngineKind.PODMAN

    def __init__(self, client: PodmanClient) -> None:
        self._client = client

    @classmethod
    def connect(cls, socket: str) -> "PodmanEngine":
        """
        Open a client on the socket and verify the service answers.

        Raises:
            EngineError: If the service cannot be reached
        """
        try:
            client = PodmanClient(base_url=socket)
            version = client.version()
        except PODMAN_ERRORS as e:
            raise EngineError("version", str(e)) from e

        logger.debug(f"🔧 Podman {version.get('Version', 'unknown')} at {socket}")
        return cls(client)

    def create(self, reference: ImageReference) -> str:
        try:
            container = self._client.containers.create(
                reference.raw, command=NOOP_COMMAND
            )
        except PODMAN_ERRORS as e:
            raise EngineError("create", str(e)) from e

        logger.debug(f"📦 Created container with id: {container.id}")
        return container.id

    def remove(self, handle: str) -> None:
        # Delete this container only; pruning would also take unrelated
        # stopped containers with it.
        try:
            self._client.containers.remove(handle, force=True)
        except PODMAN_ERRORS as e:
            raise EngineError("remove", str(e)) from e
        logger.debug(f"📦 Cleaned up container {handle} successfully")

    def _image_tags(self) -> Iterator[str]:
        try:
            images = self._client.images.list()
        except PODMAN_ERRORS as e:
            raise EngineError("list images", str(e)) from e
        for image in images:
            yield from image.tags

    def _stream_pull(
        self, reference: ImageReference, auth: Optional[Dict[str, str]]
    ) -> Iterator[Union[dict, bytes]]:
        # images.pull() always joins repository and tag with ":", which
        # mangles digests; libpod takes the full reference instead.
        headers = {}
        if auth is not None:
            headers["X-Registry-Auth"] = encode_auth_header(auth)
        try:
            response = self._client.api.post(
                "/images/pull",
                params={"reference": str(reference)},
                headers=headers,
                stream=True,
            )
            response.raise_for_status()
            yield from response.iter_lines()
        except PODMAN_ERRORS as e:
            raise EngineError("pull", str(e)) from e

    def _archive_chunks(self, handle: str, source_path: str) -> Iterator[bytes]:
        try:
            container = self._client.containers.get(handle)
        except PODMAN_ERRORS as e:
            raise EngineError("copy", str(e)) from e

        try:
            stream, stat = container.get_archive(source_path)
            logger.debug(f"📦 Copying {stat.get('name', source_path)} from {handle}")
            yield from stream
        except NotFound as e:
            raise ContentPathNotFoundError(source_path) from e
        except PODMAN_ERRORS as e:
            raise EngineError("copy", str(e)) from e
