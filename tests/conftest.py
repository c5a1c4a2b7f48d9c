"""Shared fixtures for image extractor tests."""

import io
import tarfile
from typing import Dict, Iterator, List, Optional

import pytest

from image_extractor.engine import ContainerEngine, EngineKind
from image_extractor.errors import ContentPathNotFoundError, EngineError


def build_tar(entries: Dict[str, Optional[bytes]], mode: int = 0o644) -> bytes:
    """Build a tar archive; a None payload creates a directory entry."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w") as tar:
        for name, payload in entries.items():
            info = tarfile.TarInfo(name)
            if payload is None:
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tar.addfile(info)
            else:
                info.size = len(payload)
                info.mode = mode
                tar.addfile(info, io.BytesIO(payload))
    return buffer.getvalue()


class FakeEngine(ContainerEngine):
    """In-memory engine recording every call made by the pipeline."""

    kind = EngineKind.DOCKER

    def __init__(
        self,
        tags: Optional[List[str]] = None,
        archives: Optional[Dict[str, bytes]] = None,
    ) -> None:
        self.tags = tags or []
        self.archives = archives or {}
        self.calls: List[tuple] = []
        self.pull_events: List[dict] = [{"status": "Pulling"}, {"status": "Done"}]
        self.fail_on: Dict[str, Exception] = {}

    def _fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise self.fail_on[operation]

    def create(self, reference) -> str:
        self.calls.append(("create", reference.raw))
        self._fail("create")
        return "container-1"

    def remove(self, handle: str) -> None:
        self.calls.append(("remove", handle))
        self._fail("remove")

    def _image_tags(self) -> Iterator[str]:
        self.calls.append(("list",))
        self._fail("list")
        yield from self.tags

    def _stream_pull(self, reference, auth) -> Iterator[dict]:
        self.calls.append(("pull", reference.repository, reference.tag, auth))
        self._fail("pull")
        yield from self.pull_events

    def _archive_chunks(self, handle: str, source_path: str) -> Iterator[bytes]:
        self.calls.append(("copy", handle, source_path))
        self._fail("copy")
        if source_path not in self.archives:
            raise ContentPathNotFoundError(source_path)
        data = self.archives[source_path]
        for start in range(0, len(data), 512):
            yield data[start : start + 512]

    def operations(self) -> List[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def tar_bytes() -> bytes:
    return build_tar(
        {
            "configs": None,
            "configs/catalog.json": b'{"name": "catalog"}',
            "configs/nested": None,
            "configs/nested/run.sh": b"#!/bin/sh\necho hi\n",
        }
    )


@pytest.fixture
def fake_engine(tar_bytes) -> FakeEngine:
    return FakeEngine(archives={"/configs": tar_bytes})


@pytest.fixture
def engine_failure() -> EngineError:
    return EngineError("remove", "daemon went away")


@pytest.fixture
def make_tar():
    return build_tar
