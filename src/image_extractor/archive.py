"""Unpacking of container tar archives onto the local filesystem."""

import logging
import tarfile
from pathlib import Path
from typing import BinaryIO

from .errors import ExtractionError

logger = logging.getLogger(__name__)


def _keep_permissions(member: tarfile.TarInfo, path: str) -> tarfile.TarInfo:
    """The "tar" extraction filter, minus its group/other write masking."""
    filtered = tarfile.tar_filter(member, path)
    if member.mode is not None:
        # setuid, setgid and sticky stay cleared
        filtered = filtered.replace(mode=member.mode & 0o777, deep=False)
    return filtered


def unpack_archive(archive: BinaryIO, destination: Path) -> int:
    """
    Extract a tar stream into a directory.

    Entry paths are kept relative to the destination along with their
    rwx permission bits. Absolute paths and entries escaping the destination
    are refused, and setuid, setgid and sticky bits are dropped.

    Args:
        archive: Readable tar stream
        destination: Directory to extract into (created if missing)

    Returns:
        Number of archive members written

    Raises:
        ExtractionError: If the archive cannot be read or written out
    """
    destination = Path(destination)
    try:
        destination.mkdir(parents=True, exist_ok=True)
        # Directory permissions are applied after their contents are written,
        # so read-only directories in the image do not block extraction.
        with tarfile.open(fileobj=archive, mode="r:*") as tar:
            tar.extractall(path=destination, filter=_keep_permissions)
            count = len(tar.getmembers())
    except (tarfile.TarError, OSError) as e:
        raise ExtractionError(f"failed to unpack archive into {destination}: {e}") from e

    logger.debug(f"📦 Unpacked {count} entries into {destination}")
    return count
