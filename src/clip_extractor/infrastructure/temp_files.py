"""
Local temporary files that live for a single extraction.

Two kinds of artifact exist per request: the staged copy of the source
object, and the transcoded clip. Each one is owned by exactly one handle
whose release deletes the file, at most once.
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO

from clip_extractor.domain import CancellationToken
from clip_extractor.exceptions import OperationCancelledError, StagingFailedError

logger = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 1024 * 1024


def remove_temp_file(path: Path) -> None:
    try:
        os.remove(path)
        logger.info("Deleted temp file", extra={"path": str(path)})
    except OSError:
        logger.warning(
            "Error deleting temp file", extra={"path": str(path)}, exc_info=True
        )


def create_temp_path(prefix: str, suffix: str = "", temp_dir: str | None = None) -> Path:
    """Reserves a new, uniquely named empty file and returns its path."""
    fd, name = tempfile.mkstemp(prefix=prefix, suffix=suffix, dir=temp_dir)
    os.close(fd)
    return Path(name)


def split_extension(name: str) -> tuple[str, str]:
    """
    Splits a name at the last dot of its final path element.

    Everything from that dot on is the extension, so ".mp4" is all
    extension and "file." has the extension ".".
    """
    dot = name.rfind(".")
    if dot == -1 or "/" in name[dot:]:
        return name, ""
    return name[:dot], name[dot:]


def extension_of(name: str) -> str:
    """Returns the file extension of a display name, including the dot."""
    return split_extension(name)[1]


class StagedFile:
    """Scoped handle on a local copy of a source object."""

    def __init__(self, path: Path):
        self.path = path
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Deletes the file. Calling it again does nothing."""
        if self._released:
            logger.debug("Staged file already released", extra={"path": str(self.path)})
            return
        self._released = True
        remove_temp_file(self.path)

    def __enter__(self) -> "StagedFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


def stage_source(
    name_hint: str,
    source: BinaryIO,
    temp_dir: str | None = None,
    token: CancellationToken | None = None,
) -> StagedFile:
    """
    Copies a source stream into a new local temp file.

    The temp file keeps the extension of name_hint so that the transcoder
    can infer the container format. The stream is drained completely before
    this returns.

    Raises:
        StagingFailedError: If the file cannot be created or written.
        OperationCancelledError: If the token fires during the copy.
    """
    try:
        staged = StagedFile(
            create_temp_path("download-", extension_of(name_hint), temp_dir)
        )
    except OSError as e:
        logger.exception("Could not create staging file", extra={"name": name_hint})
        raise StagingFailedError(name_hint, e) from e

    logger.info(
        "Staging source", extra={"name": name_hint, "path": str(staged.path)}
    )
    try:
        with open(staged.path, "wb") as f:
            if token is None:
                shutil.copyfileobj(source, f, COPY_CHUNK_SIZE)
            else:
                while True:
                    token.raise_if_cancelled("staging")
                    chunk = source.read(COPY_CHUNK_SIZE)
                    if not chunk:
                        break
                    f.write(chunk)
    except OperationCancelledError:
        staged.release()
        raise
    except Exception as e:
        logger.exception(
            "Staging failed", extra={"name": name_hint, "path": str(staged.path)}
        )
        staged.release()
        raise StagingFailedError(name_hint, e) from e

    logger.info(
        "Finished staging source",
        extra={
            "name": name_hint,
            "path": str(staged.path),
            "size": staged.path.stat().st_size,
        },
    )
    return staged


class TempFileStream:
    """
    Readable, seekable stream over a temp file that it owns.

    Closing the stream deletes the file. Close is idempotent, so a caller
    may close early after a partial read and again on the way out.
    """

    def __init__(self, path: Path):
        self.path = path
        self._file = open(path, "rb")
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def writable(self) -> bool:
        return False

    def read(self, size: int = -1) -> bytes:
        return self._file.read(size)

    def readinto(self, buffer) -> int:
        return self._file.readinto(buffer)

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        return self._file.seek(offset, whence)

    def tell(self) -> int:
        return self._file.tell()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._file.close()
        finally:
            remove_temp_file(self.path)

    def __enter__(self) -> "TempFileStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
