"""Google Drive implementation of the ObjectStore interface."""

import io
import logging
import mimetypes
from typing import BinaryIO

import google.auth
from googleapiclient.discovery import Resource, build
from googleapiclient.http import MediaIoBaseDownload, MediaIoBaseUpload

from clip_extractor.domain import CancellableReader, CancellationToken
from clip_extractor.exceptions import (
    FetchFailedError,
    OperationCancelledError,
    StoreFailedError,
)
from clip_extractor.infrastructure.interfaces import ObjectStore

logger = logging.getLogger(__name__)

DRIVE_SCOPE = "https://www.googleapis.com/auth/drive"


def build_drive_service() -> Resource:
    """Builds a Drive v3 service from Application Default Credentials."""
    credentials, project = google.auth.default(scopes=[DRIVE_SCOPE])
    logger.info("Connected to Google Drive API", extra={"project": project})
    return build("drive", "v3", credentials=credentials, cache_discovery=False)


class _DriveMediaStream(io.RawIOBase):
    """Lazily downloads a Drive file one chunk at a time as it is read."""

    def __init__(
        self,
        request,
        chunk_size: int,
        token: CancellationToken | None = None,
    ):
        super().__init__()
        self._buffer = io.BytesIO()
        self._downloader = MediaIoBaseDownload(
            self._buffer, request, chunksize=chunk_size
        )
        self._token = token
        self._done = False
        self._pending = memoryview(b"")

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        while not self._pending and not self._done:
            if self._token is not None:
                self._token.raise_if_cancelled("fetch")
            _, self._done = self._downloader.next_chunk()
            self._pending = memoryview(self._buffer.getvalue())
            self._buffer.seek(0)
            self._buffer.truncate()
        n = min(len(b), len(self._pending))
        b[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        return n


class GoogleDriveObjectStore(ObjectStore):
    """Fetches and stores files in Google Drive, including shared drives."""

    def __init__(self, service: Resource, chunk_size: int = 10 * 1024 * 1024):
        self._service = service
        self._chunk_size = chunk_size

    def fetch(
        self, source_id: str, token: CancellationToken | None = None
    ) -> tuple[str, BinaryIO]:
        if token is not None:
            token.raise_if_cancelled("fetch")
        try:
            metadata = (
                self._service.files()
                .get(fileId=source_id, fields="name", supportsAllDrives=True)
                .execute()
            )
            request = self._service.files().get_media(
                fileId=source_id, supportsAllDrives=True
            )
        except Exception as e:
            logger.exception("Drive fetch failed", extra={"file_id": source_id})
            raise FetchFailedError(source_id, e) from e

        name = metadata["name"]
        logger.info("Opened Drive file", extra={"file_id": source_id, "file_name": name})
        stream = _DriveMediaStream(request, self._chunk_size, token)
        return name, io.BufferedReader(stream, buffer_size=self._chunk_size)

    def store(
        self,
        name: str,
        parent: str,
        data: BinaryIO,
        token: CancellationToken | None = None,
    ) -> str:
        mimetype = mimetypes.guess_type(name)[0] or "application/octet-stream"
        if token is not None:
            token.raise_if_cancelled("store")
            data = CancellableReader(data, token, "store")
        try:
            media = MediaIoBaseUpload(
                data, mimetype=mimetype, chunksize=self._chunk_size, resumable=True
            )
            created = (
                self._service.files()
                .create(
                    body={"name": name, "parents": [parent]},
                    media_body=media,
                    fields="id, name, webViewLink",
                    supportsAllDrives=True,
                )
                .execute()
            )
        except OperationCancelledError:
            logger.warning("Drive upload cancelled", extra={"file_name": name})
            raise
        except Exception as e:
            logger.exception(
                "Drive upload failed", extra={"file_name": name, "folder_id": parent}
            )
            raise StoreFailedError(name, parent, e) from e

        logger.info(
            "File uploaded to Drive",
            extra={
                "file_name": created.get("name"),
                "file_id": created.get("id"),
                "folder_id": parent,
            },
        )
        return created["webViewLink"]
