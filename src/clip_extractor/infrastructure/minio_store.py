"""MinIO implementation of the ObjectStore interface."""

import logging
import mimetypes
import posixpath
from datetime import timedelta
from typing import BinaryIO

from minio import Minio

from clip_extractor.domain import CancellableReader, CancellationToken
from clip_extractor.exceptions import (
    FetchFailedError,
    OperationCancelledError,
    StoreFailedError,
)
from clip_extractor.infrastructure.interfaces import ObjectStore

logger = logging.getLogger(__name__)

PART_SIZE = 10 * 1024 * 1024


class _ObjectStream:
    """Read side of a MinIO GET that returns its connection to the pool on close."""

    def __init__(self, response):
        self._response = response
        self._closed = False

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            return self._response.read()
        return self._response.read(size)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._response.close()
        self._response.release_conn()


class MinioObjectStore(ObjectStore):
    """Handles object storage operations using MinIO."""

    def __init__(
        self,
        client: Minio,
        bucket_name: str,
        url_expiry: timedelta = timedelta(days=7),
    ):
        self._client = client
        self._bucket_name = bucket_name
        self._url_expiry = url_expiry

    def fetch(
        self, source_id: str, token: CancellationToken | None = None
    ) -> tuple[str, BinaryIO]:
        if token is not None:
            token.raise_if_cancelled("fetch")
        try:
            response = self._client.get_object(self._bucket_name, source_id)
        except Exception as e:
            logger.exception(
                "MinIO download failed",
                extra={"bucket_name": self._bucket_name, "object_name": source_id},
            )
            raise FetchFailedError(source_id, e) from e

        name = posixpath.basename(source_id)
        logger.info(
            "Opened object from MinIO",
            extra={
                "bucket_name": self._bucket_name,
                "object_name": source_id,
                "file_name": name,
                "content_length": response.headers.get("Content-Length"),
            },
        )
        return name, _ObjectStream(response)

    def store(
        self,
        name: str,
        parent: str,
        data: BinaryIO,
        token: CancellationToken | None = None,
    ) -> str:
        object_name = posixpath.join(parent.strip("/"), name) if parent else name
        content_type = mimetypes.guess_type(name)[0] or "application/octet-stream"
        if token is not None:
            token.raise_if_cancelled("store")
            data = CancellableReader(data, token, "store")
        try:
            self._client.put_object(
                bucket_name=self._bucket_name,
                object_name=object_name,
                data=data,
                length=-1,
                part_size=PART_SIZE,
                content_type=content_type,
            )
            url = self._client.presigned_get_object(
                self._bucket_name, object_name, expires=self._url_expiry
            )
        except OperationCancelledError:
            logger.warning(
                "MinIO upload cancelled", extra={"object_name": object_name}
            )
            raise
        except Exception as e:
            logger.exception(
                "MinIO upload failed",
                extra={"bucket_name": self._bucket_name, "object_name": object_name},
            )
            raise StoreFailedError(name, parent, e) from e

        logger.info(
            "File uploaded to MinIO",
            extra={"bucket_name": self._bucket_name, "object_name": object_name},
        )
        return url

    def ensure_bucket_exists(self) -> None:
        if not self._client.bucket_exists(self._bucket_name):
            self._client.make_bucket(self._bucket_name)
            logger.info("Bucket created", extra={"bucket_name": self._bucket_name})
        else:
            logger.info(
                "Bucket already exists", extra={"bucket_name": self._bucket_name}
            )
