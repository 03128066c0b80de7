"""FastAPI dependency injection configuration."""

import logging
from datetime import timedelta
from functools import lru_cache

from minio import Minio

from clip_extractor.config import AppConfig, load_config
from clip_extractor.handlers import ExtractionHandler
from clip_extractor.infrastructure import (
    FFmpegTranscoder,
    GoogleDriveObjectStore,
    MinioObjectStore,
)
from clip_extractor.infrastructure.drive_store import build_drive_service
from clip_extractor.infrastructure.interfaces import ObjectStore, Transcoder

logger = logging.getLogger(__name__)


@lru_cache
def get_config() -> AppConfig:
    """Returns the application configuration."""
    return load_config()


@lru_cache
def get_object_store() -> ObjectStore:
    """Returns the configured object store."""
    config = get_config()
    if config.storage_backend == "drive":
        logger.info("Using Google Drive storage backend")
        return GoogleDriveObjectStore(build_drive_service(), config.drive.chunk_size)

    logger.info(
        "Using MinIO storage backend",
        extra={"endpoint": config.minio.endpoint, "bucket_name": config.minio.bucket_name},
    )
    client = Minio(
        endpoint=config.minio.endpoint,
        access_key=config.minio.user,
        secret_key=config.minio.password,
        secure=config.minio.secure,
    )
    store = MinioObjectStore(
        client,
        config.minio.bucket_name,
        url_expiry=timedelta(hours=config.minio.url_expiry_hours),
    )
    store.ensure_bucket_exists()
    return store


@lru_cache
def get_transcoder() -> Transcoder:
    """Returns the transcoder, shared so its concurrency limit is global."""
    config = get_config().transcoder
    return FFmpegTranscoder(
        binary=config.ffmpeg_binary,
        temp_dir=config.temp_dir,
        max_concurrent=config.max_concurrent_transcodes,
        poll_interval=config.poll_interval,
    )


def get_handler() -> ExtractionHandler:
    """Returns the configured extraction handler."""
    return ExtractionHandler(
        get_object_store(),
        get_transcoder(),
        temp_dir=get_config().transcoder.temp_dir,
    )
