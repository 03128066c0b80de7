"""Application configuration loaded from environment variables."""

import os
from typing import Literal

from pydantic import BaseModel, Field


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class ServerConfig(BaseModel, frozen=True):
    """HTTP server configuration."""

    host: str = "0.0.0.0"
    port: int = Field(default=8080, gt=0, lt=65536)
    idle_timeout: float = Field(default=60.0, gt=0)
    shutdown_timeout: float = Field(default=10.0, ge=0)
    request_timeout: float | None = Field(default=300.0, gt=0)


class MinioConfig(BaseModel, frozen=True):
    """MinIO connection configuration."""

    endpoint: str
    user: str
    password: str
    bucket_name: str = "media"
    secure: bool = False
    url_expiry_hours: int = Field(default=168, gt=0, le=168)


class DriveConfig(BaseModel, frozen=True):
    """Google Drive API configuration."""

    chunk_size: int = Field(default=10 * 1024 * 1024, gt=0)


class TranscoderConfig(BaseModel, frozen=True):
    """FFmpeg invocation configuration."""

    ffmpeg_binary: str = "ffmpeg"
    temp_dir: str | None = None
    max_concurrent_transcodes: int = Field(default=4, gt=0)
    poll_interval: float = Field(default=0.5, gt=0)


class AppConfig(BaseModel, frozen=True):
    """Root application configuration."""

    server: ServerConfig = ServerConfig()
    storage_backend: Literal["minio", "drive"] = "minio"
    minio: MinioConfig
    drive: DriveConfig = DriveConfig()
    transcoder: TranscoderConfig = TranscoderConfig()
    expose_error_detail: bool = False


def load_config() -> AppConfig:
    """Loads configuration from environment variables."""
    request_timeout = os.getenv("REQUEST_TIMEOUT", "300")
    return AppConfig(
        server=ServerConfig(
            port=int(os.getenv("PORT", "8080")),
            idle_timeout=float(os.getenv("IDLE_TIMEOUT", "60")),
            # 0 disables the per-request deadline
            request_timeout=float(request_timeout) or None,
        ),
        storage_backend=os.getenv("STORAGE_BACKEND", "minio"),
        minio=MinioConfig(
            endpoint=os.getenv("MINIO_ENDPOINT", "minio:9000"),
            user=os.getenv("MINIO_USER", ""),
            password=os.getenv("MINIO_PASSWORD", ""),
            bucket_name=os.getenv("MINIO_BUCKET", "media"),
            secure=_env_bool("MINIO_SECURE"),
            url_expiry_hours=int(os.getenv("MINIO_URL_EXPIRY_HOURS", "168")),
        ),
        drive=DriveConfig(
            chunk_size=int(os.getenv("DRIVE_CHUNK_SIZE", str(10 * 1024 * 1024))),
        ),
        transcoder=TranscoderConfig(
            ffmpeg_binary=os.getenv("FFMPEG_BINARY", "ffmpeg"),
            temp_dir=os.getenv("TEMP_DIR") or None,
            max_concurrent_transcodes=int(
                os.getenv("MAX_CONCURRENT_TRANSCODES", "4")
            ),
        ),
        expose_error_detail=_env_bool("EXPOSE_ERROR_DETAIL"),
    )
