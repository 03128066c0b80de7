"""Infrastructure implementations."""

from .drive_store import GoogleDriveObjectStore
from .ffmpeg_transcoder import FFmpegTranscoder
from .minio_store import MinioObjectStore
from .temp_files import StagedFile, TempFileStream, stage_source

__all__ = [
    "FFmpegTranscoder",
    "GoogleDriveObjectStore",
    "MinioObjectStore",
    "StagedFile",
    "TempFileStream",
    "stage_source",
]
