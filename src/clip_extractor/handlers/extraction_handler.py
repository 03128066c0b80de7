"""Handler that runs one clip extraction from fetch to store."""

import logging
from contextlib import contextmanager

from clip_extractor.domain import (
    CancellationToken,
    ExtractionJob,
    ExtractionResult,
    parse_time_range,
)
from clip_extractor.exceptions import (
    ExtractionError,
    FetchFailedError,
    StoreFailedError,
    TranscodeFailedError,
)
from clip_extractor.infrastructure.interfaces import ObjectStore, Transcoder
from clip_extractor.infrastructure.temp_files import split_extension, stage_source

logger = logging.getLogger(__name__)


def clip_file_name(source_name: str, clip_start: str, clip_end: str) -> str:
    """
    Derives the clip name from the source name and the literal timestamps.

    "movie.mp4", "00:01:23", "00:02:34" -> "movie_00:01:23_to_00:02:34.mp4"
    """
    base, ext = split_extension(source_name)
    return f"{base}_{clip_start}_to_{clip_end}{ext}"


@contextmanager
def _closing_quietly(stream, description: str):
    """Closes stream on exit, logging instead of raising close errors."""
    try:
        yield stream
    finally:
        try:
            stream.close()
        except Exception:
            logger.warning("Error closing %s", description, exc_info=True)


class ExtractionHandler:
    """Fetches a source, cuts a clip out of it and stores the clip."""

    def __init__(
        self,
        store: ObjectStore,
        transcoder: Transcoder,
        temp_dir: str | None = None,
    ):
        self._store = store
        self._transcoder = transcoder
        self._temp_dir = temp_dir

    def process(
        self, job: ExtractionJob, token: CancellationToken | None = None
    ) -> ExtractionResult:
        """
        Runs every stage of an extraction once, without retries.

        Temp files acquired by a stage are released on every exit path of the
        stages that follow it.

        Args:
            job: The extraction request.
            token: Cancellation token of the calling request.

        Returns:
            ExtractionResult with the locator of the stored clip.

        Raises:
            InvalidRequestError: If a timestamp is malformed or the range is empty.
            FetchFailedError: If the source cannot be fetched.
            StagingFailedError: If the source cannot be copied locally.
            TranscodeFailedError: If the clip cannot be cut.
            StoreFailedError: If the clip cannot be uploaded.
            OperationCancelledError: If the token fires mid-pipeline.
        """
        token = token or CancellationToken()
        logger.info(
            "Extraction requested",
            extra={
                "source_id": job.source_id,
                "clip_start": job.clip_start,
                "clip_end": job.clip_end,
                "destination": job.destination,
            },
        )

        time_range = parse_time_range(job.clip_start, job.clip_end)

        try:
            source_name, source = self._store.fetch(job.source_id, token)
        except ExtractionError:
            raise
        except Exception as e:
            logger.exception("Fetch failed", extra={"source_id": job.source_id})
            raise FetchFailedError(job.source_id, e) from e

        with _closing_quietly(source, "source stream"):
            staged = stage_source(source_name, source, self._temp_dir, token)

        with staged:
            try:
                clip = self._transcoder.clip(
                    staged.path, time_range.start, time_range.end, token
                )
            except ExtractionError:
                raise
            except Exception as e:
                logger.exception("Transcode failed", extra={"path": str(staged.path)})
                raise TranscodeFailedError(str(staged.path), cause=e) from e

            name = clip_file_name(source_name, job.clip_start, job.clip_end)
            with _closing_quietly(clip, "clip stream"):
                logger.info(
                    "Uploading clip",
                    extra={"file_name": name, "destination": job.destination},
                )
                try:
                    locator = self._store.store(name, job.destination, clip, token)
                except ExtractionError:
                    raise
                except Exception as e:
                    logger.exception("Store failed", extra={"file_name": name})
                    raise StoreFailedError(name, job.destination, e) from e

        logger.info(
            "Extraction completed",
            extra={"source_id": job.source_id, "file_name": name, "locator": locator},
        )
        return ExtractionResult(locator=locator, name=name)
