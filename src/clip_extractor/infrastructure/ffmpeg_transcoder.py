"""FFmpeg implementation of the Transcoder interface."""

import logging
import subprocess
import threading
from datetime import timedelta
from pathlib import Path

from clip_extractor.domain import CancellationToken, format_timestamp
from clip_extractor.exceptions import (
    ExtractionError,
    SourceNotFoundError,
    TranscodeFailedError,
)
from clip_extractor.infrastructure.interfaces import Transcoder
from clip_extractor.infrastructure.temp_files import (
    TempFileStream,
    create_temp_path,
    remove_temp_file,
)

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_SUFFIX = ".mp4"


def build_clip_command(
    binary: str,
    input_path: Path,
    start: timedelta,
    duration: timedelta,
    output_path: Path,
) -> list[str]:
    """
    Builds the ffmpeg argv for a stream-copy cut.

    -noaccurate_seek -ss: seek to the nearest keyframe before start
    -t: clip length, not an absolute end time
    -avoid_negative_ts make_zero: shift timestamps left negative by the seek
    -c copy: no re-encoding
    """
    return [
        binary,
        "-nostdin",
        "-noaccurate_seek",
        "-ss",
        format_timestamp(start),
        "-i",
        str(input_path),
        "-t",
        format_timestamp(duration),
        "-avoid_negative_ts",
        "make_zero",
        "-y",
        "-c",
        "copy",
        str(output_path),
    ]


class FFmpegTranscoder(Transcoder):
    """Runs ffmpeg as a subprocess to cut clips without re-encoding."""

    def __init__(
        self,
        binary: str = "ffmpeg",
        temp_dir: str | None = None,
        max_concurrent: int = 4,
        poll_interval: float = 0.5,
    ):
        self._binary = binary
        self._temp_dir = temp_dir
        self._slots = threading.BoundedSemaphore(max_concurrent)
        self._poll_interval = poll_interval

    def clip(
        self,
        path: Path,
        start: timedelta,
        end: timedelta,
        token: CancellationToken | None = None,
    ) -> TempFileStream:
        path = Path(path)
        if not path.is_file():
            logger.error("Transcoder input missing", extra={"path": str(path)})
            raise SourceNotFoundError(str(path))

        token = token or CancellationToken()
        self._acquire_slot(token)
        try:
            return self._clip(path, start, end, token)
        finally:
            self._slots.release()

    def _wait_interval(self, token: CancellationToken) -> float:
        """Poll interval, shortened so that a wait never runs past the deadline."""
        remaining = token.remaining()
        if remaining is None:
            return self._poll_interval
        return min(self._poll_interval, remaining)

    def _acquire_slot(self, token: CancellationToken) -> None:
        while not self._slots.acquire(timeout=self._wait_interval(token)):
            token.raise_if_cancelled("waiting for a transcoder slot")
        if token.cancelled:
            self._slots.release()
            token.raise_if_cancelled("waiting for a transcoder slot")

    def _clip(
        self, path: Path, start: timedelta, end: timedelta, token: CancellationToken
    ) -> TempFileStream:
        output_path = create_temp_path(
            "ffmpeg-", path.suffix or DEFAULT_OUTPUT_SUFFIX, self._temp_dir
        )
        logger.info(
            "Created temp file for transcoding", extra={"path": str(output_path)}
        )

        try:
            cmd = build_clip_command(
                self._binary, path, start, end - start, output_path
            )
            logger.info("Running command", extra={"command": " ".join(cmd)})
            returncode, stderr = self._run(cmd, token)
            if returncode != 0:
                logger.error(
                    "FFmpeg clipping failed",
                    extra={"returncode": returncode, "stderr": stderr},
                )
                raise TranscodeFailedError(str(path), returncode, stderr)

            logger.info("Transcode finished", extra={"path": str(output_path)})
            return TempFileStream(output_path)
        except ExtractionError:
            remove_temp_file(output_path)
            raise
        except Exception as e:
            logger.exception("FFmpeg could not be run", extra={"path": str(path)})
            remove_temp_file(output_path)
            raise TranscodeFailedError(str(path), cause=e) from e

    def _run(self, cmd: list[str], token: CancellationToken) -> tuple[int, str]:
        """Runs the command to completion, killing it if the token fires."""
        process = subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
        )
        while True:
            try:
                _, stderr = process.communicate(
                    timeout=self._wait_interval(token)
                )
                return process.returncode, stderr.decode("utf-8", errors="replace")
            except subprocess.TimeoutExpired:
                if not token.cancelled:
                    continue
                process.kill()
                process.communicate()
                logger.warning(
                    "FFmpeg killed", extra={"pid": process.pid, "command": cmd[0]}
                )
                token.raise_if_cancelled("transcoding")
