"""Abstract interface for the media transcoder."""

from abc import ABC, abstractmethod
from datetime import timedelta
from pathlib import Path
from typing import BinaryIO

from clip_extractor.domain import CancellationToken


class Transcoder(ABC):
    """Cuts a time window out of a local media file."""

    @abstractmethod
    def clip(
        self,
        path: Path,
        start: timedelta,
        end: timedelta,
        token: CancellationToken | None = None,
    ) -> BinaryIO:
        """
        Extracts the clip between start and end.

        Args:
            path: Local media file to cut from.
            start: Clip start offset.
            end: Clip end offset.
            token: Cancellation token of the calling request.

        Returns:
            A stream over the clip. Closing it releases the backing file.

        Raises:
            SourceNotFoundError: If path does not exist.
            TranscodeFailedError: If the transcoder reports an error.
        """
