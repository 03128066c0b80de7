"""Abstract interface for remote object storage."""

from abc import ABC, abstractmethod
from typing import BinaryIO

from clip_extractor.domain import CancellationToken


class ObjectStore(ABC):
    """Abstract base class for remote object storage backends."""

    @abstractmethod
    def fetch(
        self, source_id: str, token: CancellationToken | None = None
    ) -> tuple[str, BinaryIO]:
        """
        Opens an object for reading.

        Args:
            source_id: Backend-specific identifier of the object.
            token: Cancellation token of the calling request.

        Returns:
            Tuple of (display_name, stream). The caller closes the stream.

        Raises:
            FetchFailedError: If the object cannot be opened.
        """

    @abstractmethod
    def store(
        self,
        name: str,
        parent: str,
        data: BinaryIO,
        token: CancellationToken | None = None,
    ) -> str:
        """
        Creates a new object from a stream.

        Args:
            name: Display name of the new object.
            parent: Backend-specific location to create the object in.
            data: Readable binary stream with the object contents.
            token: Cancellation token of the calling request.

        Returns:
            A locator (URL) of the stored object.

        Raises:
            StoreFailedError: If the upload fails.
        """
