"""Custom exceptions for the clip-extractor service."""


class ExtractionError(Exception):
    """Base class for every failure of a single extraction request."""

    status_code = 500

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message)


class InvalidRequestError(ExtractionError):
    """Raised when the request itself is malformed."""

    status_code = 400


class InvalidTimestampError(InvalidRequestError):
    """Raised when a timestamp does not match HH:MM:SS."""

    def __init__(self, timestamp: str):
        self.timestamp = timestamp
        super().__init__(f"{timestamp!r} does not match format HH:MM:SS")


class InvalidTimeRangeError(InvalidRequestError):
    """Raised when the clip end is not after the clip start."""

    def __init__(self, start: str, end: str):
        self.start = start
        self.end = end
        super().__init__(f"Clip end {end!r} must be after clip start {start!r}")


class FetchFailedError(ExtractionError):
    """Raised when the source object cannot be fetched from storage."""

    def __init__(self, source_id: str, cause: Exception | None = None):
        self.source_id = source_id
        super().__init__(f"Failed to fetch '{source_id}' from storage", cause)


class StagingFailedError(ExtractionError):
    """Raised when the fetched source cannot be copied to local disk."""

    def __init__(self, name: str, cause: Exception | None = None):
        self.name = name
        super().__init__(f"Failed to stage '{name}' locally", cause)


class TranscodeFailedError(ExtractionError):
    """Raised when the external transcoder fails."""

    def __init__(
        self,
        path: str,
        returncode: int | None = None,
        stderr: str = "",
        cause: Exception | None = None,
        message: str | None = None,
    ):
        self.path = path
        self.returncode = returncode
        self.stderr = stderr
        if message is None:
            if returncode is None:
                message = f"Failed to transcode '{path}'"
            else:
                message = f"Transcoding '{path}' exited with status {returncode}"
        super().__init__(message, cause)


class SourceNotFoundError(TranscodeFailedError):
    """Raised when the file handed to the transcoder does not exist."""

    def __init__(self, path: str):
        super().__init__(path, message=f"Transcoder input '{path}' does not exist")


class StoreFailedError(ExtractionError):
    """Raised when the clip cannot be uploaded to storage."""

    def __init__(self, name: str, parent: str, cause: Exception | None = None):
        self.name = name
        self.parent = parent
        super().__init__(f"Failed to store '{name}' in '{parent}'", cause)


class OperationCancelledError(ExtractionError):
    """Raised when a request is cancelled or runs past its deadline."""

    def __init__(self, operation: str, reason: str = "cancelled"):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} aborted: {reason}")
