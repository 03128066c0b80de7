"""Domain layer containing business logic and models."""

from .cancellation import CancellableReader, CancellationToken
from .models import ExtractionJob, ExtractionResult, TimeRange
from .timestamps import format_timestamp, parse_time_range, parse_timestamp

__all__ = [
    "CancellableReader",
    "CancellationToken",
    "ExtractionJob",
    "ExtractionResult",
    "TimeRange",
    "format_timestamp",
    "parse_time_range",
    "parse_timestamp",
]
