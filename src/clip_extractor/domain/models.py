"""Domain models for the clip extraction service."""

from datetime import timedelta

from pydantic import BaseModel


class ExtractionJob(BaseModel, frozen=True):
    """A single clip extraction, as received from the caller."""

    source_id: str
    clip_start: str
    clip_end: str
    destination: str


class TimeRange(BaseModel, frozen=True):
    """Parsed clip boundaries."""

    start: timedelta
    end: timedelta

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


class ExtractionResult(BaseModel, frozen=True):
    """Result of a successful extraction."""

    locator: str
    name: str
