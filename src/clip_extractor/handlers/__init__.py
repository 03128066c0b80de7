"""Request handlers."""

from .extraction_handler import ExtractionHandler, clip_file_name

__all__ = ["ExtractionHandler", "clip_file_name"]
