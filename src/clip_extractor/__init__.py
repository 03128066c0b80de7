"""Cuts time ranges out of media files held in object storage."""

__version__ = "0.1.0"
