"""Abstract interfaces for infrastructure dependencies."""

from .object_store import ObjectStore
from .transcoder import Transcoder

__all__ = ["ObjectStore", "Transcoder"]
