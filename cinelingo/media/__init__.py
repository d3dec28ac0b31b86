"""Media import helpers."""

from .filename_metadata import FilenameMetadata, extract

__all__ = ["FilenameMetadata", "extract"]
