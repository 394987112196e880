"""Data models for cinecatalog."""

from cinecatalog.models.media import Episode, Media, MediaType, RawRecord, RawValue, Server

__all__ = ["Episode", "Media", "MediaType", "RawRecord", "RawValue", "Server"]
