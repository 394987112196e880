"""Pydantic models for API requests and responses."""

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from cinecatalog.models.media import Episode, Media


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    uptime_seconds: float
    media_count: int
    partitions: dict[str, int]


class ImportRequest(BaseModel):
    """Bulk import request.

    ``jsonData`` may be raw (possibly malformed) text, a single object or a
    list of objects. ``text`` is accepted as an alias for raw text uploads.
    """

    model_config = ConfigDict(populate_by_name=True)

    json_data: Optional[Union[str, List[Any], dict[str, Any]]] = Field(
        default=None, alias="jsonData"
    )
    text: Optional[str] = None
    validate_fields: bool = Field(default=False, alias="validate")

    @property
    def payload(self) -> Optional[Union[str, List[Any], dict[str, Any]]]:
        """The data to import, whichever field carried it."""
        return self.json_data if self.json_data is not None else self.text


class ImportResults(BaseModel):
    """Counts reported by a bulk import."""

    total: int
    success: int
    failed: int
    errors: List[str]


class ImportResponse(BaseModel):
    """Bulk import response."""

    message: str
    results: ImportResults


class ValidateRequest(BaseModel):
    """Strict JSON validation request."""

    model_config = ConfigDict(populate_by_name=True)

    json_data: Union[str, List[Any], dict[str, Any]] = Field(..., alias="jsonData")


class ValidateResponse(BaseModel):
    """Strict JSON validation response."""

    valid: bool
    message: str
    itemCount: int = 0


class ExportResponse(BaseModel):
    """Catalog export wrapped with a count."""

    message: str
    count: int
    data: List[dict[str, Any]]


class YearCount(BaseModel):
    """Number of media for one year."""

    year: str
    count: int


class EpisodeResponse(BaseModel):
    """An episode with the media it belongs to."""

    episode: Episode
    series: Media


class DeleteResponse(BaseModel):
    """Deletion response."""

    status: str
    media_id: str
