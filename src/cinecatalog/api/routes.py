"""API routes for browsing, importing and exporting the catalog."""

import json
import time
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response

from cinecatalog import __version__
from cinecatalog.api.models import (
    DeleteResponse,
    EpisodeResponse,
    ExportResponse,
    HealthResponse,
    ImportRequest,
    ImportResponse,
    ImportResults,
    ValidateRequest,
    ValidateResponse,
    YearCount,
)
from cinecatalog.core.catalog import ANIME, MOVIES, OTHER, SERIES
from cinecatalog.core.importer import export_catalog, export_records, import_media, validate_json
from cinecatalog.models.media import Media
from cinecatalog.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter()

# URL segment -> catalog partition
PARTITION_ROUTES = {
    "movies": MOVIES,
    "series": SERIES,
    "anime": ANIME,
    "other-media": OTHER,
}
MAX_SEARCH_LIMIT = 100


def _partition_or_404(name: Optional[str]) -> Optional[str]:
    if name is None:
        return None
    if name in PARTITION_ROUTES:
        return PARTITION_ROUTES[name]
    if name in PARTITION_ROUTES.values():
        return name
    raise HTTPException(status_code=404, detail=f"Unknown partition: {name}")


@router.get("/health", response_model=HealthResponse)
def health_check(request: Request):
    """Health check endpoint.

    Args:
        request: FastAPI request

    Returns:
        Health status with partition sizes
    """
    app_state = request.app.state.cinecatalog
    catalog = app_state.catalog

    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=time.time() - app_state.start_time,
        media_count=len(catalog),
        partitions=catalog.counts(),
    )


@router.get("/api/media", response_model=List[Media])
def list_media(
    request: Request,
    type: Optional[str] = None,
    year: Optional[str] = None,
    category: Optional[str] = None,
):
    """List the whole catalog, deduplicated, with optional filters."""
    catalog = request.app.state.cinecatalog.catalog
    return catalog.list_media(media_type=type, year=year, category=category)


@router.get("/api/media/trending", response_model=List[Media])
def trending(request: Request, partition: Optional[str] = None):
    """Trending media, optionally for one partition."""
    catalog = request.app.state.cinecatalog.catalog
    return catalog.trending(_partition_or_404(partition))


@router.get("/api/media/new-releases", response_model=List[Media])
def new_releases(request: Request, partition: Optional[str] = None):
    """Newly released media, optionally for one partition."""
    catalog = request.app.state.cinecatalog.catalog
    return catalog.new_releases(_partition_or_404(partition))


@router.get("/api/media/search", response_model=List[Media])
def search_media(
    request: Request,
    q: Optional[str] = None,
    limit: Optional[int] = None,
    partition: Optional[str] = None,
):
    """Search titles and descriptions.

    Args:
        request: FastAPI request
        q: Search text (required)
        limit: Maximum results, honored between 1 and 100
        partition: Restrict the search to one partition

    Returns:
        Matching media, numbered titles first
    """
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Search query 'q' is required")

    if limit is not None and not 1 <= limit <= MAX_SEARCH_LIMIT:
        limit = None

    catalog = request.app.state.cinecatalog.catalog
    results = catalog.search(q, limit=limit, partition=_partition_or_404(partition))

    logger.debug("Search executed", query=q, results=len(results))
    return results


@router.get("/api/media/years", response_model=List[YearCount])
def years(request: Request, type: Optional[str] = None):
    """Available years with the number of media for each, newest first."""
    catalog = request.app.state.cinecatalog.catalog
    return catalog.years_with_counts(media_type=type)


@router.get("/api/media/recommendations/{media_id}", response_model=List[Media])
def recommendations(request: Request, media_id: str):
    """Related media for a detail page. Unknown ids yield an empty list."""
    catalog = request.app.state.cinecatalog.catalog
    results = catalog.recommendations(media_id)

    logger.debug("Recommendations computed", media_id=media_id, results=len(results))
    return results


@router.get("/api/media/export")
def export_media(request: Request, format: Optional[str] = None):
    """Export the deduplicated catalog.

    With ``format=download`` the data is returned as a JSON file attachment,
    otherwise it is wrapped together with a count.
    """
    catalog = request.app.state.cinecatalog.catalog

    if format == "download":
        return Response(
            content=export_catalog(catalog),
            media_type="application/json",
            headers={"Content-Disposition": 'attachment; filename="media-export.json"'},
        )

    records = export_records(catalog)
    logger.info("Catalog exported", count=len(records))
    return ExportResponse(message="Export complete", count=len(records), data=records)


@router.post("/api/media/import", response_model=ImportResponse)
def import_data(request: Request, payload: ImportRequest):
    """Bulk import raw catalog data.

    Raw text is parsed leniently. Every usable record is normalized,
    deduplicated against the batch and stored; the rest are reported in
    ``errors``.

    Args:
        request: FastAPI request
        payload: Import request

    Returns:
        Import counts and error messages
    """
    app_state = request.app.state.cinecatalog
    data = payload.payload

    if data is None or (isinstance(data, str) and not data.strip()):
        raise HTTPException(status_code=400, detail="jsonData or text is required")

    result = import_media(
        app_state.catalog,
        data,
        validate=payload.validate_fields,
        default_type=app_state.config.catalog.default_type,
        default_year=app_state.config.catalog.default_year,
    )

    if result.success:
        app_state.persist()

    return ImportResponse(
        message=f"Imported {result.success} of {result.total} items",
        results=ImportResults(**result.to_dict()),
    )


@router.post("/api/media/validate-json", response_model=ValidateResponse)
def validate_data(payload: ValidateRequest):
    """Strictly validate JSON catalog data without importing it."""
    data = payload.json_data
    text = data if isinstance(data, str) else json.dumps(data, ensure_ascii=False)

    validation = validate_json(text)
    if validation.is_valid:
        return ValidateResponse(valid=True, message="Data is valid", itemCount=len(validation.items))

    return ValidateResponse(valid=False, message=validation.error or "Invalid data")


@router.get("/api/media/{media_id}", response_model=Media)
def get_media(request: Request, media_id: str):
    """Get a single media item by id."""
    media = request.app.state.cinecatalog.catalog.get(media_id)
    if media is None:
        raise HTTPException(status_code=404, detail=f"Media not found: {media_id}")
    return media


@router.delete("/api/media/{media_id}", response_model=DeleteResponse)
def delete_media(request: Request, media_id: str):
    """Hard-delete a media item."""
    app_state = request.app.state.cinecatalog

    if not app_state.catalog.delete(media_id):
        raise HTTPException(status_code=404, detail=f"Media not found: {media_id}")

    app_state.persist()
    return DeleteResponse(status="deleted", media_id=media_id)


@router.get("/api/series/{media_id}/episodes/{number}", response_model=EpisodeResponse)
def get_episode(request: Request, media_id: str, number: int):
    """Get one episode of a series together with the series itself."""
    found = request.app.state.cinecatalog.catalog.get_episode(media_id, number)
    if found is None:
        raise HTTPException(status_code=404, detail=f"Episode {number} not found for {media_id}")

    episode, media = found
    return EpisodeResponse(episode=episode, series=media)


@router.get("/api/{partition_name}", response_model=List[Media])
def list_partition(
    request: Request,
    partition_name: str,
    type: Optional[str] = None,
    year: Optional[str] = None,
    category: Optional[str] = None,
):
    """List one partition (movies, series, anime or other-media)."""
    if partition_name not in PARTITION_ROUTES:
        raise HTTPException(status_code=404, detail=f"Unknown partition: {partition_name}")

    catalog = request.app.state.cinecatalog.catalog
    return catalog.list_partition(
        PARTITION_ROUTES[partition_name], media_type=type, year=year, category=category
    )


@router.get("/")
def root():
    """Root endpoint."""
    return {
        "name": "cinecatalog",
        "version": __version__,
        "description": "Catalog normalization and recommendation engine",
        "endpoints": {
            "health": "/health",
            "media": "/api/media",
            "search": "/api/media/search",
            "import": "/api/media/import",
            "export": "/api/media/export",
            "docs": "/docs",
        },
    }
