"""FastAPI application exposing the catalog engine."""

import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cinecatalog import __version__
from cinecatalog.api import routes
from cinecatalog.api.middleware import RequestLoggingMiddleware
from cinecatalog.config import Config
from cinecatalog.core.catalog import Catalog
from cinecatalog.core.ranker import Ranker
from cinecatalog.core.store import CatalogStore
from cinecatalog.utils.logger import get_logger

logger = get_logger(__name__)


class AppState:
    """Application state container."""

    def __init__(self, config: Config, catalog: Catalog, store: Optional[CatalogStore]):
        self.config = config
        self.catalog = catalog
        self.store = store
        self.start_time = time.time()

    def persist(self) -> None:
        """Write the catalog back to the store, if there is one."""
        if self.store is not None:
            self.store.save(self.catalog)


def build_store(config: Config) -> CatalogStore:
    """Create the partition file store described by the configuration."""
    return CatalogStore(
        Path(config.catalog.data_dir),
        read_only=config.catalog.read_only,
        default_type=config.catalog.default_type,
        default_year=config.catalog.default_year,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    app_state = app.state.cinecatalog
    logger.info(
        "Starting cinecatalog API",
        version=__version__,
        media_count=len(app_state.catalog),
    )

    yield

    logger.info("Shutting down cinecatalog API")


def create_app(
    config: Config,
    catalog: Optional[Catalog] = None,
    store: Optional[CatalogStore] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    When no catalog is given one is created and filled from the configured
    data directory.

    Args:
        config: Application configuration
        catalog: Pre-built catalog (tests, embedding)
        store: Store used to persist writes (None disables persistence)

    Returns:
        Configured FastAPI application
    """
    if catalog is None:
        catalog = Catalog(Ranker.from_config(config.recommendations))
        store = store or build_store(config)
        store.load(catalog)

    app = FastAPI(
        title="cinecatalog",
        description="Catalog normalization and recommendation engine",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.cinecatalog = AppState(config, catalog, store)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors with detailed logging."""
        logger.error(
            "Request validation failed",
            path=request.url.path,
            method=request.method,
            errors=exc.errors(),
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "status": "error",
                "message": "Invalid request payload",
                "errors": jsonable_errors(exc),
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch all unhandled exceptions."""
        logger.error(
            "Unhandled exception in request handler",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=True,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "status": "error",
                "message": "Internal server error",
            },
        )

    app.include_router(routes.router)

    logger.info(
        "FastAPI application created",
        version=__version__,
        api_port=config.api.port,
        media_count=len(catalog),
        persistence=store is not None,
    )

    return app


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors reduced to JSON-safe fields."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]
