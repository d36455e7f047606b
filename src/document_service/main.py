"""Main FastAPI application for Document Service."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from . import __version__
from .config.settings import get_settings, Settings
from .core.document_repository import DocumentRepository
from .core.document_service import DocumentService
from .core.ingestion import FileIngester
from .infrastructure.persistence import SnapshotStore
from .api.routes import documents
from .models.requests import HealthResponse

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def ensure_directories(settings: Settings) -> None:
    """Create the data and upload directories if they are missing."""
    for directory in (Path(settings.data_dir), settings.upload_path):
        if directory is None:
            continue
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Could not create directory {directory}: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.service_name} v{__version__}")

    ensure_directories(settings)

    logger.info(f"Loading documents from {settings.snapshot_path}...")
    store = SnapshotStore(settings.snapshot_path)
    repository = await DocumentRepository.open(store)

    ingester = FileIngester(
        max_bytes=settings.max_upload_bytes,
        archive_dir=settings.upload_path
    )
    app.state.document_service = DocumentService(repository, ingester)

    logger.info(f"{settings.service_name} is ready with {len(repository)} documents")

    yield

    logger.info("Shutdown complete")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application; tests pass their own settings."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Document Service",
        description="Markdown and LaTeX document storage with snapshot persistence",
        version=__version__,
        lifespan=lifespan
    )
    app.state.settings = settings

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"{request.method} {request.url.path}")
        return await call_next(request)

    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/static", StaticFiles(directory=static_dir), name="static")

    app.include_router(documents.router)
    app.add_exception_handler(RequestValidationError, documents.malformed_body_handler)

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """Health check endpoint."""
        service: DocumentService = request.app.state.document_service
        return HealthResponse(
            status="healthy",
            service=settings.service_name,
            version=__version__,
            document_count=len(service.repository),
            snapshot_path=str(settings.snapshot_path)
        )

    @app.get("/")
    async def root():
        """Serve the editor page when one is installed."""
        index = static_dir / "index.html"
        if index.is_file():
            return FileResponse(index)
        return {
            "service": settings.service_name,
            "version": __version__,
            "status": "running",
            "docs": "/docs"
        }

    return app


app = create_app()


def run() -> None:
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "document_service.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development"
    )


if __name__ == "__main__":
    run()
