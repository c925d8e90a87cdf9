"""
FastAPI application factory.
Exposes the HTTP trigger for a sweep of the upload folder plus a health check.
Swagger UI available at /docs.
"""
import threading
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI

from isk_import import __version__
from isk_import.orchestrator import IngestionOrchestrator
from isk_import.utils.logger import get_logger


def build_orchestrator() -> IngestionOrchestrator:
    """Bootstrap folders/sheet against the configured root and wire the pipeline."""
    from isk_import.bootstrap import bootstrap
    from isk_import.drive.drive_store import DriveStore

    drive = DriveStore()
    context, sheet = bootstrap(drive)
    return IngestionOrchestrator(context, drive, sheet)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Try to bootstrap at startup; a failure is retried on the first /run."""
    logger = get_logger()
    try:
        app.state.orchestrator = app.state.orchestrator_factory()
        logger.info("Import context bootstrapped", component="API")
    except Exception as e:
        app.state.orchestrator = None
        app.state.bootstrap_error = str(e)
        logger.warning(f"Bootstrap deferred: {e}", component="API")

    yield

    logger.info("Shutting down API server", component="API")


def create_app(
    orchestrator_factory: Optional[Callable[[], IngestionOrchestrator]] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="ISK Import Report API",
        description=(
            "Sweeps the UploadHere Drive folder: crops each donation screenshot, "
            "OCRs it through Google Docs, records it in the ISK Import Report "
            "sheet and files it under Processed or Failed."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.orchestrator_factory = orchestrator_factory or build_orchestrator
    app.state.orchestrator = None
    app.state.bootstrap_error = None
    app.state.run_lock = threading.Lock()

    from isk_import.api.routes.health_routes import router as health_router
    from isk_import.api.routes.run_routes import router as run_router

    app.include_router(run_router, prefix="/run", tags=["Import"])
    app.include_router(health_router, prefix="/health", tags=["Health"])

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "service": "ISK Import Report API",
            "version": __version__,
            "docs": "/docs",
            "run": "/run",
            "health": "/health",
        }

    return app
