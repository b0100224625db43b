"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from photobooth.core.config import get_settings
from photobooth.core.errors import PhotoboothError
from photobooth.core.logging import setup_logging

# Setup logging
logger = setup_logging("main")

INVALID_REQUEST_MESSAGE = "Requête invalide"

_SERVICE_ATTRIBUTES = ("submission_service", "configuration_service", "results_service")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialize services at startup, clean up at shutdown."""
    settings = get_settings()
    image_client = None
    http_client = None
    try:
        import httpx
        from google.cloud import firestore

        from photobooth.services.configuration import ConfigurationService
        from photobooth.services.image import build_image_client
        from photobooth.services.repository import ConfigRepository, ResponseRepository
        from photobooth.services.results import ResultsService
        from photobooth.services.storage import S3BlobStore
        from photobooth.services.submission import SubmissionService

        db = firestore.Client(project=settings.gcp_project_id)
        config_repository = ConfigRepository(db, settings.firestore_config_collection)
        response_repository = ResponseRepository(db, settings.firestore_response_collection_suffix)
        blob_store = S3BlobStore.from_settings(settings)
        image_client = build_image_client(settings)
        http_client = httpx.AsyncClient(
            timeout=settings.http_timeout_seconds,
            follow_redirects=True,
        )

        app.state.submission_service = SubmissionService(
            config_repository=config_repository,
            response_repository=response_repository,
            blob_store=blob_store,
            image_client=image_client,
            http_client=http_client,
            generate_size=settings.generate_image_size,
        )
        app.state.configuration_service = ConfigurationService(config_repository)
        app.state.results_service = ResultsService(response_repository)
        logger.info(
            "Services initialized successfully (image provider: %s)",
            settings.image_provider,
        )
    except Exception as exc:
        logger.error(
            "Service initialization failed, running in degraded mode",
            exc_info=True,
            extra={"error_type": type(exc).__name__},
        )
        # Continue without services; endpoints return 503 until fixed

    yield

    if http_client is not None:
        await http_client.aclose()
    if image_client is not None:
        await image_client.close()


# Create FastAPI app
app = FastAPI(
    title="Photobooth - Yearbook & Adventurer",
    description="Photo submission and AI portrait generation service",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PhotoboothError)
async def photobooth_error_handler(request: Request, exc: PhotoboothError) -> JSONResponse:
    """Render domain errors as ``{"message": ...}`` with their status code."""
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed query or body fields are client input errors (400)."""
    logger.info("Rejected malformed request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"message": INVALID_REQUEST_MESSAGE})


# Register one router per variant
from photobooth.api.variants import build_router  # noqa: E402
from photobooth.services.variants import build_variants  # noqa: E402

for _variant in build_variants(settings).values():
    app.include_router(build_router(_variant))


@app.get("/health")
async def health_check(request: Request) -> dict:
    """Health check endpoint.

    Always returns HTTP 200; check `services` for what started successfully.
    """
    services = {
        attribute: "ok" if getattr(request.app.state, attribute, None) is not None else "unavailable"
        for attribute in _SERVICE_ATTRIBUTES
    }

    logger.info("Health check requested")
    return {
        "status": "ok",
        "version": app.version,
        "services": services,
    }
