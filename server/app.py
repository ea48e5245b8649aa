"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from models.errors import ErrorKind, ReviewImportError
from server.dependencies import get_review_import_service, shutdown_review_import_service
from server.routes import health, reviews
from utils.logger import get_logger

logger = get_logger(__name__)

STATUS_BY_KIND = {
    ErrorKind.CONFIG_ERROR: 503,
    ErrorKind.API_ERROR: 502,
    ErrorKind.SEARCH_ERROR: 500,
    ErrorKind.INVALID_REVIEW: 400,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup/shutdown logic."""
    logger.info("FastAPI server starting up")
    try:
        get_review_import_service()
    except ReviewImportError as e:
        logger.warning(f"Review import unavailable at startup: {e.message}")

    yield

    shutdown_review_import_service()
    logger.info("FastAPI server shutting down")


async def review_import_error_handler(request: Request, exc: ReviewImportError):
    status_code = STATUS_BY_KIND.get(exc.kind, 500)
    logger.error(
        f"Unhandled review import error: {exc.message}",
        extra={"extra_fields": {"path": request.url.path, **exc.to_dict()}},
    )
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": exc.message, "kind": exc.kind.value},
    )


def create_app() -> FastAPI:
    """Factory function to create FastAPI application."""
    app = FastAPI(
        title="Review Import API",
        description="Cross-platform business search and review import",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ReviewImportError, review_import_error_handler)

    app.include_router(health.router)
    app.include_router(reviews.router)

    return app
