import time
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.routes.bulk import router as bulk_router
from api.routes.stats import router as stats_router
from api.routes.transcript import router as transcript_router
from config import Settings, settings as default_settings
from schemas.server import ErrorResponse, HealthResponse
from services.errors import TranscriptAPIError
from services.rate_limit import WindowLimiter, api_rate_limit
from services.transcript_fetcher import TranscriptFetcher, get_transcript_fetcher

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"

# Message shown when body validation fails on a known field
FIELD_MESSAGES = {
    "videoId": "videoId es requerido",
    "videoIds": "videoIds debe ser un array no vacío",
}
ROUTE_FIELDS = {
    "/api/transcript": "videoId",
    "/api/bulk-transcript": "videoIds",
}


def error_response(status_code: int, message: str, video_id: Optional[str] = None, headers=None) -> JSONResponse:
    body = ErrorResponse(error=message, videoId=video_id).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def transcript_api_error_handler(request: Request, exc: TranscriptAPIError):
    return error_response(exc.status_code, exc.message, exc.video_id)


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    field = ROUTE_FIELDS.get(request.url.path)
    for error in exc.errors():
        known = [part for part in error.get("loc", ()) if part in FIELD_MESSAGES]
        if known:
            field = known[0]
            break

    message = FIELD_MESSAGES.get(field, "Solicitud inválida")
    video_id = exc.body.get("videoId") if isinstance(exc.body, dict) else None
    if not isinstance(video_id, str):
        video_id = None
    return error_response(400, message, video_id)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return error_response(404, "Endpoint no encontrado")
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return error_response(500, "Error interno del servidor")


def log_banner(settings: Settings, fetcher: TranscriptFetcher) -> None:
    logger.info("YouTube Transcript API Server")
    logger.info(f"  Port: {settings.PORT}")
    logger.info(f"  Environment: {settings.NODE_ENV}")
    logger.info(f"  Bulk: up to {settings.BULK_MAX_VIDEOS} videos")
    logger.info(
        f"  Concurrency: {settings.BULK_CONCURRENT_REQUESTS} videos at a time, "
        f"{settings.BULK_DELAY_BETWEEN_BATCHES}ms between groups"
    )
    logger.info(f"  Fetcher: {fetcher.name}")
    for method, path in (
        ("GET ", "/health"),
        ("GET ", "/api/stats"),
        ("POST", "/api/transcript"),
        ("POST", "/api/bulk-transcript"),
    ):
        logger.info(f"  {method} http://{settings.HOST}:{settings.PORT}{path}")


def create_app(
    settings: Optional[Settings] = None,
    fetcher: Optional[TranscriptFetcher] = None,
) -> FastAPI:
    settings = settings or default_settings
    fetcher = fetcher or get_transcript_fetcher(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log_banner(settings, fetcher)
        yield

    app = FastAPI(
        title="YouTube Transcript API",
        version=VERSION,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.fetcher = fetcher
    app.state.started_at = time.monotonic()
    app.state.api_limiter = WindowLimiter(
        settings.RATE_LIMIT_MAX_REQUESTS, settings.RATE_LIMIT_WINDOW_MS / 1000
    )
    app.state.bulk_limiter = WindowLimiter(
        settings.BULK_RATE_LIMIT_MAX_REQUESTS, settings.BULK_RATE_LIMIT_WINDOW_MS / 1000
    )

    origins = settings.allowed_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if "*" in origins else origins,
        # file:// pages opened during local development
        allow_origin_regex=r"file://.*",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TranscriptAPIError, transcript_api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    _limited = [Depends(api_rate_limit)]
    for router, tag in (
        (transcript_router, "transcript"),
        (bulk_router, "bulk-transcript"),
        (stats_router, "stats"),
    ):
        app.include_router(router, prefix="/api", tags=[tag], dependencies=_limited)

    # Routes
    @app.get("/")
    async def root():
        return {"message": "YouTube Transcript API", "version": VERSION}

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint"""
        return HealthResponse(
            status="ok",
            timestamp=datetime.now(timezone.utc).isoformat(),
            environment=settings.NODE_ENV,
        )

    return app


app = create_app()


def run():
    uvicorn.run("main:app", host=default_settings.HOST, port=default_settings.PORT, env_file=".env")


if __name__ == "__main__":
    run()
