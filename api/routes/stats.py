import platform
import time

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_fetcher, get_settings
from config import Settings
from schemas.server import StatsLimits, StatsResponse, StatsServer
from services.transcript_fetcher import TranscriptFetcher

router = APIRouter()


@router.get("/stats", response_model=StatsResponse)
async def stats(
    request: Request,
    settings: Settings = Depends(get_settings),
    fetcher: TranscriptFetcher = Depends(get_fetcher),
):
    """Current limits and server info."""
    return StatsResponse(
        limits=StatsLimits(
            maxVideosPerBulk=settings.BULK_MAX_VIDEOS,
            concurrentRequests=settings.BULK_CONCURRENT_REQUESTS,
            delayBetweenBatchesMs=settings.BULK_DELAY_BETWEEN_BATCHES,
            rateLimitMaxRequests=settings.RATE_LIMIT_MAX_REQUESTS,
            rateLimitWindowMs=settings.RATE_LIMIT_WINDOW_MS,
            bulkRequestsPerWindow=settings.BULK_RATE_LIMIT_MAX_REQUESTS,
            bulkRateLimitWindowMs=settings.BULK_RATE_LIMIT_WINDOW_MS,
        ),
        server=StatsServer(
            uptime=round(time.monotonic() - request.app.state.started_at, 3),
            pythonVersion=platform.python_version(),
            environment=settings.NODE_ENV,
            fetcher=fetcher.name,
        ),
    )
