from pydantic import BaseModel
from typing import Optional


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    environment: str


class StatsLimits(BaseModel):
    maxVideosPerBulk: int
    concurrentRequests: int
    delayBetweenBatchesMs: int
    rateLimitMaxRequests: int
    rateLimitWindowMs: int
    bulkRequestsPerWindow: int
    bulkRateLimitWindowMs: int


class StatsServer(BaseModel):
    uptime: float  # seconds
    pythonVersion: str
    environment: str
    fetcher: str


class StatsResponse(BaseModel):
    limits: StatsLimits
    server: StatsServer


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    videoId: Optional[str] = None
