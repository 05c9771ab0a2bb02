import time
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from api.dependencies import get_fetcher
from schemas.transcript import TranscriptMetadata, TranscriptRequest, TranscriptResponse
from services.errors import TranscriptAPIError
from services.transcript_fetcher import TranscriptFetcher
from services.transcript_service import fetch_formatted_transcript

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/transcript", response_model=TranscriptResponse)
async def get_transcript(
    request: TranscriptRequest,
    fetcher: TranscriptFetcher = Depends(get_fetcher),
) -> TranscriptResponse:
    """
    Fetch a single video's transcript with [HH:MM:SS] timestamps.

    Args:
        request: Contains videoId

    Returns:
        TranscriptResponse with the formatted transcript and timing metadata
    """
    start_time = time.perf_counter()
    logger.info(f"Processing video: {request.videoId}")

    try:
        result = await fetch_formatted_transcript(request.videoId, fetcher)
    except TranscriptAPIError as e:
        logger.error(f"Error processing video {request.videoId}: {e.__cause__ or e.message}")
        raise

    processing_time = int((time.perf_counter() - start_time) * 1000)
    logger.info(f"Video {request.videoId} processed in {processing_time}ms")

    return TranscriptResponse(
        videoId=result.videoId,
        transcript=result.transcript,
        metadata=TranscriptMetadata(
            segments=result.segments,
            processingTimeMs=processing_time,
            timestamp=datetime.now(timezone.utc).isoformat(),
        ),
    )
