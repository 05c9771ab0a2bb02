import logging
from fastapi import APIRouter, Depends

from api.dependencies import get_fetcher, get_settings
from config import Settings
from schemas.bulk import BulkTranscriptRequest, BulkTranscriptResponse
from services.batch_processor import process_batch
from services.errors import InternalError, TranscriptAPIError
from services.rate_limit import bulk_rate_limit
from services.transcript_fetcher import TranscriptFetcher

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/bulk-transcript",
    response_model=BulkTranscriptResponse,
    dependencies=[Depends(bulk_rate_limit)],
)
async def bulk_transcript(
    req: BulkTranscriptRequest,
    settings: Settings = Depends(get_settings),
    fetcher: TranscriptFetcher = Depends(get_fetcher),
):
    """
    Fetch transcripts for many videos. Always 200 once the request is valid;
    per-video failures are reported in `results`.
    """
    try:
        results, summary = await process_batch(req.videoIds, settings.batch_config(), fetcher)
    except TranscriptAPIError:
        raise
    except Exception as e:
        logger.error(f"Bulk processing error: {e}", exc_info=True)
        raise InternalError("Error en el procesamiento bulk") from e

    return BulkTranscriptResponse(results=results, summary=summary)
