# services/batch_processor.py
"""
Bulk transcript processing.

Video ids are split into consecutive groups of `group_size`. Groups run one
after another; the members of a group are fetched concurrently and the group is
awaited as a whole before the next one starts, with a fixed pause in between so
the upstream rate limits are not hit. A failing video never aborts the batch:
it becomes a failure entry in the results, in input order.
"""
import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Sequence, Tuple

from config import BatchConfig
from schemas.bulk import (
    BatchItemFailure,
    BatchItemMetadata,
    BatchItemResult,
    BatchItemSuccess,
    BatchItemSuccessMetadata,
    BatchSummary,
)
from services.errors import CapacityError, TranscriptAPIError, ValidationError, friendly_error_message
from services.transcript_fetcher import TranscriptFetcher
from services.transcript_service import fetch_formatted_transcript

logger = logging.getLogger(__name__)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def chunk(video_ids: Sequence[str], size: int) -> List[List[str]]:
    return [list(video_ids[i:i + size]) for i in range(0, len(video_ids), size)]


async def process_item(video_id: str, fetcher: TranscriptFetcher) -> BatchItemResult:
    started = time.perf_counter()

    try:
        result = await fetch_formatted_transcript(video_id, fetcher, compact_errors=True)
    except TranscriptAPIError as e:
        error = e.message
    except Exception as e:
        logger.exception(f"Unexpected error processing {video_id}")
        error = friendly_error_message(e, compact=True)
    else:
        processing_time = _elapsed_ms(started)
        logger.info(f"  ✓ {video_id} processed in {processing_time}ms")
        return BatchItemSuccess(
            videoId=video_id,
            transcript=result.transcript,
            metadata=BatchItemSuccessMetadata(segments=result.segments, processingTimeMs=processing_time),
        )

    processing_time = _elapsed_ms(started)
    logger.info(f"  ✗ {video_id} failed: {error}")
    return BatchItemFailure(
        videoId=video_id,
        error=error,
        metadata=BatchItemMetadata(processingTimeMs=processing_time),
    )


async def process_batch(
    video_ids: Sequence[str],
    config: BatchConfig,
    fetcher: TranscriptFetcher,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> Tuple[List[BatchItemResult], BatchSummary]:
    """
    Fetch and format transcripts for every id in `video_ids`.

    Args:
        video_ids: Non-empty list of at most `config.max_items` ids
        config: Group size, inter-group delay and batch size limit
        fetcher: Transcript fetcher shared by all items
        sleep: Awaitable used for the inter-group pause

    Returns:
        Results in input order and the batch summary

    Raises:
        ValidationError: `video_ids` is empty
        CapacityError: more than `config.max_items` ids; nothing is fetched
    """
    if not video_ids:
        raise ValidationError("videoIds debe ser un array no vacío")
    if len(video_ids) > config.max_items:
        raise CapacityError(f"Máximo {config.max_items} videos permitidos. Recibidos: {len(video_ids)}")

    started = time.perf_counter()
    logger.info(f"Bulk processing started: {len(video_ids)} videos")

    results: List[BatchItemResult] = []
    groups = chunk(video_ids, config.group_size)

    for index, group in enumerate(groups):
        # gather keeps submission order regardless of completion order
        group_results = await asyncio.gather(*(process_item(video_id, fetcher) for video_id in group))
        results.extend(group_results)

        if index < len(groups) - 1 and config.inter_group_delay_ms > 0:
            await sleep(config.inter_group_delay_ms / 1000)

    successful = sum(1 for r in results if r.success)
    summary = BatchSummary(
        total=len(results),
        successful=successful,
        failed=len(results) - successful,
        processingTimeMs=_elapsed_ms(started),
        timestamp=datetime.now(timezone.utc).isoformat(),
    )

    logger.info(
        f"Bulk completed: {summary.successful} successful, {summary.failed} failed "
        f"in {summary.processingTimeMs}ms"
    )
    return results, summary
