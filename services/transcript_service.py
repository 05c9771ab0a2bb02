from schemas.transcript import TranscriptResult
from services.errors import NO_TRANSCRIPT_MESSAGE, NotFoundError, UpstreamError, friendly_error_message
from services.formatter import format_transcript
from services.transcript_fetcher import TranscriptFetcher


async def fetch_formatted_transcript(
    video_id: str,
    fetcher: TranscriptFetcher,
    compact_errors: bool = False,
) -> TranscriptResult:
    """
    Fetch one video's captions and format them.

    Raises:
        UpstreamError: the fetcher failed; the message is the friendly version
            of the upstream error (short form when `compact_errors` is set).
        NotFoundError: the fetcher succeeded but returned no segments.
    """
    try:
        segments = await fetcher.fetch(video_id)
    except Exception as e:
        raise UpstreamError(friendly_error_message(e, compact=compact_errors), video_id=video_id) from e

    if not segments:
        raise NotFoundError(NO_TRANSCRIPT_MESSAGE, video_id=video_id)

    return TranscriptResult(
        videoId=video_id,
        transcript=format_transcript(segments),
        segments=len(segments),
    )
