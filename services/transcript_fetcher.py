# services/transcript_fetcher.py
"""
Transcript fetchers. A fetcher turns a YouTube video id into caption segments
or raises whatever the underlying library raised.
"""
import logging
from typing import List, Optional, Protocol, Sequence

from fastapi.concurrency import run_in_threadpool
from youtube_transcript_api import YouTubeTranscriptApi

from config import Settings
from schemas.transcript import CaptionSegment

logger = logging.getLogger(__name__)


class TranscriptFetcher(Protocol):
    name: str

    async def fetch(self, video_id: str) -> List[CaptionSegment]:
        ...


class YouTubeTranscriptApiFetcher:
    """
    Fetch captions with youtube-transcript-api.

    With no preferred languages the first transcript YouTube lists is used
    (manually created ones are listed before generated ones).
    """

    name = "youtube_transcript_api"

    def __init__(self, languages: Optional[Sequence[str]] = None):
        self.languages = list(languages or [])
        self._api = YouTubeTranscriptApi()

    def _fetch_sync(self, video_id: str):
        if self.languages:
            return self._api.fetch(video_id, languages=self.languages)

        for transcript in self._api.list(video_id):
            return transcript.fetch()
        return []

    async def fetch(self, video_id: str) -> List[CaptionSegment]:
        # The library is synchronous; keep it off the event loop
        fetched = await run_in_threadpool(self._fetch_sync, video_id)
        return [
            CaptionSegment(offsetMs=round(snippet.start * 1000), text=snippet.text)
            for snippet in fetched
        ]


def get_transcript_fetcher(settings: Settings) -> TranscriptFetcher:
    backend = settings.TRANSCRIPT_FETCHER.strip().lower()

    if backend == "yt_dlp":
        from services.ytdlp_fetcher import YtDlpFetcher

        fetcher = YtDlpFetcher(
            languages=settings.transcript_languages,
            cookies_base64=settings.YOUTUBE_COOKIES_BASE64,
        )
    elif backend == "youtube_transcript_api":
        fetcher = YouTubeTranscriptApiFetcher(languages=settings.transcript_languages)
    else:
        raise ValueError(f"Unknown TRANSCRIPT_FETCHER: {settings.TRANSCRIPT_FETCHER}")

    logger.info(f"Using transcript fetcher: {fetcher.name}")
    return fetcher
