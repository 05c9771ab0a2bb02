# services/ytdlp_fetcher.py
import os
import re
import base64
import logging
import tempfile
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx
import yt_dlp
from fastapi.concurrency import run_in_threadpool

from schemas.transcript import CaptionSegment
from services.errors import SubtitleFormatError

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")

# Global cookie file path (created once if cookies are configured)
_cookie_file_path: Optional[str] = None


def get_cookie_file_path(cookies_b64: str) -> Optional[str]:
    """
    Decode base64 YouTube cookies and write them to a temp file.
    Returns the path to the cookie file, or None if not configured.
    """
    global _cookie_file_path

    if _cookie_file_path and os.path.exists(_cookie_file_path):
        return _cookie_file_path

    if not cookies_b64:
        return None

    try:
        cookies_content = base64.b64decode(cookies_b64).decode("utf-8")
    except ValueError as e:
        logger.error(f"Failed to decode YouTube cookies: {e}")
        return None

    fd, path = tempfile.mkstemp(suffix=".txt", prefix="yt_cookies_")
    with os.fdopen(fd, "w") as f:
        f.write(cookies_content)

    _cookie_file_path = path
    logger.info("YouTube cookies loaded successfully")
    return path


def pick_subtitle_track(
    info: Dict[str, Any], languages: Sequence[str]
) -> Optional[Tuple[List[Dict[str, Any]], bool]]:
    """
    Choose the caption formats to download from yt-dlp's info dict.
    Returns (formats, is_automatic), or None when nothing matches.

    Manually created subtitles win over automatic captions. Within each kind the
    preferred languages are tried in order; manual subtitles in any other
    language are still better than nothing.
    """
    preferred = list(languages) or ["en"]
    subtitles = info.get("subtitles") or {}
    automatic = info.get("automatic_captions") or {}

    for lang in preferred:
        if subtitles.get(lang):
            return subtitles[lang], False
    if not languages:
        for formats in subtitles.values():
            if formats:
                return formats, False
    for lang in preferred:
        if automatic.get(lang):
            return automatic[lang], True
    return None


def parse_vtt_timestamp(timestamp_str: str) -> float:
    """
    Convert VTT timestamp to seconds.
    Format: HH:MM:SS.mmm or MM:SS.mmm
    """
    parts = timestamp_str.split(":")

    if len(parts) == 3:
        hours, minutes, seconds = parts
        return float(hours) * 3600 + float(minutes) * 60 + float(seconds)
    elif len(parts) == 2:
        minutes, seconds = parts
        return float(minutes) * 60 + float(seconds)
    else:
        return float(timestamp_str)


def parse_vtt_captions(vtt_content: str, rolling: bool = False) -> List[CaptionSegment]:
    """
    Parse WebVTT captions into segments.

    Inline styling/timing tags are stripped. YouTube's automatic captions
    (`rolling=True`) repeat the previous cue's last line at the top of each
    cue; with `rolling` those leading repeats are dropped. Manual subtitles are
    kept verbatim, repeated lines included.
    """
    segments: List[CaptionSegment] = []
    previous_last_line = None
    lines = vtt_content.strip().splitlines()

    i = 0
    while i < len(lines):
        line = lines[i].strip()
        i += 1

        if "-->" not in line:
            continue

        try:
            start = parse_vtt_timestamp(line.split("-->")[0].strip())
        except ValueError:
            logger.warning(f"Skipping malformed cue timing: {line}")
            continue

        cue_lines = []
        while i < len(lines) and lines[i].strip():
            text = _TAG_RE.sub("", lines[i]).strip()
            if text:
                cue_lines.append(text)
            i += 1

        if not cue_lines:
            continue
        last_line = cue_lines[-1]
        if rolling and cue_lines[0] == previous_last_line:
            cue_lines = cue_lines[1:]
        previous_last_line = last_line

        if cue_lines:
            segments.append(CaptionSegment(offsetMs=round(start * 1000), text=" ".join(cue_lines)))

    return segments


class YtDlpFetcher:
    """Fetch captions with yt-dlp, using cookies if configured to bypass bot detection."""

    name = "yt_dlp"

    def __init__(self, languages: Optional[Sequence[str]] = None, cookies_base64: str = ""):
        self.languages = list(languages or [])
        self.cookies_base64 = cookies_base64

    def _extract_info(self, video_id: str) -> Dict[str, Any]:
        ydl_opts = {
            "quiet": True,
            "no_warnings": True,
            "skip_download": True,
        }

        cookie_file = get_cookie_file_path(self.cookies_base64)
        if cookie_file:
            ydl_opts["cookiefile"] = cookie_file

        with yt_dlp.YoutubeDL(ydl_opts) as ydl:
            return ydl.extract_info(f"https://www.youtube.com/watch?v={video_id}", download=False)

    async def fetch(self, video_id: str) -> List[CaptionSegment]:
        info = await run_in_threadpool(self._extract_info, video_id)

        track = pick_subtitle_track(info, self.languages)
        if not track:
            logger.warning(f"No subtitles found for video: {video_id}")
            return []
        formats, is_automatic = track

        vtt_subtitle = next((f for f in formats if f.get("ext") == "vtt"), None)
        if vtt_subtitle is None:
            available = ", ".join(sorted({str(f.get("ext")) for f in formats}))
            raise SubtitleFormatError(f"Subtitles for {video_id} exist but not in VTT format (available: {available})")

        async with httpx.AsyncClient(follow_redirects=True, timeout=30.0) as client:
            response = await client.get(vtt_subtitle["url"])
            response.raise_for_status()

        return parse_vtt_captions(response.text, rolling=is_automatic)
