from typing import Sequence

from schemas.transcript import CaptionSegment


def format_timestamp(offset_ms: int) -> str:
    """
    Convert a millisecond offset to HH:MM:SS.
    Sub-second remainders are dropped, never rounded.
    """
    hours = offset_ms // 3600000
    minutes = (offset_ms % 3600000) // 60000
    seconds = (offset_ms % 60000) // 1000
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_transcript(segments: Sequence[CaptionSegment]) -> str:
    """
    Render segments in fetch order as "[HH:MM:SS] text", separated by a blank line.
    """
    return "\n\n".join(
        f"[{format_timestamp(segment.offsetMs)}] {segment.text}" for segment in segments
    )
