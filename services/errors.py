# services/errors.py
"""
Error taxonomy for the transcript API and the friendly-message table used to
translate upstream fetch failures into something a user can act on.
"""
from typing import Callable, List, Optional, Tuple

from youtube_transcript_api import NoTranscriptFound, TranscriptsDisabled, VideoUnavailable


class TranscriptAPIError(Exception):
    """Base error; rendered as {"success": false, "error": ...} with `status_code`."""

    status_code = 500

    def __init__(self, message: str, video_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.video_id = video_id


class ValidationError(TranscriptAPIError):
    status_code = 400


class NotFoundError(TranscriptAPIError):
    status_code = 404


class UpstreamError(TranscriptAPIError):
    status_code = 400


class CapacityError(TranscriptAPIError):
    status_code = 400


class InternalError(TranscriptAPIError):
    status_code = 500


class SubtitleFormatError(Exception):
    """Raised by a fetcher when captions exist but in no format it can parse."""


NO_TRANSCRIPT_MESSAGE = "No se encontró transcripción para este video"


def _matches(exc_types: Tuple[type, ...], *fragments: str) -> Callable[[BaseException], bool]:
    def predicate(exc: BaseException) -> bool:
        if isinstance(exc, exc_types):
            return True
        text = str(exc)
        return any(fragment in text for fragment in fragments)

    return predicate


# (predicate, message, compact message for batch results). First match wins.
# Upstream error text changes between library releases, so both the exception
# type and known message fragments are checked.
FRIENDLY_ERRORS: List[Tuple[Callable[[BaseException], bool], str, str]] = [
    (
        _matches((TranscriptsDisabled,), "Transcript is disabled", "Subtitles are disabled"),
        "Este video no tiene subtítulos/transcripción disponible",
        "Transcripción no disponible",
    ),
    (
        _matches((VideoUnavailable,), "Video unavailable", "Private video"),
        "Video no disponible o privado",
        "Video no disponible",
    ),
    (
        _matches((NoTranscriptFound,), "Could not find", "No transcripts were found"),
        "No se pudo encontrar la transcripción para este video",
        "Transcripción no encontrada",
    ),
    (
        _matches((SubtitleFormatError,)),
        "Los subtítulos de este video no están en un formato compatible",
        "Formato de subtítulos no compatible",
    ),
]


def friendly_error_message(exc: BaseException, compact: bool = False) -> str:
    for predicate, message, compact_message in FRIENDLY_ERRORS:
        if predicate(exc):
            return compact_message if compact else message
    return str(exc) or type(exc).__name__
