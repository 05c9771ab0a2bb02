from fastapi import Request

from config import Settings
from services.transcript_fetcher import TranscriptFetcher


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_fetcher(request: Request) -> TranscriptFetcher:
    return request.app.state.fetcher
