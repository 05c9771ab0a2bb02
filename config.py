from typing import List

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class BatchConfig(BaseModel):
    group_size: int = Field(gt=0)
    inter_group_delay_ms: int = Field(ge=0)
    max_items: int = Field(gt=0)


class Settings(BaseSettings):
    PORT: int = 3001
    HOST: str = "0.0.0.0"
    NODE_ENV: str = "development"

    # Comma-separated list of origins, or "*"
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # Applies to every /api/* route, per client IP
    RATE_LIMIT_WINDOW_MS: int = 60000
    RATE_LIMIT_MAX_REQUESTS: int = 20
    # Key clients on the first X-Forwarded-For entry. Only enable behind a proxy
    # that overwrites the header, otherwise clients can pick their own key.
    TRUST_PROXY: bool = False

    # Stricter window on top of the above for the bulk endpoint
    BULK_RATE_LIMIT_WINDOW_MS: int = 60 * 60 * 1000
    BULK_RATE_LIMIT_MAX_REQUESTS: int = 5

    BULK_MAX_VIDEOS: int = Field(50, gt=0)
    BULK_CONCURRENT_REQUESTS: int = Field(3, gt=0)
    BULK_DELAY_BETWEEN_BATCHES: int = Field(1000, ge=0)

    # "youtube_transcript_api" or "yt_dlp"
    TRANSCRIPT_FETCHER: str = "youtube_transcript_api"
    # Preferred caption languages, e.g. "es,en". Empty takes the first available.
    TRANSCRIPT_LANGUAGES: str = ""

    # YouTube cookies for yt-dlp authentication (base64 encoded)
    # Export from browser, then: base64 < cookies.txt
    YOUTUBE_COOKIES_BASE64: str = ""

    class Config:
        env_file = ".env"

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def transcript_languages(self) -> List[str]:
        return [lang.strip() for lang in self.TRANSCRIPT_LANGUAGES.split(",") if lang.strip()]

    def batch_config(self) -> BatchConfig:
        return BatchConfig(
            group_size=self.BULK_CONCURRENT_REQUESTS,
            inter_group_delay_ms=self.BULK_DELAY_BETWEEN_BATCHES,
            max_items=self.BULK_MAX_VIDEOS,
        )


settings = Settings()
