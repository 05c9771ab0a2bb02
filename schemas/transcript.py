# Models
from pydantic import BaseModel, ConfigDict, Field


class CaptionSegment(BaseModel):
    model_config = ConfigDict(frozen=True)

    offsetMs: int = Field(ge=0)
    text: str


class TranscriptRequest(BaseModel):
    videoId: str = Field(min_length=1)


class TranscriptResult(BaseModel):
    videoId: str
    transcript: str
    segments: int


class TranscriptMetadata(BaseModel):
    segments: int
    processingTimeMs: int
    timestamp: str


class TranscriptResponse(BaseModel):
    success: bool = True
    videoId: str
    transcript: str
    metadata: TranscriptMetadata
