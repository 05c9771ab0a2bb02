from pydantic import BaseModel, Field
from typing import List, Literal, Union


class BulkTranscriptRequest(BaseModel):
    videoIds: List[str] = Field(min_length=1)


class BatchItemMetadata(BaseModel):
    processingTimeMs: int


class BatchItemSuccessMetadata(BatchItemMetadata):
    segments: int


class BatchItemSuccess(BaseModel):
    videoId: str
    success: Literal[True] = True
    transcript: str
    metadata: BatchItemSuccessMetadata


class BatchItemFailure(BaseModel):
    videoId: str
    success: Literal[False] = False
    error: str
    metadata: BatchItemMetadata


BatchItemResult = Union[BatchItemSuccess, BatchItemFailure]


class BatchSummary(BaseModel):
    total: int
    successful: int
    failed: int
    processingTimeMs: int
    timestamp: str


class BulkTranscriptResponse(BaseModel):
    success: bool = True
    results: List[BatchItemResult]
    summary: BatchSummary
