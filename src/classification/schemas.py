from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel, Field

from inbox_sync.models import QueueItem


class UnprocessedResponse(BaseModel):
    count: int = 0
    items: List[QueueItem] = Field(default_factory=list)


class ClassifyRequest(BaseModel):
    text: str


class LegacyClassification(BaseModel):
    classification: str
    target_folder: str
    confidence: Optional[float] = None


class MultiClassification(BaseModel):
    categories: List[str] = Field(default_factory=list)
    folders: List[str] = Field(default_factory=list)
    confidence: Optional[float] = None
    is_task: Optional[bool] = False


class MarkProcessedRequest(BaseModel):
    row_number: int
    rem_id: str
