from __future__ import annotations

import math
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

SNIPPET_LENGTH = 100


class QueueItem(BaseModel):
    """One row of the external inbox queue awaiting import."""

    row_number: int
    timestamp: str = ""
    raw_input: str = ""
    classification: str = ""
    target_folder: str = ""
    confidence: float = 0.0
    notes: str = ""

    @field_validator("timestamp", "raw_input", "classification", "target_folder", "notes", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        # sheet cells come back as null when empty
        return "" if v is None else v

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v):
        # empty or garbled cells read as 0, out-of-range values are clamped
        try:
            value = float(v)
        except (TypeError, ValueError):
            return 0.0
        if math.isnan(value):
            return 0.0
        return min(max(value, 0.0), 1.0)

    @property
    def is_task(self) -> bool:
        return self.classification == "task"


class CategoryMapping(BaseModel):
    """Lower-cased category name -> host graph node id."""

    ids: Dict[str, str] = Field(default_factory=dict)

    def get(self, name: str) -> Optional[str]:
        return self.ids.get(name.lower())

    def tag_ids(self) -> set:
        return set(self.ids.values())

    def is_empty(self) -> bool:
        return not self.ids


class ClassificationResult(BaseModel):
    categories: List[str] = Field(default_factory=list)
    folders: List[str] = Field(default_factory=list)
    confidence: Optional[float] = None
    is_task: bool = False

    @property
    def is_actionable(self) -> bool:
        return self.is_task or any(c.lower() == "task" for c in self.categories)


class ProcessStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    DONE = "done"
    ERROR = "error"


class ProcessResult(BaseModel):
    rem_id: str
    text: str = ""
    classification: str = ""
    target_folder: str = ""
    confidence: Optional[float] = None
    status: ProcessStatus = ProcessStatus.PENDING
    error: Optional[str] = None
    tags_applied: List[str] = Field(default_factory=list)

    @staticmethod
    def snippet(text: str) -> str:
        return text[:SNIPPET_LENGTH] + "..." if len(text) > SNIPPET_LENGTH else text


class RunSummary(BaseModel):
    processed: int = 0
    skipped: int = 0
    errors: int = 0
    message: str = ""
    results: List[ProcessResult] = Field(default_factory=list)


class ImportOutcome(BaseModel):
    row_number: int
    ok: bool
    rem_id: Optional[str] = None
    error: Optional[str] = None
