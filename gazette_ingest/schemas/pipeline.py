"""Result models for the gazette ingestion pipeline."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ProcessStatus(str, Enum):
    """Status reported to the user when a job (or one of its steps) finishes."""
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class PipelineState(str, Enum):
    STARTED = "started"
    SLICED = "sliced"
    METADATA_APPLIED = "metadata_applied"
    MATERIALIZED = "materialized"
    NOTIFIED = "notified"


class MaterializationOutcome(BaseModel):
    """Sections created from one slice result and the per-file errors collected on the way."""
    created: int = 0
    section_ids: List[int] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class PipelineOutcome(BaseModel):
    """What one run of the pipeline did to a gazette."""
    document_id: int
    status: ProcessStatus
    state: PipelineState
    page_count: int = 0
    sections_created: int = 0
    slicing_failed: bool = False
    metadata_applied: bool = False
    error_notifications: int = 0
    final_notification_sent: bool = False
    errors: List[str] = Field(default_factory=list)
    description: Optional[str] = None
