"""Request and response models for the gazette endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProcessGazetteRequest(BaseModel):
    pdf_path: str = Field(..., min_length=1, description="Absolute path of the uploaded gazette PDF")
    user_id: Optional[int] = Field(default=None, description="User notified when processing finishes")


class ProcessingJobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    document_id: int
    user_id: Optional[int] = None
    pdf_path: str
    workflow_id: Optional[str] = None
    status: str
    final_status: Optional[str] = None
    attempts: int = 0
    last_error: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProcessingJobListResponse(BaseModel):
    total: int
    jobs: List[ProcessingJobResponse]
