"""
Pydantic schemas for generation provider jobs.
"""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field


class JobState(str, Enum):
    """Lifecycle of a provider job."""
    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.COMPLETED, JobState.FAILED)


class JobHandle(BaseModel):
    """Returned by submit; everything needed to poll the job."""
    request_id: str
    model_id: str
    status_url: Optional[str] = None
    response_url: Optional[str] = None


class JobStatus(BaseModel):
    state: JobState
    result_ref: Optional[str] = Field(None, description="URL of the produced asset once completed")
    error: Optional[str] = None
    payload: dict[str, Any] = Field(default_factory=dict)
