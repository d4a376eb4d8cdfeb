"""Pydantic models for API requests and responses."""

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from enum import Enum
from datetime import datetime, timezone


def _now() -> datetime:
    return datetime.now(timezone.utc)


class HealthStatus(BaseModel):
    status: str  # "healthy", "degraded", "unhealthy"
    store: bool
    redis: bool
    timestamp: datetime = Field(default_factory=_now)


class JobStatus(str, Enum):
    """Job status enum."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class JobProgress(BaseModel):
    """Job progress tracking; ``current`` is a percentage."""
    current: int = 0
    total: int = 100
    phase: str = "initializing"


class JobResponse(BaseModel):
    """Job response model."""
    job_id: str
    job_type: str
    status: JobStatus
    created_at: datetime
    completed_at: Optional[datetime] = None
    progress: JobProgress
    error: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
