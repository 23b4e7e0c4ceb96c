"""Data models for email jobs and queue configuration."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EmailType(str, Enum):
    """Kinds of outbound email the application sends."""
    MAGIC_LINK = "magic-link"
    INVITE = "invite"
    WELCOME = "welcome"
    APPROVAL = "approval"
    OTHER = "other"


class EmailStatus(str, Enum):
    """Email job lifecycle states."""
    PENDING = "pending"
    PROCESSING = "processing"
    SENT = "sent"
    FAILED = "failed"


class EmailJob(BaseModel):
    """A single outbound email waiting to be delivered."""
    id: str
    type: EmailType
    recipient: str
    data: Dict[str, Any] = Field(default_factory=dict)
    attempts: int = 0
    max_attempts: int = 3
    status: EmailStatus = EmailStatus.PENDING
    created_at: datetime = Field(default_factory=utcnow)
    last_attempt: Optional[datetime] = None
    error: Optional[str] = None

    def summary(self) -> "JobSummary":
        return JobSummary(
            id=self.id,
            type=self.type,
            recipient=self.recipient,
            attempts=self.attempts,
            status=self.status,
            error=self.error,
            created_at=self.created_at,
            last_attempt=self.last_attempt,
        )


class JobSummary(BaseModel):
    """Read-only view of a job, as reported by the queue status."""
    id: str
    type: EmailType
    recipient: str
    attempts: int
    status: EmailStatus
    error: Optional[str] = None
    created_at: datetime
    last_attempt: Optional[datetime] = None


class QueueStatus(BaseModel):
    """Counts per status plus a summary of every stored job."""
    total: int = 0
    pending: int = 0
    processing: int = 0
    sent: int = 0
    failed: int = 0
    jobs: List[JobSummary] = Field(default_factory=list)


class QueueConfig(BaseModel):
    """Retry and throttling knobs for the queue."""
    max_attempts: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=5.0, ge=0)  # seconds to wait after a failed attempt
    send_delay: float = Field(default=1.0, ge=0)  # seconds between sends

    @classmethod
    def from_settings(cls, settings=None) -> "QueueConfig":
        if settings is None:
            from .config import get_settings
            settings = get_settings()
        return cls(
            max_attempts=settings.max_attempts,
            retry_delay=settings.retry_delay,
            send_delay=settings.send_delay,
        )
