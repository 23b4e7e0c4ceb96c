"""In-memory email queue."""

import logging
import threading
import time
from datetime import timedelta
from typing import Dict, List, Optional, Union
from .delivery import Deliverer, as_deliverer
from .models import EmailJob, EmailStatus, EmailType, QueueConfig, QueueStatus, utcnow
from .worker import Worker

logger = logging.getLogger(__name__)


class EmailQueue:
    """Accepts email jobs and hands them to a single background worker.

    Jobs live in an insertion-ordered dict keyed by id. Sent jobs are dropped
    from the store right away; failed jobs stay until ``purge_failed`` so they
    can be inspected through ``get_status``. Nothing is persisted.
    """

    def __init__(self, deliverer=None, config: Optional[QueueConfig] = None):
        self.config = config or QueueConfig.from_settings()
        self.deliverer: Deliverer = as_deliverer(deliverer)
        self._jobs: Dict[str, EmailJob] = {}
        self._lock = threading.RLock()
        self.worker = Worker(self)

    def add(
        self,
        type: Union[EmailType, str],
        recipient: str,
        data: Optional[dict] = None,
        max_attempts: Optional[int] = None,
    ) -> str:
        """Enqueue an email and return its id without waiting for delivery."""
        email_type = EmailType(type)
        if max_attempts is None:
            max_attempts = self.config.max_attempts
        if isinstance(max_attempts, bool) or not isinstance(max_attempts, int):
            raise ValueError(f"max_attempts must be an integer, got {max_attempts!r}")
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        with self._lock:
            job = EmailJob(
                id=self._new_id(email_type, recipient),
                type=email_type,
                recipient=recipient,
                data=data or {},
                max_attempts=max_attempts,
            )
            self._jobs[job.id] = job

        logger.info("Email queued: %s -> %s (id %s)", email_type.value, recipient, job.id)
        self.worker.start()
        return job.id

    def _new_id(self, email_type: EmailType, recipient: str) -> str:
        base = f"{email_type.value}-{recipient}-{int(time.time() * 1000)}"
        job_id = base
        n = 1
        while job_id in self._jobs:
            job_id = f"{base}-{n}"
            n += 1
        return job_id

    # State transitions, driven by the worker

    def mark_processing(self, job: EmailJob) -> None:
        with self._lock:
            job.status = EmailStatus.PROCESSING
            job.attempts += 1
            job.last_attempt = utcnow()

    def mark_sent(self, job: EmailJob) -> None:
        with self._lock:
            job.status = EmailStatus.SENT
            job.error = None
            self._jobs.pop(job.id, None)

    def mark_failed(self, job: EmailJob, error: str) -> bool:
        """Record a failed attempt. Returns True if the job will be retried."""
        with self._lock:
            job.error = error
            if job.attempts >= job.max_attempts:
                job.status = EmailStatus.FAILED
                return False
            job.status = EmailStatus.PENDING
            return True

    # Queries

    def get_pending_jobs(self) -> List[EmailJob]:
        with self._lock:
            return [job for job in self._jobs.values() if job.status == EmailStatus.PENDING]

    def get_job(self, job_id: str) -> Optional[EmailJob]:
        with self._lock:
            job = self._jobs.get(job_id)
            return job.model_copy(deep=True) if job else None

    def get_failed_jobs(self, limit: Optional[int] = None) -> List[EmailJob]:
        with self._lock:
            failed = [
                job.model_copy(deep=True)
                for job in self._jobs.values()
                if job.status == EmailStatus.FAILED
            ]
        return failed[:limit] if limit is not None else failed

    def get_status(self) -> QueueStatus:
        """Counts per status and a summary of every job still in the store."""
        with self._lock:
            return self._summarize(list(self._jobs.values()))

    def get_stats(self, hours: float = 24) -> QueueStatus:
        """Like ``get_status`` but only for jobs created in the last ``hours``."""
        if hours < 0:
            raise ValueError(f"hours must be >= 0, got {hours}")
        since = utcnow() - timedelta(hours=hours)
        with self._lock:
            return self._summarize([job for job in self._jobs.values() if job.created_at >= since])

    @staticmethod
    def _summarize(jobs: List[EmailJob]) -> QueueStatus:
        status = QueueStatus(total=len(jobs), jobs=[job.summary() for job in jobs])
        for job in jobs:
            field = job.status.value
            setattr(status, field, getattr(status, field) + 1)
        return status

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    # Maintenance

    def cleanup(self) -> int:
        """Drop jobs in ``sent`` status. Returns how many were removed."""
        removed = self._remove(EmailStatus.SENT)
        logger.info("Cleanup: removed %d sent email(s) from the queue", removed)
        return removed

    def purge_failed(self) -> int:
        """Drop jobs in ``failed`` status. Returns how many were removed."""
        removed = self._remove(EmailStatus.FAILED)
        logger.info("Purged %d failed email(s) from the queue", removed)
        return removed

    def _remove(self, status: EmailStatus) -> int:
        with self._lock:
            doomed = [job_id for job_id, job in self._jobs.items() if job.status == status]
            for job_id in doomed:
                del self._jobs[job_id]
        return len(doomed)

    def retry_failed(self, job_id: str) -> bool:
        """Give a failed job a fresh set of attempts."""
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None or job.status != EmailStatus.FAILED:
                return False
            job.status = EmailStatus.PENDING
            job.attempts = 0
            job.error = None
            job.last_attempt = None

        logger.info("Email %s moved back to pending for retry", job_id)
        self.worker.start()
        return True

    # Worker lifecycle

    @property
    def is_processing(self) -> bool:
        return self.worker.running

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until the worker has no pending jobs left. False on timeout."""
        return self.worker.wait_idle(timeout)
