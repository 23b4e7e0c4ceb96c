"""Background worker that delivers queued emails."""

import logging
import threading
import time
from typing import Optional
from .errors import DeliveryError
from .models import EmailJob, EmailStatus

logger = logging.getLogger(__name__)


class Worker:
    """Sends pending jobs one at a time on a daemon thread.

    At most one loop runs per queue. The loop sweeps the pending jobs in
    insertion order, throttles between sends, and exits once nothing is
    pending; ``start`` brings it back on the next enqueue.
    """

    def __init__(self, queue):
        self.queue = queue
        self.running = False
        self.current_job: Optional[EmailJob] = None
        self._thread: Optional[threading.Thread] = None
        self._idle = threading.Event()
        self._idle.set()

    def start(self) -> bool:
        """Start the loop unless it is already running."""
        with self.queue._lock:
            if self.running:
                return False
            self.running = True
            self._idle.clear()
            self._thread = threading.Thread(target=self.run, name="mailqueue-worker", daemon=True)
            self._thread.start()
        logger.debug("Email worker started")
        return True

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        return self._idle.wait(timeout)

    def run(self) -> None:
        """Sweep until no job is pending."""
        try:
            while True:
                # Flip ``running`` under the queue lock so an add() that lands
                # after the last sweep starts a fresh loop.
                with self.queue._lock:
                    pending = self.queue.get_pending_jobs()
                    if not pending:
                        self.running = False
                        self._idle.set()
                        break

                for job in pending:
                    if job.status != EmailStatus.PENDING:
                        continue
                    self._execute_job(job)
                    time.sleep(self.queue.config.send_delay)
        except Exception:
            with self.queue._lock:
                left = len(self.queue.get_pending_jobs())
                logger.exception("Email worker crashed; %d email(s) left pending until the next add()", left)
                self.running = False
                self._idle.set()
        logger.debug("Email worker stopped")

    def _execute_job(self, job: EmailJob) -> bool:
        """Make one delivery attempt. Returns True if the email was sent."""
        self.current_job = job
        self.queue.mark_processing(job)
        logger.info("Sending email %s (attempt %d/%d)", job.id, job.attempts, job.max_attempts)

        try:
            if not self.queue.deliverer.deliver(job):
                raise DeliveryError("Email send returned false")
        except Exception as e:
            error_msg = str(e) or type(e).__name__
            logger.error("Error sending email %s (attempt %d/%d): %s", job.id, job.attempts, job.max_attempts, error_msg)
            if self.queue.mark_failed(job, error_msg):
                delay = self.queue.config.retry_delay
                logger.info("Retrying email %s in %.1fs", job.id, delay)
                time.sleep(delay)
            else:
                logger.error("Email %s failed after %d attempts", job.id, job.attempts)
            return False
        else:
            self.queue.mark_sent(job)
            logger.info("Email sent: %s", job.id)
            return True
        finally:
            self.current_job = None
