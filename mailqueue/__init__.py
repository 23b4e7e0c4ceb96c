"""In-process email queue with bounded retries."""

from .delivery import BrevoDeliverer, CallableDeliverer, Deliverer, NullDeliverer
from .errors import DeliveryError, MailQueueError
from .models import EmailJob, EmailStatus, EmailType, QueueConfig, QueueStatus
from .queue import EmailQueue

__version__ = "1.0.0"

__all__ = [
    "BrevoDeliverer",
    "CallableDeliverer",
    "Deliverer",
    "DeliveryError",
    "EmailJob",
    "EmailQueue",
    "EmailStatus",
    "EmailType",
    "MailQueueError",
    "NullDeliverer",
    "QueueConfig",
    "QueueStatus",
]
