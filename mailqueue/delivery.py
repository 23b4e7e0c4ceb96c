"""Delivery backends the worker hands jobs to.

A deliverer takes one :class:`EmailJob` and either returns True (the provider
accepted the message), returns False, or raises. The queue treats the last two
the same way: the attempt failed and may be retried.
"""

import logging
from typing import Any, Callable, Dict, Optional

import requests

from .config import Settings, get_settings
from .errors import DeliveryError
from .models import EmailJob, EmailType

logger = logging.getLogger(__name__)

DEFAULT_SUBJECTS: Dict[EmailType, str] = {
    EmailType.MAGIC_LINK: "Your sign-in link",
    EmailType.INVITE: "You're invited to the loyalty program",
    EmailType.WELCOME: "Welcome to the loyalty program",
    EmailType.APPROVAL: "Your account has been approved",
    EmailType.OTHER: "Loyalty program notification",
}


class Deliverer:
    """Base class for delivery backends."""

    def deliver(self, job: EmailJob) -> bool:
        raise NotImplementedError


class NullDeliverer(Deliverer):
    """Accepts every job without sending anything."""

    def deliver(self, job: EmailJob) -> bool:
        logger.debug("Dry run: not sending %s to %s", job.type.value, job.recipient)
        return True


class CallableDeliverer(Deliverer):
    """Wraps a plain ``job -> bool`` function."""

    def __init__(self, func: Callable[[EmailJob], Any]):
        self.func = func

    def deliver(self, job: EmailJob) -> bool:
        return bool(self.func(job))


def as_deliverer(obj) -> Deliverer:
    if obj is None:
        return NullDeliverer()
    if isinstance(obj, Deliverer):
        return obj
    if callable(obj):
        return CallableDeliverer(obj)
    raise TypeError(f"Expected a Deliverer or a callable, got {type(obj).__name__}")


class BrevoDeliverer(Deliverer):
    """Sends through the Brevo transactional email API.

    The job payload supplies the rendered message:

    - ``subject``: falls back to a default for the job's type
    - ``html`` and/or ``text``: the body; at least one is required
    - ``name``: optional recipient display name
    """

    def __init__(self, settings: Optional[Settings] = None, session=None):
        self.settings = settings or get_settings()
        self.session = session or requests

    def build_payload(self, job: EmailJob) -> Dict[str, Any]:
        data = job.data
        html = data.get("html")
        text = data.get("text")
        if not html and not text:
            raise DeliveryError(f"Email {job.id} has no html or text body")

        recipient: Dict[str, str] = {"email": job.recipient}
        if data.get("name"):
            recipient["name"] = data["name"]

        payload: Dict[str, Any] = {
            "sender": {"email": self.settings.from_email, "name": self.settings.from_name},
            "to": [recipient],
            "subject": data.get("subject") or DEFAULT_SUBJECTS[job.type],
            "tags": [job.type.value],
        }
        if html:
            payload["htmlContent"] = html
        if text:
            payload["textContent"] = text
        return payload

    def deliver(self, job: EmailJob) -> bool:
        if not self.settings.brevo_api_key:
            raise DeliveryError("MAILQUEUE_BREVO_API_KEY is not configured")

        headers = {
            "api-key": self.settings.brevo_api_key,
            "accept": "application/json",
            "content-type": "application/json",
        }
        try:
            response = self.session.post(
                self.settings.brevo_api_url,
                json=self.build_payload(job),
                headers=headers,
                timeout=self.settings.request_timeout,
            )
        except requests.RequestException as e:
            raise DeliveryError(f"Brevo request failed: {e}") from e

        if response.status_code >= 400:
            try:
                detail = response.json().get("message", response.text)
            except ValueError:
                detail = response.text
            raise DeliveryError(f"Brevo returned {response.status_code}: {detail}", response.status_code)

        try:
            message_id = response.json().get("messageId", "unknown")
        except ValueError:
            message_id = "unknown"
        logger.info("Brevo accepted email %s (message id %s)", job.id, message_id)
        return True
