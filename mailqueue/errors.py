"""Exceptions raised by mailqueue."""


class MailQueueError(Exception):
    """Base class for mailqueue errors."""


class DeliveryError(MailQueueError):
    """The mail provider did not accept a message."""

    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.status_code = status_code
