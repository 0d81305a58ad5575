"""
Subscription-specific exceptions.

All exceptions inherit from SubscriptionError so callers can catch every
user-facing signup failure in one place. The message of each exception
is what the status line shows.
"""

from typing import Optional


class SubscriptionError(Exception):
    """Base exception for signup failures."""

    @property
    def message(self) -> str:
        return str(self)


class InvalidEmailError(SubscriptionError):
    """
    Email address failed the client-side format check.

    Raised before any request is made.
    """
    pass


class SubscriptionRejected(SubscriptionError):
    """
    Backend answered the signup with a non-OK status.

    The message is the ``detail`` the backend sent, or a generic
    fallback when there was none.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SubscriptionTransportError(SubscriptionError):
    """
    Signup request never completed.

    Raised for connection failures, timeouts and other transport errors.
    """
    pass
