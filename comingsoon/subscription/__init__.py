"""Email capture: backend client, errors and the form state machine."""

from .client import CountResult, SubscriptionClient
from .errors import (
    InvalidEmailError,
    SubscriptionError,
    SubscriptionRejected,
    SubscriptionTransportError,
)
from .form import (
    StatusType,
    SubscriptionForm,
    SubscriptionStatus,
    is_valid_email,
    validate_email,
)

__all__ = [
    "CountResult",
    "InvalidEmailError",
    "StatusType",
    "SubscriptionClient",
    "SubscriptionError",
    "SubscriptionForm",
    "SubscriptionRejected",
    "SubscriptionStatus",
    "SubscriptionTransportError",
    "is_valid_email",
    "validate_email",
]
