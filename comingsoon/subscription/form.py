"""
Subscription form controller.

Holds the email field, validates it, submits it through a
SubscriptionClient and tracks the status shown under the form. Also owns
the best-effort subscriber count badge.

Status transitions::

    idle/success/error --submit--> loading --+--> success
                                             +--> error
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .client import SubscriptionClient
from .errors import InvalidEmailError, SubscriptionError

# Loose on purpose; the backend does the real validation
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

SUBMITTING_MESSAGE = "Submitting..."
INVALID_EMAIL_MESSAGE = "Please enter a valid email address."
SUCCESS_MESSAGE = "You're on the list! We'll keep you posted."

BADGE_PLACEHOLDER = "Growing"
BUTTON_LABEL = "Notify me"
BUTTON_LABEL_LOADING = "Joining…"


def is_valid_email(email: str) -> bool:
    """Check an address against the ``local@domain.tld`` shape."""
    return EMAIL_PATTERN.fullmatch(email) is not None


def validate_email(email: str) -> str:
    """
    Return ``email`` unchanged if it looks like an address.

    Raises:
        InvalidEmailError: If it does not.
    """
    if not is_valid_email(email):
        raise InvalidEmailError(INVALID_EMAIL_MESSAGE)
    return email


class StatusType(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class SubscriptionStatus:
    """Current form status and the message shown for it."""

    type: StatusType = StatusType.IDLE
    message: str = ""

    @classmethod
    def idle(cls) -> "SubscriptionStatus":
        return cls(StatusType.IDLE)

    @classmethod
    def loading(cls, message: str = SUBMITTING_MESSAGE) -> "SubscriptionStatus":
        return cls(StatusType.LOADING, message)

    @classmethod
    def success(cls, message: str = SUCCESS_MESSAGE) -> "SubscriptionStatus":
        return cls(StatusType.SUCCESS, message)

    @classmethod
    def error(cls, message: str) -> "SubscriptionStatus":
        return cls(StatusType.ERROR, message)

    @property
    def is_loading(self) -> bool:
        return self.type is StatusType.LOADING


class SubscriptionForm:
    """
    State machine behind the email capture form.

    Every state change calls ``on_change`` so a view can redraw. After
    detach(), results of requests still in flight are dropped.

    Args:
        client: SubscriptionClient used for both backend calls
        on_change: Optional callback invoked after each state change
    """

    def __init__(
        self,
        client: SubscriptionClient,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self.client = client
        self.on_change = on_change
        self._email = ""
        self._status = SubscriptionStatus.idle()
        self._subscriber_count: Optional[str] = None
        self._attached = True
        self.logger = logging.getLogger(f"{__name__}.SubscriptionForm")

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def email(self) -> str:
        return self._email

    @email.setter
    def email(self, value: str) -> None:
        self._email = value
        self._changed()

    @property
    def status(self) -> SubscriptionStatus:
        return self._status

    @property
    def subscriber_count(self) -> Optional[str]:
        return self._subscriber_count

    @property
    def badge_text(self) -> str:
        return self._subscriber_count or BADGE_PLACEHOLDER

    @property
    def submit_enabled(self) -> bool:
        """False while a submission is in flight (the disabled button)."""
        return not self._status.is_loading

    @property
    def button_label(self) -> str:
        return BUTTON_LABEL_LOADING if self._status.is_loading else BUTTON_LABEL

    @property
    def attached(self) -> bool:
        return self._attached

    def attach(self) -> None:
        self._attached = True

    def detach(self) -> None:
        """Stop applying results; called when the page is torn down."""
        self._attached = False

    def _set_status(self, status: SubscriptionStatus) -> None:
        self._status = status
        self._changed()

    def _changed(self) -> None:
        if self.on_change:
            self.on_change()

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    async def submit(self) -> SubscriptionStatus:
        """
        Validate and submit the current email.

        Returns:
            The status the submission ended in.
        """
        email = self._email
        self._set_status(SubscriptionStatus.loading())

        try:
            validate_email(email)
        except InvalidEmailError as e:
            self._set_status(SubscriptionStatus.error(e.message))
            return self._status

        try:
            await self.client.subscribe(email)
        except SubscriptionError as e:
            outcome = SubscriptionStatus.error(e.message)
        else:
            outcome = SubscriptionStatus.success()

        if not self._attached:
            self.logger.debug(f"Dropping {outcome.type.value} result after detach")
            # Nothing is in flight any more; a later attach() must find the
            # button enabled again
            if self._status.is_loading:
                self._status = SubscriptionStatus.idle()
            return outcome

        if outcome.type is StatusType.SUCCESS:
            self._email = ""
        self._set_status(outcome)
        return outcome

    async def load_subscriber_count(self) -> None:
        """
        Fetch the subscriber count once for the badge.

        Failures are ignored and the placeholder stays.
        """
        result = await self.client.fetch_subscriber_count()

        if not result.ok:
            self.logger.debug(f"Subscriber count unavailable: {result.reason}")
            return

        if not self._attached:
            return

        self._subscriber_count = f"+{max(0, result.count)}"
        self._changed()
