"""
Subscription API client.

Talks to the backend subscription service:

    GET  {base}/api/subscribers?limit=1   -> JSON array (count proxy)
    POST {base}/api/subscribe             -> {"email", "source"}
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from .errors import SubscriptionRejected, SubscriptionTransportError

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "Unknown error"
GENERIC_FAILURE = "Subscription failed"


@dataclass(frozen=True)
class CountResult:
    """
    Outcome of the best-effort subscriber count read.

    Either ``ok`` with a ``count``, or not ``ok`` with a ``reason``.
    """

    ok: bool
    count: Optional[int] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, count: int) -> "CountResult":
        return cls(ok=True, count=count)

    @classmethod
    def failure(cls, reason: str) -> "CountResult":
        return cls(ok=False, reason=reason)


def extract_detail(response: httpx.Response) -> str:
    """
    Pull a user-facing message out of an error response.

    Returns:
        The ``detail`` string, a joined list of FastAPI validation
        messages, "Unknown error" for a non-JSON body, or
        "Subscription failed" when the JSON has no usable detail.
    """
    try:
        body = response.json()
    except ValueError:
        return UNKNOWN_ERROR

    detail: Any = body.get("detail") if isinstance(body, dict) else None

    if isinstance(detail, list):
        messages = [
            str(item["msg"]) for item in detail
            if isinstance(item, dict) and item.get("msg")
        ]
        detail = "; ".join(messages)
    elif detail is not None and not isinstance(detail, str):
        detail = str(detail)

    return detail or GENERIC_FAILURE


class SubscriptionClient:
    """
    Async client for the subscription backend.

    The underlying httpx.AsyncClient is created on first use and reused
    until close().

    Args:
        base_url: Backend base URL, e.g. "http://localhost:8000"
        timeout: HTTP request timeout in seconds
        source: Value sent as ``source`` with every signup
        transport: Optional httpx transport (used by tests)
    """

    SUBSCRIBE_PATH = "/api/subscribe"
    SUBSCRIBERS_PATH = "/api/subscribers"

    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        source: str = "coming-soon",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.source = source
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self.logger = logging.getLogger(f"{__name__}.SubscriptionClient")

    @property
    def subscribe_url(self) -> str:
        return f"{self.base_url}{self.SUBSCRIBE_PATH}"

    @property
    def subscribers_url(self) -> str:
        return f"{self.base_url}{self.SUBSCRIBERS_PATH}"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def subscribe(self, email: str) -> None:
        """
        Sign an email address up.

        Args:
            email: Address to subscribe

        Raises:
            SubscriptionRejected: If the backend returns a non-OK status
            SubscriptionTransportError: If the request never completes
        """
        client = await self._get_client()
        payload = {"email": email, "source": self.source}

        self.logger.debug(f"POST {self.subscribe_url}")

        try:
            response = await client.post(
                self.subscribe_url,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            message = str(e) or type(e).__name__
            self.logger.warning(f"Subscribe request failed: {message}")
            raise SubscriptionTransportError(message) from e

        if not response.is_success:
            detail = extract_detail(response)
            self.logger.info(
                f"Subscribe rejected with status {response.status_code}: {detail}"
            )
            raise SubscriptionRejected(detail, status_code=response.status_code)

        self.logger.info(f"Subscribed ({response.status_code})")

    async def fetch_subscriber_count(self) -> CountResult:
        """
        Read the subscriber list length as a rough signup count.

        Never raises for HTTP or parsing problems; those come back as a
        failed CountResult.

        Returns:
            CountResult
        """
        client = await self._get_client()

        try:
            response = await client.get(self.subscribers_url, params={"limit": 1})
        except httpx.HTTPError as e:
            return CountResult.failure(f"request failed: {str(e) or type(e).__name__}")

        if not response.is_success:
            return CountResult.failure(f"status {response.status_code}")

        try:
            data = response.json() if response.content else []
        except ValueError as e:
            return CountResult.failure(f"invalid JSON: {e}")

        if not isinstance(data, list):
            return CountResult.failure(f"expected a list, got {type(data).__name__}")

        return CountResult.success(len(data))

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
