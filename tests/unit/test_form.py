"""
Tests for the subscription form state machine.
"""

import asyncio

import httpx
import pytest

from comingsoon.subscription import (
    InvalidEmailError,
    StatusType,
    SubscriptionStatus,
    is_valid_email,
    validate_email,
)
from comingsoon.subscription.form import (
    INVALID_EMAIL_MESSAGE,
    SUBMITTING_MESSAGE,
    SUCCESS_MESSAGE,
)


class TestEmailValidation:
    """Tests for the loose client-side email check."""

    @pytest.mark.parametrize("email", [
        "user@example.com",
        "first.last+tag@sub.example.co.uk",
        "a@b.c",
    ])
    def test_accepts(self, email):
        assert is_valid_email(email) is True
        assert validate_email(email) == email

    @pytest.mark.parametrize("email", [
        "bad-email",
        "user@",
        "@example.com",
        "user example.com",
        "user@example",
        "user@@example.com",
        "user@exa mple.com",
        "user@example.com\n",
        "",
    ])
    def test_rejects(self, email):
        assert is_valid_email(email) is False
        with pytest.raises(InvalidEmailError, match="valid email"):
            validate_email(email)


class TestSubscriptionStatus:
    """Tests for the status value."""

    def test_starts_idle(self):
        status = SubscriptionStatus()
        assert status.type is StatusType.IDLE
        assert status.message == ""

    def test_loading_default_message(self):
        assert SubscriptionStatus.loading() == SubscriptionStatus(StatusType.LOADING, SUBMITTING_MESSAGE)
        assert SubscriptionStatus.loading().is_loading

    def test_type_values(self):
        assert [t.value for t in StatusType] == ["idle", "loading", "success", "error"]


class TestSubmit:
    """Tests for the submission flow."""

    @pytest.mark.asyncio
    async def test_invalid_email_skips_network(self, form, backend):
        form.email = "bad-email"

        status = await form.submit()

        assert status == SubscriptionStatus.error(INVALID_EMAIL_MESSAGE)
        assert form.status == status
        assert backend.requests == []
        assert form.email == "bad-email"

    @pytest.mark.asyncio
    async def test_passes_through_loading(self, form):
        form.email = "bad-email"

        await form.submit()

        statuses = [s.type for s in form.changes]
        assert statuses[-2:] == [StatusType.LOADING, StatusType.ERROR]
        assert SubscriptionStatus.loading() in form.changes

    @pytest.mark.asyncio
    async def test_success_clears_email(self, form, backend):
        backend.subscribe_response = httpx.Response(200, json={"ok": True})
        form.email = "user@example.com"

        status = await form.submit()

        assert status == SubscriptionStatus(StatusType.SUCCESS, SUCCESS_MESSAGE)
        assert form.email == ""
        assert backend.posted_json() == {"email": "user@example.com", "source": "coming-soon"}

    @pytest.mark.asyncio
    async def test_rejected_with_detail(self, form, backend):
        backend.subscribe_response = httpx.Response(400, json={"detail": "already subscribed"})
        form.email = "user@example.com"

        await form.submit()

        assert form.status == SubscriptionStatus.error("already subscribed")
        assert form.email == "user@example.com"

    @pytest.mark.asyncio
    async def test_rejected_with_unparsable_body(self, form, backend):
        backend.subscribe_response = httpx.Response(400, text="not json")
        form.email = "user@example.com"

        await form.submit()

        assert form.status == SubscriptionStatus.error("Unknown error")

    @pytest.mark.asyncio
    async def test_transport_error(self, form, backend):
        backend.subscribe_response = httpx.ConnectError("Connection refused")
        form.email = "user@example.com"

        await form.submit()

        assert form.status.type is StatusType.ERROR
        assert form.status.message == "Connection refused"

    @pytest.mark.asyncio
    async def test_resubmit_after_error(self, form, backend):
        backend.subscribe_response = httpx.Response(500, json={"detail": "try again"})
        form.email = "user@example.com"
        await form.submit()
        assert form.status.type is StatusType.ERROR

        backend.subscribe_response = httpx.Response(201)
        form.changes.clear()
        await form.submit()

        assert form.changes[0] == SubscriptionStatus.loading()
        assert form.status.type is StatusType.SUCCESS
        assert len(backend.posts()) == 2

    @pytest.mark.asyncio
    async def test_resubmit_after_success(self, form, backend):
        form.email = "user@example.com"
        await form.submit()
        form.email = "other@example.com"
        form.changes.clear()

        await form.submit()

        assert form.changes[0] == SubscriptionStatus.loading()
        assert backend.posted_json()["email"] == "other@example.com"

    @pytest.mark.asyncio
    async def test_button_disabled_while_loading(self, form, backend):
        gate = asyncio.Event()
        original = form.client.subscribe

        async def slow_subscribe(email):
            await gate.wait()
            await original(email)

        form.client.subscribe = slow_subscribe
        form.email = "user@example.com"

        task = asyncio.create_task(form.submit())
        await asyncio.sleep(0)

        assert form.status.is_loading
        assert form.submit_enabled is False
        assert form.button_label == "Joining…"

        gate.set()
        await task

        assert form.submit_enabled is True
        assert form.button_label == "Notify me"

    @pytest.mark.asyncio
    async def test_result_dropped_after_detach(self, form, backend):
        gate = asyncio.Event()
        original = form.client.subscribe

        async def slow_subscribe(email):
            await gate.wait()
            await original(email)

        form.client.subscribe = slow_subscribe
        form.email = "user@example.com"

        task = asyncio.create_task(form.submit())
        await asyncio.sleep(0)
        form.detach()
        changes_before = len(form.changes)
        gate.set()
        outcome = await task

        assert outcome.type is StatusType.SUCCESS
        assert len(form.changes) == changes_before
        assert form.status.type is StatusType.IDLE
        assert form.submit_enabled
        assert form.email == "user@example.com"


class TestSubscriberCount:
    """Tests for the best-effort subscriber badge."""

    def test_placeholder_by_default(self, form):
        assert form.subscriber_count is None
        assert form.badge_text == "Growing"

    @pytest.mark.asyncio
    async def test_count_from_list(self, form, backend):
        backend.subscribers_response = httpx.Response(200, json=["a", "b", "c"])

        await form.load_subscriber_count()

        assert form.badge_text == "+3"
        assert form.changes

    @pytest.mark.asyncio
    async def test_empty_list_shows_zero(self, form, backend):
        backend.subscribers_response = httpx.Response(200, json=[])

        await form.load_subscriber_count()

        assert form.badge_text == "+0"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(500, json=["a"]),
        httpx.Response(200, text="{broken"),
        httpx.Response(200, json={"count": 3}),
        httpx.ConnectError("Connection refused"),
    ])
    async def test_failures_keep_placeholder(self, form, backend, response):
        backend.subscribers_response = response

        await form.load_subscriber_count()

        assert form.badge_text == "Growing"
        assert form.changes == []
        assert form.status.type is StatusType.IDLE

    @pytest.mark.asyncio
    async def test_ignored_after_detach(self, form, backend):
        backend.subscribers_response = httpx.Response(200, json=["a"])
        form.detach()

        await form.load_subscriber_count()

        assert form.badge_text == "Growing"

    @pytest.mark.asyncio
    async def test_single_request(self, form, backend):
        backend.subscribers_response = httpx.ConnectError("down")

        await form.load_subscriber_count()

        assert len(backend.requests) == 1
