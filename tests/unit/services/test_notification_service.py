import httpx
import pytest
from unittest.mock import MagicMock, patch

from gazette_ingest.core.config import settings
from gazette_ingest.database.models import User
from gazette_ingest.schemas.pipeline import ProcessStatus
from gazette_ingest.services.notification_service import (
    MailRelayNotifier,
    NullAnnouncer,
    NullNotifier,
    WebhookAnnouncer,
    build_announcer,
    build_notifier,
)

LINK = "https://gazettes.test/admin/gazettes/45"


@pytest.fixture
def notifier():
    return MailRelayNotifier("https://relay.test/send", token="relay-token", timeout=5)


@pytest.fixture
def user():
    return User(id=3, email="clerk@example.com", full_name="Clerk", notifications_enabled=True)


@pytest.mark.asyncio
async def test_mail_relay_posts_message(notifier, user):
    with patch("httpx.AsyncClient.post") as mock_post:
        mock_post.return_value = MagicMock(status_code=202)

        await notifier.notify(user, LINK, ProcessStatus.WARNING)

        mock_post.assert_called_once()
        args, kwargs = mock_post.call_args
        assert args[0] == "https://relay.test/send"
        assert kwargs["headers"] == {"Authorization": "Bearer relay-token"}
        assert kwargs["json"]["to"] == "clerk@example.com"
        assert kwargs["json"]["subject"] == "Your gazette was processed with warnings"
        assert kwargs["json"]["variables"] == {"document_link": LINK, "status": "warning"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "recipient",
    [
        None,
        User(id=4, email="", notifications_enabled=True),
        User(id=5, email="muted@example.com", notifications_enabled=False),
    ],
)
async def test_mail_relay_skips_unreachable_users(notifier, recipient):
    with patch("httpx.AsyncClient.post") as mock_post:
        await notifier.notify(recipient, LINK, ProcessStatus.SUCCESS)

        mock_post.assert_not_called()


@pytest.mark.asyncio
async def test_mail_relay_errors_are_swallowed(notifier, user):
    with patch("httpx.AsyncClient.post") as mock_post:
        mock_post.side_effect = httpx.ConnectError("relay down")

        await notifier.notify(user, LINK, ProcessStatus.ERROR)

        mock_post.assert_called_once()


@pytest.mark.asyncio
async def test_webhook_announcer_message():
    announcer = WebhookAnnouncer("https://chat.test/webhook")
    with patch("httpx.AsyncClient.post") as mock_post:
        mock_post.return_value = MagicMock(status_code=204)

        await announcer.announce("45", LINK)

        _, kwargs = mock_post.call_args
        assert kwargs["json"] == {"content": f"New gazette sliced! [45]({LINK}) :scroll:"}


@pytest.mark.asyncio
async def test_webhook_announcer_errors_are_swallowed():
    announcer = WebhookAnnouncer("https://chat.test/webhook")
    with patch("httpx.AsyncClient.post") as mock_post:
        mock_post.side_effect = httpx.ReadTimeout("slow")

        await announcer.announce("45", LINK)


def test_builders_fall_back_to_null_implementations():
    config = settings.notifications.model_copy(update={"mail_relay_url": "", "announce_webhook_url": ""})

    assert isinstance(build_notifier(config), NullNotifier)
    assert isinstance(build_announcer(config), NullAnnouncer)


def test_builders_use_configured_endpoints():
    config = settings.notifications.model_copy(
        update={"mail_relay_url": "https://relay.test/send", "announce_webhook_url": "https://chat.test/webhook"}
    )

    notifier = build_notifier(config)
    announcer = build_announcer(config)

    assert isinstance(notifier, MailRelayNotifier)
    assert notifier.relay_url == "https://relay.test/send"
    assert isinstance(announcer, WebhookAnnouncer)
