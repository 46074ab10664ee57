"""User notifications and gazette announcements.

Both collaborators are best effort: transport failures are logged and never
reach the pipeline.
"""

from typing import Optional, Protocol

import httpx

from gazette_ingest.core.config import NotificationSettings, settings
from gazette_ingest.database.models import User
from gazette_ingest.schemas.pipeline import ProcessStatus
from gazette_ingest.utils.logging import get_logger

LOGGER = get_logger(__name__)

SUBJECTS = {
    ProcessStatus.SUCCESS: "Your gazette has been processed",
    ProcessStatus.WARNING: "Your gazette was processed with warnings",
    ProcessStatus.ERROR: "Your gazette could not be processed",
}


class Notifier(Protocol):
    async def notify(self, user: Optional[User], document_link: str, status: ProcessStatus) -> None:
        ...


class GazetteAnnouncer(Protocol):
    async def announce(self, publication_number: str, gazette_link: str) -> None:
        ...


class NullNotifier:
    """Used when no notification channel is configured."""

    async def notify(self, user: Optional[User], document_link: str, status: ProcessStatus) -> None:
        LOGGER.debug(f"Notification ({status.value}) not sent, no channel configured: {document_link}")


class NullAnnouncer:
    async def announce(self, publication_number: str, gazette_link: str) -> None:
        LOGGER.debug(f"Announcement for gazette {publication_number} not sent, no webhook configured")


class MailRelayNotifier:
    """Sends the processing-complete email through an HTTP mail relay."""

    def __init__(self, relay_url: str, token: str = "", timeout: float = 30.0):
        self.relay_url = relay_url
        self.token = token
        self.timeout = timeout

    async def notify(self, user: Optional[User], document_link: str, status: ProcessStatus) -> None:
        if user is None or not user.email:
            LOGGER.info(f"No recipient for {status.value} notification: {document_link}")
            return
        if not user.notifications_enabled:
            LOGGER.info(f"User {user.id} has notifications disabled, skipping {status.value} notification")
            return

        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        message = {
            "to": user.email,
            "name": user.full_name,
            "subject": SUBJECTS[status],
            "template": "document_processing_complete",
            "variables": {"document_link": document_link, "status": status.value},
        }
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.relay_url, json=message, headers=headers, timeout=self.timeout
                )
                response.raise_for_status()
            LOGGER.info(
                f"Sent {status.value} notification to user {user.id}",
                extra={"document_link": document_link},
            )
        except httpx.HTTPError as e:
            LOGGER.error(
                f"Failed to send {status.value} notification to user {user.id}: {e}",
                extra={"document_link": document_link},
            )


class WebhookAnnouncer:
    """Posts a chat message (Discord webhook format) when a gazette has been sliced."""

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def announce(self, publication_number: str, gazette_link: str) -> None:
        content = f"New gazette sliced! [{publication_number}]({gazette_link}) :scroll:"
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.webhook_url, json={"content": content}, timeout=self.timeout
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            LOGGER.error(f"Failed to announce gazette {publication_number}: {e}")


def build_notifier(config: Optional[NotificationSettings] = None) -> Notifier:
    config = config or settings.notifications
    if config.mail_relay_url:
        return MailRelayNotifier(config.mail_relay_url, config.mail_relay_token, timeout=settings.http_timeout)
    return NullNotifier()


def build_announcer(config: Optional[NotificationSettings] = None) -> GazetteAnnouncer:
    config = config or settings.notifications
    if config.announce_webhook_url:
        return WebhookAnnouncer(config.announce_webhook_url)
    return NullAnnouncer()
