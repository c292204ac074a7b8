"""Slack incoming-webhook client."""

from typing import Any

import httpx
import structlog

from event_notifier.errors import SinkError
from event_notifier.messages import MessageField, NotificationMessage
from event_notifier.metrics import NOTIFICATIONS

log = structlog.get_logger()


def to_slack_payload(message: NotificationMessage) -> dict[str, Any]:
    """Serialize a notification as a single-attachment Slack message."""
    return {
        "attachments": [
            {
                "fallback": message.title,
                "color": message.color,
                "fields": [
                    {"title": f.label, "value": f.value, "short": f.short}
                    for f in message.fields
                ],
            }
        ]
    }


def from_slack_payload(payload: dict[str, Any]) -> NotificationMessage:
    """Rebuild a notification from the wire format produced by to_slack_payload."""
    attachment = payload["attachments"][0]
    return NotificationMessage(
        title=attachment["fallback"],
        color=attachment["color"],
        fields=[
            MessageField(f["title"], f["value"], short=f["short"])
            for f in attachment["fields"]
        ],
    )


class SlackClient:
    """Simple Slack webhook client."""

    def __init__(self, webhook_url: str):
        self.webhook_url = webhook_url

    def send_message(self, message: NotificationMessage) -> None:
        """Post a notification to the webhook.

        Args:
            message: The notification to send

        Raises:
            SinkError: If the request fails or Slack rejects it
        """
        log.info("Sending Slack message", title=message.title)

        try:
            response = httpx.post(self.webhook_url, json=to_slack_payload(message))
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            NOTIFICATIONS.labels(sink="slack", status="error").inc()
            log.error("Slack API error", status=e.response.status_code)
            raise SinkError(
                f"failed to send Slack message - got status {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            NOTIFICATIONS.labels(sink="slack", status="error").inc()
            log.error("Slack request failed", error=str(e))
            raise SinkError(f"failed to send Slack message - got error: {e}") from e

        NOTIFICATIONS.labels(sink="slack", status="success").inc()
        log.info("Slack message sent")
