"""PagerDuty generic events API client."""

from typing import Any

import httpx
import structlog

from event_notifier.errors import SinkError
from event_notifier.messages import Incident
from event_notifier.metrics import NOTIFICATIONS

log = structlog.get_logger()

DEFAULT_EVENTS_URL = "https://events.pagerduty.com/generic/2010-04-15/create_event.json"
DEFAULT_CLIENT_NAME = "AWS Event Processor"


class PagerDutyClient:
    """Triggers incidents on a PagerDuty service via its integration key."""

    def __init__(
        self,
        service_key: str,
        events_url: str = DEFAULT_EVENTS_URL,
        client_name: str = DEFAULT_CLIENT_NAME,
    ):
        self.service_key = service_key
        self.events_url = events_url
        self.client_name = client_name

    def build_request(self, incident: Incident) -> dict[str, Any]:
        return {
            "service_key": self.service_key,
            "event_type": "trigger",
            "description": incident.description,
            "incident_key": incident.incident_key,
            "client": self.client_name,
            "details": {"fields": dict(incident.fields)},
        }

    def trigger_incident(self, incident: Incident) -> None:
        """Trigger (or re-trigger) the incident identified by its key.

        Raises:
            SinkError: If the request fails or PagerDuty rejects it
        """
        log.info("Triggering PagerDuty incident", incident_key=incident.incident_key)

        try:
            response = httpx.post(self.events_url, json=self.build_request(incident))
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            NOTIFICATIONS.labels(sink="pagerduty", status="error").inc()
            log.error("PagerDuty API error", status=e.response.status_code)
            raise SinkError(
                f"failed to trigger PagerDuty incident - got status {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            NOTIFICATIONS.labels(sink="pagerduty", status="error").inc()
            log.error("PagerDuty request failed", error=str(e))
            raise SinkError(f"failed to trigger PagerDuty incident - got error: {e}") from e

        NOTIFICATIONS.labels(sink="pagerduty", status="success").inc()
        log.info("PagerDuty incident triggered", incident_key=incident.incident_key)
