"""Outbound notification sinks."""

from .pagerduty import DEFAULT_CLIENT_NAME, DEFAULT_EVENTS_URL, PagerDutyClient
from .slack import SlackClient, from_slack_payload, to_slack_payload

__all__ = [
    # Slack
    "SlackClient",
    "to_slack_payload",
    "from_slack_payload",
    # PagerDuty
    "PagerDutyClient",
    "DEFAULT_EVENTS_URL",
    "DEFAULT_CLIENT_NAME",
]
