"""Route AWS event payloads to Slack and PagerDuty."""

__version__ = "0.1.0"
