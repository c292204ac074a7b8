"""AWS Lambda entry point.

Configure the function handler as ``event_notifier.handler.lambda_handler`` and
set SLACK_WEBHOOK_URL and PAGERDUTY_SERVICE_KEY in the function environment.
"""

import json
from typing import Any

import structlog

from event_notifier.config import Config
from event_notifier.errors import EventNotifierError
from event_notifier.logging import configure_logging, invocation_context
from event_notifier.notifiers import PagerDutyClient, SlackClient
from event_notifier.router import EventRouter

log = structlog.get_logger()


def build_router(config: Config) -> EventRouter:
    """Create a router wired to the configured Slack and PagerDuty sinks."""
    slack = SlackClient(config.slack_webhook_url)
    pagerduty = PagerDutyClient(
        config.pagerduty.service_key,
        events_url=config.pagerduty.events_url,
        client_name=config.pagerduty.client_name,
    )
    return EventRouter(slack, pagerduty)


def handle_payload(raw: bytes | str, request_id: str | None = None) -> None:
    """Route one raw payload using configuration from the environment.

    Configuration is read on every call, so a missing secret fails the
    invocation before anything is sent.
    """
    config = Config.from_env()
    configure_logging(level=config.log_level)

    with invocation_context(request_id):
        log.info("Receiving new event(s)")
        try:
            build_router(config).route(raw)
        except EventNotifierError as e:
            log.error("Event routing failed", error=str(e), error_type=type(e).__name__)
            raise


def lambda_handler(event: Any, context: Any) -> None:
    """Lambda handler; the runtime has already decoded the payload JSON."""
    handle_payload(
        json.dumps(event).encode("utf-8"),
        request_id=getattr(context, "aws_request_id", None),
    )
