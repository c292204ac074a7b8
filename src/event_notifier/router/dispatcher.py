"""Top-level dispatch of raw payloads to the SNS or CloudWatch Event processor."""

import json
import time

import structlog
from pydantic import ValidationError

from event_notifier.errors import MalformedPayload, RoutingError, UnsupportedShape
from event_notifier.metrics import ERRORS, EVENTS, ROUTE_DURATION
from event_notifier.models import GenericEnvelope
from event_notifier.notifiers import PagerDutyClient, SlackClient

from .cloudwatch import CloudwatchEventProcessor
from .sns import SNS_EVENT_SOURCE, SNSRecordProcessor

log = structlog.get_logger()


def detect_envelope(raw: bytes | str) -> GenericEnvelope:
    """Decode just enough of a payload to decide which processor applies.

    Raises:
        MalformedPayload: If the payload is not valid JSON
        UnsupportedShape: If the payload is valid JSON but not an object
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedPayload(f"unsupported payload: {e}") from e

    if not isinstance(data, dict):
        raise UnsupportedShape(
            f"unsupported payload: expected a JSON object, got {type(data).__name__}"
        )

    try:
        return GenericEnvelope.model_validate(data)
    except ValidationError as e:
        raise MalformedPayload(f"unsupported payload: {e}") from e


class EventRouter:
    """Routes one payload per call to Slack and PagerDuty."""

    def __init__(self, slack: SlackClient, pagerduty: PagerDutyClient):
        self.sns = SNSRecordProcessor(slack, pagerduty)
        self.cloudwatch = CloudwatchEventProcessor(slack)

    def route(self, raw: bytes | str) -> None:
        """Classify a raw payload and deliver its notifications.

        SNS deliveries go to the SNS processor; anything without records is
        treated as a CloudWatch Event. Records from other event sources are
        dropped.

        Raises:
            RoutingError: On the first failure; nothing after it is attempted
        """
        start = time.monotonic()
        try:
            self._route(raw)
        except RoutingError as e:
            ERRORS.labels(error_type=type(e).__name__).inc()
            raise
        finally:
            ROUTE_DURATION.observe(time.monotonic() - start)

    def _route(self, raw: bytes | str) -> None:
        envelope = detect_envelope(raw)

        records = envelope.records or []
        if records:
            event_source = records[0].get("EventSource")
            if event_source == SNS_EVENT_SOURCE:
                EVENTS.labels(path="sns").inc()
                self.sns.process_records(raw)
            else:
                EVENTS.labels(path="dropped").inc()
                log.info("No SNS records to process", event_source=event_source)
            return

        if not envelope.looks_like_event:
            raise UnsupportedShape(
                "unsupported payload: neither SNS records nor a CloudWatch event"
            )

        EVENTS.labels(path="cloudwatch").inc()
        self.cloudwatch.process_event(raw)
