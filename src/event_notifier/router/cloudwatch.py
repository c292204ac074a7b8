"""CloudWatch Event classification.

Events are dispatched on ``source`` and then ``detail-type``; each supported
combination decodes its ``detail`` block into a typed model. Unrecognised
sources fall back to a generic notification carrying the raw detail JSON.
None of these events page.
"""

import json
from collections.abc import Callable
from typing import TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from event_notifier.errors import DecodeError, RoutingError, with_prefix
from event_notifier.messages import (
    COLOR_INFO,
    COLOR_WARN,
    EVENT_FIELD_LABEL,
    NotificationMessage,
    event_message,
    narrow,
    wide,
)
from event_notifier.models import (
    CloudwatchEvent,
    EC2StateChangeDetail,
    InstanceActivityDetail,
    LifecycleActionDetail,
)
from event_notifier.notifiers import SlackClient

log = structlog.get_logger()

SOURCE_EC2 = "aws.ec2"
SOURCE_SCHEDULED = "aws.events"
SOURCE_AUTOSCALING = "aws.autoscaling"

EC2_STATE_CHANGE = "EC2 Instance State-change Notification"
EC2_STOPPING_STATES = frozenset({"shutting-down", "terminated", "stopping", "stopped"})

AUTOSCALING_LIFECYCLE_ACTIONS = frozenset(
    {
        "EC2 Instance-launch Lifecycle Action",
        "EC2 Instance-terminate Lifecycle Action",
    }
)
AUTOSCALING_FAILURES = frozenset(
    {
        "EC2 Instance Launch Unsuccessful",
        "EC2 Instance Terminate Unsuccessful",
    }
)

# Ordered (kind, predicate) rules; the first matching predicate wins
EVENT_RULES: list[tuple[str, Callable[[CloudwatchEvent], bool]]] = [
    (
        "ec2_state_change",
        lambda e: e.source == SOURCE_EC2 and e.detail_type == EC2_STATE_CHANGE,
    ),
    ("ec2_other", lambda e: e.source == SOURCE_EC2),
    ("scheduled", lambda e: e.source == SOURCE_SCHEDULED),
    (
        "autoscaling_lifecycle",
        lambda e: e.source == SOURCE_AUTOSCALING
        and e.detail_type in AUTOSCALING_LIFECYCLE_ACTIONS,
    ),
    ("autoscaling_activity", lambda e: e.source == SOURCE_AUTOSCALING),
    ("generic", lambda e: True),
]

_ERROR_PREFIXES = {
    "ec2_state_change": "failed to process EC2 event: ",
    "autoscaling_lifecycle": "failed to process Autoscaling event: ",
    "autoscaling_activity": "failed to process Autoscaling event: ",
}

DetailT = TypeVar("DetailT", bound=BaseModel)


def classify_event(event: CloudwatchEvent) -> str:
    """Return the kind of CloudWatch Event, by source then detail-type."""
    for kind, predicate in EVENT_RULES:
        if predicate(event):
            return kind
    raise AssertionError("EVENT_RULES must end with a catch-all")


def decode_detail(event: CloudwatchEvent, model: type[DetailT]) -> DetailT:
    if event.detail is None:
        raise DecodeError(f"unsupported {event.detail_type!r} event detail: detail is missing")
    try:
        return model.model_validate(event.detail)
    except ValidationError as e:
        raise DecodeError(f"unsupported {event.detail_type!r} event detail: {e}") from e


def build_ec2_state_message(detail: EC2StateChangeDetail) -> NotificationMessage:
    color = COLOR_WARN if detail.state in EC2_STOPPING_STATES else COLOR_INFO
    return event_message(
        "EC2 Instance State-change",
        color,
        narrow("instance-id", detail.instance_id),
        narrow("state", detail.state),
    )


def build_lifecycle_message(detail: LifecycleActionDetail) -> NotificationMessage:
    return event_message(
        "Autoscaling - Lifecycle Action",
        COLOR_INFO,
        narrow("AutoScalingGroupName", detail.auto_scaling_group_name),
        narrow("EC2InstanceId", detail.ec2_instance_id),
        narrow("LifecycleTransition", detail.lifecycle_transition),
    )


def build_activity_message(detail_type: str, detail: InstanceActivityDetail) -> NotificationMessage:
    color = COLOR_WARN if detail_type in AUTOSCALING_FAILURES else COLOR_INFO
    return event_message(
        f"Autoscaling - {detail_type}",
        color,
        narrow("EC2InstanceId", detail.ec2_instance_id),
        narrow("StatusCode", detail.status_code),
        narrow("Availability Zone", detail.details.availability_zone),
        narrow("Cause", detail.cause),
    )


def build_generic_message(event: CloudwatchEvent) -> NotificationMessage:
    if event.detail is None:
        detail_text = ""
    else:
        detail_text = json.dumps(event.detail, ensure_ascii=False)
    return NotificationMessage(
        title=event.source,
        color=COLOR_INFO,
        fields=[
            wide(EVENT_FIELD_LABEL, event.source),
            wide("Event Detail JSON", detail_text),
        ],
    )


class CloudwatchEventProcessor:
    """Processes a single CloudWatch Event. Sends to Slack only."""

    def __init__(self, slack: SlackClient):
        self.slack = slack
        self._handlers: dict[str, Callable[[CloudwatchEvent], None]] = {
            "ec2_state_change": self.handle_ec2_state_change,
            "ec2_other": self.ignore,
            "scheduled": self.ignore,
            "autoscaling_lifecycle": self.handle_autoscaling_lifecycle,
            "autoscaling_activity": self.handle_autoscaling_activity,
            "generic": self.handle_generic,
        }

    def process_event(self, raw: bytes | str) -> None:
        """Decode a CloudWatch Event and notify according to its type.

        Raises:
            DecodeError: If the event or its detail block is malformed
            SinkError: If the notification could not be delivered
        """
        try:
            event = CloudwatchEvent.model_validate_json(raw)
        except ValidationError as e:
            raise DecodeError(f"unsupported CloudWatch event payload: {e}") from e

        kind = classify_event(event)
        log.info(
            "Processing CloudWatch event",
            source=event.source,
            detail_type=event.detail_type,
            kind=kind,
        )

        try:
            self._handlers[kind](event)
        except RoutingError as e:
            prefix = _ERROR_PREFIXES.get(kind)
            if prefix is None:
                raise
            raise with_prefix(e, prefix) from e

    def handle_ec2_state_change(self, event: CloudwatchEvent) -> None:
        detail = decode_detail(event, EC2StateChangeDetail)
        self.slack.send_message(build_ec2_state_message(detail))

    def handle_autoscaling_lifecycle(self, event: CloudwatchEvent) -> None:
        detail = decode_detail(event, LifecycleActionDetail)
        self.slack.send_message(build_lifecycle_message(detail))

    def handle_autoscaling_activity(self, event: CloudwatchEvent) -> None:
        detail = decode_detail(event, InstanceActivityDetail)
        self.slack.send_message(build_activity_message(event.detail_type, detail))

    def handle_generic(self, event: CloudwatchEvent) -> None:
        self.slack.send_message(build_generic_message(event))

    def ignore(self, event: CloudwatchEvent) -> None:
        log.info("Ignoring CloudWatch event", source=event.source, detail_type=event.detail_type)
