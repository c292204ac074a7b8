"""SNS record classification.

An SNS delivery carries one or more records. Each record is classified by its
subject line, first match wins:

    "ALARM:" / "OK:"            CloudWatch alarm (Message is JSON)
    "RDS Notification Message"  RDS event notification (plain text for now)
    anything else               plain message

Failing alarms are additionally paged. A batch stops at the first record that
fails; records already delivered are not rolled back.
"""

from collections.abc import Callable

import structlog
from pydantic import ValidationError

from event_notifier.errors import DecodeError, RoutingError, with_prefix
from event_notifier.messages import (
    COLOR_ERROR,
    COLOR_SUCCESS,
    Incident,
    NotificationMessage,
    narrow,
    plain_message,
    wide,
)
from event_notifier.models import CloudwatchAlarm, SNSRecord, SNSRecordList
from event_notifier.notifiers import PagerDutyClient, SlackClient

log = structlog.get_logger()

SNS_EVENT_SOURCE = "aws:sns"

ALARM_MARKER = "ALARM:"
OK_MARKER = "OK:"
RDS_MARKER = "RDS Notification Message"

INCIDENT_KEY_PREFIX = "incident"


def is_alarm_subject(subject: str) -> bool:
    return ALARM_MARKER in subject or OK_MARKER in subject


def is_rds_notification(subject: str) -> bool:
    return RDS_MARKER in subject


def _any_subject(subject: str) -> bool:
    return True


# Ordered (kind, predicate) rules; the first matching predicate wins
SUBJECT_RULES: list[tuple[str, Callable[[str], bool]]] = [
    ("alarm", is_alarm_subject),
    ("rds_notification", is_rds_notification),
    ("plain", _any_subject),
]


def classify_subject(subject: str) -> str:
    """Return the kind of SNS record a subject line denotes."""
    for kind, predicate in SUBJECT_RULES:
        if predicate(subject):
            return kind
    raise AssertionError("SUBJECT_RULES must end with a catch-all")


def build_alarm_message(subject: str, alarm: CloudwatchAlarm, failing: bool) -> NotificationMessage:
    """Build the Slack notification for a CloudWatch alarm state change."""
    trigger = alarm.trigger
    fields = [wide(subject, alarm.new_state_reason)]
    fields.extend(narrow(d.name, d.value) for d in trigger.dimensions)
    fields.append(narrow("Namespace", trigger.namespace))
    fields.append(narrow("MetricName", trigger.metric_name))

    return NotificationMessage(
        title=alarm.new_state_reason,
        color=COLOR_ERROR if failing else COLOR_SUCCESS,
        fields=fields,
    )


def build_incident(subject: str, alarm: CloudwatchAlarm) -> Incident:
    """Build the PagerDuty incident for a failing alarm.

    The key is derived from dimension values only, so alarms on the same
    resource share one open incident.
    """
    dimensions = alarm.trigger.dimensions
    return Incident(
        description=f"{subject}-{alarm.new_state_reason}",
        incident_key=INCIDENT_KEY_PREFIX + "".join(d.value for d in dimensions),
        fields={d.name: d.value for d in dimensions},
    )


def decode_alarm(message: str) -> CloudwatchAlarm:
    try:
        return CloudwatchAlarm.model_validate_json(message)
    except ValidationError as e:
        raise DecodeError(f"could not decode CloudWatch alarm payload: {e}") from e


class SNSRecordProcessor:
    """Processes a batch of SNS records, fail-fast."""

    def __init__(self, slack: SlackClient, pagerduty: PagerDutyClient):
        self.slack = slack
        self.pagerduty = pagerduty
        self._handlers: dict[str, Callable[[SNSRecord], None]] = {
            "alarm": self.handle_alarm,
            "rds_notification": self.handle_rds_notification,
            "plain": self.handle_plain_message,
        }

    def process_records(self, raw: bytes | str) -> None:
        """Decode an SNS delivery and process every record in order.

        Raises:
            DecodeError: If the record list, or a record's alarm payload, is malformed
            SinkError: If a notification could not be delivered
        """
        try:
            record_list = SNSRecordList.model_validate_json(raw)
        except ValidationError as e:
            raise DecodeError(f"could not decode SNS record list: {e}") from e

        log.info("Processing SNS records", count=len(record_list.records))
        for record in record_list.records:
            try:
                self.process_record(record)
            except RoutingError as e:
                raise with_prefix(e, "could not process SNS record: ") from e

    def process_record(self, record: SNSRecord) -> None:
        subject = record.sns.subject
        kind = classify_subject(subject)
        log.debug("Classified SNS record", subject=subject, kind=kind)
        self._handlers[kind](record)

    def handle_alarm(self, record: SNSRecord) -> None:
        subject = record.sns.subject
        failing = ALARM_MARKER in subject
        alarm = decode_alarm(record.sns.message)

        log.info(
            "CloudWatch alarm",
            alarm=alarm.alarm_name,
            subject=subject,
            failing=failing,
        )
        self.slack.send_message(build_alarm_message(subject, alarm, failing))

        if failing:
            self.pagerduty.trigger_incident(build_incident(subject, alarm))

    def handle_rds_notification(self, record: SNSRecord) -> None:
        # Structure of RDS notifications not yet mapped; forwarded as plain text
        self.slack.send_message(plain_message(record.sns.subject, record.sns.message))

    def handle_plain_message(self, record: SNSRecord) -> None:
        self.slack.send_message(plain_message(record.sns.subject, record.sns.message))
