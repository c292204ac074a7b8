"""Event classification and routing."""

from .cloudwatch import CloudwatchEventProcessor, classify_event
from .dispatcher import EventRouter, detect_envelope
from .sns import SNSRecordProcessor, build_alarm_message, build_incident, classify_subject

__all__ = [
    # Dispatcher
    "EventRouter",
    "detect_envelope",
    # SNS
    "SNSRecordProcessor",
    "classify_subject",
    "build_alarm_message",
    "build_incident",
    # CloudWatch Events
    "CloudwatchEventProcessor",
    "classify_event",
]
