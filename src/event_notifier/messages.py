"""Sink-agnostic notification and incident types, plus shared builders."""

from dataclasses import dataclass, field

# Severity colors
COLOR_INFO = "#00BFFF"  # Deep Sky Blue
COLOR_SUCCESS = "#00FF00"  # Lime
COLOR_WARN = "#FFD700"  # Gold
COLOR_ERROR = "#DC143C"  # Crimson

EVENT_FIELD_LABEL = "CloudWatch Event"


@dataclass(frozen=True)
class MessageField:
    """One labelled value in a notification."""

    label: str
    value: str
    short: bool = False  # Layout hint: render side by side with other short fields


@dataclass
class NotificationMessage:
    """A chat notification: title, severity color and ordered fields."""

    title: str
    color: str
    fields: list[MessageField] = field(default_factory=list)


@dataclass
class Incident:
    """A paging incident keyed for deduplication."""

    description: str
    incident_key: str
    fields: dict[str, str] = field(default_factory=dict)


def wide(label: str, value: str) -> MessageField:
    return MessageField(label, value, short=False)


def narrow(label: str, value: str) -> MessageField:
    return MessageField(label, value, short=True)


def event_message(title: str, color: str, *fields: MessageField) -> NotificationMessage:
    """Build a CloudWatch Event notification headed by a wide title field."""
    return NotificationMessage(
        title=title,
        color=color,
        fields=[wide(EVENT_FIELD_LABEL, title), *fields],
    )


def plain_message(subject: str, text: str) -> NotificationMessage:
    """Build an informational notification pairing a subject with its raw text."""
    return NotificationMessage(
        title=text,
        color=COLOR_INFO,
        fields=[wide(subject, text)],
    )
