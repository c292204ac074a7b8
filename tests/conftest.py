"""Shared fixtures and payload builders."""

import json
from typing import Any
from unittest.mock import MagicMock

import pytest

from event_notifier.notifiers import PagerDutyClient, SlackClient


def alarm_json(
    dimensions: list[dict[str, str]] | None = None,
    reason: str = "Threshold Crossed: 1 datapoint (10.0) was greater than or equal to 1.0.",
) -> str:
    """A CloudWatch alarm as SNS delivers it: JSON encoded inside Message."""
    return json.dumps(
        {
            "AlarmName": "db-cpu-high",
            "AlarmDescription": "Database CPU",
            "AWSAccountId": "000000000000",
            "NewStateValue": "ALARM",
            "NewStateReason": reason,
            "StateChangeTime": "2017-01-12T16:30:42.236+0000",
            "Region": "EU - Ireland",
            "OldStateValue": "OK",
            "Trigger": {
                "MetricName": "CPUUtilization",
                "Namespace": "AWS/RDS",
                "Statistic": "AVERAGE",
                "Unit": None,
                "Dimensions": dimensions or [],
                "Period": 300,
                "EvaluationPeriods": 1,
                "ComparisonOperator": "GreaterThanOrEqualToThreshold",
                "Threshold": 1.0,
            },
        }
    )


def sns_record(subject: str, message: str, event_source: str = "aws:sns") -> dict[str, Any]:
    return {
        "EventVersion": "1.0",
        "EventSubscriptionArn": "arn:aws:sns:us-east-1:000000000000:alerts:1234",
        "EventSource": event_source,
        "Sns": {
            "SignatureVersion": "1",
            "Timestamp": "1970-01-01T00:00:00.000Z",
            "Signature": "EXAMPLE",
            "SigningCertUrl": "EXAMPLE",
            "MessageId": "95df01b4-ee98-5cb9-9903-4c221d41eb5e",
            "Message": message,
            "MessageAttributes": {"Test": {"Type": "String", "Value": "TestString"}},
            "Type": "Notification",
            "UnsubscribeUrl": "EXAMPLE",
            "TopicArn": "arn:aws:sns:us-east-1:000000000000:alerts",
            "Subject": subject,
        },
    }


def sns_payload(*records: dict[str, Any]) -> bytes:
    return json.dumps({"Records": list(records)}).encode()


def cloudwatch_event(source: str, detail_type: str, detail: Any) -> bytes:
    return json.dumps(
        {
            "id": "7bf73129-1428-4cd3-a780-95db273d1602",
            "detail-type": detail_type,
            "source": source,
            "account": "123456789012",
            "time": "2015-11-11T21:29:54Z",
            "region": "us-east-1",
            "resources": ["arn:aws:ec2:us-east-1:123456789012:instance/i-abcd1111"],
            "detail": detail,
        }
    ).encode()


@pytest.fixture
def slack() -> MagicMock:
    return MagicMock(spec=SlackClient)


@pytest.fixture
def pagerduty() -> MagicMock:
    return MagicMock(spec=PagerDutyClient)


@pytest.fixture
def secrets_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SLACK_WEBHOOK_URL", "https://hooks.slack.test/services/T000/B000/XXX")
    monkeypatch.setenv("PAGERDUTY_SERVICE_KEY", "pd-service-key")
    for name in ("PAGERDUTY_EVENTS_URL", "PAGERDUTY_CLIENT", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
