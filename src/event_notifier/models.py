"""Data models for inbound AWS event payloads.

Two families of payload reach the router:

- SNS deliveries (``{"Records": [{"EventSource": "aws:sns", "Sns": {...}}]}``),
  whose ``Sns.Message`` may itself be a JSON-encoded CloudWatch alarm.
- CloudWatch Events / EventBridge events (``{"id", "detail-type", "source",
  ..., "detail": {...}}``), whose ``detail`` shape depends on source and
  detail-type.

Missing fields fall back to empty values and JSON ``null`` is treated as
missing. A field present with the wrong JSON type fails validation; numeric
fields are strict so that numbers sent as strings are rejected too.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Payload(BaseModel):
    """Base for inbound models: alias-keyed, unknown keys ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        """Treat explicit nulls as absent so field defaults apply."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


# === Envelope detection ===


class GenericEnvelope(_Payload):
    """Permissive view of any payload, used only to pick a classifier."""

    records: list[dict[str, Any]] | None = Field(None, alias="Records")
    id: str | None = None
    detail_type: str | None = Field(None, alias="detail-type")
    source: str | None = None

    @property
    def looks_like_event(self) -> bool:
        """True if any CloudWatch Event discriminator is present."""
        return any(v is not None for v in (self.id, self.detail_type, self.source))


# === SNS delivery ===


class SNSMessageAttribute(_Payload):
    type: str = Field("", alias="Type")
    value: str = Field("", alias="Value")


class SNSMessage(_Payload):
    """The ``Sns`` block of an SNS record."""

    signature_version: str = Field("", alias="SignatureVersion")
    timestamp: str = Field("", alias="Timestamp")
    signature: str = Field("", alias="Signature")
    signing_cert_url: str = Field("", alias="SigningCertUrl")
    message_id: str = Field("", alias="MessageId")
    message: str = Field("", alias="Message")
    message_attributes: dict[str, SNSMessageAttribute] = Field(
        default_factory=dict, alias="MessageAttributes"
    )
    type: str = Field("", alias="Type")
    unsubscribe_url: str = Field("", alias="UnsubscribeUrl")
    topic_arn: str = Field("", alias="TopicArn")
    subject: str = Field("", alias="Subject")


class SNSRecord(_Payload):
    event_version: str = Field("", alias="EventVersion")
    event_subscription_arn: str = Field("", alias="EventSubscriptionArn")
    event_source: str = Field("", alias="EventSource")
    sns: SNSMessage = Field(default_factory=SNSMessage, alias="Sns")


class SNSRecordList(_Payload):
    records: list[SNSRecord] = Field(default_factory=list, alias="Records")


# === CloudWatch alarm (JSON-encoded inside SNSMessage.message) ===


class Dimension(_Payload):
    """A metric dimension, e.g. ``{"name": "DBInstanceIdentifier", "value": "primary"}``."""

    name: str = ""
    value: str = ""


class AlarmTrigger(_Payload):
    metric_name: str = Field("", alias="MetricName")
    namespace: str = Field("", alias="Namespace")
    statistic: str = Field("", alias="Statistic")
    unit: str | None = Field(None, alias="Unit")
    dimensions: list[Dimension] = Field(default_factory=list, alias="Dimensions")
    period: int = Field(0, alias="Period", strict=True)
    evaluation_periods: int = Field(0, alias="EvaluationPeriods", strict=True)
    comparison_operator: str = Field("", alias="ComparisonOperator")
    threshold: float = Field(0.0, alias="Threshold", strict=True)


class CloudwatchAlarm(_Payload):
    alarm_name: str = Field("", alias="AlarmName")
    alarm_description: str = Field("", alias="AlarmDescription")
    aws_account_id: str = Field("", alias="AWSAccountId")
    new_state_value: str = Field("", alias="NewStateValue")
    new_state_reason: str = Field("", alias="NewStateReason")
    state_change_time: str = Field("", alias="StateChangeTime")
    region: str = Field("", alias="Region")
    old_state_value: str = Field("", alias="OldStateValue")
    trigger: AlarmTrigger = Field(default_factory=AlarmTrigger, alias="Trigger")


# === CloudWatch Events ===


class CloudwatchEvent(_Payload):
    """Common CloudWatch Event headers; ``detail`` is decoded per event type."""

    id: str = ""
    detail_type: str = Field("", alias="detail-type")
    source: str = ""
    account: str = ""
    time: str = ""
    region: str = ""
    resources: list[str] = Field(default_factory=list)
    detail: Any = None


class EC2StateChangeDetail(_Payload):
    instance_id: str = Field("", alias="instance-id")
    state: str = ""


class LifecycleActionDetail(_Payload):
    """Detail of an Auto Scaling lifecycle hook action."""

    lifecycle_action_token: str = Field("", alias="LifecycleActionToken")
    auto_scaling_group_name: str = Field("", alias="AutoScalingGroupName")
    lifecycle_hook_name: str = Field("", alias="LifecycleHookName")
    ec2_instance_id: str = Field("", alias="EC2InstanceId")
    lifecycle_transition: str = Field("", alias="LifecycleTransition")
    notification_metadata: str = Field("", alias="NotificationMetadata")


class InstanceActivityPlacement(_Payload):
    availability_zone: str = Field("", alias="Availability Zone")
    subnet_id: str = Field("", alias="Subnet ID")


class InstanceActivityDetail(_Payload):
    """Detail of an Auto Scaling instance launch/terminate activity."""

    status_code: str = Field("", alias="StatusCode")
    auto_scaling_group_name: str = Field("", alias="AutoScalingGroupName")
    activity_id: str = Field("", alias="ActivityId")
    details: InstanceActivityPlacement = Field(
        default_factory=InstanceActivityPlacement, alias="Details"
    )
    request_id: str = Field("", alias="RequestId")
    end_time: str = Field("", alias="EndTime")
    ec2_instance_id: str = Field("", alias="EC2InstanceId")
    start_time: str = Field("", alias="StartTime")
    cause: str = Field("", alias="Cause")
