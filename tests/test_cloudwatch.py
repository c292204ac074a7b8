"""Tests for CloudWatch Event classification."""

import json

import pytest
from conftest import cloudwatch_event

from event_notifier.errors import DecodeError, SinkError
from event_notifier.messages import COLOR_INFO, COLOR_WARN, MessageField
from event_notifier.models import CloudwatchEvent
from event_notifier.router import CloudwatchEventProcessor, classify_event

EC2_STATE_CHANGE = "EC2 Instance State-change Notification"

LIFECYCLE_DETAIL = {
    "LifecycleActionToken": "c613620e-07e2-4ed2-a9e2-ef8258911ade",
    "AutoScalingGroupName": "my-asg",
    "LifecycleHookName": "my-lifecycle-hook",
    "EC2InstanceId": "i-1234567890abcdef0",
    "LifecycleTransition": "autoscaling:EC2_INSTANCE_LAUNCHING",
    "NotificationMetadata": "additional-info",
}

ACTIVITY_DETAIL = {
    "StatusCode": "InProgress",
    "AutoScalingGroupName": "ASGLaunchSuccess",
    "ActivityId": "9cabb81f-42de-417d-8aa7-ce16bf026590",
    "Details": {"Availability Zone": "us-east-1b", "Subnet ID": "subnet-95bfcebe"},
    "RequestId": "9cabb81f-42de-417d-8aa7-ce16bf026590",
    "EndTime": "2015-11-11T21:31:47.208Z",
    "EC2InstanceId": "i-b188560f",
    "StartTime": "2015-11-11T21:31:13.671Z",
    "Cause": "At 2015-11-11T21:31:10Z a user request created an Auto Scaling group.",
}


def _event(source: str, detail_type: str = "") -> CloudwatchEvent:
    return CloudwatchEvent.model_validate({"source": source, "detail-type": detail_type})


def ec2_event(instance_id: object, state: str) -> bytes:
    return cloudwatch_event(
        "aws.ec2", EC2_STATE_CHANGE, {"instance-id": instance_id, "state": state}
    )


class TestClassifyEvent:
    """Tests for the ordered event rules."""

    def test_ec2_state_change(self):
        assert classify_event(_event("aws.ec2", EC2_STATE_CHANGE)) == "ec2_state_change"

    def test_ec2_other(self):
        event = _event("aws.ec2", "EC2 Spot Instance Interruption Warning")
        assert classify_event(event) == "ec2_other"

    def test_scheduled(self):
        assert classify_event(_event("aws.events", "Scheduled Event")) == "scheduled"

    @pytest.mark.parametrize(
        "detail_type",
        ["EC2 Instance-launch Lifecycle Action", "EC2 Instance-terminate Lifecycle Action"],
    )
    def test_autoscaling_lifecycle(self, detail_type):
        assert classify_event(_event("aws.autoscaling", detail_type)) == "autoscaling_lifecycle"

    def test_autoscaling_activity(self):
        assert (
            classify_event(_event("aws.autoscaling", "EC2 Instance Launch Successful"))
            == "autoscaling_activity"
        )

    def test_generic(self):
        assert classify_event(_event("aws.codebuild", "CodeBuild Build State Change")) == "generic"


class TestEC2StateChange:
    """Tests for EC2 instance state-change notifications."""

    @pytest.mark.parametrize("state", ["shutting-down", "terminated", "stopping", "stopped"])
    def test_stopping_states_warn(self, slack, state):
        CloudwatchEventProcessor(slack).process_event(
            ec2_event("i-abcd1111", state)
        )
        assert slack.send_message.call_args.args[0].color == COLOR_WARN

    def test_pending_is_info(self, slack):
        CloudwatchEventProcessor(slack).process_event(
            ec2_event("i-abcd1111", "pending")
        )

        message = slack.send_message.call_args.args[0]
        assert message.color == COLOR_INFO
        assert message.title == "EC2 Instance State-change"
        assert message.fields == [
            MessageField("CloudWatch Event", "EC2 Instance State-change", short=False),
            MessageField("instance-id", "i-abcd1111", short=True),
            MessageField("state", "pending", short=True),
        ]

    def test_other_ec2_events_ignored(self, slack):
        CloudwatchEventProcessor(slack).process_event(
            cloudwatch_event("aws.ec2", "EC2 Spot Instance Interruption Warning", {})
        )
        slack.send_message.assert_not_called()

    def test_bad_detail(self, slack):
        with pytest.raises(DecodeError, match="^failed to process EC2 event: "):
            CloudwatchEventProcessor(slack).process_event(
                ec2_event(7, "pending")
            )
        slack.send_message.assert_not_called()

    def test_missing_detail(self, slack):
        with pytest.raises(DecodeError, match="^failed to process EC2 event: .*detail is missing"):
            CloudwatchEventProcessor(slack).process_event(
                cloudwatch_event("aws.ec2", EC2_STATE_CHANGE, None)
            )
        slack.send_message.assert_not_called()

    def test_sink_error_prefixed(self, slack):
        slack.send_message.side_effect = SinkError("slack down")
        with pytest.raises(SinkError, match="failed to process EC2 event: slack down"):
            CloudwatchEventProcessor(slack).process_event(
                ec2_event("i-1", "running")
            )


class TestAutoscaling:
    """Tests for Auto Scaling events."""

    def test_lifecycle_action(self, slack):
        CloudwatchEventProcessor(slack).process_event(
            cloudwatch_event(
                "aws.autoscaling", "EC2 Instance-launch Lifecycle Action", LIFECYCLE_DETAIL
            )
        )

        message = slack.send_message.call_args.args[0]
        assert message.color == COLOR_INFO
        assert message.title == "Autoscaling - Lifecycle Action"
        assert message.fields[1:] == [
            MessageField("AutoScalingGroupName", "my-asg", short=True),
            MessageField("EC2InstanceId", "i-1234567890abcdef0", short=True),
            MessageField("LifecycleTransition", "autoscaling:EC2_INSTANCE_LAUNCHING", short=True),
        ]

    @pytest.mark.parametrize(
        "detail_type",
        ["EC2 Instance Launch Unsuccessful", "EC2 Instance Terminate Unsuccessful"],
    )
    def test_unsuccessful_activity_warns(self, slack, detail_type):
        CloudwatchEventProcessor(slack).process_event(
            cloudwatch_event("aws.autoscaling", detail_type, ACTIVITY_DETAIL)
        )
        assert slack.send_message.call_args.args[0].color == COLOR_WARN

    def test_successful_activity(self, slack):
        CloudwatchEventProcessor(slack).process_event(
            cloudwatch_event("aws.autoscaling", "EC2 Instance Launch Successful", ACTIVITY_DETAIL)
        )

        message = slack.send_message.call_args.args[0]
        assert message.color == COLOR_INFO
        assert message.title == "Autoscaling - EC2 Instance Launch Successful"
        assert message.fields == [
            MessageField(
                "CloudWatch Event", "Autoscaling - EC2 Instance Launch Successful", short=False
            ),
            MessageField("EC2InstanceId", "i-b188560f", short=True),
            MessageField("StatusCode", "InProgress", short=True),
            MessageField("Availability Zone", "us-east-1b", short=True),
            MessageField("Cause", ACTIVITY_DETAIL["Cause"], short=True),
        ]

    def test_detail_not_an_object(self, slack):
        with pytest.raises(DecodeError, match="^failed to process Autoscaling event: "):
            CloudwatchEventProcessor(slack).process_event(
                cloudwatch_event("aws.autoscaling", "EC2 Instance Launch Successful", "oops")
            )


class TestOtherSources:
    """Tests for scheduled and generic events."""

    def test_scheduled_event_ignored(self, slack):
        CloudwatchEventProcessor(slack).process_event(
            cloudwatch_event("aws.events", "Scheduled Event", {})
        )
        slack.send_message.assert_not_called()

    def test_generic_event(self, slack):
        detail = {"build-status": "FAILED", "project-name": "api"}
        CloudwatchEventProcessor(slack).process_event(
            cloudwatch_event("aws.codebuild", "CodeBuild Build State Change", detail)
        )

        message = slack.send_message.call_args.args[0]
        assert message.color == COLOR_INFO
        assert message.title == "aws.codebuild"
        assert message.fields[0] == MessageField("CloudWatch Event", "aws.codebuild", short=False)
        assert message.fields[1].label == "Event Detail JSON"
        assert message.fields[1].short is False
        assert json.loads(message.fields[1].value) == detail

    def test_generic_detail_keeps_non_ascii(self, slack):
        CloudwatchEventProcessor(slack).process_event(
            cloudwatch_event("aws.custom", "Deploy Finished", {"msg": "café ✓"})
        )

        field = slack.send_message.call_args.args[0].fields[1]
        assert field.value == '{"msg": "café ✓"}'

    def test_generic_without_detail(self, slack):
        CloudwatchEventProcessor(slack).process_event(
            cloudwatch_event("aws.custom", "Deploy Finished", None)
        )

        field = slack.send_message.call_args.args[0].fields[1]
        assert field == MessageField("Event Detail JSON", "", short=False)

    def test_generic_sink_error_not_prefixed(self, slack):
        slack.send_message.side_effect = SinkError("slack down")
        with pytest.raises(SinkError, match="^slack down$"):
            CloudwatchEventProcessor(slack).process_event(
                cloudwatch_event("aws.codebuild", "CodeBuild Build State Change", {})
            )

    def test_malformed_headers(self, slack):
        with pytest.raises(DecodeError, match="unsupported CloudWatch event payload"):
            CloudwatchEventProcessor(slack).process_event(b'{"source": ["aws.ec2"]}')
