import json

import pytest
from pydantic import ValidationError

from terraform_aws.resources import aws_sns_topic
from terraform_aws.resources.sns_topic import SnsTopicAttributes

from conftest import resource_body

ROLE_ARN = "arn:aws:iam::123456789012:role/sns-feedback"


def test_fifo_naming():
    with pytest.raises(ValidationError, match=r"FIFO topic names must end with '\.fifo' suffix"):
        SnsTopicAttributes(name="events", fifo_topic=True)
    with pytest.raises(ValidationError, match=r"Standard topic names cannot end with '\.fifo' suffix"):
        SnsTopicAttributes(name="events.fifo")


def test_content_based_deduplication_requires_fifo():
    with pytest.raises(ValidationError, match="content_based_deduplication is only valid for FIFO topics"):
        SnsTopicAttributes(name="events", content_based_deduplication=True)


@pytest.mark.parametrize("field", ["delivery_policy", "policy", "message_data_protection_policy"])
def test_policies_must_be_json(field):
    with pytest.raises(ValidationError, match=f"{field} must be valid JSON"):
        SnsTopicAttributes(**{field: "{broken"})


def test_sample_rate_requires_role():
    with pytest.raises(
        ValidationError,
        match="sqs_success_feedback_sample_rate requires sqs_success_feedback_role_arn to be set",
    ):
        SnsTopicAttributes(sqs_success_feedback_sample_rate=50)


def test_sample_rate_range():
    with pytest.raises(ValidationError):
        SnsTopicAttributes(http_success_feedback_role_arn=ROLE_ARN, http_success_feedback_sample_rate=101)


def test_standard_topic_synthesis(synth):
    ref = aws_sns_topic(synth, "alerts", {"name": "alerts", "display_name": "Alerts"})

    body = resource_body(synth, "aws_sns_topic", "alerts")
    assert body == {"name": "alerts", "display_name": "Alerts", "fifo_topic": False}
    assert ref.arn == "${aws_sns_topic.alerts.arn}"
    assert ref.owner == "${aws_sns_topic.alerts.owner}"
    assert ref.topic_type == "Standard"
    assert not ref.is_encrypted
    assert not ref.has_feedback_enabled
    assert ref.feedback_protocols == []


def test_fifo_topic_with_feedback(synth):
    policy = json.dumps({"http": {"defaultHealthyRetryPolicy": {"numRetries": 3}}})
    ref = aws_sns_topic(synth, "orders", {
        "name": "orders.fifo",
        "fifo_topic": True,
        "content_based_deduplication": True,
        "kms_master_key_id": "alias/aws/sns",
        "delivery_policy": policy,
        "tracing_config": "Active",
        "lambda_failure_feedback_role_arn": ROLE_ARN,
        "sqs_success_feedback_role_arn": ROLE_ARN,
        "sqs_success_feedback_sample_rate": 100,
        "tags": {"env": "prod"},
    })

    body = resource_body(synth, "aws_sns_topic", "orders")
    assert body["content_based_deduplication"] is True
    assert body["delivery_policy"] == policy
    assert body["sqs_success_feedback_sample_rate"] == 100
    assert body["tracing_config"] == "Active"
    assert "http_success_feedback_role_arn" not in body

    assert ref.is_fifo
    assert ref.topic_type == "FIFO"
    assert ref.is_encrypted
    assert ref.has_delivery_policy
    assert ref.tracing_enabled
    assert ref.feedback_protocols == ["lambda", "sqs"]
