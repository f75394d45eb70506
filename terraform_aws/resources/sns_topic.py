"""aws_sns_topic: SNS standard and FIFO topics."""

import json
from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import Field, field_validator, model_validator

from terraform_aws.synthesis import ResourceReference, TerraformSynthesizer
from .base import TaggedAttributes

RESOURCE_TYPE = "aws_sns_topic"
FIFO_SUFFIX = ".fifo"
FEEDBACK_PROTOCOLS = ("application", "http", "lambda", "sqs", "firehose")


class SnsTopicAttributes(TaggedAttributes):
    """Attributes of an SNS topic. Delivery feedback is configured per protocol."""

    name: Optional[str] = Field(None, max_length=256)
    display_name: Optional[str] = Field(None, max_length=100)
    kms_master_key_id: Optional[str] = None
    fifo_topic: bool = False
    content_based_deduplication: bool = False
    delivery_policy: Optional[str] = None
    policy: Optional[str] = None
    message_data_protection_policy: Optional[str] = None
    tracing_config: Optional[Literal["Active", "PassThrough"]] = None

    application_success_feedback_role_arn: Optional[str] = None
    application_success_feedback_sample_rate: Optional[int] = Field(None, ge=0, le=100)
    application_failure_feedback_role_arn: Optional[str] = None
    http_success_feedback_role_arn: Optional[str] = None
    http_success_feedback_sample_rate: Optional[int] = Field(None, ge=0, le=100)
    http_failure_feedback_role_arn: Optional[str] = None
    lambda_success_feedback_role_arn: Optional[str] = None
    lambda_success_feedback_sample_rate: Optional[int] = Field(None, ge=0, le=100)
    lambda_failure_feedback_role_arn: Optional[str] = None
    sqs_success_feedback_role_arn: Optional[str] = None
    sqs_success_feedback_sample_rate: Optional[int] = Field(None, ge=0, le=100)
    sqs_failure_feedback_role_arn: Optional[str] = None
    firehose_success_feedback_role_arn: Optional[str] = None
    firehose_success_feedback_sample_rate: Optional[int] = Field(None, ge=0, le=100)
    firehose_failure_feedback_role_arn: Optional[str] = None

    @field_validator('delivery_policy', 'policy', 'message_data_protection_policy')
    @classmethod
    def validate_json(cls, v: Optional[str], info) -> Optional[str]:
        if v is not None:
            try:
                json.loads(v)
            except ValueError as e:
                raise ValueError(f"{info.field_name} must be valid JSON: {e}") from e
        return v

    @model_validator(mode='after')
    def validate_topic(self) -> 'SnsTopicAttributes':
        if self.name:
            if self.fifo_topic and not self.name.endswith(FIFO_SUFFIX):
                raise ValueError("FIFO topic names must end with '.fifo' suffix")
            if not self.fifo_topic and self.name.endswith(FIFO_SUFFIX):
                raise ValueError("Standard topic names cannot end with '.fifo' suffix")
        if not self.fifo_topic and self.content_based_deduplication:
            raise ValueError("content_based_deduplication is only valid for FIFO topics")

        for protocol in FEEDBACK_PROTOCOLS:
            sample_rate = f"{protocol}_success_feedback_sample_rate"
            role_arn = f"{protocol}_success_feedback_role_arn"
            if getattr(self, sample_rate) is not None and not getattr(self, role_arn):
                raise ValueError(f"{sample_rate} requires {role_arn} to be set")
        return self

    @property
    def feedback_protocols(self) -> List[str]:
        return [
            protocol for protocol in FEEDBACK_PROTOCOLS
            if getattr(self, f"{protocol}_success_feedback_role_arn")
            or getattr(self, f"{protocol}_failure_feedback_role_arn")
        ]


class SnsTopicReference(ResourceReference):
    """Reference to an ``aws_sns_topic``."""

    OUTPUTS = ("id", "arn", "name", "owner", "beginning_archive_time")
    COMPUTED = (
        "is_fifo", "is_encrypted", "has_delivery_policy", "has_access_policy",
        "has_data_protection", "has_feedback_enabled", "feedback_protocols",
        "topic_type", "tracing_enabled",
    )

    @property
    def is_fifo(self) -> bool:
        return self.attrs.fifo_topic

    @property
    def is_encrypted(self) -> bool:
        return bool(self.attrs.kms_master_key_id)

    @property
    def has_delivery_policy(self) -> bool:
        return bool(self.attrs.delivery_policy)

    @property
    def has_access_policy(self) -> bool:
        return bool(self.attrs.policy)

    @property
    def has_data_protection(self) -> bool:
        return bool(self.attrs.message_data_protection_policy)

    @property
    def has_feedback_enabled(self) -> bool:
        return bool(self.attrs.feedback_protocols)

    @property
    def topic_type(self) -> str:
        return "FIFO" if self.is_fifo else "Standard"

    @property
    def tracing_enabled(self) -> bool:
        return self.attrs.tracing_config == "Active"


def aws_sns_topic(
    synth: TerraformSynthesizer,
    name: str,
    attributes: Optional[Mapping[str, Any]] = None,
) -> SnsTopicReference:
    """Create an SNS topic."""
    attrs = SnsTopicAttributes.build(attributes)

    body: Dict[str, Any] = {
        "name": attrs.name,
        "display_name": attrs.display_name,
        "fifo_topic": attrs.fifo_topic,
    }
    if attrs.fifo_topic:
        body["content_based_deduplication"] = attrs.content_based_deduplication

    body.update(attrs.model_dump(
        include={"kms_master_key_id", "delivery_policy", "policy",
                 "message_data_protection_policy", "tracing_config"},
        exclude_none=True,
    ))
    for protocol in FEEDBACK_PROTOCOLS:
        for suffix in ("success_feedback_role_arn", "success_feedback_sample_rate", "failure_feedback_role_arn"):
            key = f"{protocol}_{suffix}"
            body[key] = getattr(attrs, key)
    body["tags"] = attrs.tags_block()

    synth.resource(RESOURCE_TYPE, name, body)
    return SnsTopicReference(RESOURCE_TYPE, name, attrs)
