"""aws_sqs_queue: SQS standard and FIFO queues."""

import json
from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import Field, model_validator

from terraform_aws.synthesis import ResourceReference, TerraformSynthesizer
from .base import ResourceAttributes, TaggedAttributes
from .types import validate_json_document

RESOURCE_TYPE = "aws_sqs_queue"
FIFO_SUFFIX = ".fifo"


class RedrivePolicy(ResourceAttributes):
    """Dead-letter queue routing."""

    deadLetterTargetArn: str
    maxReceiveCount: int = Field(3, ge=1, le=1000)


class RedriveAllowPolicy(ResourceAttributes):
    """Which source queues may use this queue as their dead-letter queue."""

    redrivePermission: Literal["allowAll", "denyAll", "byQueue"] = "allowAll"
    sourceQueueArns: Optional[List[str]] = None


class SqsQueueAttributes(TaggedAttributes):
    """Attributes of an SQS queue."""

    name: str = Field(..., min_length=1, max_length=80, pattern=r"^[A-Za-z0-9_-]+(\.fifo)?$")
    fifo_queue: bool = False
    content_based_deduplication: bool = False

    visibility_timeout_seconds: int = Field(30, ge=0, le=43200)
    message_retention_seconds: int = Field(345600, ge=60, le=1209600)
    max_message_size: int = Field(262144, ge=1024, le=262144)
    delay_seconds: int = Field(0, ge=0, le=900)
    receive_wait_time_seconds: int = Field(0, ge=0, le=20)

    redrive_policy: Optional[RedrivePolicy] = None
    redrive_allow_policy: Optional[RedriveAllowPolicy] = None

    kms_master_key_id: Optional[str] = None
    kms_data_key_reuse_period_seconds: int = Field(300, ge=60, le=86400)
    sqs_managed_sse_enabled: bool = False

    deduplication_scope: Literal["messageGroup", "queue"] = "queue"
    fifo_throughput_limit: Literal["perMessageGroupId", "perQueue"] = "perQueue"

    policy: Optional[str] = None

    @model_validator(mode='after')
    def validate_queue(self) -> 'SqsQueueAttributes':
        if self.fifo_queue and not self.name.endswith(FIFO_SUFFIX):
            raise ValueError("FIFO queue names must end with '.fifo' suffix")
        if not self.fifo_queue and self.name.endswith(FIFO_SUFFIX):
            raise ValueError("Standard queue names cannot end with '.fifo' suffix")

        if not self.fifo_queue:
            if self.content_based_deduplication:
                raise ValueError("content_based_deduplication is only valid for FIFO queues")
            if self.deduplication_scope != "queue":
                raise ValueError("deduplication_scope is only valid for FIFO queues")
            if self.fifo_throughput_limit != "perQueue":
                raise ValueError("fifo_throughput_limit is only valid for FIFO queues")

        allow = self.redrive_allow_policy
        if allow and allow.redrivePermission == "byQueue" and not allow.sourceQueueArns:
            raise ValueError("sourceQueueArns must be specified when redrivePermission is 'byQueue'")

        if self.kms_master_key_id and self.sqs_managed_sse_enabled:
            raise ValueError("Cannot enable both KMS encryption and SQS managed server-side encryption")

        validate_json_document(self.policy, "policy")
        return self


class SqsQueueReference(ResourceReference):
    """Reference to an ``aws_sqs_queue``."""

    OUTPUTS = ("id", "arn", "url", "name")
    COMPUTED = (
        "is_fifo", "is_encrypted", "has_dlq", "long_polling_enabled",
        "is_delay_queue", "allows_all_sources", "queue_type", "encryption_type",
    )

    @property
    def is_fifo(self) -> bool:
        return self.attrs.fifo_queue

    @property
    def is_encrypted(self) -> bool:
        return bool(self.attrs.kms_master_key_id) or self.attrs.sqs_managed_sse_enabled

    @property
    def has_dlq(self) -> bool:
        policy = self.attrs.redrive_policy
        return policy is not None and bool(policy.deadLetterTargetArn)

    @property
    def long_polling_enabled(self) -> bool:
        return self.attrs.receive_wait_time_seconds > 0

    @property
    def is_delay_queue(self) -> bool:
        return self.attrs.delay_seconds > 0

    @property
    def allows_all_sources(self) -> bool:
        allow = self.attrs.redrive_allow_policy
        return allow is None or allow.redrivePermission == "allowAll"

    @property
    def queue_type(self) -> str:
        return "FIFO" if self.is_fifo else "Standard"

    @property
    def encryption_type(self) -> str:
        if self.attrs.kms_master_key_id:
            return "KMS"
        if self.attrs.sqs_managed_sse_enabled:
            return "SQS-SSE"
        return "None"


def aws_sqs_queue(
    synth: TerraformSynthesizer,
    name: str,
    attributes: Optional[Mapping[str, Any]] = None,
) -> SqsQueueReference:
    """Create an SQS queue. Redrive policies are emitted as JSON strings."""
    attrs = SqsQueueAttributes.build(attributes)

    body: Dict[str, Any] = {
        "name": attrs.name,
        "fifo_queue": attrs.fifo_queue,
        "visibility_timeout_seconds": attrs.visibility_timeout_seconds,
        "message_retention_seconds": attrs.message_retention_seconds,
        "max_message_size": attrs.max_message_size,
        "delay_seconds": attrs.delay_seconds,
        "receive_wait_time_seconds": attrs.receive_wait_time_seconds,
    }

    if attrs.fifo_queue:
        body["content_based_deduplication"] = attrs.content_based_deduplication
        body["deduplication_scope"] = attrs.deduplication_scope
        body["fifo_throughput_limit"] = attrs.fifo_throughput_limit

    if attrs.redrive_policy:
        body["redrive_policy"] = json.dumps(attrs.redrive_policy.model_dump())
    if attrs.redrive_allow_policy:
        body["redrive_allow_policy"] = json.dumps(
            attrs.redrive_allow_policy.model_dump(exclude_none=True)
        )

    if attrs.kms_master_key_id:
        body["kms_master_key_id"] = attrs.kms_master_key_id
        body["kms_data_key_reuse_period_seconds"] = attrs.kms_data_key_reuse_period_seconds
    elif attrs.sqs_managed_sse_enabled:
        body["sqs_managed_sse_enabled"] = True

    body["policy"] = attrs.policy
    body["tags"] = attrs.tags_block()

    synth.resource(RESOURCE_TYPE, name, body)
    return SqsQueueReference(RESOURCE_TYPE, name, attrs)
