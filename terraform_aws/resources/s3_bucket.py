"""aws_s3_bucket: S3 buckets, with an optional public access block."""

from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import Field, field_validator, model_validator

from terraform_aws.synthesis import ResourceReference, TerraformSynthesizer
from .base import ResourceAttributes, TaggedAttributes
from .types import validate_json_document

RESOURCE_TYPE = "aws_s3_bucket"
PUBLIC_ACCESS_BLOCK_TYPE = "aws_s3_bucket_public_access_block"

StorageClass = Literal[
    "STANDARD_IA", "ONEZONE_IA", "INTELLIGENT_TIERING", "GLACIER", "GLACIER_IR", "DEEP_ARCHIVE",
]


class Versioning(ResourceAttributes):
    enabled: bool = False
    mfa_delete: Optional[bool] = None


class SseByDefault(ResourceAttributes):
    sse_algorithm: Literal["AES256", "aws:kms", "aws:kms:dsse"] = "AES256"
    kms_master_key_id: Optional[str] = None


class SseRule(ResourceAttributes):
    apply_server_side_encryption_by_default: SseByDefault = Field(default_factory=SseByDefault)
    bucket_key_enabled: Optional[bool] = None


class ServerSideEncryptionConfiguration(ResourceAttributes):
    rule: SseRule = Field(default_factory=SseRule)


class Transition(ResourceAttributes):
    days: Optional[int] = Field(None, ge=0)
    date: Optional[str] = None
    storage_class: StorageClass


class Expiration(ResourceAttributes):
    days: Optional[int] = Field(None, ge=1)
    date: Optional[str] = None
    expired_object_delete_marker: Optional[bool] = None


class NoncurrentVersionTransition(ResourceAttributes):
    days: int = Field(..., ge=0)
    storage_class: StorageClass


class NoncurrentVersionExpiration(ResourceAttributes):
    days: int = Field(..., ge=1)


class LifecycleRule(ResourceAttributes):
    id: str
    enabled: bool = True
    prefix: Optional[str] = None
    tags: Optional[Dict[str, str]] = None
    abort_incomplete_multipart_upload_days: Optional[int] = Field(None, ge=1)
    transition: List[Transition] = Field(default_factory=list)
    expiration: Optional[Expiration] = None
    noncurrent_version_transition: List[NoncurrentVersionTransition] = Field(default_factory=list)
    noncurrent_version_expiration: Optional[NoncurrentVersionExpiration] = None

    @model_validator(mode='after')
    def validate_has_action(self) -> 'LifecycleRule':
        has_action = (
            self.transition or self.expiration
            or self.noncurrent_version_transition or self.noncurrent_version_expiration
            or self.abort_incomplete_multipart_upload_days
        )
        if not has_action:
            raise ValueError(
                f"Lifecycle rule '{self.id}' must have at least one action (transition, expiration, etc.)"
            )
        return self


class CorsRule(ResourceAttributes):
    allowed_methods: List[Literal["GET", "PUT", "POST", "DELETE", "HEAD"]] = Field(..., min_length=1)
    allowed_origins: List[str] = Field(..., min_length=1)
    allowed_headers: Optional[List[str]] = None
    expose_headers: Optional[List[str]] = None
    max_age_seconds: Optional[int] = Field(None, ge=0)


class RedirectAllRequestsTo(ResourceAttributes):
    host_name: str
    protocol: Optional[Literal["http", "https"]] = None


class Website(ResourceAttributes):
    index_document: Optional[str] = None
    error_document: Optional[str] = None
    redirect_all_requests_to: Optional[RedirectAllRequestsTo] = None
    routing_rules: Optional[str] = None

    @field_validator('routing_rules')
    @classmethod
    def validate_routing_rules(cls, v: Optional[str]) -> Optional[str]:
        return validate_json_document(v, "routing_rules")

    @model_validator(mode='after')
    def validate_redirect(self) -> 'Website':
        if self.redirect_all_requests_to and (self.index_document or self.error_document):
            raise ValueError("Cannot specify both redirect_all_requests_to and index/error documents")
        return self

    @property
    def enabled(self) -> bool:
        return self.index_document is not None or self.redirect_all_requests_to is not None


class BucketLogging(ResourceAttributes):
    target_bucket: Optional[str] = None
    target_prefix: Optional[str] = None


class DefaultRetention(ResourceAttributes):
    mode: Literal["COMPLIANCE", "GOVERNANCE"]
    days: Optional[int] = Field(None, ge=1)
    years: Optional[int] = Field(None, ge=1)

    @model_validator(mode='after')
    def validate_period(self) -> 'DefaultRetention':
        if (self.days is None) == (self.years is None):
            raise ValueError("Default retention requires exactly one of 'days' or 'years'")
        return self


class ObjectLockRule(ResourceAttributes):
    default_retention: DefaultRetention


class ObjectLockConfiguration(ResourceAttributes):
    object_lock_enabled: Optional[Literal["Enabled"]] = None
    rule: Optional[ObjectLockRule] = None


class PublicAccessBlockConfiguration(ResourceAttributes):
    block_public_acls: Optional[bool] = None
    block_public_policy: Optional[bool] = None
    ignore_public_acls: Optional[bool] = None
    restrict_public_buckets: Optional[bool] = None

    @property
    def is_set(self) -> bool:
        return any(v is not None for v in self.model_dump().values())

    @property
    def fully_blocked(self) -> bool:
        return all(v is True for v in self.model_dump().values())


class S3BucketAttributes(TaggedAttributes):
    """Attributes of an S3 bucket."""

    bucket: Optional[str] = Field(None, min_length=3, max_length=63, pattern=r"^[a-z0-9][a-z0-9.-]*[a-z0-9]$")
    acl: Literal["private", "public-read", "public-read-write", "authenticated-read", "log-delivery-write"] = "private"
    versioning: Versioning = Field(default_factory=Versioning)
    server_side_encryption_configuration: ServerSideEncryptionConfiguration = Field(
        default_factory=ServerSideEncryptionConfiguration
    )
    lifecycle_rule: List[LifecycleRule] = Field(default_factory=list)
    cors_rule: List[CorsRule] = Field(default_factory=list)
    website: Website = Field(default_factory=Website)
    logging: BucketLogging = Field(default_factory=BucketLogging)
    object_lock_configuration: ObjectLockConfiguration = Field(default_factory=ObjectLockConfiguration)
    public_access_block_configuration: PublicAccessBlockConfiguration = Field(
        default_factory=PublicAccessBlockConfiguration
    )
    policy: Optional[str] = None

    @field_validator('policy')
    @classmethod
    def validate_policy(cls, v: Optional[str]) -> Optional[str]:
        return validate_json_document(v, "policy")

    @model_validator(mode='after')
    def validate_bucket(self) -> 'S3BucketAttributes':
        sse = self.sse_defaults
        if sse.sse_algorithm.startswith("aws:kms") and sse.kms_master_key_id is None:
            raise ValueError("kms_master_key_id is required when using aws:kms encryption")

        if self.object_lock_configuration.object_lock_enabled and not self.versioning.enabled:
            raise ValueError("Object lock requires versioning to be enabled")
        return self

    @property
    def sse_defaults(self) -> SseByDefault:
        return self.server_side_encryption_configuration.rule.apply_server_side_encryption_by_default


class S3BucketReference(ResourceReference):
    """Reference to an ``aws_s3_bucket``."""

    OUTPUTS = (
        "id", "arn", "bucket", "bucket_domain_name", "bucket_regional_domain_name",
        "hosted_zone_id", "region", "website_endpoint", "website_domain",
    )
    COMPUTED = (
        "encryption_enabled", "kms_encrypted", "versioning_enabled",
        "website_enabled", "lifecycle_rules_count", "public_access_blocked",
    )

    @property
    def encryption_enabled(self) -> bool:
        return self.attrs.sse_defaults.sse_algorithm is not None

    @property
    def kms_encrypted(self) -> bool:
        return self.attrs.sse_defaults.sse_algorithm.startswith("aws:kms")

    @property
    def versioning_enabled(self) -> bool:
        return self.attrs.versioning.enabled

    @property
    def website_enabled(self) -> bool:
        return self.attrs.website.enabled

    @property
    def lifecycle_rules_count(self) -> int:
        return len(self.attrs.lifecycle_rule)

    @property
    def public_access_blocked(self) -> bool:
        return self.attrs.public_access_block_configuration.fully_blocked


def aws_s3_bucket(
    synth: TerraformSynthesizer,
    name: str,
    attributes: Optional[Mapping[str, Any]] = None,
) -> S3BucketReference:
    """
    Create an S3 bucket.

    When any public access block flag is given, an
    ``aws_s3_bucket_public_access_block`` named ``<name>_public_access_block``
    is emitted alongside the bucket.
    """
    attrs = S3BucketAttributes.build(attributes)

    body: Dict[str, Any] = {
        "bucket": attrs.bucket,
        "acl": attrs.acl,
        "versioning": attrs.versioning.model_dump(exclude_none=True),
        "server_side_encryption_configuration": attrs.server_side_encryption_configuration.model_dump(
            exclude_none=True
        ),
    }
    if attrs.lifecycle_rule:
        body["lifecycle_rule"] = [
            _without_empty_lists(rule.model_dump(exclude_none=True)) for rule in attrs.lifecycle_rule
        ]
    if attrs.cors_rule:
        body["cors_rule"] = [rule.model_dump(exclude_none=True) for rule in attrs.cors_rule]

    website = attrs.website.model_dump(exclude_none=True)
    if website:
        body["website"] = website
    logging_config = attrs.logging.model_dump(exclude_none=True)
    if logging_config:
        body["logging"] = logging_config
    object_lock = attrs.object_lock_configuration.model_dump(exclude_none=True)
    if object_lock:
        body["object_lock_configuration"] = object_lock

    body["policy"] = attrs.policy
    body["tags"] = attrs.tags_block()

    synth.resource(RESOURCE_TYPE, name, body)

    pab = attrs.public_access_block_configuration
    if pab.is_set:
        block_name = f"{name}_public_access_block"
        synth.resource(PUBLIC_ACCESS_BLOCK_TYPE, block_name, {
            "bucket": synth.ref(RESOURCE_TYPE, name, "id"),
            **pab.model_dump(exclude_none=True),
        })
        synth.event_logger.debug(
            "resource.auxiliary",
            f"{PUBLIC_ACCESS_BLOCK_TYPE}.{block_name}",
            {"type": PUBLIC_ACCESS_BLOCK_TYPE, "name": block_name},
        )

    return S3BucketReference(RESOURCE_TYPE, name, attrs)


def _without_empty_lists(rule: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in rule.items() if v != []}
