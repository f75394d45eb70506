"""aws_lambda_function: Zip and container image Lambda functions."""

import re
from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import Field, field_validator, model_validator

from terraform_aws.synthesis import ResourceReference, TerraformSynthesizer
from .base import ResourceAttributes, TaggedAttributes
from .types import is_arn

RESOURCE_TYPE = "aws_lambda_function"

Runtime = Literal[
    "python3.8", "python3.9", "python3.10", "python3.11", "python3.12", "python3.13",
    "nodejs16.x", "nodejs18.x", "nodejs20.x", "nodejs22.x",
    "java8", "java8.al2", "java11", "java17", "java21",
    "dotnet6", "dotnet8",
    "ruby3.2", "ruby3.3",
    "go1.x",
    "provided", "provided.al2", "provided.al2023",
]
Architecture = Literal["x86_64", "arm64"]

ENV_VAR_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_]*$")

# runtime prefix -> (handler pattern, expected form)
HANDLER_FORMATS = {
    "python": (re.compile(r"^[A-Za-z0-9_/.-]+\.[A-Za-z_][A-Za-z0-9_]*$"), "module.function"),
    "nodejs": (re.compile(r"^[A-Za-z0-9_/.-]+\.[A-Za-z_$][A-Za-z0-9_$]*$"), "filename.export"),
    "java": (re.compile(r"^[A-Za-z_][A-Za-z0-9_.$]*::[A-Za-z_][A-Za-z0-9_]*$"), "package.Class::method"),
    "go": (re.compile(r"^[A-Za-z0-9_-]+$"), "the executable name"),
}
HANDLER_LABELS = {"python": "Python", "nodejs": "Node.js", "java": "Java", "go": "Go"}

# USD, us-east-1 on-demand pricing
PRICE_PER_GB_SECOND = {"x86_64": 0.0000166667, "arm64": 0.0000133334}
PRICE_PER_MILLION_REQUESTS = 0.20
ASSUMED_MONTHLY_INVOCATIONS = 1_000_000
ASSUMED_DURATION_SECONDS = 0.1


class LambdaEnvironment(ResourceAttributes):
    variables: Dict[str, str] = Field(default_factory=dict)

    @field_validator('variables')
    @classmethod
    def validate_variable_names(cls, v: Dict[str, str]) -> Dict[str, str]:
        for key in v:
            if not ENV_VAR_PATTERN.match(key):
                raise ValueError(
                    f"Invalid environment variable name '{key}': must start with a letter "
                    "and contain only letters, digits and underscores"
                )
        return v


class LambdaVpcConfig(ResourceAttributes):
    subnet_ids: List[str] = Field(..., min_length=1)
    security_group_ids: List[str] = Field(..., min_length=1)
    ipv6_allowed_for_dual_stack: Optional[bool] = None


class LambdaDeadLetterConfig(ResourceAttributes):
    target_arn: str

    @field_validator('target_arn')
    @classmethod
    def validate_target_arn(cls, v: str) -> str:
        if not (is_arn(v, service="sqs") or is_arn(v, service="sns")):
            raise ValueError(f"dead_letter_config target_arn must be an SQS queue or SNS topic ARN: {v}")
        return v


class LambdaFileSystemConfig(ResourceAttributes):
    arn: str
    local_mount_path: str = Field(..., pattern=r"^/mnt/[a-zA-Z0-9_-]+$")


class LambdaTracingConfig(ResourceAttributes):
    mode: Literal["Active", "PassThrough"]


class LambdaEphemeralStorage(ResourceAttributes):
    size: int = Field(..., ge=512, le=10240)


class LambdaSnapStart(ResourceAttributes):
    apply_on: Literal["PublishedVersions", "None"]


class LambdaImageConfig(ResourceAttributes):
    entry_point: Optional[List[str]] = None
    command: Optional[List[str]] = None
    working_directory: Optional[str] = None


class LambdaLoggingConfig(ResourceAttributes):
    log_format: Literal["JSON", "Text"]
    application_log_level: Optional[Literal["TRACE", "DEBUG", "INFO", "WARN", "ERROR", "FATAL"]] = None
    system_log_level: Optional[Literal["DEBUG", "INFO", "WARN"]] = None
    log_group: Optional[str] = None

    @model_validator(mode='after')
    def validate_levels(self) -> 'LambdaLoggingConfig':
        if self.log_format == "Text" and (self.application_log_level or self.system_log_level):
            raise ValueError("Log levels can only be set with the JSON log format")
        return self


class LambdaFunctionAttributes(TaggedAttributes):
    """Attributes of a Lambda function."""

    function_name: str = Field(..., pattern=r"^[a-zA-Z0-9_-]{1,64}$")
    role: str
    package_type: Literal["Zip", "Image"] = "Zip"

    handler: Optional[str] = None
    runtime: Optional[Runtime] = None
    filename: Optional[str] = None
    s3_bucket: Optional[str] = None
    s3_key: Optional[str] = None
    s3_object_version: Optional[str] = None
    image_uri: Optional[str] = None
    image_config: Optional[LambdaImageConfig] = None

    description: Optional[str] = Field(None, max_length=256)
    timeout: int = Field(3, ge=1, le=900)
    memory_size: int = Field(128, ge=128, le=10240)
    publish: bool = False
    architectures: List[Architecture] = Field(default_factory=lambda: ["x86_64"])
    reserved_concurrent_executions: Optional[int] = Field(None, ge=-1, le=1000)
    layers: List[str] = Field(default_factory=list, max_length=5)

    environment: Optional[LambdaEnvironment] = None
    vpc_config: Optional[LambdaVpcConfig] = None
    dead_letter_config: Optional[LambdaDeadLetterConfig] = None
    file_system_config: Optional[List[LambdaFileSystemConfig]] = None
    tracing_config: Optional[LambdaTracingConfig] = None
    kms_key_arn: Optional[str] = None
    code_signing_config_arn: Optional[str] = None
    ephemeral_storage: Optional[LambdaEphemeralStorage] = None
    snap_start: Optional[LambdaSnapStart] = None
    logging_config: Optional[LambdaLoggingConfig] = None

    @field_validator('architectures')
    @classmethod
    def validate_architectures(cls, v: List[str]) -> List[str]:
        if len(v) != 1:
            raise ValueError("Lambda functions support exactly one architecture")
        return v

    @field_validator('role')
    @classmethod
    def validate_role(cls, v: str) -> str:
        if not is_arn(v, service="iam"):
            raise ValueError(f"role must be an IAM role ARN: {v}")
        return v

    @model_validator(mode='after')
    def validate_package(self) -> 'LambdaFunctionAttributes':
        if self.package_type == "Image":
            if not self.image_uri:
                raise ValueError("image_uri is required when package_type is Image")
            if self.handler or self.runtime:
                raise ValueError("handler and runtime should not be specified for Image package type")
        else:
            if not self.handler or not self.runtime:
                raise ValueError("handler and runtime are required for Zip package type")
            if not self.filename and not self.s3_bucket:
                raise ValueError("Either filename or s3_bucket/s3_key must be specified for Zip package type")
            if self.s3_bucket and not self.s3_key:
                raise ValueError("s3_key is required when s3_bucket is specified")
            self._validate_handler()

        if self.snap_start and not self.is_java:
            raise ValueError("snap_start is only supported for Java runtimes")
        return self

    def _validate_handler(self) -> None:
        for prefix, (pattern, expected) in HANDLER_FORMATS.items():
            if self.runtime.startswith(prefix) and not pattern.match(self.handler):
                raise ValueError(
                    f"Invalid {HANDLER_LABELS[prefix]} handler '{self.handler}': expected {expected}"
                )

    @property
    def is_java(self) -> bool:
        return bool(self.runtime) and self.runtime.startswith("java")

    @property
    def architecture(self) -> str:
        return self.architectures[0]

    @property
    def requires_vpc(self) -> bool:
        return self.vpc_config is not None

    @property
    def has_dlq(self) -> bool:
        return self.dead_letter_config is not None

    @property
    def uses_efs(self) -> bool:
        return bool(self.file_system_config)

    @property
    def is_container_based(self) -> bool:
        return self.package_type == "Image"

    @property
    def supports_snap_start(self) -> bool:
        return self.is_java

    @property
    def estimated_monthly_cost(self) -> float:
        """Rough monthly cost for a million 100ms invocations."""
        gb_seconds = (self.memory_size / 1024) * ASSUMED_DURATION_SECONDS * ASSUMED_MONTHLY_INVOCATIONS
        compute = gb_seconds * PRICE_PER_GB_SECOND[self.architecture]
        requests = ASSUMED_MONTHLY_INVOCATIONS / 1_000_000 * PRICE_PER_MILLION_REQUESTS
        return round(compute + requests, 2)


class LambdaFunctionReference(ResourceReference):
    """Reference to an ``aws_lambda_function``. Computed values come from the schema."""

    OUTPUTS = (
        "arn", "function_name", "qualified_arn", "qualified_invoke_arn", "invoke_arn",
        "version", "last_modified", "source_code_hash", "source_code_size",
        "role", "handler", "runtime", "timeout", "memory_size",
        "signing_job_arn", "signing_profile_version_arn",
    )
    COMPUTED = (
        "estimated_monthly_cost", "requires_vpc", "has_dlq", "uses_efs",
        "is_container_based", "supports_snap_start", "architecture",
    )


def aws_lambda_function(
    synth: TerraformSynthesizer,
    name: str,
    attributes: Optional[Mapping[str, Any]] = None,
) -> LambdaFunctionReference:
    """Create a Lambda function from a Zip archive or a container image."""
    attrs = LambdaFunctionAttributes.build(attributes)

    body: Dict[str, Any] = {
        "function_name": attrs.function_name,
        "role": attrs.role,
    }
    if attrs.is_container_based:
        body["package_type"] = "Image"
        body["image_uri"] = attrs.image_uri
        if attrs.image_config:
            body["image_config"] = attrs.image_config.model_dump(exclude_none=True)
    else:
        body["handler"] = attrs.handler
        body["runtime"] = attrs.runtime
        if attrs.filename:
            body["filename"] = attrs.filename
        else:
            body["s3_bucket"] = attrs.s3_bucket
            body["s3_key"] = attrs.s3_key
            body["s3_object_version"] = attrs.s3_object_version

    body.update({
        "description": attrs.description,
        "timeout": attrs.timeout,
        "memory_size": attrs.memory_size,
        "publish": attrs.publish,
        "architectures": list(attrs.architectures),
        "reserved_concurrent_executions": attrs.reserved_concurrent_executions,
        "layers": list(attrs.layers) or None,
    })

    if attrs.environment and attrs.environment.variables:
        body["environment"] = {"variables": dict(attrs.environment.variables)}
    if attrs.vpc_config:
        body["vpc_config"] = attrs.vpc_config.model_dump(exclude_none=True)
    if attrs.dead_letter_config:
        body["dead_letter_config"] = attrs.dead_letter_config.model_dump()
    if attrs.file_system_config:
        body["file_system_config"] = [fs.model_dump() for fs in attrs.file_system_config]
    if attrs.tracing_config:
        body["tracing_config"] = attrs.tracing_config.model_dump()

    body["kms_key_arn"] = attrs.kms_key_arn
    body["code_signing_config_arn"] = attrs.code_signing_config_arn

    if attrs.ephemeral_storage:
        body["ephemeral_storage"] = attrs.ephemeral_storage.model_dump()
    if attrs.snap_start:
        body["snap_start"] = attrs.snap_start.model_dump()
    if attrs.logging_config:
        body["logging_config"] = attrs.logging_config.model_dump(exclude_none=True)
    body["tags"] = attrs.tags_block()

    synth.resource(RESOURCE_TYPE, name, body)
    return LambdaFunctionReference(RESOURCE_TYPE, name, attrs)
