"""aws_batch_compute_environment: AWS Batch compute environments."""

import re
from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import Field, field_validator, model_validator

from terraform_aws.synthesis import ResourceReference, TerraformSynthesizer
from .base import ResourceAttributes, TaggedAttributes

RESOURCE_TYPE = "aws_batch_compute_environment"

NAME_PATTERN = re.compile(r"^[a-zA-Z0-9\-_]+$")
INSTANCE_TYPE_PATTERN = re.compile(r"^[a-z0-9]+\.[a-z0-9]+$")
OPTIMAL = "optimal"

EC2_TYPES = ("EC2", "SPOT")
FARGATE_TYPES = ("FARGATE", "FARGATE_SPOT")
ALLOCATION_STRATEGIES = {
    "EC2": ("BEST_FIT", "BEST_FIT_PROGRESSIVE", "SPOT_CAPACITY_OPTIMIZED"),
    "SPOT": ("BEST_FIT", "BEST_FIT_PROGRESSIVE", "SPOT_CAPACITY_OPTIMIZED"),
    "FARGATE": ("SPOT_CAPACITY_OPTIMIZED",),
    "FARGATE_SPOT": ("SPOT_CAPACITY_OPTIMIZED",),
}


def validate_vpc_configuration(vpc_config: Any) -> bool:
    """
    Check a ``{"subnets": [...], "security_group_ids": [...]}`` mapping.

    Raises:
        ValueError: If either list is missing or empty
    """
    if not isinstance(vpc_config, dict):
        raise ValueError("VPC configuration must be a dictionary")
    subnets = vpc_config.get("subnets")
    if not isinstance(subnets, list) or not subnets:
        raise ValueError("VPC configuration must include non-empty subnets array")
    security_groups = vpc_config.get("security_group_ids")
    if not isinstance(security_groups, list) or not security_groups:
        raise ValueError("VPC configuration must include non-empty security_group_ids array")
    return True


class LaunchTemplate(ResourceAttributes):
    launch_template_id: Optional[str] = None
    launch_template_name: Optional[str] = None
    version: Optional[str] = None


class ComputeResources(ResourceAttributes):
    """The ``compute_resources`` block of a managed environment."""

    type: Literal["EC2", "SPOT", "FARGATE", "FARGATE_SPOT"]
    allocation_strategy: Optional[str] = None
    min_vcpus: Optional[int] = None
    max_vcpus: int
    desired_vcpus: Optional[int] = None
    instance_types: Optional[List[str]] = None
    subnets: List[str] = Field(..., min_length=1)
    security_group_ids: List[str] = Field(default_factory=list)
    instance_role: Optional[str] = None
    spot_iam_fleet_request_role: Optional[str] = None
    bid_percentage: Optional[int] = Field(None, ge=0, le=100)
    ec2_key_pair: Optional[str] = None
    image_id: Optional[str] = None
    launch_template: Optional[LaunchTemplate] = None
    platform_capabilities: Optional[List[str]] = None
    tags: Dict[str, str] = Field(default_factory=dict)

    @field_validator('instance_types', mode='before')
    @classmethod
    def validate_instance_types(cls, v: Any) -> Any:
        if v is None:
            return v
        if not isinstance(v, list) or not all(isinstance(t, str) for t in v):
            raise ValueError("Instance types must be an array of strings")
        for instance_type in v:
            if instance_type != OPTIMAL and not INSTANCE_TYPE_PATTERN.match(instance_type):
                raise ValueError(f"Invalid instance type format: {instance_type}")
        return v

    @model_validator(mode='after')
    def validate_resources(self) -> 'ComputeResources':
        if self.allocation_strategy and self.allocation_strategy not in ALLOCATION_STRATEGIES[self.type]:
            raise ValueError(
                f"Invalid allocation strategy '{self.allocation_strategy}' for type '{self.type}'"
            )

        for field_name in ("min_vcpus", "max_vcpus", "desired_vcpus"):
            value = getattr(self, field_name)
            if value is not None and value < 0:
                raise ValueError(f"{field_name} must be non-negative")
        if self.min_vcpus is not None and self.min_vcpus > self.max_vcpus:
            raise ValueError("min_vcpus cannot be greater than max_vcpus")
        if self.desired_vcpus is not None and self.desired_vcpus > self.max_vcpus:
            raise ValueError("desired_vcpus cannot be greater than max_vcpus")

        if self.type == "SPOT" and self.spot_iam_fleet_request_role is None:
            raise ValueError("SPOT compute resources require spot_iam_fleet_request_role")

        if self.type in FARGATE_TYPES:
            if self.platform_capabilities is not None and "FARGATE" not in self.platform_capabilities:
                raise ValueError("Fargate compute resources must include FARGATE platform capability")
        return self

    def to_terraform(self) -> Dict[str, Any]:
        block: Dict[str, Any] = {
            "type": self.type,
            "allocation_strategy": self.allocation_strategy,
            "min_vcpus": self.min_vcpus,
            "max_vcpus": self.max_vcpus,
            "desired_vcpus": self.desired_vcpus,
            "instance_type": self.instance_types,
            "subnets": self.subnets,
            "security_group_ids": self.security_group_ids or None,
            "instance_role": self.instance_role,
            "spot_iam_fleet_request_role": self.spot_iam_fleet_request_role,
            "bid_percentage": self.bid_percentage,
            "ec2_key_pair": self.ec2_key_pair,
            "image_id": self.image_id,
        }
        if self.launch_template:
            block["launch_template"] = self.launch_template.model_dump(exclude_none=True)
        if self.tags:
            block["tags"] = dict(self.tags)
        return block


class BatchComputeEnvironmentAttributes(TaggedAttributes):
    """Attributes of a Batch compute environment."""

    compute_environment_name: Optional[str] = None
    compute_environment_name_prefix: Optional[str] = None
    type: Literal["MANAGED", "UNMANAGED"] = "MANAGED"
    state: Literal["ENABLED", "DISABLED"] = "ENABLED"
    service_role: Optional[str] = None
    compute_resources: Optional[ComputeResources] = None

    @field_validator('compute_environment_name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not 1 <= len(v) <= 128:
            raise ValueError("Compute environment name must be between 1 and 128 characters")
        if not NAME_PATTERN.match(v):
            raise ValueError(
                "Compute environment name can only contain letters, numbers, hyphens, and underscores"
            )
        return v

    @model_validator(mode='after')
    def validate_environment(self) -> 'BatchComputeEnvironmentAttributes':
        if self.compute_environment_name and self.compute_environment_name_prefix:
            raise ValueError(
                "Cannot specify both 'compute_environment_name' and 'compute_environment_name_prefix'"
            )
        if self.type == "UNMANAGED" and self.compute_resources is not None:
            raise ValueError("UNMANAGED compute environments cannot have compute_resources")
        if self.type == "MANAGED" and self.compute_resources is None:
            raise ValueError("MANAGED compute environments require compute_resources")
        return self

    @property
    def resource_type(self) -> Optional[str]:
        return self.compute_resources.type if self.compute_resources else None


class BatchComputeEnvironmentReference(ResourceReference):
    """Reference to an ``aws_batch_compute_environment``."""

    OUTPUTS = ("id", "arn", "name", "ecs_cluster_arn", "status", "status_reason", "tags_all")
    COMPUTED = (
        "is_managed", "is_unmanaged", "is_enabled", "is_disabled",
        "supports_ec2", "supports_fargate", "is_spot_based",
    )

    @property
    def is_managed(self) -> bool:
        return self.attrs.type == "MANAGED"

    @property
    def is_unmanaged(self) -> bool:
        return self.attrs.type == "UNMANAGED"

    @property
    def is_enabled(self) -> bool:
        return self.attrs.state == "ENABLED"

    @property
    def is_disabled(self) -> bool:
        return self.attrs.state == "DISABLED"

    @property
    def supports_ec2(self) -> bool:
        return self.attrs.resource_type in EC2_TYPES

    @property
    def supports_fargate(self) -> bool:
        return self.attrs.resource_type in FARGATE_TYPES

    @property
    def is_spot_based(self) -> bool:
        return self.attrs.resource_type in ("SPOT", "FARGATE_SPOT")


def aws_batch_compute_environment(
    synth: TerraformSynthesizer,
    name: str,
    attributes: Optional[Mapping[str, Any]] = None,
) -> BatchComputeEnvironmentReference:
    """Create a Batch compute environment."""
    attrs = BatchComputeEnvironmentAttributes.build(attributes)

    body: Dict[str, Any] = {
        "compute_environment_name": attrs.compute_environment_name,
        "compute_environment_name_prefix": attrs.compute_environment_name_prefix,
        "type": attrs.type,
        "state": attrs.state,
        "service_role": attrs.service_role,
    }
    if attrs.compute_resources:
        body["compute_resources"] = attrs.compute_resources.to_terraform()
    body["tags"] = attrs.tags_block()

    synth.resource(RESOURCE_TYPE, name, body)
    return BatchComputeEnvironmentReference(RESOURCE_TYPE, name, attrs)


class BatchComputeEnvironmentTemplates:
    """Attribute presets for common compute environment shapes."""

    @staticmethod
    def ec2_managed_environment(name: str, vpc_config: Dict[str, Any], options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        validate_vpc_configuration(vpc_config)
        options = options or {}
        return {
            "compute_environment_name": name,
            "type": "MANAGED",
            "state": "ENABLED",
            "compute_resources": {
                "type": "EC2",
                "allocation_strategy": "BEST_FIT_PROGRESSIVE",
                "min_vcpus": options.get("min_vcpus", 0),
                "max_vcpus": options.get("max_vcpus", 100),
                "desired_vcpus": options.get("desired_vcpus", 0),
                "instance_types": options.get("instance_types", [OPTIMAL]),
                "subnets": vpc_config["subnets"],
                "security_group_ids": vpc_config["security_group_ids"],
                "instance_role": options.get("instance_role"),
                "tags": options.get("tags", {}),
            },
        }

    @staticmethod
    def spot_managed_environment(name: str, vpc_config: Dict[str, Any], options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        validate_vpc_configuration(vpc_config)
        options = options or {}
        return {
            "compute_environment_name": name,
            "type": "MANAGED",
            "state": "ENABLED",
            "compute_resources": {
                "type": "SPOT",
                "allocation_strategy": "SPOT_CAPACITY_OPTIMIZED",
                "min_vcpus": options.get("min_vcpus", 0),
                "max_vcpus": options.get("max_vcpus", 100),
                "desired_vcpus": options.get("desired_vcpus", 0),
                "instance_types": options.get("instance_types", [OPTIMAL]),
                "spot_iam_fleet_request_role": options.get("spot_iam_fleet_request_role"),
                "bid_percentage": options.get("bid_percentage", 50),
                "subnets": vpc_config["subnets"],
                "security_group_ids": vpc_config["security_group_ids"],
                "instance_role": options.get("instance_role"),
                "tags": options.get("tags", {}),
            },
        }

    @staticmethod
    def fargate_managed_environment(name: str, vpc_config: Dict[str, Any], options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return _fargate_environment("FARGATE", name, vpc_config, options or {})

    @staticmethod
    def fargate_spot_managed_environment(name: str, vpc_config: Dict[str, Any], options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return _fargate_environment("FARGATE_SPOT", name, vpc_config, options or {})

    @staticmethod
    def unmanaged_environment(name: str, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        options = options or {}
        return {
            "compute_environment_name": name,
            "type": "UNMANAGED",
            "state": options.get("state", "ENABLED"),
            "service_role": options.get("service_role"),
            "tags": options.get("tags", {}),
        }


def _fargate_environment(resource_type: str, name: str, vpc_config: Dict[str, Any], options: Dict[str, Any]) -> Dict[str, Any]:
    validate_vpc_configuration(vpc_config)
    return {
        "compute_environment_name": name,
        "type": "MANAGED",
        "state": "ENABLED",
        "compute_resources": {
            "type": resource_type,
            "max_vcpus": options.get("max_vcpus", 100),
            "subnets": vpc_config["subnets"],
            "security_group_ids": vpc_config["security_group_ids"],
            "platform_capabilities": ["FARGATE"],
            "tags": options.get("tags", {}),
        },
    }


class BatchInstanceTypes:
    """Instance type groups for ``instance_types``."""

    COMPUTE_OPTIMIZED = [
        "c5.large", "c5.xlarge", "c5.2xlarge", "c5.4xlarge", "c5.9xlarge", "c5.18xlarge",
        "c6i.large", "c6i.xlarge", "c6i.2xlarge", "c6i.4xlarge", "c6i.8xlarge",
    ]
    MEMORY_OPTIMIZED = [
        "r5.large", "r5.xlarge", "r5.2xlarge", "r5.4xlarge", "r5.8xlarge", "r5.16xlarge",
        "r6i.large", "r6i.xlarge", "r6i.2xlarge", "r6i.4xlarge", "r6i.8xlarge",
    ]
    GENERAL_PURPOSE = [
        "m5.large", "m5.xlarge", "m5.2xlarge", "m5.4xlarge", "m5.8xlarge", "m5.16xlarge",
        "m6i.large", "m6i.xlarge", "m6i.2xlarge", "m6i.4xlarge", "m6i.8xlarge",
    ]
    GPU = [
        "p3.2xlarge", "p3.8xlarge", "p3.16xlarge",
        "g4dn.xlarge", "g4dn.2xlarge", "g4dn.4xlarge", "g4dn.8xlarge", "g4dn.12xlarge",
    ]

    @classmethod
    def for_workload(cls, workload: str) -> List[str]:
        groups = {
            "compute": cls.COMPUTE_OPTIMIZED,
            "memory": cls.MEMORY_OPTIMIZED,
            "general": cls.GENERAL_PURPOSE,
            "gpu": cls.GPU,
        }
        if workload not in groups:
            raise ValueError(f"Unknown workload '{workload}'; use one of: {', '.join(groups)}")
        return list(groups[workload])
