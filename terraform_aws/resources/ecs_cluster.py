"""aws_ecs_cluster: ECS clusters."""

from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import Field, field_validator, model_validator

from terraform_aws.synthesis import ResourceReference, TerraformSynthesizer
from .base import ResourceAttributes, TaggedAttributes

RESOURCE_TYPE = "aws_ecs_cluster"
MANAGED_CAPACITY_PROVIDERS = ("FARGATE", "FARGATE_SPOT")
CONTAINER_INSIGHTS = "containerInsights"


class ClusterSetting(ResourceAttributes):
    name: Literal["containerInsights"]
    value: Literal["enabled", "disabled"]


class ExecuteCommandLogConfiguration(ResourceAttributes):
    cloud_watch_encryption_enabled: Optional[bool] = None
    cloud_watch_log_group_name: Optional[str] = None
    s3_bucket_name: Optional[str] = None
    s3_bucket_encryption_enabled: Optional[bool] = None
    s3_key_prefix: Optional[str] = None


class ExecuteCommandConfiguration(ResourceAttributes):
    kms_key_id: Optional[str] = None
    logging: Optional[Literal["DEFAULT", "NONE", "OVERRIDE"]] = None
    log_configuration: Optional[ExecuteCommandLogConfiguration] = None


class ClusterConfiguration(ResourceAttributes):
    execute_command_configuration: Optional[ExecuteCommandConfiguration] = None


class ServiceConnectDefaults(ResourceAttributes):
    namespace: str


class EcsCapacityProviderStrategy(ResourceAttributes):
    """One entry of a capacity provider strategy, shared with ``aws_ecs_service``."""

    capacity_provider: str
    weight: int = Field(1, ge=0, le=1000)
    base: int = Field(0, ge=0, le=100000)

    @model_validator(mode='after')
    def validate_base_weight(self) -> 'EcsCapacityProviderStrategy':
        if self.base > 0 and self.weight == 0:
            raise ValueError("Cannot have base > 0 with weight = 0")
        return self


class EcsClusterAttributes(TaggedAttributes):
    """Attributes of an ECS cluster."""

    name: str = Field(..., min_length=1, max_length=255)
    capacity_providers: List[str] = Field(default_factory=list)
    container_insights_enabled: Optional[bool] = None
    setting: List[ClusterSetting] = Field(default_factory=list)
    configuration: Optional[ClusterConfiguration] = None
    service_connect_defaults: Optional[ServiceConnectDefaults] = None

    @field_validator('capacity_providers')
    @classmethod
    def validate_capacity_providers(cls, v: List[str]) -> List[str]:
        for provider in v:
            if provider not in MANAGED_CAPACITY_PROVIDERS and not provider.startswith("arn:aws:ecs:"):
                raise ValueError(
                    f"Invalid capacity provider: {provider}. Must be FARGATE, FARGATE_SPOT, or an ARN"
                )
        return v

    @model_validator(mode='after')
    def validate_insights(self) -> 'EcsClusterAttributes':
        if self.container_insights_enabled is not None:
            existing = self._insights_setting()
            expected = "enabled" if self.container_insights_enabled else "disabled"
            if existing is not None and existing.value != expected:
                raise ValueError("container_insights_enabled conflicts with setting value")
        return self

    def _insights_setting(self) -> Optional[ClusterSetting]:
        for entry in self.setting:
            if entry.name == CONTAINER_INSIGHTS:
                return entry
        return None

    @property
    def insights_enabled(self) -> bool:
        if self.container_insights_enabled is not None:
            return self.container_insights_enabled
        existing = self._insights_setting()
        return existing is not None and existing.value == "enabled"

    def settings_block(self) -> List[Dict[str, str]]:
        """Explicit settings plus the one implied by ``container_insights_enabled``."""
        settings = [entry.model_dump() for entry in self.setting]
        if self.container_insights_enabled is not None and self._insights_setting() is None:
            settings.append({
                "name": CONTAINER_INSIGHTS,
                "value": "enabled" if self.container_insights_enabled else "disabled",
            })
        return settings


class EcsClusterReference(ResourceReference):
    """Reference to an ``aws_ecs_cluster``."""

    OUTPUTS = ("id", "arn", "name")
    COMPUTED = ("using_fargate", "using_ec2", "insights_enabled", "estimated_monthly_cost")

    @property
    def using_fargate(self) -> bool:
        return any("FARGATE" in cp for cp in self.attrs.capacity_providers)

    @property
    def using_ec2(self) -> bool:
        return any("FARGATE" not in cp for cp in self.attrs.capacity_providers)

    @property
    def insights_enabled(self) -> bool:
        return self.attrs.insights_enabled

    @property
    def estimated_monthly_cost(self) -> float:
        cost = 5.0 if self.insights_enabled else 0.0
        if self.attrs.service_connect_defaults:
            cost += 2.0
        return cost

    def arn_pattern(self, region: str = "*", account_id: str = "*") -> str:
        return f"arn:aws:ecs:{region}:{account_id}:cluster/{self.attrs.name}"


def aws_ecs_cluster(
    synth: TerraformSynthesizer,
    name: str,
    attributes: Optional[Mapping[str, Any]] = None,
) -> EcsClusterReference:
    """Create an ECS cluster."""
    attrs = EcsClusterAttributes.build(attributes)

    body: Dict[str, Any] = {"name": attrs.name}
    if attrs.capacity_providers:
        body["capacity_providers"] = list(attrs.capacity_providers)

    settings = attrs.settings_block()
    if settings:
        body["setting"] = settings

    if attrs.configuration and attrs.configuration.execute_command_configuration:
        body["configuration"] = attrs.configuration.model_dump(exclude_none=True)
    if attrs.service_connect_defaults:
        body["service_connect_defaults"] = attrs.service_connect_defaults.model_dump()
    body["tags"] = attrs.tags_block()

    synth.resource(RESOURCE_TYPE, name, body)
    return EcsClusterReference(RESOURCE_TYPE, name, attrs)
