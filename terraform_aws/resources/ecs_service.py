"""aws_ecs_service: long-running ECS services."""

import re
from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import Field, field_validator, model_validator

from terraform_aws.synthesis import ResourceReference, TerraformSynthesizer
from .base import ResourceAttributes, TaggedAttributes
from .ecs_cluster import EcsCapacityProviderStrategy
from .types import is_interpolation

RESOURCE_TYPE = "aws_ecs_service"

TASK_DEFINITION_PATTERN = re.compile(r"^[A-Za-z0-9_-]+:\d+$")
TASK_DEFINITION_ARN_PATTERN = re.compile(
    r"^arn:aws[a-z-]*:ecs:[a-z0-9-]+:\d{12}:task-definition/[A-Za-z0-9_-]+(:\d+)?$"
)
TARGET_GROUP_ARN_PATTERN = re.compile(r"^arn:aws[a-z-]*:elasticloadbalancing:[a-z0-9-]+:\d{12}:targetgroup/.+")

DEFAULT_REPLICA_COUNT = 1

# Monthly USD per running task, plus flat add-ons
FARGATE_TASK_MONTHLY = 50.0
EC2_TASK_MONTHLY = 30.0
SERVICE_CONNECT_MONTHLY = 5.0
LOAD_BALANCER_MONTHLY = 8.0


class EcsLoadBalancer(ResourceAttributes):
    target_group_arn: str
    container_name: str
    container_port: int = Field(..., ge=1, le=65535)

    @field_validator('target_group_arn')
    @classmethod
    def validate_target_group_arn(cls, v: str) -> str:
        if not (is_interpolation(v) or TARGET_GROUP_ARN_PATTERN.match(v)):
            raise ValueError(f"Invalid target group ARN format: {v}")
        return v


class EcsNetworkConfiguration(ResourceAttributes):
    subnets: List[str] = Field(..., min_length=1)
    security_groups: Optional[List[str]] = None
    assign_public_ip: bool = False


class EcsServiceRegistry(ResourceAttributes):
    registry_arn: str
    port: Optional[int] = Field(None, ge=1, le=65535)
    container_port: Optional[int] = Field(None, ge=1, le=65535)
    container_name: Optional[str] = None


class EcsPlacementConstraint(ResourceAttributes):
    type: Literal["distinctInstance", "memberOf"]
    expression: Optional[str] = None

    @model_validator(mode='after')
    def validate_expression(self) -> 'EcsPlacementConstraint':
        if self.type == "memberOf" and not self.expression:
            raise ValueError("Expression is required for memberOf constraint type")
        return self


class EcsPlacementStrategy(ResourceAttributes):
    type: Literal["random", "spread", "binpack"]
    field: Optional[str] = None

    @model_validator(mode='after')
    def validate_field(self) -> 'EcsPlacementStrategy':
        if self.type in ("spread", "binpack") and not self.field:
            raise ValueError(f"Field is required for {self.type} strategy")
        return self


class DeploymentCircuitBreaker(ResourceAttributes):
    enable: bool = False
    rollback: bool = False


class EcsDeploymentConfiguration(ResourceAttributes):
    deployment_circuit_breaker: DeploymentCircuitBreaker = Field(default_factory=DeploymentCircuitBreaker)
    maximum_percent: int = Field(200, ge=100, le=200)
    minimum_healthy_percent: int = Field(100, ge=0, le=100)


class EcsDeploymentController(ResourceAttributes):
    type: Literal["ECS", "CODE_DEPLOY", "EXTERNAL"] = "ECS"


class ServiceConnectClientAlias(ResourceAttributes):
    port: int = Field(..., ge=1, le=65535)
    dns_name: Optional[str] = None


class ServiceConnectTimeout(ResourceAttributes):
    idle_timeout_seconds: Optional[int] = Field(None, ge=0)
    per_request_timeout_seconds: Optional[int] = Field(None, ge=0)


class ServiceConnectService(ResourceAttributes):
    port_name: str
    discovery_name: Optional[str] = None
    ingress_port_override: Optional[int] = Field(None, ge=1, le=65535)
    client_alias: List[ServiceConnectClientAlias] = Field(default_factory=list)
    timeout: Optional[ServiceConnectTimeout] = None


class ServiceConnectSecretOption(ResourceAttributes):
    name: str
    value_from: str


class ServiceConnectLogConfiguration(ResourceAttributes):
    log_driver: str
    options: Optional[Dict[str, str]] = None
    secret_option: List[ServiceConnectSecretOption] = Field(default_factory=list)


class ServiceConnectConfiguration(ResourceAttributes):
    enabled: bool = True
    namespace: Optional[str] = None
    service: List[ServiceConnectService] = Field(default_factory=list)
    log_configuration: Optional[ServiceConnectLogConfiguration] = None


class EcsServiceAttributes(TaggedAttributes):
    """Attributes of an ECS service."""

    name: str = Field(..., min_length=1, max_length=255)
    cluster: Optional[str] = None
    task_definition: str

    desired_count: Optional[int] = Field(None, ge=0)
    launch_type: Optional[Literal["EC2", "FARGATE", "EXTERNAL"]] = None
    platform_version: str = "LATEST"
    capacity_provider_strategy: List[EcsCapacityProviderStrategy] = Field(default_factory=list)
    scheduling_strategy: Literal["REPLICA", "DAEMON"] = "REPLICA"

    load_balancer: List[EcsLoadBalancer] = Field(default_factory=list)
    network_configuration: Optional[EcsNetworkConfiguration] = None
    service_registries: List[EcsServiceRegistry] = Field(default_factory=list)
    placement_constraints: List[EcsPlacementConstraint] = Field(default_factory=list)
    placement_strategy: List[EcsPlacementStrategy] = Field(default_factory=list)

    deployment_configuration: EcsDeploymentConfiguration = Field(default_factory=EcsDeploymentConfiguration)
    deployment_controller: EcsDeploymentController = Field(default_factory=EcsDeploymentController)

    health_check_grace_period_seconds: Optional[int] = Field(None, ge=0, le=2147483647)
    enable_ecs_managed_tags: bool = True
    enable_execute_command: bool = False
    propagate_tags: Literal["NONE", "SERVICE", "TASK_DEFINITION"] = "NONE"
    service_connect_configuration: Optional[ServiceConnectConfiguration] = None

    wait_for_steady_state: bool = False
    force_new_deployment: bool = False

    @field_validator('task_definition')
    @classmethod
    def validate_task_definition(cls, v: str) -> str:
        if not (
            is_interpolation(v)
            or TASK_DEFINITION_PATTERN.match(v)
            or TASK_DEFINITION_ARN_PATTERN.match(v)
        ):
            raise ValueError("Invalid task definition format")
        return v

    @model_validator(mode='after')
    def validate_service(self) -> 'EcsServiceAttributes':
        if self.launch_type and self.capacity_provider_strategy:
            raise ValueError("Cannot specify both launch_type and capacity_provider_strategy")

        if self.scheduling_strategy == "DAEMON":
            if self.desired_count not in (None, 0):
                raise ValueError("desired_count must be 0 or omitted for DAEMON scheduling")
            if self.placement_strategy:
                raise ValueError("placement_strategy cannot be used with DAEMON scheduling")

        if self.health_check_grace_period_seconds is not None and not self.load_balancer:
            raise ValueError("health_check_grace_period_seconds requires load_balancer configuration")

        sc = self.service_connect_configuration
        if sc and sc.enabled and not sc.service:
            raise ValueError("Service Connect requires at least one service configuration")
        return self

    @property
    def task_count(self) -> int:
        if self.scheduling_strategy == "DAEMON":
            return 0
        return DEFAULT_REPLICA_COUNT if self.desired_count is None else self.desired_count


class EcsServiceReference(ResourceReference):
    """Reference to an ``aws_ecs_service``."""

    OUTPUTS = (
        "id", "name", "cluster", "iam_role", "desired_count", "launch_type",
        "platform_version", "task_definition", "tags_all",
    )
    COMPUTED = (
        "using_fargate", "load_balanced", "service_discovery_enabled",
        "service_connect_enabled", "deployment_safe", "estimated_monthly_cost",
    )

    @property
    def using_fargate(self) -> bool:
        if self.attrs.launch_type == "FARGATE":
            return True
        return any("FARGATE" in s.capacity_provider for s in self.attrs.capacity_provider_strategy)

    @property
    def load_balanced(self) -> bool:
        return bool(self.attrs.load_balancer)

    @property
    def service_discovery_enabled(self) -> bool:
        return bool(self.attrs.service_registries)

    @property
    def service_connect_enabled(self) -> bool:
        sc = self.attrs.service_connect_configuration
        return sc is not None and sc.enabled

    @property
    def deployment_safe(self) -> bool:
        return self.attrs.deployment_configuration.deployment_circuit_breaker.enable

    @property
    def estimated_monthly_cost(self) -> float:
        per_task = FARGATE_TASK_MONTHLY if self.using_fargate else EC2_TASK_MONTHLY
        cost = self.attrs.task_count * per_task
        if self.service_connect_enabled:
            cost += SERVICE_CONNECT_MONTHLY
        cost += LOAD_BALANCER_MONTHLY * len(self.attrs.load_balancer)
        return cost


def _drop_empty(value: Any) -> Any:
    """Remove ``None`` and empty-list entries from nested dumps."""
    if isinstance(value, dict):
        return {k: _drop_empty(v) for k, v in value.items() if v is not None and v != []}
    if isinstance(value, list):
        return [_drop_empty(v) for v in value]
    return value


def _service_connect_block(config: ServiceConnectConfiguration) -> Dict[str, Any]:
    return _drop_empty(config.model_dump())


def aws_ecs_service(
    synth: TerraformSynthesizer,
    name: str,
    attributes: Optional[Mapping[str, Any]] = None,
) -> EcsServiceReference:
    """
    Create an ECS service.

    ``desired_count`` is omitted for DAEMON services; ``platform_version`` is
    only emitted for the FARGATE launch type.
    """
    attrs = EcsServiceAttributes.build(attributes)

    body: Dict[str, Any] = {
        "name": attrs.name,
        "cluster": attrs.cluster,
        "task_definition": attrs.task_definition,
    }

    if attrs.scheduling_strategy != "DAEMON":
        body["desired_count"] = attrs.task_count
    if attrs.scheduling_strategy != "REPLICA":
        body["scheduling_strategy"] = attrs.scheduling_strategy

    if attrs.launch_type:
        body["launch_type"] = attrs.launch_type
        if attrs.launch_type == "FARGATE":
            body["platform_version"] = attrs.platform_version

    if attrs.capacity_provider_strategy:
        strategies = []
        for strategy in attrs.capacity_provider_strategy:
            entry: Dict[str, Any] = {
                "capacity_provider": strategy.capacity_provider,
                "weight": strategy.weight,
            }
            if strategy.base > 0:
                entry["base"] = strategy.base
            strategies.append(entry)
        body["capacity_provider_strategy"] = strategies

    if attrs.load_balancer:
        body["load_balancer"] = [lb.model_dump() for lb in attrs.load_balancer]
    if attrs.network_configuration:
        body["network_configuration"] = attrs.network_configuration.model_dump(exclude_none=True)
    if attrs.service_registries:
        body["service_registries"] = [r.model_dump(exclude_none=True) for r in attrs.service_registries]

    deployment = attrs.deployment_configuration
    body["deployment_circuit_breaker"] = deployment.deployment_circuit_breaker.model_dump()
    body["deployment_maximum_percent"] = deployment.maximum_percent
    body["deployment_minimum_healthy_percent"] = deployment.minimum_healthy_percent
    body["deployment_controller"] = attrs.deployment_controller.model_dump()

    if attrs.placement_constraints:
        body["placement_constraints"] = [c.model_dump(exclude_none=True) for c in attrs.placement_constraints]
    if attrs.placement_strategy:
        body["ordered_placement_strategy"] = [s.model_dump(exclude_none=True) for s in attrs.placement_strategy]

    body["health_check_grace_period_seconds"] = attrs.health_check_grace_period_seconds
    body["enable_ecs_managed_tags"] = attrs.enable_ecs_managed_tags
    body["enable_execute_command"] = attrs.enable_execute_command
    if attrs.propagate_tags != "NONE":
        body["propagate_tags"] = attrs.propagate_tags

    if attrs.service_connect_configuration:
        body["service_connect_configuration"] = _service_connect_block(attrs.service_connect_configuration)

    body["wait_for_steady_state"] = attrs.wait_for_steady_state
    body["force_new_deployment"] = attrs.force_new_deployment
    body["tags"] = attrs.tags_block()

    synth.resource(RESOURCE_TYPE, name, body)
    return EcsServiceReference(RESOURCE_TYPE, name, attrs)
