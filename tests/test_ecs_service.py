import pytest
from pydantic import ValidationError

from terraform_aws.resources import aws_ecs_service
from terraform_aws.resources.ecs_service import (
    EcsPlacementConstraint,
    EcsPlacementStrategy,
    EcsServiceAttributes,
)

from conftest import resource_body

TARGET_GROUP = "arn:aws:elasticloadbalancing:us-east-1:123456789012:targetgroup/web/abc123"


def service(**overrides):
    attributes = {"name": "web", "cluster": "${aws_ecs_cluster.main.id}", "task_definition": "web:3"}
    attributes.update(overrides)
    return attributes


def load_balancer():
    return {"target_group_arn": TARGET_GROUP, "container_name": "web", "container_port": 8080}


@pytest.mark.parametrize("task_definition", [
    "web:3",
    "${aws_ecs_task_definition.web.arn}",
    "arn:aws:ecs:us-east-1:123456789012:task-definition/web:7",
])
def test_task_definition_formats(task_definition):
    assert EcsServiceAttributes(**service(task_definition=task_definition)).task_definition == task_definition


def test_invalid_task_definition():
    with pytest.raises(ValidationError, match="Invalid task definition format"):
        EcsServiceAttributes(**service(task_definition="web"))


@pytest.mark.parametrize("arn", [
    "tg-123",
    "arn:aws:elasticloadbalancing:us-east-1:123456789012:loadbalancer/app/web/50dc6c495c0c9188",
    "arn:aws:elasticloadbalancing:us-east-1:123456789012:listener/app/web/50dc6c495c0c9188/f2f7dc8efc522ab2",
])
def test_invalid_target_group(arn):
    with pytest.raises(ValidationError, match="Invalid target group ARN format"):
        EcsServiceAttributes(**service(load_balancer=[{**load_balancer(), "target_group_arn": arn}]))


def test_target_group_interpolation_accepted():
    attrs = EcsServiceAttributes(**service(load_balancer=[
        {**load_balancer(), "target_group_arn": "${aws_lb_target_group.web.arn}"},
    ]))
    assert attrs.load_balancer[0].target_group_arn == "${aws_lb_target_group.web.arn}"


@pytest.mark.parametrize("overrides, message", [
    ({"launch_type": "FARGATE", "capacity_provider_strategy": [{"capacity_provider": "FARGATE"}]},
     "Cannot specify both launch_type and capacity_provider_strategy"),
    ({"scheduling_strategy": "DAEMON", "desired_count": 2},
     "desired_count must be 0 or omitted for DAEMON scheduling"),
    ({"scheduling_strategy": "DAEMON", "placement_strategy": [{"type": "random"}]},
     "placement_strategy cannot be used with DAEMON scheduling"),
    ({"health_check_grace_period_seconds": 60},
     "health_check_grace_period_seconds requires load_balancer configuration"),
    ({"service_connect_configuration": {"namespace": "apps"}},
     "Service Connect requires at least one service configuration"),
])
def test_cross_field_rules(overrides, message):
    with pytest.raises(ValidationError, match=message):
        EcsServiceAttributes(**service(**overrides))


def test_placement_rules():
    with pytest.raises(ValidationError, match="Expression is required for memberOf constraint type"):
        EcsPlacementConstraint(type="memberOf")
    with pytest.raises(ValidationError, match="Field is required for binpack strategy"):
        EcsPlacementStrategy(type="binpack")
    assert EcsPlacementStrategy(type="random").field is None


def test_deployment_percent_ranges():
    with pytest.raises(ValidationError):
        EcsServiceAttributes(**service(deployment_configuration={"maximum_percent": 250}))


def test_fargate_service_synthesis(synth):
    ref = aws_ecs_service(synth, "web", service(
        desired_count=3,
        launch_type="FARGATE",
        load_balancer=[load_balancer()],
        network_configuration={"subnets": ["subnet-a", "subnet-b"], "security_groups": ["sg-1"]},
        health_check_grace_period_seconds=30,
        deployment_configuration={"deployment_circuit_breaker": {"enable": True, "rollback": True}},
        placement_strategy=[{"type": "spread", "field": "attribute:ecs.availability-zone"}],
        propagate_tags="SERVICE",
    ))

    body = resource_body(synth, "aws_ecs_service", "web")
    assert body["desired_count"] == 3
    assert body["launch_type"] == "FARGATE"
    assert body["platform_version"] == "LATEST"
    assert body["load_balancer"] == [load_balancer()]
    assert body["network_configuration"] == {
        "subnets": ["subnet-a", "subnet-b"], "security_groups": ["sg-1"], "assign_public_ip": False,
    }
    assert body["deployment_circuit_breaker"] == {"enable": True, "rollback": True}
    assert body["deployment_maximum_percent"] == 200
    assert body["deployment_minimum_healthy_percent"] == 100
    assert body["deployment_controller"] == {"type": "ECS"}
    assert body["ordered_placement_strategy"] == [{"type": "spread", "field": "attribute:ecs.availability-zone"}]
    assert body["propagate_tags"] == "SERVICE"
    assert "scheduling_strategy" not in body

    assert ref.task_definition == "${aws_ecs_service.web.task_definition}"
    assert ref.using_fargate
    assert ref.load_balanced
    assert ref.deployment_safe
    assert ref.estimated_monthly_cost == 3 * 50.0 + 8.0


def test_capacity_provider_service(synth):
    ref = aws_ecs_service(synth, "worker", service(
        name="worker",
        capacity_provider_strategy=[
            {"capacity_provider": "FARGATE_SPOT", "weight": 3},
            {"capacity_provider": "FARGATE", "weight": 1, "base": 1},
        ],
    ))
    body = resource_body(synth, "aws_ecs_service", "worker")
    assert body["desired_count"] == 1
    assert body["capacity_provider_strategy"] == [
        {"capacity_provider": "FARGATE_SPOT", "weight": 3},
        {"capacity_provider": "FARGATE", "weight": 1, "base": 1},
    ]
    assert "launch_type" not in body
    assert ref.using_fargate


def test_daemon_service(synth):
    ref = aws_ecs_service(synth, "agent", service(
        name="agent", scheduling_strategy="DAEMON", launch_type="EC2",
        placement_constraints=[{"type": "memberOf", "expression": "attribute:ecs.os-type == linux"}],
    ))
    body = resource_body(synth, "aws_ecs_service", "agent")
    assert "desired_count" not in body
    assert body["scheduling_strategy"] == "DAEMON"
    assert "platform_version" not in body
    assert body["placement_constraints"] == [
        {"type": "memberOf", "expression": "attribute:ecs.os-type == linux"},
    ]
    assert not ref.using_fargate
    assert ref.estimated_monthly_cost == 0.0


def test_service_connect(synth):
    ref = aws_ecs_service(synth, "api", service(
        name="api",
        launch_type="EC2",
        desired_count=2,
        service_connect_configuration={
            "namespace": "apps",
            "service": [{"port_name": "http", "client_alias": [{"port": 80, "dns_name": "api"}]}],
        },
    ))
    block = resource_body(synth, "aws_ecs_service", "api")["service_connect_configuration"]
    assert block == {
        "enabled": True,
        "namespace": "apps",
        "service": [{"port_name": "http", "client_alias": [{"port": 80, "dns_name": "api"}]}],
    }
    assert ref.service_connect_enabled
    assert ref.estimated_monthly_cost == 2 * 30.0 + 5.0
