import pytest
from pydantic import ValidationError

from terraform_aws.resources import aws_security_group
from terraform_aws.resources.security_group import SecurityGroupAttributes, SecurityGroupRule

from conftest import resource_body

HTTPS = {"from_port": 443, "to_port": 443, "protocol": "tcp", "cidr_blocks": ["0.0.0.0/0"]}


def test_rule_missing_fields():
    with pytest.raises(ValidationError, match="Security group rule is missing required fields: to_port, protocol"):
        SecurityGroupRule.model_validate({"from_port": 22})


@pytest.mark.parametrize("protocol", ["tcp", "udp", "icmp", "icmpv6", "-1", "all", "6", -1, 50])
def test_valid_protocols(protocol):
    rule = SecurityGroupRule.model_validate({"from_port": 0, "to_port": 0, "protocol": protocol})
    assert rule.protocol == str(protocol)


@pytest.mark.parametrize("protocol", ["http", "256", "tcp/udp"])
def test_invalid_protocols(protocol):
    with pytest.raises(ValidationError, match=f"protocol '{protocol}' is not valid"):
        SecurityGroupRule.model_validate({"from_port": 0, "to_port": 0, "protocol": protocol})


def test_invalid_cidr_blocks():
    with pytest.raises(ValidationError, match="invalid CIDR block: 10.0.0.0"):
        SecurityGroupRule.model_validate({**HTTPS, "cidr_blocks": ["10.0.0.0"]})
    with pytest.raises(ValidationError, match="invalid CIDR block: 10.0.0.0/8"):
        SecurityGroupRule.model_validate({**HTTPS, "cidr_blocks": [], "ipv6_cidr_blocks": ["10.0.0.0/8"]})


def test_port_order():
    with pytest.raises(ValidationError, match=r"from_port \(8080\) cannot be greater than to_port \(80\)"):
        SecurityGroupRule.model_validate({"from_port": 8080, "to_port": 80, "protocol": "tcp"})


def test_naming_rules():
    with pytest.raises(ValidationError, match="Cannot specify both 'name' and 'name_prefix'"):
        SecurityGroupAttributes(name="web", name_prefix="web-")
    with pytest.raises(ValidationError, match="cannot start with 'sg-'"):
        SecurityGroupAttributes(name="sg-web")


def test_rule_to_terraform_carries_every_attribute():
    rule = SecurityGroupRule.model_validate({"from_port": 22, "to_port": 22, "protocol": "tcp", "self": True})
    assert rule.to_terraform() == {
        "from_port": 22,
        "to_port": 22,
        "protocol": "tcp",
        "cidr_blocks": [],
        "ipv6_cidr_blocks": [],
        "prefix_list_ids": [],
        "security_groups": [],
        "self": True,
        "description": "",
    }


def test_security_group_synthesis(synth):
    ref = aws_security_group(synth, "web", {
        "name": "web",
        "vpc_id": "${aws_vpc.main.id}",
        "description": "Web tier",
        "ingress_rules": [
            HTTPS,
            {"from_port": 80, "to_port": 80, "protocol": "tcp", "ipv6_cidr_blocks": ["::/0"]},
            {"from_port": 8000, "to_port": 8100, "protocol": "tcp", "cidr_blocks": ["0.0.0.0/0"]},
            {"from_port": 22, "to_port": 22, "protocol": "tcp", "cidr_blocks": ["10.0.0.0/8"]},
        ],
        "egress_rules": [{"from_port": 0, "to_port": 0, "protocol": "-1", "cidr_blocks": ["0.0.0.0/0"]}],
        "revoke_rules_on_delete": True,
        "tags": {"tier": "web"},
    })

    body = resource_body(synth, "aws_security_group", "web")
    assert body["vpc_id"] == "${aws_vpc.main.id}"
    assert len(body["ingress"]) == 4
    assert body["ingress"][0]["cidr_blocks"] == ["0.0.0.0/0"]
    assert body["ingress"][0]["self"] is False
    assert body["egress"][0]["protocol"] == "-1"
    assert body["revoke_rules_on_delete"] is True
    assert "name_prefix" not in body

    assert ref.id == "${aws_security_group.web.id}"
    assert ref.ingress_rule_count == 4
    assert ref.egress_rule_count == 1
    assert ref.allows_public_ingress
    assert ref.open_ports == [80, 443]


def test_empty_security_group(synth):
    ref = aws_security_group(synth, "empty", {"name_prefix": "app-"})
    assert resource_body(synth, "aws_security_group", "empty") == {"name_prefix": "app-"}
    assert not ref.allows_public_ingress
    assert ref.open_ports == []
