"""aws_security_group: VPC security groups with inline rules."""

from typing import Any, Dict, List, Mapping, Optional

from pydantic import Field, field_validator, model_validator

from terraform_aws.synthesis import ResourceReference, TerraformSynthesizer
from .base import ResourceAttributes, TaggedAttributes
from .types import is_cidr

RESOURCE_TYPE = "aws_security_group"

NAMED_PROTOCOLS = ("tcp", "udp", "icmp", "icmpv6", "-1", "all")
RULE_REQUIRED_FIELDS = ("from_port", "to_port", "protocol")
PUBLIC_CIDRS = ("0.0.0.0/0", "::/0")


def _valid_protocol(protocol: str) -> bool:
    if protocol in NAMED_PROTOCOLS:
        return True
    return protocol.isdigit() and 0 <= int(protocol) <= 255


class SecurityGroupRule(ResourceAttributes):
    """One inline ingress or egress rule."""

    from_port: int = Field(..., ge=-1, le=65535)
    to_port: int = Field(..., ge=-1, le=65535)
    protocol: str
    cidr_blocks: List[str] = Field(default_factory=list)
    ipv6_cidr_blocks: List[str] = Field(default_factory=list)
    prefix_list_ids: List[str] = Field(default_factory=list)
    security_groups: List[str] = Field(default_factory=list)
    self_referencing: bool = Field(False, alias="self")
    description: str = ""

    @model_validator(mode='before')
    @classmethod
    def check_required(cls, data: Any) -> Any:
        if isinstance(data, dict):
            missing = [key for key in RULE_REQUIRED_FIELDS if data.get(key) is None]
            if missing:
                raise ValueError(f"Security group rule is missing required fields: {', '.join(missing)}")
        return data

    @field_validator('protocol', mode='before')
    @classmethod
    def validate_protocol(cls, v: Any) -> str:
        v = str(v)
        if not _valid_protocol(v):
            raise ValueError(
                f"protocol '{v}' is not valid; use tcp, udp, icmp, icmpv6, -1 or a protocol number"
            )
        return v

    @field_validator('cidr_blocks')
    @classmethod
    def validate_cidr_blocks(cls, v: List[str]) -> List[str]:
        for block in v:
            if not is_cidr(block, version=4):
                raise ValueError(f"Security group rule has an invalid CIDR block: {block}")
        return v

    @field_validator('ipv6_cidr_blocks')
    @classmethod
    def validate_ipv6_cidr_blocks(cls, v: List[str]) -> List[str]:
        for block in v:
            if not is_cidr(block, version=6):
                raise ValueError(f"Security group rule has an invalid CIDR block: {block}")
        return v

    @model_validator(mode='after')
    def validate_port_range(self) -> 'SecurityGroupRule':
        if self.from_port > self.to_port:
            raise ValueError(
                f"from_port ({self.from_port}) cannot be greater than to_port ({self.to_port})"
            )
        return self

    @property
    def is_public(self) -> bool:
        return any(block in PUBLIC_CIDRS for block in self.cidr_blocks + self.ipv6_cidr_blocks)

    def to_terraform(self) -> Dict[str, Any]:
        """Inline rules in Terraform JSON must carry every attribute."""
        return self.model_dump(by_alias=True)


class SecurityGroupAttributes(TaggedAttributes):
    """Attributes of a security group; every field is optional."""

    name: Optional[str] = Field(None, max_length=255)
    name_prefix: Optional[str] = Field(None, max_length=100)
    vpc_id: Optional[str] = None
    description: Optional[str] = Field(None, max_length=255)
    ingress_rules: List[SecurityGroupRule] = Field(default_factory=list)
    egress_rules: List[SecurityGroupRule] = Field(default_factory=list)
    revoke_rules_on_delete: bool = False

    @model_validator(mode='after')
    def validate_naming(self) -> 'SecurityGroupAttributes':
        if self.name and self.name_prefix:
            raise ValueError("Cannot specify both 'name' and 'name_prefix'")
        if self.name and self.name.lower().startswith("sg-"):
            raise ValueError("Security group names cannot start with 'sg-'")
        return self


class SecurityGroupReference(ResourceReference):
    """Reference to an ``aws_security_group``."""

    OUTPUTS = ("id", "arn", "vpc_id", "owner_id", "name")
    COMPUTED = ("ingress_rule_count", "egress_rule_count", "allows_public_ingress", "open_ports")

    @property
    def ingress_rule_count(self) -> int:
        return len(self.attrs.ingress_rules)

    @property
    def egress_rule_count(self) -> int:
        return len(self.attrs.egress_rules)

    @property
    def allows_public_ingress(self) -> bool:
        return any(rule.is_public for rule in self.attrs.ingress_rules)

    @property
    def open_ports(self) -> List[int]:
        """Ports opened to the internet by single-port ingress rules."""
        return sorted({
            rule.from_port
            for rule in self.attrs.ingress_rules
            if rule.is_public and rule.from_port == rule.to_port
        })


def aws_security_group(
    synth: TerraformSynthesizer,
    name: str,
    attributes: Optional[Mapping[str, Any]] = None,
) -> SecurityGroupReference:
    """Create a security group. Rules are emitted as inline ``ingress``/``egress`` lists."""
    attrs = SecurityGroupAttributes.build(attributes)

    body: Dict[str, Any] = {
        "name": attrs.name,
        "name_prefix": attrs.name_prefix,
        "vpc_id": attrs.vpc_id,
        "description": attrs.description,
    }
    if attrs.ingress_rules:
        body["ingress"] = [rule.to_terraform() for rule in attrs.ingress_rules]
    if attrs.egress_rules:
        body["egress"] = [rule.to_terraform() for rule in attrs.egress_rules]
    if attrs.revoke_rules_on_delete:
        body["revoke_rules_on_delete"] = True
    body["tags"] = attrs.tags_block()

    synth.resource(RESOURCE_TYPE, name, body)
    return SecurityGroupReference(RESOURCE_TYPE, name, attrs)
