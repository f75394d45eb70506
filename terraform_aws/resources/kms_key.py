"""aws_kms_key: customer managed KMS keys."""

from typing import Any, Dict, Literal, Mapping, Optional

from pydantic import Field, field_validator, model_validator

from terraform_aws.synthesis import ResourceReference, TerraformSynthesizer
from .base import TaggedAttributes
from .types import validate_json_document

RESOURCE_TYPE = "aws_kms_key"

KeyUsage = Literal["ENCRYPT_DECRYPT", "SIGN_VERIFY", "GENERATE_VERIFY_MAC"]
KeySpec = Literal[
    "SYMMETRIC_DEFAULT",
    "RSA_2048", "RSA_3072", "RSA_4096",
    "ECC_NIST_P256", "ECC_NIST_P384", "ECC_NIST_P521", "ECC_SECG_P256K1",
    "HMAC_224", "HMAC_256", "HMAC_384", "HMAC_512",
]

# key_usage -> key_spec prefixes it accepts
USAGE_SPEC_PREFIXES = {
    "ENCRYPT_DECRYPT": ("SYMMETRIC_DEFAULT", "RSA_"),
    "SIGN_VERIFY": ("RSA_", "ECC_"),
    "GENERATE_VERIFY_MAC": ("HMAC_",),
}

KEY_MONTHLY_COST = 1.00
MULTI_REGION_MONTHLY_COST = 2.00


class KmsKeyAttributes(TaggedAttributes):
    """Attributes of a KMS key."""

    description: Optional[str] = Field(None, max_length=8192)
    key_usage: KeyUsage = "ENCRYPT_DECRYPT"
    key_spec: KeySpec = "SYMMETRIC_DEFAULT"
    policy: Optional[str] = None
    bypass_policy_lockout_safety_check: bool = False
    deletion_window_in_days: int = Field(30, ge=7, le=30)
    is_enabled: bool = True
    enable_key_rotation: bool = False
    rotation_period_in_days: Optional[int] = Field(None, ge=90, le=2560)
    multi_region: bool = False

    @field_validator('policy')
    @classmethod
    def validate_policy(cls, v: Optional[str]) -> Optional[str]:
        return validate_json_document(v, "policy")

    @model_validator(mode='after')
    def validate_key(self) -> 'KmsKeyAttributes':
        if not self.key_spec.startswith(USAGE_SPEC_PREFIXES[self.key_usage]):
            raise ValueError(f"Key spec {self.key_spec} is not valid for {self.key_usage} usage")

        # Rotation only applies to symmetric encryption keys
        if self.enable_key_rotation and not self.is_symmetric:
            self.enable_key_rotation = False
        return self

    @property
    def is_symmetric(self) -> bool:
        return self.key_spec == "SYMMETRIC_DEFAULT"

    @property
    def key_algorithm_family(self) -> str:
        if self.is_symmetric:
            return "AES"
        return self.key_spec.split("_", 1)[0]

    def estimated_monthly_cost(self) -> float:
        return MULTI_REGION_MONTHLY_COST if self.multi_region else KEY_MONTHLY_COST


class KmsKeyReference(ResourceReference):
    """Reference to an ``aws_kms_key``."""

    OUTPUTS = (
        "id", "arn", "key_id", "description", "key_usage", "key_spec", "policy",
        "deletion_window_in_days", "enable_key_rotation", "multi_region",
    )
    COMPUTED = (
        "is_symmetric", "is_asymmetric", "supports_encryption", "supports_signing",
        "supports_rotation", "key_algorithm_family", "estimated_monthly_cost",
    )

    @property
    def is_symmetric(self) -> bool:
        return self.attrs.is_symmetric

    @property
    def is_asymmetric(self) -> bool:
        return not self.attrs.is_symmetric

    @property
    def supports_encryption(self) -> bool:
        return self.attrs.key_usage == "ENCRYPT_DECRYPT"

    @property
    def supports_signing(self) -> bool:
        return self.attrs.key_usage == "SIGN_VERIFY"

    @property
    def supports_rotation(self) -> bool:
        return self.attrs.is_symmetric

    @property
    def key_algorithm_family(self) -> str:
        return self.attrs.key_algorithm_family

    @property
    def estimated_monthly_cost(self) -> float:
        return self.attrs.estimated_monthly_cost()


def aws_kms_key(
    synth: TerraformSynthesizer,
    name: str,
    attributes: Optional[Mapping[str, Any]] = None,
) -> KmsKeyReference:
    """Create a KMS key. Rotation is dropped silently for asymmetric and HMAC keys."""
    attrs = KmsKeyAttributes.build(attributes)

    body: Dict[str, Any] = {
        "description": attrs.description,
        "key_usage": attrs.key_usage,
        "customer_master_key_spec": attrs.key_spec,
        "policy": attrs.policy,
        "deletion_window_in_days": attrs.deletion_window_in_days,
        "is_enabled": attrs.is_enabled,
        "enable_key_rotation": attrs.enable_key_rotation,
        "multi_region": attrs.multi_region,
    }
    if attrs.bypass_policy_lockout_safety_check:
        body["bypass_policy_lockout_safety_check"] = True
    if attrs.enable_key_rotation:
        body["rotation_period_in_days"] = attrs.rotation_period_in_days
    body["tags"] = attrs.tags_block()

    synth.resource(RESOURCE_TYPE, name, body)
    return KmsKeyReference(RESOURCE_TYPE, name, attrs)
