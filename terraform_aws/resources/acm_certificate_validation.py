"""aws_acm_certificate_validation: wait for an ACM certificate to be issued."""

import re
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import field_validator

from terraform_aws.synthesis import ResourceReference, TerraformSynthesizer
from .base import ResourceAttributes
from .types import is_arn, is_interpolation

RESOURCE_TYPE = "aws_acm_certificate_validation"
FQDN_PATTERN = re.compile(r"^([a-z0-9_]([a-z0-9_-]*[a-z0-9])?\.)+[a-z]{2,}\.?$", re.IGNORECASE)
TIMEOUT_PATTERN = re.compile(r"^\d+(s|m|h)$")


class ValidationTimeouts(ResourceAttributes):
    create: str = "75m"

    @field_validator('create')
    @classmethod
    def validate_create(cls, v: str) -> str:
        if not TIMEOUT_PATTERN.match(v):
            raise ValueError(f"Invalid timeout '{v}'; use a duration such as 45m or 2h")
        return v


class AcmCertificateValidationAttributes(ResourceAttributes):
    certificate_arn: str
    validation_record_fqdns: Optional[Union[List[str], str]] = None
    timeouts: Optional[ValidationTimeouts] = None

    @field_validator('certificate_arn')
    @classmethod
    def validate_certificate_arn(cls, v: str) -> str:
        if not is_arn(v, service="acm"):
            raise ValueError(f"certificate_arn must be an ACM certificate ARN or interpolation: {v}")
        return v

    @field_validator('validation_record_fqdns', mode='before')
    @classmethod
    def validate_fqdns(cls, v: Any) -> Any:
        # A single interpolation may stand for the whole list
        if isinstance(v, str):
            if not is_interpolation(v):
                raise ValueError(f"validation_record_fqdns must be a list or a single interpolation: {v}")
            return v
        for fqdn in v or []:
            if not isinstance(fqdn, str) or not (is_interpolation(fqdn) or FQDN_PATTERN.match(fqdn)):
                raise ValueError(f"Invalid validation record FQDN: {fqdn}")
        return v


class AcmCertificateValidationReference(ResourceReference):
    OUTPUTS = ("id", "certificate_arn")
    COMPUTED = ("uses_dns_records",)

    @property
    def uses_dns_records(self) -> bool:
        return bool(self.attrs.validation_record_fqdns)


def aws_acm_certificate_validation(
    synth: TerraformSynthesizer,
    name: str,
    attributes: Optional[Mapping[str, Any]] = None,
) -> AcmCertificateValidationReference:
    """Create a certificate validation; EMAIL validated certificates omit the FQDN list."""
    attrs = AcmCertificateValidationAttributes.build(attributes)

    body: Dict[str, Any] = {"certificate_arn": attrs.certificate_arn}
    fqdns = attrs.validation_record_fqdns
    if fqdns:
        body["validation_record_fqdns"] = fqdns if isinstance(fqdns, str) else list(fqdns)
    if attrs.timeouts:
        body["timeouts"] = attrs.timeouts.model_dump()

    synth.resource(RESOURCE_TYPE, name, body)
    return AcmCertificateValidationReference(RESOURCE_TYPE, name, attrs)
