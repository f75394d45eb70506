"""aws_acm_certificate: ACM public certificates."""

import re
from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import Field, field_validator, model_validator

from terraform_aws.synthesis import ResourceReference, TerraformSynthesizer
from .base import ResourceAttributes, TaggedAttributes

RESOURCE_TYPE = "aws_acm_certificate"

MAX_DOMAINS = 100
MAX_DOMAIN_LENGTH = 253
MAX_LABEL_LENGTH = 63
WILDCARD_PATTERN = re.compile(r"^\*\.[a-z0-9.-]+$", re.IGNORECASE)
LABEL_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$", re.IGNORECASE)


def validate_domain_name(domain: str) -> str:
    """
    Validate a certificate domain, allowing one leading ``*.`` wildcard.

    Raises:
        ValueError: With a message naming the offending domain or label
    """
    if "*" in domain:
        if domain.count("*") > 1:
            raise ValueError(f"Domain cannot contain multiple wildcards: {domain}")
        if not WILDCARD_PATTERN.match(domain):
            raise ValueError(
                f"Invalid wildcard domain: {domain}. Wildcards must be at the start (*.example.com)"
            )

    if len(domain) > MAX_DOMAIN_LENGTH:
        raise ValueError(f"Domain name too long: {domain} (max {MAX_DOMAIN_LENGTH} characters)")

    labels = domain[2:].split(".") if domain.startswith("*.") else domain.split(".")
    if len(labels) < 2:
        raise ValueError(f"Domain name must contain at least two labels: {domain}")
    for label in labels:
        if len(label) > MAX_LABEL_LENGTH:
            raise ValueError(f"Domain label too long: {label} (max {MAX_LABEL_LENGTH} characters)")
        if not LABEL_PATTERN.match(label):
            raise ValueError(f"Invalid domain label '{label}' in {domain}")
    return domain


class ValidationOption(ResourceAttributes):
    domain_name: str
    validation_domain: str


class CertificateLifecycle(ResourceAttributes):
    create_before_destroy: bool = True
    prevent_destroy: bool = False


class AcmCertificateAttributes(TaggedAttributes):
    """Attributes of an ACM certificate request."""

    domain_name: str
    subject_alternative_names: Optional[List[str]] = None
    validation_method: Literal["DNS", "EMAIL"] = "DNS"
    key_algorithm: Literal[
        "RSA_1024", "RSA_2048", "RSA_3072", "RSA_4096",
        "EC_prime256v1", "EC_secp384r1", "EC_secp521r1",
    ] = "RSA_2048"
    certificate_transparency_logging_preference: Optional[Literal["ENABLED", "DISABLED"]] = None
    validation_options: Optional[List[ValidationOption]] = None
    lifecycle: Optional[CertificateLifecycle] = None

    @field_validator('domain_name')
    @classmethod
    def check_domain_name(cls, v: str) -> str:
        return validate_domain_name(v)

    @field_validator('subject_alternative_names')
    @classmethod
    def check_sans(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        for san in v or []:
            validate_domain_name(san)
        return v

    @model_validator(mode='after')
    def validate_domains(self) -> 'AcmCertificateAttributes':
        domains = self.all_domains
        if len(set(domains)) != len(domains):
            raise ValueError("Duplicate domains found in certificate request")
        if len(domains) > MAX_DOMAINS:
            raise ValueError(
                f"ACM certificate supports maximum {MAX_DOMAINS} domain names (including primary domain)"
            )

        for option in self.validation_options or []:
            if option.domain_name not in domains:
                raise ValueError(
                    f"Validation option domain '{option.domain_name}' not found in certificate domains"
                )
        return self

    @property
    def all_domains(self) -> List[str]:
        return [self.domain_name, *(self.subject_alternative_names or [])]

    @property
    def is_wildcard_certificate(self) -> bool:
        return self.domain_name.startswith("*.")

    @property
    def total_domain_count(self) -> int:
        return len(self.all_domains)

    @property
    def uses_dns_validation(self) -> bool:
        return self.validation_method == "DNS"

    @property
    def uses_email_validation(self) -> bool:
        return self.validation_method == "EMAIL"

    @property
    def estimated_validation_time(self) -> str:
        if self.uses_dns_validation:
            return "5-10 minutes (after DNS records are created)"
        return "1-2 hours (after email confirmation)"

    @property
    def certificate_scope(self) -> str:
        if self.is_wildcard_certificate:
            return f"Wildcard certificate for {self.domain_name}"
        if self.subject_alternative_names:
            return f"Multi-domain certificate covering {self.total_domain_count} domains"
        return "Single domain certificate"


class AcmCertificateReference(ResourceReference):
    """Reference to an ``aws_acm_certificate``. Computed values come from the schema."""

    OUTPUTS = (
        "id", "arn", "domain_name", "domain_validation_options", "status",
        "validation_emails", "not_after", "not_before",
    )
    COMPUTED = (
        "is_wildcard_certificate", "total_domain_count", "uses_dns_validation",
        "uses_email_validation", "estimated_validation_time", "certificate_scope",
    )

    def validation_record_fqdns(self) -> str:
        """Expression listing the DNS validation record names, for ``aws_acm_certificate_validation``."""
        return f"${{[for o in {self.address}.domain_validation_options : o.resource_record_name]}}"


def aws_acm_certificate(
    synth: TerraformSynthesizer,
    name: str,
    attributes: Optional[Mapping[str, Any]] = None,
) -> AcmCertificateReference:
    """Request an ACM certificate."""
    attrs = AcmCertificateAttributes.build(attributes)

    body: Dict[str, Any] = {
        "domain_name": attrs.domain_name,
        "subject_alternative_names": attrs.subject_alternative_names,
        "validation_method": attrs.validation_method,
        "key_algorithm": attrs.key_algorithm,
    }
    if attrs.certificate_transparency_logging_preference:
        body["options"] = {
            "certificate_transparency_logging_preference": attrs.certificate_transparency_logging_preference,
        }
    if attrs.validation_options:
        body["validation_option"] = [option.model_dump() for option in attrs.validation_options]
    if attrs.lifecycle:
        body["lifecycle"] = attrs.lifecycle.model_dump()
    body["tags"] = attrs.tags_block()

    synth.resource(RESOURCE_TYPE, name, body)
    return AcmCertificateReference(RESOURCE_TYPE, name, attrs)
