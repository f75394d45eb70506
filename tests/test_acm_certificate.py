import pytest
from pydantic import ValidationError

from terraform_aws.resources import aws_acm_certificate
from terraform_aws.resources.acm_certificate import AcmCertificateAttributes, validate_domain_name

from conftest import resource_body


class TestDomainNames:
    @pytest.mark.parametrize("domain", [
        "example.com",
        "api.example.com",
        "*.example.com",
        "my-app.eu.example.co.uk",
    ])
    def test_valid(self, domain):
        assert validate_domain_name(domain) == domain

    @pytest.mark.parametrize("domain, message", [
        ("*.*.example.com", "Domain cannot contain multiple wildcards"),
        ("api.*.example.com", "Wildcards must be at the start"),
        ("localhost", "must contain at least two labels"),
        ("-api.example.com", "Invalid domain label '-api'"),
        ("api_v2.example.com", "Invalid domain label 'api_v2'"),
        ("a" * 64 + ".example.com", "Domain label too long"),
        (".".join(["abcdefghij"] * 24) + ".com", "Domain name too long"),
    ])
    def test_invalid(self, domain, message):
        with pytest.raises(ValueError, match=message):
            validate_domain_name(domain)

    def test_subject_alternative_names_are_checked(self):
        with pytest.raises(ValidationError, match="Invalid domain label"):
            AcmCertificateAttributes(domain_name="example.com", subject_alternative_names=["bad..example.com"])


def test_duplicate_domains():
    with pytest.raises(ValidationError, match="Duplicate domains found in certificate request"):
        AcmCertificateAttributes(domain_name="example.com", subject_alternative_names=["example.com"])


def test_domain_limit():
    sans = [f"host{i}.example.com" for i in range(100)]
    with pytest.raises(ValidationError, match="supports maximum 100 domain names"):
        AcmCertificateAttributes(domain_name="example.com", subject_alternative_names=sans)
    attrs = AcmCertificateAttributes(domain_name="example.com", subject_alternative_names=sans[:99])
    assert attrs.total_domain_count == 100


def test_validation_option_domain_must_be_requested():
    with pytest.raises(ValidationError, match="Validation option domain 'other.com' not found"):
        AcmCertificateAttributes(
            domain_name="example.com",
            validation_method="EMAIL",
            validation_options=[{"domain_name": "other.com", "validation_domain": "other.com"}],
        )


def test_key_algorithm_values():
    assert AcmCertificateAttributes(domain_name="example.com").key_algorithm == "RSA_2048"
    with pytest.raises(ValidationError):
        AcmCertificateAttributes(domain_name="example.com", key_algorithm="RSA-2048")


def test_dns_certificate_synthesis(synth):
    ref = aws_acm_certificate(synth, "site", {
        "domain_name": "example.com",
        "subject_alternative_names": ["www.example.com", "api.example.com"],
        "certificate_transparency_logging_preference": "ENABLED",
        "lifecycle": {},
        "tags": {"Name": "site"},
    })

    body = resource_body(synth, "aws_acm_certificate", "site")
    assert body["validation_method"] == "DNS"
    assert body["key_algorithm"] == "RSA_2048"
    assert body["subject_alternative_names"] == ["www.example.com", "api.example.com"]
    assert body["options"] == {"certificate_transparency_logging_preference": "ENABLED"}
    assert body["lifecycle"] == {"create_before_destroy": True, "prevent_destroy": False}
    assert body["tags"] == {"Name": "site"}
    assert "validation_option" not in body

    assert ref.arn == "${aws_acm_certificate.site.arn}"
    assert ref.domain_validation_options == "${aws_acm_certificate.site.domain_validation_options}"
    assert ref.uses_dns_validation
    assert not ref.uses_email_validation
    assert not ref.is_wildcard_certificate
    assert ref.total_domain_count == 3
    assert ref.certificate_scope == "Multi-domain certificate covering 3 domains"
    assert ref.estimated_validation_time.startswith("5-10 minutes")


def test_email_wildcard_certificate(synth):
    ref = aws_acm_certificate(synth, "wildcard", {
        "domain_name": "*.example.com",
        "validation_method": "EMAIL",
        "validation_options": [{"domain_name": "*.example.com", "validation_domain": "example.com"}],
    })

    body = resource_body(synth, "aws_acm_certificate", "wildcard")
    assert body["validation_option"] == [{"domain_name": "*.example.com", "validation_domain": "example.com"}]
    assert "subject_alternative_names" not in body
    assert "options" not in body
    assert ref.is_wildcard_certificate
    assert ref.uses_email_validation
    assert ref.certificate_scope == "Wildcard certificate for *.example.com"
    assert ref.estimated_validation_time.startswith("1-2 hours")


def test_single_domain_scope(synth):
    ref = aws_acm_certificate(synth, "api", {"domain_name": "api.example.com"})
    assert ref.certificate_scope == "Single domain certificate"
    assert ref.computed_properties["total_domain_count"] == 1


def test_validation_record_fqdns_expression(synth):
    ref = aws_acm_certificate(synth, "site", {"domain_name": "example.com"})
    assert ref.validation_record_fqdns() == (
        "${[for o in aws_acm_certificate.site.domain_validation_options : o.resource_record_name]}"
    )
