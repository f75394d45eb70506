import pytest
from pydantic import ValidationError

from terraform_aws.resources import aws_acm_certificate, aws_acm_certificate_validation
from terraform_aws.resources.acm_certificate_validation import AcmCertificateValidationAttributes

from conftest import resource_body

CERT_ARN = "arn:aws:acm:us-east-1:123456789012:certificate/abcd-1234"


def test_certificate_arn_must_be_acm():
    with pytest.raises(ValidationError, match="certificate_arn must be an ACM certificate ARN"):
        AcmCertificateValidationAttributes(certificate_arn="arn:aws:iam::123456789012:role/acm")
    attrs = AcmCertificateValidationAttributes(certificate_arn="${aws_acm_certificate.site.arn}")
    assert attrs.certificate_arn == "${aws_acm_certificate.site.arn}"


def test_fqdn_format():
    with pytest.raises(ValidationError, match="Invalid validation record FQDN: not a host"):
        AcmCertificateValidationAttributes(certificate_arn=CERT_ARN, validation_record_fqdns=["not a host"])
    attrs = AcmCertificateValidationAttributes(
        certificate_arn=CERT_ARN,
        validation_record_fqdns=["_abc123.example.com.", "${aws_route53_record.validation.fqdn}"],
    )
    assert len(attrs.validation_record_fqdns) == 2


def test_single_interpolation_stays_scalar():
    attrs = AcmCertificateValidationAttributes(
        certificate_arn=CERT_ARN,
        validation_record_fqdns="${[for r in aws_route53_record.validation : r.fqdn]}",
    )
    assert attrs.validation_record_fqdns == "${[for r in aws_route53_record.validation : r.fqdn]}"


def test_plain_string_is_rejected():
    with pytest.raises(ValidationError, match="must be a list or a single interpolation"):
        AcmCertificateValidationAttributes(certificate_arn=CERT_ARN, validation_record_fqdns="_abc.example.com")


def test_timeouts():
    with pytest.raises(ValidationError, match="Invalid timeout '75 minutes'"):
        AcmCertificateValidationAttributes(certificate_arn=CERT_ARN, timeouts={"create": "75 minutes"})


def test_dns_validation_with_certificate(synth):
    cert = aws_acm_certificate(synth, "site", {"domain_name": "example.com"})
    ref = aws_acm_certificate_validation(synth, "site", {
        "certificate_arn": cert.arn,
        "validation_record_fqdns": cert.validation_record_fqdns(),
        "timeouts": {},
    })

    body = resource_body(synth, "aws_acm_certificate_validation", "site")
    assert body["certificate_arn"] == "${aws_acm_certificate.site.arn}"
    assert body["validation_record_fqdns"] == cert.validation_record_fqdns()
    assert body["timeouts"] == {"create": "75m"}
    assert ref.certificate_arn == "${aws_acm_certificate_validation.site.certificate_arn}"
    assert ref.uses_dns_records


def test_explicit_fqdn_list_is_kept(synth):
    aws_acm_certificate_validation(synth, "site", {
        "certificate_arn": CERT_ARN,
        "validation_record_fqdns": ["_abc.example.com"],
    })
    body = resource_body(synth, "aws_acm_certificate_validation", "site")
    assert body["validation_record_fqdns"] == ["_abc.example.com"]


def test_email_validation(synth):
    ref = aws_acm_certificate_validation(synth, "mail", {"certificate_arn": CERT_ARN})
    body = resource_body(synth, "aws_acm_certificate_validation", "mail")
    assert body == {"certificate_arn": CERT_ARN}
    assert not ref.uses_dns_records


def test_splat_expression_is_emitted_verbatim(synth):
    ref = aws_acm_certificate_validation(synth, "site", {
        "certificate_arn": "${aws_acm_certificate.site.arn}",
        "validation_record_fqdns": "${aws_route53_record.validation[*].fqdn}",
    })
    body = resource_body(synth, "aws_acm_certificate_validation", "site")
    assert body["validation_record_fqdns"] == "${aws_route53_record.validation[*].fqdn}"
    assert ref.uses_dns_records
