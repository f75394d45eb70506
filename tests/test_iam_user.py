import logging
import string

import pytest
from pydantic import ValidationError

from terraform_aws.resources import PermissionsBoundaries, UserPatterns, aws_iam_user
from terraform_aws.resources.iam_user import IamUserAttributes, generate_secure_password

from conftest import resource_body


def test_defaults():
    attrs = IamUserAttributes(name="john.doe")
    assert attrs.path == "/"
    assert attrs.force_destroy is False
    assert attrs.permissions_boundary is None


@pytest.mark.parametrize("name, message", [
    ("john doe", "must contain only alphanumeric characters and"),
    ("a" * 65, "IAM user name cannot exceed 64 characters \\(got 65\\)"),
])
def test_invalid_names(name, message):
    with pytest.raises(ValidationError, match=message):
        IamUserAttributes(name=name)


@pytest.mark.parametrize("path", ["developers/", "/developers", "developers"])
def test_invalid_paths(path):
    with pytest.raises(ValidationError, match="must start with '/' and end with '/'"):
        IamUserAttributes(name="dev", path=path)


def test_path_length():
    with pytest.raises(ValidationError, match="cannot exceed 512 characters"):
        IamUserAttributes(name="dev", path="/" + "a" * 511 + "/")


def test_invalid_permissions_boundary():
    with pytest.raises(ValidationError, match="must be a valid IAM policy ARN"):
        IamUserAttributes(name="dev", permissions_boundary="arn:aws:s3:::bucket")


@pytest.mark.parametrize("name, category", [
    ("ops.admin", "administrative"),
    ("billing-service", "service_account"),
    ("jane.smith", "human_user"),
    ("deploybot", "generic"),
])
def test_user_category(name, category):
    assert IamUserAttributes(name=name).user_category == category


def test_security_risk_level():
    assert IamUserAttributes(name="root-admin").security_risk_level == "high"
    assert IamUserAttributes(name="jane.smith").security_risk_level == "medium"
    bounded = IamUserAttributes(name="root-admin", permissions_boundary=PermissionsBoundaries.ADMIN_BOUNDARY)
    assert bounded.security_risk_level == "low"
    assert bounded.permissions_boundary_policy_name == "AdminPermissionsBoundary"


def test_security_warnings():
    warnings = IamUserAttributes(name="admin").security_warnings()
    assert len(warnings) == 3
    assert "should have a permissions boundary" in warnings[0]
    assert "common attack targets" in warnings[1]
    assert "root path" in warnings[2]
    assert UserPatterns.developer_user("jane.smith", "platform")["path"] == "/platform/"
    assert IamUserAttributes(**UserPatterns.developer_user("jane.smith", "platform")).security_warnings() == []


@pytest.mark.parametrize("name, flagged", [
    ("Guest", True),
    ("test", True),
    ("administrator", True),
    ("user", False),
    ("test-runner", False),
])
def test_common_attack_target_names(name, flagged):
    warnings = IamUserAttributes(name=name, path="/team/").security_warnings()
    assert any("common attack targets" in w for w in warnings) is flagged


def test_synthesis(synth):
    ref = aws_iam_user(synth, "jane", UserPatterns.developer_user("jane.smith", "platform"))

    body = resource_body(synth, "aws_iam_user", "jane")
    assert body == {
        "name": "jane.smith",
        "path": "/platform/",
        "permissions_boundary": PermissionsBoundaries.DEVELOPER_BOUNDARY,
        "force_destroy": False,
        "tags": {"UserType": "Developer", "Department": "Platform"},
    }

    assert ref.name == "jane"
    assert ref["name"] == "${aws_iam_user.jane.name}"
    assert ref.unique_id == "${aws_iam_user.jane.unique_id}"
    assert ref.user_category == "human_user"
    assert ref.organizational_path
    assert ref.organizational_unit == "platform"
    assert ref.has_permissions_boundary
    assert ref.user_arn("111122223333") == "arn:aws:iam::111122223333:user/platform/jane.smith"
    assert ref.user_arn() == "arn:aws:iam::123456789012:user/platform/jane.smith"


def test_warnings_are_logged(synth, caplog):
    with caplog.at_level(logging.WARNING):
        aws_iam_user(synth, "root", {"name": "root"})
    assert "common attack targets" in caplog.text
    assert "root path" in caplog.text


def test_user_patterns():
    assert UserPatterns.service_account_user("billing", "prod")["name"] == "billing-service"
    assert UserPatterns.service_account_user("billing", "prod")["path"] == "/service-accounts/prod/"
    assert UserPatterns.cicd_user("shop", "org/shop")["name"] == "shop-cicd"
    assert UserPatterns.admin_user("ops", "security")["name"] == "ops.admin"
    assert UserPatterns.readonly_user("audit", "compliance")["name"] == "audit.readonly"
    assert UserPatterns.emergency_user("breakglass")["name"] == "breakglass.emergency"
    assert UserPatterns.cross_account_user("partner", "999988887777")["name"] == "partner.crossaccount"

    for preset in (
        UserPatterns.service_account_user("billing", "prod"),
        UserPatterns.cicd_user("shop", "org/shop"),
        UserPatterns.admin_user("ops", "security"),
        UserPatterns.readonly_user("audit", "compliance"),
        UserPatterns.emergency_user("breakglass"),
        UserPatterns.cross_account_user("partner", "999988887777"),
    ):
        assert IamUserAttributes(**preset).has_permissions_boundary


def test_permissions_boundaries():
    assert PermissionsBoundaries.boundary_for_user_type("cicd") == PermissionsBoundaries.CICD_BOUNDARY
    assert PermissionsBoundaries.boundary_for_user_type("unknown") is None
    assert len(PermissionsBoundaries.all_boundaries()) == 5


def test_generate_secure_password():
    password = generate_secure_password(20)
    assert len(password) == 20
    assert any(c in string.ascii_uppercase for c in password)
    assert any(c in string.ascii_lowercase for c in password)
    assert any(c in string.digits for c in password)
    assert any(c in "!@#$%^&*" for c in password)
    with pytest.raises(ValueError):
        generate_secure_password(3)
