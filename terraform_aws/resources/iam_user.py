"""aws_iam_user: IAM users, with presets for common user types."""

import logging
import re
import secrets
import string
from typing import Any, Dict, List, Mapping, Optional

from pydantic import Field, field_validator

from terraform_aws.synthesis import ResourceReference, TerraformSynthesizer
from .base import TaggedAttributes

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "aws_iam_user"
DEFAULT_ACCOUNT_ID = "123456789012"

USER_NAME_PATTERN = re.compile(r"^[A-Za-z0-9+=,.@_-]+$")
POLICY_ARN_PATTERN = re.compile(r"^arn:aws:iam::(\d{12}|aws):policy/[A-Za-z0-9+=,.@_/-]+$")
HUMAN_NAME_PATTERN = re.compile(r"^[a-z]+\.[a-z]+", re.IGNORECASE)

ADMIN_MARKERS = ("admin", "super", "root")
SERVICE_MARKERS = ("service", "svc", "system")
COMMON_ATTACK_TARGETS = {"root", "admin", "administrator", "test", "guest"}
PASSWORD_SYMBOLS = "!@#$%^&*"


class IamUserAttributes(TaggedAttributes):
    """Attributes of an IAM user."""

    name: str
    path: str = "/"
    permissions_boundary: Optional[str] = None
    force_destroy: bool = False

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not USER_NAME_PATTERN.match(v):
            raise ValueError(
                f"IAM user name '{v}' must contain only alphanumeric characters and +=,.@_-"
            )
        if len(v) > 64:
            raise ValueError(f"IAM user name cannot exceed 64 characters (got {len(v)})")
        return v

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        if not (v.startswith("/") and v.endswith("/")):
            raise ValueError(f"IAM user path '{v}' must start with '/' and end with '/'")
        if len(v) > 512:
            raise ValueError(f"IAM user path cannot exceed 512 characters (got {len(v)})")
        return v

    @field_validator('permissions_boundary')
    @classmethod
    def validate_permissions_boundary(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not POLICY_ARN_PATTERN.match(v):
            raise ValueError(f"permissions_boundary '{v}' must be a valid IAM policy ARN")
        return v

    @property
    def administrative_user(self) -> bool:
        lowered = self.name.lower()
        return any(marker in lowered for marker in ADMIN_MARKERS)

    @property
    def service_user(self) -> bool:
        lowered = self.name.lower()
        return any(marker in lowered for marker in SERVICE_MARKERS)

    @property
    def human_user(self) -> bool:
        return bool(HUMAN_NAME_PATTERN.match(self.name))

    @property
    def user_category(self) -> str:
        if self.administrative_user:
            return "administrative"
        if self.service_user:
            return "service_account"
        if self.human_user:
            return "human_user"
        return "generic"

    @property
    def organizational_path(self) -> bool:
        return self.path != "/"

    @property
    def organizational_unit(self) -> Optional[str]:
        segments = [s for s in self.path.split("/") if s]
        return segments[0] if segments else None

    def user_arn(self, account_id: str = DEFAULT_ACCOUNT_ID) -> str:
        return f"arn:aws:iam::{account_id}:user{self.path}{self.name}"

    @property
    def has_permissions_boundary(self) -> bool:
        return self.permissions_boundary is not None

    @property
    def permissions_boundary_policy_name(self) -> Optional[str]:
        if not self.permissions_boundary:
            return None
        return self.permissions_boundary.rsplit("/", 1)[-1]

    @property
    def security_risk_level(self) -> str:
        if self.has_permissions_boundary:
            return "low"
        if self.administrative_user:
            return "high"
        return "medium"

    def security_warnings(self) -> List[str]:
        """Configuration choices that are legal but worth a second look."""
        warnings = []
        if self.administrative_user and not self.has_permissions_boundary:
            warnings.append(f"Administrative user '{self.name}' should have a permissions boundary")
        if self.name.lower() in COMMON_ATTACK_TARGETS:
            warnings.append(f"User name '{self.name}' matches common attack targets")
        if not self.organizational_path:
            warnings.append(f"User '{self.name}' is in the root path; consider organizational path structure")
        return warnings


def generate_secure_password(length: int = 16) -> str:
    """
    Random password with at least one upper, lower, digit and symbol.

    Raises:
        ValueError: If ``length`` is below 4
    """
    if length < 4:
        raise ValueError("Password length must be at least 4")

    required = [
        secrets.choice(string.ascii_uppercase),
        secrets.choice(string.ascii_lowercase),
        secrets.choice(string.digits),
        secrets.choice(PASSWORD_SYMBOLS),
    ]
    alphabet = string.ascii_letters + string.digits + PASSWORD_SYMBOLS
    chars = required + [secrets.choice(alphabet) for _ in range(length - len(required))]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


class IamUserReference(ResourceReference):
    """Reference to an ``aws_iam_user``."""

    OUTPUTS = ("id", "arn", "name", "path", "permissions_boundary", "unique_id", "tags_all")
    COMPUTED = (
        "administrative_user", "service_user", "human_user", "user_category",
        "organizational_path", "organizational_unit", "has_permissions_boundary",
        "permissions_boundary_policy_name", "security_risk_level",
    )
    DELEGATED = ("user_arn",)


def aws_iam_user(
    synth: TerraformSynthesizer,
    name: str,
    attributes: Optional[Mapping[str, Any]] = None,
) -> IamUserReference:
    """Create an IAM user. Risky but legal setups are logged as warnings."""
    attrs = IamUserAttributes.build(attributes)

    for warning in attrs.security_warnings():
        logger.warning(warning)

    body: Dict[str, Any] = {
        "name": attrs.name,
        "path": attrs.path,
        "permissions_boundary": attrs.permissions_boundary,
        "force_destroy": attrs.force_destroy,
        "tags": attrs.tags_block(),
    }

    synth.resource(RESOURCE_TYPE, name, body)
    return IamUserReference(RESOURCE_TYPE, name, attrs)


class PermissionsBoundaries:
    """Well-known permissions boundary policy ARNs."""

    DEVELOPER_BOUNDARY = f"arn:aws:iam::{DEFAULT_ACCOUNT_ID}:policy/DeveloperPermissionsBoundary"
    SERVICE_ACCOUNT_BOUNDARY = f"arn:aws:iam::{DEFAULT_ACCOUNT_ID}:policy/ServiceAccountPermissionsBoundary"
    ADMIN_BOUNDARY = f"arn:aws:iam::{DEFAULT_ACCOUNT_ID}:policy/AdminPermissionsBoundary"
    CICD_BOUNDARY = f"arn:aws:iam::{DEFAULT_ACCOUNT_ID}:policy/CICDPermissionsBoundary"
    READONLY_BOUNDARY = f"arn:aws:iam::{DEFAULT_ACCOUNT_ID}:policy/ReadOnlyPermissionsBoundary"

    BY_USER_TYPE = {
        "developer": DEVELOPER_BOUNDARY,
        "service_account": SERVICE_ACCOUNT_BOUNDARY,
        "administrator": ADMIN_BOUNDARY,
        "cicd": CICD_BOUNDARY,
        "readonly": READONLY_BOUNDARY,
    }

    @classmethod
    def boundary_for_user_type(cls, user_type: str) -> Optional[str]:
        return cls.BY_USER_TYPE.get(user_type)

    @classmethod
    def all_boundaries(cls) -> List[str]:
        return list(cls.BY_USER_TYPE.values())


class UserPatterns:
    """Attribute presets for recurring kinds of IAM users."""

    @staticmethod
    def developer_user(name: str, team: str) -> Dict[str, Any]:
        return {
            "name": name,
            "path": f"/{team}/",
            "permissions_boundary": PermissionsBoundaries.DEVELOPER_BOUNDARY,
            "tags": {"UserType": "Developer", "Department": team.capitalize()},
        }

    @staticmethod
    def service_account_user(service_name: str, environment: str) -> Dict[str, Any]:
        return {
            "name": f"{service_name}-service",
            "path": f"/service-accounts/{environment}/",
            "permissions_boundary": PermissionsBoundaries.SERVICE_ACCOUNT_BOUNDARY,
            "force_destroy": True,
            "tags": {"UserType": "ServiceAccount", "Environment": environment},
        }

    @staticmethod
    def cicd_user(project: str, repository: str) -> Dict[str, Any]:
        return {
            "name": f"{project}-cicd",
            "path": "/cicd/",
            "permissions_boundary": PermissionsBoundaries.CICD_BOUNDARY,
            "force_destroy": True,
            "tags": {"UserType": "CICD", "Repository": repository},
        }

    @staticmethod
    def admin_user(name: str, department: str) -> Dict[str, Any]:
        return {
            "name": f"{name}.admin",
            "path": f"/admins/{department}/",
            "permissions_boundary": PermissionsBoundaries.ADMIN_BOUNDARY,
            "tags": {
                "UserType": "Administrator",
                "Department": department.capitalize(),
                "RequiresApproval": "true",
            },
        }

    @staticmethod
    def readonly_user(name: str, purpose: str) -> Dict[str, Any]:
        return {
            "name": f"{name}.readonly",
            "path": "/readonly/",
            "permissions_boundary": PermissionsBoundaries.READONLY_BOUNDARY,
            "tags": {"UserType": "ReadOnly", "Purpose": purpose.capitalize()},
        }

    @staticmethod
    def emergency_user(name: str) -> Dict[str, Any]:
        return {
            "name": f"{name}.emergency",
            "path": "/emergency/",
            "permissions_boundary": PermissionsBoundaries.ADMIN_BOUNDARY,
            "tags": {"UserType": "Emergency", "AuditRequired": "true"},
        }

    @staticmethod
    def cross_account_user(name: str, target_account: str) -> Dict[str, Any]:
        return {
            "name": f"{name}.crossaccount",
            "path": "/cross-account/",
            "permissions_boundary": PermissionsBoundaries.DEVELOPER_BOUNDARY,
            "tags": {
                "UserType": "CrossAccount",
                "TargetAccount": target_account,
                "AccessPattern": "AssumeRole",
            },
        }
