"""Validation helpers shared by resource attribute schemas."""

import ipaddress
import json
import re
from typing import Any, Dict, Optional

ARN_PATTERN = re.compile(r"^arn:aws[a-z-]*:([a-z0-9-]+):([a-z0-9-]*):(\d{12}|aws)?:(.+)$")
INTERPOLATION_PATTERN = re.compile(r"^\$\{.+\}$")

MAX_TAG_KEY_LENGTH = 128
MAX_TAG_VALUE_LENGTH = 256


def is_interpolation(value: Any) -> bool:
    """True for Terraform interpolation strings such as ``${aws_kms_key.main.arn}``."""
    return isinstance(value, str) and bool(INTERPOLATION_PATTERN.match(value))


def is_arn(value: Any, service: Optional[str] = None) -> bool:
    """
    Check an AWS ARN, optionally restricted to one service.

    Interpolations are accepted because their value is only known at apply time.
    """
    if is_interpolation(value):
        return True
    if not isinstance(value, str):
        return False
    match = ARN_PATTERN.match(value)
    if not match:
        return False
    return service is None or match.group(1) == service


def is_cidr(value: str, version: Optional[int] = None) -> bool:
    """Check an IPv4/IPv6 CIDR block (host bits are tolerated)."""
    try:
        network = ipaddress.ip_network(value, strict=False)
    except ValueError:
        return False
    if "/" not in value:
        return False
    return version is None or network.version == version


def is_json_document(value: str) -> bool:
    """True if ``value`` parses as a JSON object or array."""
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        return False
    return isinstance(parsed, (dict, list))


def validate_json_document(value: Optional[str], field_name: str) -> Optional[str]:
    if value is not None and not is_interpolation(value) and not is_json_document(value):
        raise ValueError(f"{field_name} must be a valid JSON document")
    return value


def validate_tags(tags: Dict[str, str]) -> Dict[str, str]:
    """Enforce AWS tag key/value length limits."""
    for key, value in tags.items():
        if not 1 <= len(key) <= MAX_TAG_KEY_LENGTH:
            raise ValueError(f"Tag key '{key}' must be 1-{MAX_TAG_KEY_LENGTH} characters")
        if len(value) > MAX_TAG_VALUE_LENGTH:
            raise ValueError(f"Tag value for '{key}' cannot exceed {MAX_TAG_VALUE_LENGTH} characters")
    return tags
