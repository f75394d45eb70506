"""Synthesis settings, read from the environment."""

import os
import re
from dataclasses import dataclass, field
from typing import Dict, Optional

from terraform_aws.logging import LogLevel

DEFAULT_REGION = "us-east-1"
DEFAULT_PROVIDER_VERSION = "~> 5.0"
DEFAULT_OUTPUT_PATH = "main.tf.json"

REGION_PATTERN = re.compile(r"^[a-z]{2}(-gov|-iso[a-z]?)?-[a-z]+-\d$")


@dataclass
class SynthesisConfig:
    """Settings applied to every synthesized document."""
    region: str = DEFAULT_REGION
    provider_version: str = DEFAULT_PROVIDER_VERSION
    default_tags: Dict[str, str] = field(default_factory=dict)
    output_path: str = DEFAULT_OUTPUT_PATH
    log_level: str = "INFO"

    def provider_attributes(self) -> Dict[str, object]:
        """Body of the ``aws`` provider block."""
        attributes: Dict[str, object] = {"region": self.region}
        if self.default_tags:
            attributes["default_tags"] = {"tags": dict(self.default_tags)}
        return attributes

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "region": self.region,
            "provider_version": self.provider_version,
            "default_tags": dict(self.default_tags),
            "output_path": self.output_path,
            "log_level": self.log_level,
        }


def parse_tags(value: Optional[str]) -> Dict[str, str]:
    """
    Parse ``key=value`` pairs separated by commas.

    Raises:
        ValueError: If a pair has no ``=`` or an empty key
    """
    tags: Dict[str, str] = {}
    if not value:
        return tags
    for pair in value.split(","):
        pair = pair.strip()
        if not pair:
            continue
        key, sep, tag_value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Invalid tag '{pair}': expected key=value")
        tags[key.strip()] = tag_value.strip()
    return tags


def validate_region(region: str) -> str:
    if not REGION_PATTERN.match(region):
        raise ValueError(f"Invalid AWS region: {region}")
    return region


def load_config() -> SynthesisConfig:
    """
    Load synthesis settings from ``TF_AWS_*`` environment variables.

    Returns:
        SynthesisConfig with defaults for unset variables

    Raises:
        ValueError: If a variable holds an invalid value
    """
    region = validate_region(os.environ.get("TF_AWS_REGION", DEFAULT_REGION))
    provider_version = os.environ.get("TF_AWS_PROVIDER_VERSION", DEFAULT_PROVIDER_VERSION)
    output_path = os.environ.get("TF_AWS_OUTPUT", DEFAULT_OUTPUT_PATH)
    default_tags = parse_tags(os.environ.get("TF_AWS_DEFAULT_TAGS"))

    log_level = os.environ.get("TF_AWS_LOG_LEVEL", "INFO").upper()
    if log_level.lower() not in {level.value for level in LogLevel}:
        raise ValueError(f"Invalid TF_AWS_LOG_LEVEL: {log_level}")

    return SynthesisConfig(
        region=region,
        provider_version=provider_version,
        default_tags=default_tags,
        output_path=output_path,
        log_level=log_level,
    )
