"""JSON stack files: a list of resources and outputs to synthesize together."""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from terraform_aws.config import SynthesisConfig
from terraform_aws.errors import StackFileError
from terraform_aws.resources import get_builder
from terraform_aws.synthesis import ResourceReference, TerraformSynthesizer, interpolation

logger = logging.getLogger(__name__)

# type.name.attr, e.g. aws_sqs_queue.jobs.arn
OUTPUT_REFERENCE_PATTERN = re.compile(r"^(aws_[a-z0-9_]+)\.([A-Za-z0-9_-]+)\.([a-z0-9_]+)$")


@dataclass
class StackResource:
    """One resource declaration in a stack file."""
    type: str
    name: str
    attributes: Dict[str, Any] = field(default_factory=dict)

    @property
    def address(self) -> str:
        return f"{self.type}.{self.name}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StackResource':
        """Create resource declaration from dictionary."""
        if not isinstance(data, dict):
            raise StackFileError(f"Resource entry must be an object: {data!r}")
        missing = [key for key in ("type", "name") if not data.get(key)]
        if missing:
            raise StackFileError(f"Resource entry is missing {', '.join(missing)}: {data}")
        attributes = data.get("attributes", {})
        if not isinstance(attributes, dict):
            raise StackFileError(f"Attributes of {data['type']}.{data['name']} must be an object")
        return cls(type=data["type"], name=str(data["name"]), attributes=attributes)


@dataclass
class StackOutput:
    """One output declaration in a stack file."""
    name: str
    value: Any
    description: Optional[str] = None
    sensitive: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StackOutput':
        """Create output declaration from dictionary."""
        if not isinstance(data, dict):
            raise StackFileError(f"Output entry must be an object: {data!r}")
        if not data.get("name") or "value" not in data:
            raise StackFileError(f"Output entry requires name and value: {data}")
        return cls(
            name=data["name"],
            value=data["value"],
            description=data.get("description"),
            sensitive=bool(data.get("sensitive", False)),
        )


@dataclass
class Stack:
    """Parsed stack file."""
    resources: List[StackResource]
    outputs: List[StackOutput] = field(default_factory=list)
    region: Optional[str] = None
    default_tags: Dict[str, str] = field(default_factory=dict)
    source: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[str] = None) -> 'Stack':
        """Create stack from dictionary."""
        if not isinstance(data, dict):
            raise StackFileError("Stack file must contain a JSON object")
        resources = data.get("resources")
        if not isinstance(resources, list):
            raise StackFileError("Stack file requires a 'resources' list")
        outputs = data.get("outputs", [])
        if not isinstance(outputs, list):
            raise StackFileError("'outputs' must be a list")
        default_tags = data.get("default_tags", {})
        if not isinstance(default_tags, dict):
            raise StackFileError("'default_tags' must be an object")

        return cls(
            resources=[StackResource.from_dict(entry) for entry in resources],
            outputs=[StackOutput.from_dict(entry) for entry in outputs],
            region=data.get("region"),
            default_tags={str(k): str(v) for k, v in default_tags.items()},
            source=source,
        )

    def resource_types(self) -> List[str]:
        """Distinct resource types, in declaration order."""
        return list(dict.fromkeys(resource.type for resource in self.resources))


def load_stack(path: Union[str, Path]) -> Stack:
    """
    Load a stack file.

    Args:
        path: Path to a JSON stack file

    Returns:
        Parsed Stack

    Raises:
        FileNotFoundError: If the file does not exist
        StackFileError: If the file is not valid JSON or has the wrong shape
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Stack file not found: {path}")

    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise StackFileError(f"Invalid JSON in {path} at line {e.lineno}: {e.msg}") from e

    return Stack.from_dict(data, source=str(path))


def resolve_output_value(value: Any, references: Dict[str, ResourceReference]) -> Any:
    """
    Turn ``type.name.attr`` strings that point at a built resource into interpolations.

    Other values are returned unchanged.
    """
    if not isinstance(value, str):
        return value
    match = OUTPUT_REFERENCE_PATTERN.match(value)
    if not match:
        return value
    resource_type, name, attribute = match.groups()
    if f"{resource_type}.{name}" not in references:
        return value
    return interpolation(resource_type, name, attribute)


def build_stack(
    stack: Stack,
    synth: TerraformSynthesizer,
    config: Optional[SynthesisConfig] = None,
    include_provider: bool = True,
) -> Dict[str, ResourceReference]:
    """
    Build every resource and output of a stack into ``synth``.

    The stack's ``region`` and ``default_tags`` take precedence over ``config``.

    Returns:
        References keyed by ``type.name`` address

    Raises:
        UnknownResourceTypeError: If a resource type has no builder
        pydantic.ValidationError: If a resource's attributes are invalid
        DuplicateResourceError: If an address is declared twice
    """
    config = config or SynthesisConfig()
    synth.event_logger.info(
        "synthesis.started",
        f"Synthesizing {len(stack.resources)} resources",
        {"resources": len(stack.resources), "path": stack.source}
    )

    if include_provider:
        default_tags = {**config.default_tags, **stack.default_tags}
        provider = SynthesisConfig(region=stack.region or config.region, default_tags=default_tags)
        synth.terraform_block({
            "aws": {"source": "hashicorp/aws", "version": config.provider_version}
        })
        synth.provider("aws", **provider.provider_attributes())

    references: Dict[str, ResourceReference] = {}
    for resource in stack.resources:
        builder = get_builder(resource.type)
        references[resource.address] = builder(synth, resource.name, resource.attributes)
        logger.debug(f"Built {resource.address}")

    for output in stack.outputs:
        synth.output(
            output.name,
            resolve_output_value(output.value, references),
            description=output.description,
            sensitive=output.sensitive,
        )

    synth.event_logger.info(
        "synthesis.completed",
        f"Synthesized {synth.resource_count} resources",
        {"count": synth.resource_count, "outputs": len(stack.outputs)}
    )
    return references
