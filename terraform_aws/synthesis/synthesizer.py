"""Accumulate Terraform blocks and render them as Terraform JSON."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from terraform_aws.errors import DuplicateResourceError
from terraform_aws.logging import Logger, NullLogger

logger = logging.getLogger(__name__)


def interpolation(resource_type: str, name: str, attribute: str) -> str:
    """Build a Terraform interpolation string such as ``${aws_s3_bucket.logs.id}``."""
    return f"${{{resource_type}.{name}.{attribute}}}"


def compact(value: Any) -> Any:
    """Drop ``None`` values from nested dicts and lists, keeping key order."""
    if isinstance(value, dict):
        return {k: compact(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [compact(v) for v in value if v is not None]
    return value


class TerraformSynthesizer:
    """
    In-memory Terraform JSON document.

    Resource builders call :meth:`resource` once per block; the document is
    rendered with :meth:`synthesis` (a dict) or :meth:`to_json`.
    """

    def __init__(self, event_logger: Optional[Logger] = None):
        self.event_logger = event_logger or NullLogger()
        self._terraform: Dict[str, Any] = {}
        self._providers: Dict[str, Dict[str, Any]] = {}
        self._resources: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._outputs: Dict[str, Dict[str, Any]] = {}

    def resource(self, resource_type: str, name: str, attributes: Dict[str, Any]) -> Dict[str, Any]:
        """
        Register a resource block.

        Args:
            resource_type: Terraform resource type, e.g. ``aws_sqs_queue``
            name: Symbolic resource name
            attributes: Block body; ``None`` values are dropped

        Returns:
            The stored block body

        Raises:
            DuplicateResourceError: If ``resource_type.name`` is already declared
        """
        name = str(name)
        blocks = self._resources.setdefault(resource_type, {})
        if name in blocks:
            raise DuplicateResourceError(resource_type, name)

        body = compact(dict(attributes))
        blocks[name] = body

        logger.debug(f"Added resource {resource_type}.{name} with {len(body)} attributes")
        self.event_logger.debug(
            "resource.added",
            f"{resource_type}.{name}",
            {"type": resource_type, "name": name}
        )
        return body

    def output(
        self,
        name: str,
        value: Any,
        description: Optional[str] = None,
        sensitive: bool = False
    ) -> Dict[str, Any]:
        """Register an output block."""
        block: Dict[str, Any] = {"value": value}
        if description:
            block["description"] = description
        if sensitive:
            block["sensitive"] = True
        self._outputs[name] = block
        self.event_logger.debug("output.added", f"output {name}", {"name": name})
        return block

    def provider(self, name: str, **attributes: Any) -> Dict[str, Any]:
        """Register (or replace) a provider configuration block."""
        body = compact(attributes)
        self._providers[name] = body
        self.event_logger.debug("provider.added", f"provider {name}", {"name": name})
        return body

    def terraform_block(self, required_providers: Dict[str, Dict[str, str]]) -> None:
        """Set the top-level ``terraform`` block's ``required_providers``."""
        self._terraform["required_providers"] = dict(required_providers)

    @staticmethod
    def ref(resource_type: str, name: str, attribute: str) -> str:
        return interpolation(resource_type, name, attribute)

    def has_resource(self, resource_type: str, name: str) -> bool:
        return str(name) in self._resources.get(resource_type, {})

    def get_resource(self, resource_type: str, name: str) -> Dict[str, Any]:
        """Return a declared resource body; raises ``KeyError`` if absent."""
        return self._resources[resource_type][str(name)]

    @property
    def resource_count(self) -> int:
        return sum(len(blocks) for blocks in self._resources.values())

    def resource_addresses(self) -> List[str]:
        """List declared resources as ``type.name`` addresses."""
        return [
            f"{resource_type}.{name}"
            for resource_type, blocks in self._resources.items()
            for name in blocks
        ]

    def synthesis(self) -> Dict[str, Any]:
        """Render the document; empty top-level sections are omitted."""
        document: Dict[str, Any] = {}
        if self._terraform:
            document["terraform"] = self._terraform
        if self._providers:
            document["provider"] = self._providers
        if self._resources:
            document["resource"] = self._resources
        if self._outputs:
            document["output"] = self._outputs
        return json.loads(json.dumps(document))

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.synthesis(), indent=indent)

    def write(self, path: Union[str, Path]) -> Path:
        """Write the document to ``path`` (parent directories are created)."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json() + "\n")

        self.event_logger.info(
            "synthesis.written",
            f"Wrote {path}",
            {"path": str(path), "resources": self.resource_count}
        )
        return path

    def reset(self) -> None:
        self._terraform.clear()
        self._providers.clear()
        self._resources.clear()
        self._outputs.clear()
