"""Base classes for resource attribute schemas."""

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from .types import validate_tags


class ResourceAttributes(BaseModel):
    """Validated attributes of one Terraform resource. Unknown keys are rejected."""

    @classmethod
    def build(cls, attributes: Optional[Mapping[str, Any]] = None):
        """Validate a plain attributes mapping; raises ``pydantic.ValidationError``."""
        return cls.model_validate(dict(attributes or {}))

    class Config:
        extra = "forbid"


class TaggedAttributes(ResourceAttributes):
    """Attributes for resources that accept a ``tags`` map."""

    tags: Dict[str, str] = Field(default_factory=dict, description="Resource tags")

    @field_validator('tags')
    @classmethod
    def check_tags(cls, v: Dict[str, str]) -> Dict[str, str]:
        return validate_tags(v)

    def tags_block(self) -> Optional[Dict[str, str]]:
        """Tags to emit, or ``None`` when there are none."""
        return dict(self.tags) if self.tags else None
