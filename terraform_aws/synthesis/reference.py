"""Handles returned by resource builders."""

from typing import Any, Dict, Iterable, Optional, Tuple

from pydantic import BaseModel

from .synthesizer import interpolation


class ResourceReference:
    """
    Reference to a synthesized resource.

    ``outputs`` maps attribute names to Terraform interpolation strings and is
    also reachable as attributes (``ref.arn``) or items (``ref["name"]``).
    Subclasses list their exported attributes in ``OUTPUTS`` and their
    derived values in ``COMPUTED``. A computed value is either a property of
    the subclass or, failing that, an attribute of ``resource_attributes``;
    ``DELEGATED`` names further schema helpers (usually methods) to expose.
    """

    OUTPUTS: Tuple[str, ...] = ("id",)
    COMPUTED: Tuple[str, ...] = ()
    DELEGATED: Tuple[str, ...] = ()

    def __init__(
        self,
        type: str,
        name: str,
        resource_attributes: BaseModel,
        outputs: Optional[Iterable[str]] = None,
    ):
        self.type = type
        self.name = str(name)
        self.resource_attributes = resource_attributes
        self.outputs: Dict[str, str] = {
            attr: interpolation(type, self.name, attr)
            for attr in (outputs if outputs is not None else self.OUTPUTS)
        }

    @property
    def attrs(self) -> Any:
        return self.resource_attributes

    @property
    def address(self) -> str:
        return f"{self.type}.{self.name}"

    def ref(self, attribute: str) -> str:
        """Interpolation for any attribute, exported or not."""
        return interpolation(self.type, self.name, attribute)

    @property
    def computed_properties(self) -> Dict[str, Any]:
        return {key: getattr(self, key) for key in self.COMPUTED}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": self.type,
            "name": self.name,
            "resource_attributes": self.resource_attributes.model_dump(exclude_none=True),
            "outputs": dict(self.outputs),
            "computed_properties": self.computed_properties,
        }

    def __getitem__(self, key: str) -> str:
        return self.outputs[key]

    def __getattr__(self, item: str) -> Any:
        outputs = self.__dict__.get("outputs", {})
        if item in outputs:
            return outputs[item]
        # Computed values not implemented here are read from the attribute schema
        if item in type(self).COMPUTED or item in type(self).DELEGATED:
            return getattr(self.__dict__["resource_attributes"], item)
        raise AttributeError(f"{type(self).__name__} has no attribute or output '{item}'")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.address}>"
