"""Exceptions raised while synthesizing Terraform configuration.

Attribute validation problems surface as ``pydantic.ValidationError``; the
classes here cover everything around the attribute layer.
"""


class SynthesisError(Exception):
    """Base class for synthesis errors."""


class DuplicateResourceError(SynthesisError):
    """A resource with the same type and name was already declared."""

    def __init__(self, resource_type: str, name: str):
        self.resource_type = resource_type
        self.name = name
        super().__init__(f"Resource {resource_type}.{name} is already defined")


class UnknownResourceTypeError(SynthesisError):
    """No builder is registered for a resource type."""

    def __init__(self, resource_type: str):
        self.resource_type = resource_type
        super().__init__(f"Unsupported resource type: {resource_type}")


class StackFileError(SynthesisError):
    """A stack file could not be read or has the wrong shape."""
