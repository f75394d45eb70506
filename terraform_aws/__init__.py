"""terraform-aws - typed, validated builders that emit Terraform JSON for AWS resources."""

__version__ = "0.1.0"

from . import resources
from . import synthesis
from .config import SynthesisConfig, load_config
from .errors import DuplicateResourceError, StackFileError, SynthesisError, UnknownResourceTypeError
from .stack import Stack, build_stack, load_stack
from .synthesis import ResourceReference, TerraformSynthesizer

__all__ = [
    "resources",
    "synthesis",
    "SynthesisConfig",
    "load_config",
    "SynthesisError",
    "DuplicateResourceError",
    "UnknownResourceTypeError",
    "StackFileError",
    "Stack",
    "load_stack",
    "build_stack",
    "ResourceReference",
    "TerraformSynthesizer",
]
