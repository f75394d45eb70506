"""Terraform JSON synthesis."""

from .synthesizer import TerraformSynthesizer, compact, interpolation
from .reference import ResourceReference

__all__ = [
    "TerraformSynthesizer",
    "ResourceReference",
    "compact",
    "interpolation",
]
