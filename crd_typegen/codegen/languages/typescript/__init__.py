"""
TypeScript target for code generation.

Renders versioned API packages as TypeScript type declarations.
"""

from .generator import TypeScriptGenerator, GENERATOR_NAME
from .types import TYPESCRIPT_BUILTIN_MAP, build_replacements, property_name

__all__ = [
    "TypeScriptGenerator",
    "GENERATOR_NAME",
    "TYPESCRIPT_BUILTIN_MAP",
    "build_replacements",
    "property_name",
]
