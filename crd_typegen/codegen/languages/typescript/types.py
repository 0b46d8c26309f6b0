"""
TypeScript-specific type mapping.

Maps source builtin primitives onto TypeScript primitives and formats
property names.
"""

import json
import re
from typing import Dict

from ...core.config import GeneratorConfig

# Source builtin name -> TypeScript type
TYPESCRIPT_BUILTIN_MAP: Dict[str, str] = {
    "string": "string",
    "bool": "boolean",
    "byte": "number",
    "rune": "number",
    "int": "number",
    "int8": "number",
    "int16": "number",
    "int32": "number",
    "int64": "number",
    "uint": "number",
    "uint8": "number",
    "uint16": "number",
    "uint32": "number",
    "uint64": "number",
    "uintptr": "number",
    "float32": "number",
    "float64": "number",
    "interface{}": "unknown",
    "any": "unknown",
}

# Declarations the target cannot describe more precisely
INTERFACE_TYPE = "unknown"

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def build_replacements(config: GeneratorConfig) -> Dict[str, str]:
    """Builtin mapping overlaid with the configured replacements."""
    replacements = dict(TYPESCRIPT_BUILTIN_MAP)
    replacements.update(config.type_replacements)
    return replacements


def property_name(name: str) -> str:
    """Quote a property name unless it is a plain identifier."""
    if _IDENTIFIER.match(name):
        return name
    return json.dumps(name)
