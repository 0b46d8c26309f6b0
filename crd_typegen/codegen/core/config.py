"""
Configuration management for code generation.

Loads the generator configuration from a JSON file, rejecting unknown
fields, and compiles the regular expressions it carries once.
"""

import json
import re
from pathlib import Path
from typing import Dict, Any, List, Pattern, Tuple, Union
from dataclasses import dataclass, field

from ...logging_config import get_logger

logger = get_logger(__name__)


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""

    pass


DEFAULT_SLICE_TEMPLATE = "{{ type }}[]"


@dataclass(frozen=True)
class ExternalPackage:
    """A rule marking qualified names as defined outside the rendered set."""

    type_match_prefix: str
    pattern: Pattern = field(repr=False, compare=False, default=None)

    def __post_init__(self):
        if self.pattern is None:
            object.__setattr__(
                self, "pattern", _compile(self.type_match_prefix, "typeMatchPrefix")
            )

    def matches(self, name: str) -> bool:
        return self.pattern.search(name) is not None


@dataclass(frozen=True)
class GeneratorConfig:
    """Read-only options controlling visibility and naming."""

    # Field names hidden on every record
    hide_member_fields: Tuple[str, ...] = ()

    # Regexes hiding whole declarations by qualified name
    hide_type_patterns: Tuple[str, ...] = ()

    external_packages: Tuple[ExternalPackage, ...] = ()

    # package path -> local name -> display name
    external_types: Dict[str, Dict[str, str]] = field(default_factory=dict)

    # display name -> replacement
    type_replacements: Dict[str, str] = field(default_factory=dict)

    slice_template: str = DEFAULT_SLICE_TEMPLATE

    compiled_hide_patterns: Tuple[Pattern, ...] = field(
        default=(), repr=False, compare=False
    )

    def __post_init__(self):
        if not self.compiled_hide_patterns and self.hide_type_patterns:
            object.__setattr__(
                self,
                "compiled_hide_patterns",
                tuple(_compile(p, "hideTypePatterns") for p in self.hide_type_patterns),
            )
        if not self.slice_template:
            object.__setattr__(self, "slice_template", DEFAULT_SLICE_TEMPLATE)


def _compile(pattern: str, key: str) -> Pattern:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigError(f"Invalid regular expression in {key}: {pattern!r}: {e}")


# JSON key -> (dataclass field, expected JSON type)
_FIELDS = {
    "hideMemberFields": ("hide_member_fields", list),
    "hideTypePatterns": ("hide_type_patterns", list),
    "externalPackages": ("external_packages", list),
    "externalTypes": ("external_types", dict),
    "typeReplacements": ("type_replacements", dict),
    "sliceTemplate": ("slice_template", str),
}

_EXTERNAL_PACKAGE_FIELDS = {"typeMatchPrefix"}


def _string_list(value: List[Any], key: str) -> Tuple[str, ...]:
    if not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    return tuple(value)


def _string_map(value: Dict[str, Any], key: str) -> Dict[str, str]:
    if not all(isinstance(v, str) for v in value.values()):
        raise ConfigError(f"'{key}' values must be strings")
    return dict(value)


def config_from_dict(data: Dict[str, Any]) -> GeneratorConfig:
    """
    Build a GeneratorConfig from its JSON document form.

    Args:
        data: Mapping with the camelCase configuration keys

    Returns:
        Validated configuration

    Raises:
        ConfigError: On unknown keys, wrong value types or bad regexes
    """
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a JSON object")

    unknown = sorted(set(data) - set(_FIELDS))
    if unknown:
        raise ConfigError(f"Unknown configuration field(s): {', '.join(unknown)}")

    kwargs: Dict[str, Any] = {}
    for key, value in data.items():
        attr, expected = _FIELDS[key]
        if not isinstance(value, expected):
            raise ConfigError(f"'{key}' must be a {expected.__name__}")
        kwargs[attr] = value

    if "hide_member_fields" in kwargs:
        kwargs["hide_member_fields"] = _string_list(
            kwargs["hide_member_fields"], "hideMemberFields"
        )
    if "hide_type_patterns" in kwargs:
        kwargs["hide_type_patterns"] = _string_list(
            kwargs["hide_type_patterns"], "hideTypePatterns"
        )
    if "type_replacements" in kwargs:
        kwargs["type_replacements"] = _string_map(
            kwargs["type_replacements"], "typeReplacements"
        )

    if "external_packages" in kwargs:
        rules = []
        for entry in kwargs["external_packages"]:
            if not isinstance(entry, dict):
                raise ConfigError("'externalPackages' entries must be objects")
            extra = sorted(set(entry) - _EXTERNAL_PACKAGE_FIELDS)
            if extra:
                raise ConfigError(
                    f"Unknown externalPackages field(s): {', '.join(extra)}"
                )
            prefix = entry.get("typeMatchPrefix")
            if not isinstance(prefix, str):
                raise ConfigError("'typeMatchPrefix' must be a string")
            rules.append(ExternalPackage(prefix))
        kwargs["external_packages"] = tuple(rules)

    if "external_types" in kwargs:
        external_types = {}
        for package, names in kwargs["external_types"].items():
            if not isinstance(names, dict):
                raise ConfigError(f"'externalTypes.{package}' must be an object")
            external_types[package] = _string_map(names, f"externalTypes.{package}")
        kwargs["external_types"] = external_types

    return GeneratorConfig(**kwargs)


def load_config(config_file: Union[str, Path]) -> GeneratorConfig:
    """
    Load configuration from a JSON file.

    Args:
        config_file: Path to JSON configuration file

    Returns:
        Validated, read-only configuration
    """
    path = Path(config_file)

    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in configuration file {path}: {str(e)}")
    except OSError as e:
        raise ConfigError(f"Failed to load configuration file {path}: {str(e)}")

    config = config_from_dict(data)
    logger.debug(
        "Loaded config from %s: %d hidden fields, %d hide patterns, %d external rules",
        path,
        len(config.hide_member_fields),
        len(config.hide_type_patterns),
        len(config.external_packages),
    )
    return config


# Example configuration file for reference
EXAMPLE_CONFIG = {
    "hideMemberFields": ["TypeMeta"],
    "hideTypePatterns": ["ParseError$", "List$"],
    "externalPackages": [{"typeMatchPrefix": "^k8s\\.io/apimachinery/pkg/apis/meta/v1\\."}],
    "externalTypes": {
        "k8s.io/apimachinery/pkg/apis/meta/v1": {"ObjectMeta": "ObjectMeta"}
    },
    "typeReplacements": {"Time": "string"},
    "sliceTemplate": "Array<{{ type }}>",
}
