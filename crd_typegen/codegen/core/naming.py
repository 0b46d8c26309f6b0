"""
Visibility and naming policy for declarations.

Decides which declarations and members are hidden, how declaration lists
are ordered, and how a declaration's display name is resolved.
"""

import json
from typing import Dict, List, Optional

from .config import GeneratorConfig
from .generator import RenderError
from .packages import VersionedPackage
from .schema import (
    Declaration,
    Kind,
    Member,
    extract_comment_tags,
    final_underlying,
    innermost_element,
    struct_tag_get,
)
from .templates import TemplateError, render_slice_template
from ...logging_config import get_logger

logger = get_logger(__name__)

EXPORT_TAG = "+kubebuilder:object:root=true"
OPTIONAL_TAG = "optional"
TAG_MARKER = "+"


# Visibility


def is_exported_type(t: Declaration) -> bool:
    """Whether t carries the root-object marker tag."""
    lines = t.comment_lines + t.second_closest_comment_lines
    return any(EXPORT_TAG in line for line in lines)


def hide_type(t: Declaration, config: GeneratorConfig) -> bool:
    """
    Whether t is excluded from output.

    A hide-pattern match always wins; otherwise lowercase names that are
    not exported are hidden.
    """
    qualified = str(t.name)
    for pattern in config.compiled_hide_patterns:
        if pattern.search(qualified):
            return True
    local = t.name.name
    if local and not is_exported_type(t) and local[0].islower():
        return True
    return False


def hidden_member(m: Member, config: GeneratorConfig) -> bool:
    """Whether m is hidden by name, or never serialized."""
    name = field_name(m)
    return name in config.hide_member_fields or name == "-"


def sort_types(types: List[Declaration]) -> List[Declaration]:
    """Exported declarations first, then by qualified name."""
    return sorted(types, key=lambda t: (not is_exported_type(t), str(t.name)))


def visible_types(types: List[Declaration], config: GeneratorConfig) -> List[Declaration]:
    return [t for t in types if not hide_type(t, config)]


# Members


def field_name(m: Member) -> str:
    """Serialized name of m from its json tag, else the member name."""
    value = struct_tag_get(m.tags, "json")
    value = _remove_suffix(value, ",omitempty")
    value = _remove_suffix(value, ",inline")
    return value or m.name


def _remove_suffix(value: str, suffix: str) -> str:
    if value.endswith(suffix):
        return value[: -len(suffix)]
    return value


def field_embedded(m: Member) -> bool:
    return ",inline" in struct_tag_get(m.tags, "json")


def embedded_members(t: Declaration) -> List[Member]:
    return [m for m in t.members if field_embedded(m)]


def is_optional_member(m: Member) -> bool:
    return OPTIONAL_TAG in extract_comment_tags(TAG_MARKER, m.comment_lines)


# Comments


def filter_comment_tags(comments: List[str]) -> List[str]:
    """Drop machine-readable tag lines, keeping prose."""
    return [c for c in comments if not c.strip().startswith(TAG_MARKER)]


def has_comments(comments: List[str]) -> bool:
    comments = filter_comment_tags(comments)
    return not (not comments or (len(comments) == 1 and comments[0] == ""))


def render_comments(comments: List[str], extra: Optional[List[str]] = None) -> str:
    """
    Render prose comment lines as a documentation block.

    Args:
        comments: Raw comment lines, tag lines included
        extra: Lines appended after a separator, e.g. cross references

    Returns:
        ``/** ... */`` block, or "" when there is nothing to say
    """
    lines = filter_comment_tags(comments) if has_comments(comments) else []
    if extra:
        if lines:
            lines = lines + [""]
        lines = lines + list(extra)
    if not lines:
        return ""

    body = "\n".join(f" * {line}".rstrip() for line in lines)
    return "/**\n" + body + "\n */"


# Display names


def type_identifier(t: Declaration) -> str:
    """Qualified name of the element type of t."""
    return str(innermost_element(t).name)


def replace_type_name(replacements: Dict[str, str], name: str) -> str:
    return replacements.get(name, name)


def is_external_type(config: GeneratorConfig, name: str) -> bool:
    return any(rule.matches(name) for rule in config.external_packages)


def external_type_replacement(config: GeneratorConfig, t: Declaration) -> str:
    """Configured override for an external type, else its bare name."""
    t = innermost_element(t)
    return config.external_types.get(t.name.package, {}).get(t.name.name, t.name.name)


def constant_literal(t: Declaration) -> str:
    """
    Target-language literal for a constant declaration.

    String constants are quoted; anything else is emitted as written.
    """
    if t.const_value is None:
        raise RenderError(f"type {t.name} is a non-const declaration, which is unhandled")
    base = final_underlying(t)
    if base.kind is Kind.BUILTIN and base.name.name == "string":
        return json.dumps(t.const_value, ensure_ascii=False)
    return t.const_value


def type_display_name(
    t: Declaration,
    config: GeneratorConfig,
    type_pkg_map: Dict[Declaration, VersionedPackage],
    replacements: Optional[Dict[str, str]] = None,
) -> str:
    """
    Resolve the name used for t in generated output.

    Args:
        t: Declaration to name
        config: Naming configuration
        type_pkg_map: Declaration -> owning package, for locality
        replacements: Name replacement table; defaults to the configured one

    Returns:
        Display name

    Raises:
        RenderError: For constants without a value and unsupported kinds
    """
    if replacements is None:
        replacements = config.type_replacements

    if t.kind is Kind.POINTER:
        return type_display_name(t.elem, config, type_pkg_map, replacements)

    if t.kind is Kind.SLICE:
        element = type_display_name(t.elem, config, type_pkg_map, replacements)
        try:
            return render_slice_template(config.slice_template, element)
        except TemplateError as e:
            logger.debug("slice template failed for %s: %s", t.name, e)
            return element

    if t.kind is Kind.MAP:
        key = type_display_name(t.key, config, type_pkg_map, replacements)
        value = type_display_name(t.elem, config, type_pkg_map, replacements)
        return f"Record<{key}, {value}>"

    if t.kind is Kind.DECLARATION_OF:
        return constant_literal(t)

    if t.kind not in (Kind.STRUCT, Kind.INTERFACE, Kind.ALIAS, Kind.BUILTIN):
        raise RenderError(f"type {t.name} has kind={t.kind.value} which is unhandled")

    s = type_identifier(t)
    if t in type_pkg_map:
        s = t.name.name

    if is_external_type(config, s):
        s = external_type_replacement(config, t)

    return replace_type_name(replacements, s)
