"""
Enum synthesis from constant declarations.

A type whose package declares typed constants renders as the union of
those constants' literal values.
"""

from typing import List, Optional

from .config import GeneratorConfig
from .naming import sort_types, type_display_name
from .packages import VersionedPackage
from .references import TypePackageMap
from .schema import Declaration

UNION_SEPARATOR = " | "


def constants_of_type(
    t: Declaration, package: Optional[VersionedPackage]
) -> List[Declaration]:
    """
    Find the constants in package whose underlying type is t.

    The comparison is by identity, not by structure. Results use the
    same ordering as every other declaration list.
    """
    if package is None:
        return []
    return sort_types([c for c in package.constants if c.underlying is t])


def constants_type(
    t: Declaration, config: GeneratorConfig, type_pkg_map: TypePackageMap
) -> str:
    """
    Render the constants of t as a literal union.

    Returns:
        e.g. ``"blue" | "red"``, or "" when t has no constants
    """
    constants = constants_of_type(t, type_pkg_map.get(t))
    return UNION_SEPARATOR.join(
        type_display_name(c, config, type_pkg_map) for c in constants
    )
