"""
Cross-type reference resolution.

Builds the reverse index of which records mention which types, and the
lookup from a declaration to the versioned package that owns it.
"""

from typing import Dict, List, Optional

from .config import GeneratorConfig
from .naming import (
    hidden_member,
    hide_type,
    is_external_type,
    sort_types,
    visible_types,
)
from .packages import VersionedPackage
from .schema import Declaration, innermost_element
from ...logging_config import get_logger

logger = get_logger(__name__)

UNKNOWN_API_GROUP = "<UNKNOWN_API_GROUP>"

ReferenceIndex = Dict[Declaration, List[Declaration]]
TypePackageMap = Dict[Declaration, VersionedPackage]


def find_type_references(packages: List[VersionedPackage]) -> ReferenceIndex:
    """
    Map each element declaration to the records with a member of that type.

    Only direct membership is indexed; wrapper types are stripped first.
    """
    references: ReferenceIndex = {}
    for package in packages:
        for t in package.types:
            for member in t.members:
                element = innermost_element(member.type)
                owners = references.setdefault(element, [])
                if not any(owner is t for owner in owners):
                    owners.append(t)
    return references


def extract_type_to_package_map(packages: List[VersionedPackage]) -> TypePackageMap:
    """Map every type and constant to the versioned package owning it."""
    out: TypePackageMap = {}
    for package in packages:
        for t in package.types:
            out[t] = package
        for c in package.constants:
            out[c] = package
    return out


def type_references(
    t: Declaration, config: GeneratorConfig, references: Optional[ReferenceIndex]
) -> List[Declaration]:
    """Visible records referencing t, sorted; empty when no index is given."""
    if not references:
        return []
    return sort_types([r for r in references.get(t, []) if not hide_type(r, config)])


def api_group_for_type(t: Declaration, type_pkg_map: TypePackageMap) -> str:
    """Return ``<group>/<version>`` for t, or a sentinel for foreign types."""
    t = innermost_element(t)
    package = type_pkg_map.get(t)
    if package is None:
        logger.warning("cannot read apiVersion for %s from type=>pkg map", t.name)
        return UNKNOWN_API_GROUP
    return package.identifier


def collect_external_types(
    packages: List[VersionedPackage],
    config: GeneratorConfig,
    type_pkg_map: TypePackageMap,
) -> List[Declaration]:
    """
    Walk visible members and return the external types they reference.

    Returns:
        Distinct element declarations matching an external package rule,
        sorted like every other declaration list
    """
    found: List[Declaration] = []
    for package in packages:
        for t in visible_types(package.types, config):
            for member in t.members:
                if hidden_member(member, config):
                    continue
                element = innermost_element(member.type)
                if element in type_pkg_map or any(f is element for f in found):
                    continue
                if is_external_type(config, str(element.name)):
                    found.append(element)
    return sort_types(found)
