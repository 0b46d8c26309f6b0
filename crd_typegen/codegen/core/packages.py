"""
Grouping of raw source packages into versioned API packages.

Packages are selected by their comment tags, then merged by the
``<group>/<version>`` identity they serve.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .schema import Declaration, IngestionError, RawPackage, extract_comment_tags
from ...logging_config import get_logger

logger = get_logger(__name__)

FORCE_INCLUDE_TAG = "+gencrdrefdocs:force"
GROUP_NAME_TAG = "groupName"
API_VERSION_PATTERN = r"^v\d+((alpha|beta)\d+)?$"

_api_version_re = re.compile(API_VERSION_PATTERN)


@dataclass
class VersionedPackage:
    """Declarations of one API group version, possibly from several packages."""

    api_group: str
    api_version: str
    raw_packages: List[RawPackage] = field(default_factory=list)
    types: List[Declaration] = field(default_factory=list)
    constants: List[Declaration] = field(default_factory=list)

    @property
    def identifier(self) -> str:
        return f"{self.api_group}/{self.api_version}"

    def merge(self, package: RawPackage) -> None:
        """
        Add a raw package's types and constants.

        Declarations already present are skipped, so merging the same
        package twice changes nothing.
        """
        if not any(p is package for p in self.raw_packages):
            self.raw_packages.append(package)
        _extend_unique(self.types, package.types.values())
        _extend_unique(self.constants, package.constants.values())


def _extend_unique(target: List[Declaration], declarations) -> None:
    seen = {id(d) for d in target}
    for declaration in declarations:
        if id(declaration) not in seen:
            seen.add(id(declaration))
            target.append(declaration)


def group_name(package: RawPackage) -> str:
    """Return the ``+groupName`` tag of a package, or "" if not exactly one."""
    values = extract_comment_tags("+", package.comments).get(GROUP_NAME_TAG, [])
    if len(values) == 1:
        return values[0]
    return ""


def is_vendor_package(package: RawPackage) -> bool:
    """Determine if a package comes from a vendor/ directory."""
    return "/vendor/" in package.source_path.replace("\\", "/")


def is_force_included(package: RawPackage) -> bool:
    for line in package.doc_comments:
        line = line.strip()
        if line.startswith("//"):
            line = line[2:].strip()
        if line == FORCE_INCLUDE_TAG:
            return True
    return False


def api_version_for_package(package: RawPackage) -> Tuple[str, str]:
    """
    Infer (group, version) for a package.

    The package basename is taken as the API version.

    Raises:
        IngestionError: If the basename is not a version like v1 or v2beta1
    """
    version = package.name
    if not _api_version_re.match(version):
        raise IngestionError(
            f"cannot infer apiVersion of package {package.path} (basename "
            f"{version!r} doesn't match expected pattern {API_VERSION_PATTERN})"
        )
    return group_name(package), version


def select_api_packages(packages: List[RawPackage]) -> List[RawPackage]:
    """
    Pick the packages that define API types, sorted by import path.

    A package qualifies when it carries a group name and declares types,
    or when it is force-included. Vendored packages never qualify.
    """
    candidates: Dict[str, RawPackage] = {}
    for package in packages:
        logger.debug(
            "trying package=%s groupName=%s", package.path, group_name(package)
        )

        if is_vendor_package(package):
            logger.debug("package=%s coming from vendor/, ignoring.", package.path)
            continue

        if (group_name(package) and package.types) or is_force_included(package):
            candidates[package.path] = package

    selected = []
    for path in sorted(candidates):
        logger.info("using package=%s", path)
        selected.append(candidates[path])
    return selected


def combine_api_packages(packages: List[RawPackage]) -> List[VersionedPackage]:
    """
    Group packages by the ``<group>/<version>`` they serve.

    Packages contribute in the order given; the result is sorted by
    identifier.
    """
    by_id: Dict[str, VersionedPackage] = {}

    for package in packages:
        try:
            api_group, api_version = api_version_for_package(package)
        except IngestionError as e:
            raise IngestionError(
                f"could not get apiVersion for package {package.path}: {e}"
            ) from e

        identifier = f"{api_group}/{api_version}"
        versioned = by_id.get(identifier)
        if versioned is None:
            versioned = VersionedPackage(api_group=api_group, api_version=api_version)
            by_id[identifier] = versioned
        versioned.merge(package)

    return [by_id[identifier] for identifier in sorted(by_id)]


def load_api_packages(packages: List[RawPackage]) -> List[VersionedPackage]:
    """Select and group raw packages; an empty selection is an error."""
    selected = select_api_packages(packages)
    if not selected:
        raise IngestionError("no API packages found in source")
    return combine_api_packages(selected)
