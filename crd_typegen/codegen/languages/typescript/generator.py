"""
TypeScript code generator implementation.

Generates TypeScript type declarations from versioned API packages.
"""

from typing import Dict, List, Optional, Any
from pathlib import Path

from ...core.config import GeneratorConfig
from ...core.enums import constants_type
from ...core.generator import CodeGenerator, GeneratorError, RenderError
from ...core.naming import (
    embedded_members,
    field_embedded,
    field_name,
    hidden_member,
    is_optional_member,
    render_comments,
    sort_types,
    type_display_name,
    visible_types,
)
from ...core.packages import VersionedPackage
from ...core.references import (
    ReferenceIndex,
    TypePackageMap,
    collect_external_types,
    extract_type_to_package_map,
    find_type_references,
    type_references,
)
from ...core.schema import Declaration, Kind, Member
from .types import INTERFACE_TYPE, build_replacements, property_name

GENERATOR_NAME = "crd-typegen"


class TypeScriptGenerator(CodeGenerator):
    """Code generator for TypeScript type aliases and record types."""

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        template_dir: Optional[Path] = None,
    ):
        """Initialize TypeScript generator with configuration."""
        super().__init__(config, template_dir)
        self.replacements = build_replacements(self.config)

    @property
    def language_name(self) -> str:
        """Return the language name."""
        return "typescript"

    @property
    def file_extension(self) -> str:
        """Return TypeScript file extension."""
        return ".ts"

    def get_template_directory(self) -> Optional[Path]:
        """Return the TypeScript templates directory."""
        template_dir = Path(__file__).parent / "templates"
        return template_dir if template_dir.exists() else None

    def generate(self, packages: List[VersionedPackage]) -> str:
        """Generate TypeScript declarations for all packages using templates."""
        references = find_type_references(packages)
        type_pkg_map = extract_type_to_package_map(packages)

        package_data = [
            self._generate_package_data(package, references, type_pkg_map)
            for package in packages
        ]

        if not self.template_exists("packages.ts.j2"):
            raise GeneratorError("packages.ts.j2 template not found")

        context = {"generator": GENERATOR_NAME, "packages": package_data}
        return self.render_template("packages.ts.j2", context)

    def get_metadata(self, packages: List[VersionedPackage]) -> Dict[str, Any]:
        """Report external types referenced by rendered members."""
        type_pkg_map = extract_type_to_package_map(packages)
        external = collect_external_types(packages, self.config, type_pkg_map)
        return {"external_types": [str(t.name) for t in external]}

    def _display(self, t: Declaration, type_pkg_map: TypePackageMap) -> str:
        return type_display_name(t, self.config, type_pkg_map, self.replacements)

    def _declared_name(self, t: Declaration) -> str:
        """Name a rendered declaration is exported under."""
        return t.name.name

    def _generate_package_data(
        self,
        package: VersionedPackage,
        references: ReferenceIndex,
        type_pkg_map: TypePackageMap,
    ) -> Dict[str, Any]:
        types = visible_types(sort_types(package.types), self.config)
        return {
            "identifier": package.identifier,
            "group": package.api_group,
            "version": package.api_version,
            "types": [
                self._generate_type_data(t, references, type_pkg_map) for t in types
            ],
        }

    def _generate_type_data(
        self,
        t: Declaration,
        references: ReferenceIndex,
        type_pkg_map: TypePackageMap,
    ) -> Dict[str, Any]:
        """Generate declaration data for the type template."""
        referenced_by = [
            self._declared_name(r)
            for r in type_references(t, self.config, references)
        ]
        extra = [f"Appears in: {', '.join(referenced_by)}"] if referenced_by else None

        type_data = {
            "name": self._declared_name(t),
            "doc": render_comments(t.comment_lines, extra) or None,
        }

        if t.kind is Kind.STRUCT:
            type_data["kind"] = "record"
            type_data["fields"] = [
                self._generate_field_data(m, type_pkg_map)
                for m in t.members
                if not field_embedded(m) and not hidden_member(m, self.config)
            ]
            # Embedded shapes compose by intersection, never by copying fields
            type_data["embedded"] = [
                self._display(m.type, type_pkg_map)
                for m in embedded_members(t)
                if not hidden_member(m, self.config)
            ]
        else:
            type_data["kind"] = "alias"
            type_data["value"] = self._alias_value(t, type_pkg_map)

        return type_data

    def _generate_field_data(
        self, member: Member, type_pkg_map: TypePackageMap
    ) -> Dict[str, Any]:
        """Generate field data for the type template."""
        return {
            "name": property_name(field_name(member)),
            "type": self._display(member.type, type_pkg_map),
            "optional": is_optional_member(member),
            "doc": render_comments(member.comment_lines) or None,
        }

    def _alias_value(self, t: Declaration, type_pkg_map: TypePackageMap) -> str:
        if t.kind is Kind.INTERFACE:
            return INTERFACE_TYPE

        if t.kind is Kind.BUILTIN:
            # Named primitive
            return self.replacements.get(t.name.name, INTERFACE_TYPE)

        if t.kind is not Kind.ALIAS:
            return self._display(t, type_pkg_map)

        union = constants_type(t, self.config, type_pkg_map)
        if union:
            return union
        if t.underlying is None:
            raise RenderError(f"alias {t.name} has no underlying type")
        return self._display(t.underlying, type_pkg_map)
