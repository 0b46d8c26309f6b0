"""
Core code generation components.

Provides the declaration graph, grouping, naming policy and base classes
used by all language generators.
"""

from .schema import (
    Declaration,
    DeclarationUniverse,
    IngestionError,
    Kind,
    Member,
    RawPackage,
    TypeName,
    convert_source_document,
    innermost_element,
)
from .config import GeneratorConfig, ExternalPackage, ConfigError, load_config
from .templates import TemplateEngine, TemplateError, create_template_engine
from .packages import (
    VersionedPackage,
    combine_api_packages,
    load_api_packages,
    select_api_packages,
)
from .generator import (
    CodeGenerator,
    GeneratorError,
    RenderError,
    GenerationResult,
    generate_code,
)
from .naming import hide_type, sort_types, type_display_name, visible_types
from .references import (
    collect_external_types,
    extract_type_to_package_map,
    find_type_references,
)
from .enums import constants_of_type, constants_type

__all__ = [
    # Declaration graph
    "Declaration",
    "DeclarationUniverse",
    "IngestionError",
    "Kind",
    "Member",
    "RawPackage",
    "TypeName",
    "convert_source_document",
    "innermost_element",
    # Configuration system
    "GeneratorConfig",
    "ExternalPackage",
    "ConfigError",
    "load_config",
    # Template system
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
    # Grouping
    "VersionedPackage",
    "combine_api_packages",
    "load_api_packages",
    "select_api_packages",
    # Base generator interface
    "CodeGenerator",
    "GeneratorError",
    "RenderError",
    "GenerationResult",
    "generate_code",
    # Policy
    "hide_type",
    "sort_types",
    "type_display_name",
    "visible_types",
    "collect_external_types",
    "extract_type_to_package_map",
    "find_type_references",
    "constants_of_type",
    "constants_type",
]
