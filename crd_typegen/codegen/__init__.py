"""
Code generation from API declaration graphs.

Groups source declarations into versioned API packages and renders them
as type declarations in a target language.
"""

from typing import Any, Dict, Optional
from pathlib import Path

from .registry import (
    GeneratorRegistry,
    RegistryError,
    create_default_registry,
    get_generator,
    list_supported_languages,
)
from .core.generator import CodeGenerator, GenerationResult, generate_code
from .core.schema import convert_source_document
from .core.packages import load_api_packages
from .core.config import GeneratorConfig, ConfigError, load_config


def generate_from_source(
    document: Dict[str, Any],
    config: Optional[GeneratorConfig] = None,
    language: str = "typescript",
    template_dir: Optional[Path] = None,
) -> GenerationResult:
    """
    Generate code from a source declaration document.

    Args:
        document: Parsed declaration graph document
        config: Loaded generator configuration
        language: Target language name or alias
        template_dir: Overrides the generator's bundled templates

    Returns:
        GenerationResult with generated code

    Raises:
        IngestionError: If the document or its packages are malformed
    """
    packages = load_api_packages(convert_source_document(document))
    generator = get_generator(language, config, template_dir)
    return generate_code(generator, packages)


__all__ = [
    "GeneratorRegistry",
    "RegistryError",
    "CodeGenerator",
    "GenerationResult",
    "GeneratorConfig",
    "ConfigError",
    "create_default_registry",
    "generate_code",
    "generate_from_source",
    "get_generator",
    "list_supported_languages",
    "load_config",
]
