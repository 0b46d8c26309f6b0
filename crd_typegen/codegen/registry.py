"""
Lookup of output generators by target language.

The CLI and ``generate_from_source`` name a language (or a short alias
such as ``ts``); the registry maps that name onto a generator class.
"""

from typing import Dict, Type, Optional, List
from pathlib import Path

from .core.config import GeneratorConfig
from .core.generator import CodeGenerator


class RegistryError(Exception):
    """Exception raised when a language cannot be registered or found."""

    pass


class GeneratorRegistry:
    """Maps language names and aliases to generator classes."""

    def __init__(self):
        self._generators: Dict[str, Type[CodeGenerator]] = {}
        self._aliases: Dict[str, str] = {}

    def register(
        self,
        language: str,
        generator_class: Type[CodeGenerator],
        aliases: Optional[List[str]] = None,
    ):
        """
        Register a generator class under a language name.

        Args:
            language: Canonical name, matched case-insensitively
            generator_class: CodeGenerator subclass
            aliases: Short names resolving to the same generator

        Raises:
            RegistryError: If the class is not a generator, or a name is taken
        """
        if not issubclass(generator_class, CodeGenerator):
            raise RegistryError(f"{generator_class.__name__} is not a CodeGenerator")

        key = language.lower()
        if key in self._generators or key in self._aliases:
            raise RegistryError(f"language {language!r} is already registered")
        self._generators[key] = generator_class

        for alias in aliases or []:
            alias_key = alias.lower()
            if alias_key in self._generators or alias_key in self._aliases:
                raise RegistryError(f"alias {alias!r} is already registered")
            self._aliases[alias_key] = key

    def _resolve(self, language: str) -> str:
        key = language.lower()
        return self._aliases.get(key, key)

    def create_generator(
        self,
        language: str,
        config: Optional[GeneratorConfig] = None,
        template_dir: Optional[Path] = None,
    ) -> CodeGenerator:
        """
        Instantiate the generator for a language or alias.

        Raises:
            RegistryError: If nothing is registered under that name
        """
        generator_class = self._generators.get(self._resolve(language))
        if generator_class is None:
            raise RegistryError(
                f"unsupported language {language!r}, "
                f"choose one of: {', '.join(self.list_languages())}"
            )
        return generator_class(config, template_dir)

    def list_languages(self) -> List[str]:
        return sorted(self._generators)

    def get_aliases_for_language(self, language: str) -> List[str]:
        key = language.lower()
        return sorted(a for a, target in self._aliases.items() if target == key)

    def is_supported(self, language: str) -> bool:
        return self._resolve(language) in self._generators


def create_default_registry() -> GeneratorRegistry:
    """Build a registry with every bundled generator registered."""
    from .languages.typescript import TypeScriptGenerator

    registry = GeneratorRegistry()
    registry.register("typescript", TypeScriptGenerator, aliases=["ts"])
    return registry


def get_generator(
    language: str,
    config: Optional[GeneratorConfig] = None,
    template_dir: Optional[Path] = None,
) -> CodeGenerator:
    """Create a generator from the bundled registry."""
    return create_default_registry().create_generator(language, config, template_dir)


def list_supported_languages() -> List[str]:
    return create_default_registry().list_languages()
