"""
Base generator interface for all code generation targets.

Defines the contract that all language generators must implement.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Any, Optional
from pathlib import Path

from .config import GeneratorConfig
from .packages import VersionedPackage
from .templates import TemplateEngine, create_template_engine
from ...logging_config import get_logger

logger = get_logger(__name__)


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


class RenderError(GeneratorError):
    """The declaration graph contradicts the rendering policy."""

    pass


class CodeGenerator(ABC):
    """Abstract base class for all code generators."""

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        template_dir: Optional[Path] = None,
    ):
        """
        Initialize generator.

        Args:
            config: Visibility and naming configuration
            template_dir: Overrides the generator's bundled templates
        """
        self.config = config or GeneratorConfig()
        self._template_dir_override = template_dir
        self._template_engine = None
        self._setup_templates()

    def _setup_templates(self):
        """Setup template engine for this generator."""
        template_dir = self._template_dir_override or self.get_template_directory()
        self._template_engine = create_template_engine(template_dir)

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Return the name of the target language (e.g., 'typescript')."""
        pass

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Return the file extension for generated files (e.g., '.ts')."""
        pass

    def get_template_directory(self) -> Optional[Path]:
        """
        Return the directory containing templates for this generator.

        Subclasses should override this to provide their template directory.

        Returns:
            Path to template directory or None
        """
        return None

    @property
    def template_engine(self) -> TemplateEngine:
        """Get the template engine for this generator."""
        if self._template_engine is None:
            self._setup_templates()
        return self._template_engine

    @abstractmethod
    def generate(self, packages: List[VersionedPackage]) -> str:
        """
        Generate code for all packages.

        Args:
            packages: Grouped packages, sorted by identity

        Returns:
            Generated code as a string
        """
        pass

    def validate_packages(self, packages: List[VersionedPackage]) -> List[str]:
        """
        Collect non-fatal warnings about the packages to render.

        Returns:
            List of warning messages (empty if no issues)
        """
        warnings = []
        for package in packages:
            if not package.types:
                warnings.append(f"Package {package.identifier} has no types")
        return warnings

    def get_metadata(self, packages: List[VersionedPackage]) -> Dict[str, Any]:
        """Return generator-specific metadata for a generation result."""
        return {}

    def format_code(self, code: str) -> str:
        """
        Apply language-specific formatting to generated code.

        Trailing whitespace is removed from every line and runs of blank
        lines collapse to one.

        Args:
            code: Raw generated code

        Returns:
            Formatted code ending in a single newline
        """
        formatted_lines = []
        blank_count = 0

        for line in code.split("\n"):
            stripped = line.rstrip()
            if not stripped:
                blank_count += 1
                if blank_count <= 1:
                    formatted_lines.append("")
            else:
                blank_count = 0
                formatted_lines.append(stripped)

        return "\n".join(formatted_lines).strip("\n") + "\n"

    # Template helper methods

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """Render a template with context."""
        return self.template_engine.render_template(template_name, context)

    def template_exists(self, template_name: str) -> bool:
        """Check if a template exists."""
        return self.template_engine.template_exists(template_name)


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(
        self, code: str, warnings: List[str] = None, metadata: Dict[str, Any] = None
    ):
        """
        Initialize generation result.

        Args:
            code: Generated code
            warnings: Any warnings from generation
            metadata: Additional metadata about generation
        """
        self.code = code
        self.warnings = warnings or []
        self.metadata = metadata or {}
        self.success = True
        self.error_message = None
        self.exception = None

    @classmethod
    def error(cls, message: str, exception: Exception = None) -> "GenerationResult":
        """Create a failed generation result."""
        result = cls(code="")
        result.success = False
        result.error_message = message
        result.exception = exception
        return result


def generate_code(
    generator: CodeGenerator, packages: List[VersionedPackage]
) -> GenerationResult:
    """
    Generate code using the specified generator with error handling.

    A failure anywhere in the pass yields a failed result with no code;
    partial output is never returned.

    Args:
        generator: Code generator instance
        packages: Grouped packages to render

    Returns:
        GenerationResult with code, warnings, and metadata
    """
    try:
        warnings = generator.validate_packages(packages)

        code = generator.generate(packages)
        formatted_code = generator.format_code(code)

        metadata = {
            "language": generator.language_name,
            "file_extension": generator.file_extension,
            "package_count": len(packages),
            "type_count": sum(len(p.types) for p in packages),
            "packages": [p.identifier for p in packages],
        }
        metadata.update(generator.get_metadata(packages))

        return GenerationResult(formatted_code, warnings, metadata)

    except Exception as e:
        logger.error("Code generation failed: %s", e)
        return GenerationResult.error(f"Code generation failed: {str(e)}", exception=e)
