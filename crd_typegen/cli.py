"""
Command-line interface for crd-typegen.

Loads the configuration and declaration graph once, then writes the
rendered declarations to a file or serves them over HTTP.
"""

import argparse
import sys
from pathlib import Path
from typing import Callable, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from .codegen.core.config import ConfigError, load_config
from .codegen.core.generator import GenerationResult, generate_code
from .codegen.core.packages import load_api_packages
from .codegen.core.schema import IngestionError, convert_source_document
from .codegen.registry import RegistryError, create_default_registry
from .logging_config import get_logger, setup_logging
from .service import create_app, serve
from .utils import SourceLoaderError, load_source

logger = get_logger(__name__)

console = Console(stderr=True)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="crd-typegen",
        description="Generate TypeScript declarations from API type declarations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  crd-typegen --config config.json --api-dir api/declarations.json --out-file out/types.ts
  crd-typegen --config config.json --api-dir https://example.com/declarations.json --http-addr :8080
        """.strip(),
    )

    parser.add_argument("--config", required=True, help="path to config file (JSON)")
    parser.add_argument(
        "--api-dir",
        required=True,
        help="declarations document: file, directory containing declarations.json, or URL",
    )
    parser.add_argument(
        "--template-dir",
        help="directory with packages.ts.j2 and type.ts.j2 (default: bundled templates)",
    )

    output_group = parser.add_mutually_exclusive_group(required=True)
    output_group.add_argument(
        "--out-file", metavar="FILE", help="path to output file to save the result"
    )
    output_group.add_argument(
        "--http-addr",
        metavar="ADDR",
        help="start an HTTP server on specified addr to view the result (e.g. :8080)",
    )

    parser.add_argument(
        "--language", "-l", default="typescript", help="target language (default: typescript)"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="debug logging and generation summary"
    )
    return parser


def _resolve_template_dir(template_dir: Optional[str]) -> Optional[Path]:
    if template_dir is None:
        return None
    path = Path(template_dir).resolve()
    if not path.exists():
        raise CLIError(f"cannot read the {path} directory")
    if not path.is_dir():
        raise CLIError(f"{path} path is not a directory")
    return path


def _print_summary(result: GenerationResult) -> None:
    table = Table(title="Generation Summary", box=box.SIMPLE, header_style="bold cyan")
    table.add_column("Setting", style="bold")
    table.add_column("Value")

    metadata = result.metadata
    table.add_row("Language", metadata.get("language", ""))
    table.add_row("Packages", ", ".join(metadata.get("packages", [])))
    table.add_row("Types", str(metadata.get("type_count", 0)))
    table.add_row(
        "External types", ", ".join(metadata.get("external_types", [])) or "none"
    )
    console.print(table)

    for warning in result.warnings:
        console.print(f"[yellow]⚠️  {warning}[/yellow]")


def _write_output(result: GenerationResult, out_file: Path, verbose: bool) -> int:
    if not result.success:
        console.print(f"[red]✗ Generation failed:[/red] {result.error_message}")
        return 1

    try:
        out_file.parent.mkdir(parents=True, exist_ok=True)
        out_file.write_text(result.code, encoding="utf-8")
    except OSError as e:
        console.print(f"[red]✗ Failed to write to out file:[/red] {e}")
        return 1

    logger.info("written to %s", out_file)
    if verbose:
        _print_summary(result)
    return 0


def _serve(render: Callable[[], GenerationResult], address: str) -> int:
    try:
        serve(create_app(render), address)
    except ValueError as e:
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the generator.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    args = create_parser().parse_args(argv)
    setup_logging(args.verbose)
    logger.info("working directory is %s", Path.cwd())

    try:
        template_dir = _resolve_template_dir(args.template_dir)
        config = load_config(args.config)

        logger.info("loading declarations from %s", args.api_dir)
        _, document = load_source(args.api_dir)
        packages = load_api_packages(convert_source_document(document))

        generator = create_default_registry().create_generator(
            args.language, config, template_dir
        )
    except (CLIError, ConfigError, SourceLoaderError, IngestionError, RegistryError) as e:
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1

    def render() -> GenerationResult:
        return generate_code(generator, packages)

    if args.out_file:
        return _write_output(render(), Path(args.out_file), args.verbose)
    return _serve(render, args.http_addr)


if __name__ == "__main__":
    sys.exit(main())
