"""Command line interface for wit2scala.

This module provides a command-line interface for generating Scala bindings
from a resolved WIT document and writing them to an output directory.
"""

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, cast

import typer
from loguru import logger

from wit2scala.generator import (
    DEFAULT_BASE_PACKAGE,
    GeneratorError,
    GeneratorOptions,
    Resolve,
    generate,
    load_resolve,
)

# Define type variables for TypedCallable
F = TypeVar("F", bound=Callable[..., Any])


# TypedCommand decorator helper
def typed_command(app_command: Any) -> Callable[[F], F]:
    """Wrap typer command with proper typing for mypy."""

    def decorator(func: F) -> F:
        return cast(F, app_command(func))

    return decorator


app = typer.Typer(
    name="wit2scala",
    help=(
        "Generate Scala bindings for WebAssembly components from resolved WIT. "
        "Commands: generate, worlds."
    ),
    add_completion=False,
)

LOG_FORMAT = "<level>{level: <8}</level> | {message}"


def _configure_logging(verbose: bool) -> None:
    """Route loguru output to stderr at the requested level."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO", format=LOG_FORMAT)


def _load(document: Path) -> Resolve:
    """Load a document, turning failures into process exit codes."""
    try:
        return load_resolve(document)
    except GeneratorError as e:
        logger.error(f"Invalid document {document}: {e}")
        raise typer.Exit(e.exit_code) from e
    except OSError as e:
        logger.error(f"Failed to read {document}: {e}")
        raise typer.Exit(1) from e


def _write_files(out_dir: Path, files: dict[str, str]) -> None:
    """Write generated files below the output directory.

    Args:
        out_dir: Output root
        files: Relative path to content
    """
    for relative, content in files.items():
        target = out_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        logger.debug(f"Wrote {target}")


# Define reusable argument
DOCUMENT_ARG = typer.Argument(
    ..., help="Resolved WIT document (JSON or YAML, as printed by wasm-tools)"
)


@typed_command(app.command("generate"))
def generate_bindings(
    document: Path = DOCUMENT_ARG,
    out_dir: Path = typer.Option(
        Path("generated"), "--out-dir", "-o", help="Directory for generated sources"
    ),
    base_package: str = typer.Option(
        DEFAULT_BASE_PACKAGE,
        "--base-package",
        "-p",
        envvar="WIT2SCALA_BASE_PACKAGE",
        help="Scala package that roots all generated code",
    ),
    world: str | None = typer.Option(
        None, "--world", "-w", help="World to generate (required if several exist)"
    ),
    header: bool = typer.Option(
        True, "--header/--no-header", help="Emit a generated-code comment per file"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="List the files that would be written"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Generate Scala bindings for one world.

    Files are written only after the whole world has been generated, so a
    failing run leaves the output directory untouched.

    Example: wit2scala generate component.json -o src/main/scala -p com.example
    """
    _configure_logging(verbose)

    try:
        options = GeneratorOptions(base_package=base_package, world=world, header=header)
    except ValueError as e:
        logger.error(str(e))
        raise typer.Exit(1) from e

    resolve = _load(document)

    try:
        files = generate(resolve, options)
    except GeneratorError as e:
        logger.error(f"Generation failed: {e}")
        raise typer.Exit(e.exit_code) from e

    if dry_run:
        for relative in files:
            typer.echo(str(out_dir / relative))
        logger.info(f"{len(files)} file(s) would be written to {out_dir}")
        return

    try:
        _write_files(out_dir, files)
    except OSError as e:
        logger.error(f"Failed to write output: {e}")
        raise typer.Exit(1) from e

    logger.info(f"Generated {len(files)} file(s) in {out_dir}")


@typed_command(app.command("worlds"))
def list_worlds(
    document: Path = DOCUMENT_ARG,
) -> None:
    """List the worlds defined by a document."""
    _configure_logging(False)
    resolve = _load(document)

    if not resolve.worlds:
        logger.warning("The document does not define any world")
        return

    for world in resolve.worlds:
        if world.package is None:
            typer.echo(world.name)
        else:
            typer.echo(f"{world.name} ({resolve.package(world.package).name})")


if __name__ == "__main__":
    app()
