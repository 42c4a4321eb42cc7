"""
Scala bindings generation for WIT component interfaces.

This module provides the top-level interface for turning a resolved WIT graph
into Scala source files for the scala-wasm component runtime.
"""

from loguru import logger

from wit2scala.generator.errors import (
    AmbiguousWorldSelection,
    DanglingReference,
    FlagWidthOverflow,
    GeneratorError,
    InvalidDocument,
    NameCollision,
    UnknownWorld,
    UnsupportedFeature,
)
from wit2scala.generator.loader import load_resolve, parse_resolve
from wit2scala.generator.models import Direction, Resolve
from wit2scala.generator.options import DEFAULT_BASE_PACKAGE, GeneratorOptions
from wit2scala.generator.orchestrator import GeneratedModule, Orchestrator


def generate_modules(
    resolve: Resolve, options: GeneratorOptions | None = None
) -> list[GeneratedModule]:
    """Generate the modules of one world.

    Args:
        resolve: Resolved graph
        options: Generation options (defaults when omitted)

    Returns:
        Modules in generation order

    Raises:
        GeneratorError: If generation fails; no module is returned then
    """
    return Orchestrator(resolve, options or GeneratorOptions()).run()


def generate(
    resolve: Resolve, options: GeneratorOptions | None = None
) -> dict[str, str]:
    """Generate Scala sources for one world.

    Args:
        resolve: Resolved graph
        options: Generation options (defaults when omitted)

    Returns:
        Ordered mapping of relative file path to file content

    Raises:
        GeneratorError: If generation fails
    """
    modules = generate_modules(resolve, options)
    files = {module.path: module.render() for module in modules}
    logger.debug(f"Rendered {len(files)} file(s)")
    return files


__all__ = [
    "AmbiguousWorldSelection",
    "DEFAULT_BASE_PACKAGE",
    "DanglingReference",
    "Direction",
    "FlagWidthOverflow",
    "GeneratedModule",
    "GeneratorError",
    "GeneratorOptions",
    "InvalidDocument",
    "NameCollision",
    "Resolve",
    "UnknownWorld",
    "UnsupportedFeature",
    "generate",
    "generate_modules",
    "load_resolve",
    "parse_resolve",
]
