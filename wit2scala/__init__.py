from wit2scala.generator import (
    GeneratorError,
    GeneratorOptions,
    generate,
    generate_modules,
    load_resolve,
    parse_resolve,
)

__version__ = "0.1.0"


__all__ = [
    "GeneratorError",
    "GeneratorOptions",
    "generate",
    "generate_modules",
    "load_resolve",
    "parse_resolve",
]
