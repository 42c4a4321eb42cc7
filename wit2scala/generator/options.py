"""Configuration for a generation run."""

import re
from dataclasses import dataclass

DEFAULT_BASE_PACKAGE = "componentmodel"

_PACKAGE_SEGMENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class GeneratorOptions:
    """Options for the Scala bindings generator.

    Attributes:
        base_package: Scala package that roots all generated code
            (e.g. ``com.example.wasm``)
        world: Name of the world to generate; required when the document
            defines more than one
        header: Emit a "generated code" comment at the top of each file
    """

    base_package: str = DEFAULT_BASE_PACKAGE
    world: str | None = None
    header: bool = True

    def __post_init__(self) -> None:
        segments = self.base_package.split(".")
        if not all(_PACKAGE_SEGMENT_RE.match(s) for s in segments):
            raise ValueError(f"Invalid base package '{self.base_package}'")

    @property
    def base_segments(self) -> list[str]:
        return self.base_package.split(".")
