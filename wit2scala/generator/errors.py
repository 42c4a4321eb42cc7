"""
Exceptions raised by the Scala bindings generator.

Every error aborts the current generation run; the generator either returns a
complete set of modules or raises one of these.
"""


class GeneratorError(Exception):
    """Base class for all generation errors.

    Attributes:
        message: Human-readable description of the problem
        entity: Name of the offending entity (world, interface, type, ...)
        exit_code: Process exit status used by the command-line interface
    """

    exit_code = 1

    def __init__(self, message: str, entity: str | None = None):
        self.message = message
        self.entity = entity
        super().__init__(message)

    def __str__(self) -> str:
        if self.entity:
            return f"{self.message} (at '{self.entity}')"
        return self.message


class AmbiguousWorldSelection(GeneratorError):
    """Several worlds are defined and none was selected."""

    exit_code = 2

    def __init__(self, worlds: list[str]):
        names = ", ".join(worlds)
        super().__init__(
            f"Multiple worlds found ({names}); select one explicitly with --world"
        )
        self.worlds = worlds


class UnknownWorld(GeneratorError):
    """The selected world does not exist."""

    exit_code = 3

    def __init__(self, name: str | None, available: list[str]):
        if name is None:
            message = "The document does not define any world"
        else:
            message = f"Unknown world '{name}'"
            if available:
                message += f"; available worlds: {', '.join(available)}"
        super().__init__(message, name)
        self.available = available


class UnsupportedFeature(GeneratorError):
    """The input uses a feature the Scala runtime cannot express."""

    exit_code = 4


class NameCollision(GeneratorError):
    """Two distinct WIT identifiers map to one Scala identifier in a scope."""

    exit_code = 5

    def __init__(self, scope: str, identifier: str, first: str, second: str):
        super().__init__(
            f"Identifiers '{first}' and '{second}' both map to '{identifier}'",
            scope,
        )
        self.scope = scope
        self.identifier = identifier
        self.first = first
        self.second = second


class FlagWidthOverflow(GeneratorError):
    """A flags type declares more flags than fit in 64 bits."""

    exit_code = 6

    def __init__(self, name: str, count: int):
        super().__init__(f"Flags type declares {count} flags, at most 64 are supported", name)
        self.count = count


class DanglingReference(GeneratorError):
    """A reference points at an id that is not present in the resolved graph."""

    exit_code = 7


class InvalidDocument(GeneratorError):
    """The resolved-graph document does not follow the expected schema."""

    exit_code = 8
