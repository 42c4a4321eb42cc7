"""
Identifier derivation for generated Scala code.

WIT identifiers are kebab-case (``file-perms``, ``HTTP-client``). The Namer
turns them into one of three Scala conventions, escapes reserved words with
backticks, and keeps a per-scope table of every identifier it hands out so
that two different WIT names mapping to the same Scala name are reported
instead of silently shadowing each other.
"""

import re
from collections.abc import Iterable
from enum import Enum, auto

from loguru import logger

from wit2scala.generator.constants import SCALA_KEYWORDS
from wit2scala.generator.errors import InvalidDocument, NameCollision

_SEPARATORS = re.compile(r"[-_\s]+")


class NameCase(Enum):
    """Target naming convention."""

    TYPE = auto()  # FilePerms
    MEMBER = auto()  # filePerms
    MODULE = auto()  # file_perms


def split_words(raw: str) -> list[str]:
    """Split a WIT identifier into lower-case words.

    Raises:
        InvalidDocument: If the identifier has no words
    """
    words = [w.lower() for w in _SEPARATORS.split(raw.lstrip("%")) if w]
    if not words:
        raise InvalidDocument(f"Invalid identifier '{raw}'")
    return words


def to_type_case(raw: str) -> str:
    return "".join(w[0].upper() + w[1:] for w in split_words(raw))


def to_member_case(raw: str) -> str:
    first, *rest = split_words(raw)
    return first + "".join(w[0].upper() + w[1:] for w in rest)


def to_module_case(raw: str) -> str:
    return "_".join(split_words(raw))


_CONVERTERS = {
    NameCase.TYPE: to_type_case,
    NameCase.MEMBER: to_member_case,
    NameCase.MODULE: to_module_case,
}


def unescape(identifier: str) -> str:
    """Remove backtick escaping from an identifier."""
    if len(identifier) > 1 and identifier[0] == identifier[-1] == "`":
        return identifier[1:-1]
    return identifier


class Namer:
    """Derives Scala identifiers and detects collisions per scope.

    A Namer belongs to a single generation run; its tables are never shared
    between runs.
    """

    def __init__(self, keywords: Iterable[str] = SCALA_KEYWORDS):
        self.keywords = frozenset(keywords)
        self._tables: dict[str, dict[str, str]] = {}

    def escape(self, identifier: str) -> str:
        """Wrap a reserved word in backticks; other identifiers pass through."""
        if identifier in self.keywords:
            return f"`{identifier}`"
        return identifier

    def derive(self, raw: str, case: NameCase, scope: str | None = None) -> str:
        """Derive the Scala spelling of a WIT identifier.

        Args:
            raw: WIT identifier
            case: Target naming convention
            scope: Namespace to register the identifier in, if any

        Returns:
            The converted and, if needed, escaped identifier

        Raises:
            NameCollision: If another identifier already maps to the same
                spelling in ``scope``
        """
        identifier = self.escape(_CONVERTERS[case](raw))
        if scope is not None:
            self.register(scope, identifier, raw)
        return identifier

    def register(self, scope: str, identifier: str, raw: str) -> None:
        """Claim ``identifier`` for ``raw`` within ``scope``."""
        table = self._tables.setdefault(scope, {})
        existing = table.get(identifier)
        if existing is None:
            table[identifier] = raw
            logger.trace(f"Registered {identifier!r} for {raw!r} in {scope}")
        elif existing != raw:
            raise NameCollision(scope, identifier, existing, raw)

    def registered(self, scope: str) -> dict[str, str]:
        """Identifiers claimed in a scope, mapped to their WIT names."""
        return dict(self._tables.get(scope, {}))
