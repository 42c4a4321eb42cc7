"""Scala source formatting utilities."""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

INDENT = "  "


@dataclass
class CodeBlock:
    """Code block with proper indentation."""

    indent: int = 0
    lines: list[str] = field(default_factory=list)

    def add_line(self, line: str = "") -> None:
        """Add line with proper indentation."""
        if not line:
            self.lines.append("")
            return
        self.lines.append(INDENT * self.indent + line)

    def add_lines(self, text: str) -> None:
        """Add every line of a multi-line text at the current indentation."""
        for line in text.splitlines():
            self.add_line(line)

    @contextmanager
    def indented(self) -> Iterator[None]:
        """Context manager for indented block."""
        self.indent += 1
        try:
            yield
        finally:
            self.indent -= 1

    def get_code(self) -> str:
        """Get formatted code."""
        return "\n".join(self.lines)


def format_docs(docs: str | None) -> str:
    """Format a WIT documentation comment as a Scaladoc block.

    Args:
        docs: Documentation text, possibly multi-line

    Returns:
        Scaladoc text ending with a newline, or an empty string
    """
    content = (docs or "").strip()
    if not content:
        return ""

    first, *rest = content.splitlines()
    lines = [f"/** {first}"]
    for line in rest:
        lines.append(" *" if not line.strip() else f" *  {line}")
    lines.append(" */")
    return "\n".join(lines) + "\n"


def format_params(params: list[tuple[str, str]]) -> str:
    """Render ``name: Type`` pairs as a Scala parameter list body."""
    return ", ".join(f"{name}: {type_}" for name, type_ in params)
