"""Fixtures and configuration for pytest."""

from collections.abc import Callable

import pytest

from wit2scala.generator import parse_resolve
from wit2scala.generator.models import Resolve
from wit2scala.generator.naming import Namer


def build_document(
    types: list[dict] | None = None,
    functions: dict[str, dict] | None = None,
    *,
    direction: str = "import",
    package: str = "example:demo@1.0.0",
    interface: str = "api",
    world: str = "app",
    world_functions: dict[str, dict] | None = None,
) -> dict:
    """Build a document with one package, one interface and one world.

    Named types without an explicit owner are owned by the interface; the
    world imports or exports the interface according to ``direction``.
    """
    types = [dict(t) for t in types or []]
    for t in types:
        if t.get("name") is not None:
            t.setdefault("owner", {"interface": 0})

    interface_types = {
        t["name"]: i
        for i, t in enumerate(types)
        if t.get("name") is not None and t["owner"] == {"interface": 0}
    }
    items = {interface: {"interface": {"id": 0}}}
    for name, func in (world_functions or {}).items():
        items[name] = {"function": func}

    return {
        "packages": [
            {"name": package, "interfaces": {interface: 0}, "worlds": {world: 0}}
        ],
        "interfaces": [
            {
                "name": interface,
                "package": 0,
                "types": interface_types,
                "functions": functions or {},
            }
        ],
        "types": types,
        "worlds": [
            {
                "name": world,
                "package": 0,
                "imports": items if direction == "import" else {},
                "exports": items if direction == "export" else {},
            }
        ],
    }


def freestanding(name: str, params: list[tuple[str, object]], result=None) -> dict:
    """Function entry of a document."""
    entry = {
        "name": name,
        "kind": "freestanding",
        "params": [{"name": n, "type": t} for n, t in params],
    }
    if result is not None:
        entry["result"] = result
    return entry


@pytest.fixture
def make_document() -> Callable[..., dict]:
    """Fixture providing the document builder."""
    return build_document


@pytest.fixture
def make_function() -> Callable[..., dict]:
    """Fixture providing the freestanding function builder."""
    return freestanding


@pytest.fixture
def make_resolve() -> Callable[..., Resolve]:
    """Fixture providing a builder of decoded graphs."""

    def _make(*args, **kwargs) -> Resolve:
        return parse_resolve(build_document(*args, **kwargs))

    return _make


@pytest.fixture
def math_document() -> dict:
    """Fixture providing an imported ``math`` interface with a record."""
    return build_document(
        types=[
            {
                "name": "point",
                "kind": {
                    "record": {
                        "fields": [
                            {"name": "x", "type": "s32"},
                            {"name": "y", "type": "s32"},
                        ]
                    }
                },
            }
        ],
        functions={"add": freestanding("add", [("a", "s32"), ("b", "s32")], "s32")},
        package="example:math@1.0.0",
        interface="math",
        world="calculator",
    )


@pytest.fixture
def namer() -> Namer:
    """Fixture providing a fresh Namer."""
    return Namer()
