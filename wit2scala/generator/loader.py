"""
Decoding of resolved-graph documents.

The document follows the JSON serialization of a resolved WIT package, as
printed by ``wasm-tools component wit --json``. It is read with PyYAML, so both
JSON and YAML spellings are accepted.
"""

import re
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from wit2scala.generator.errors import DanglingReference, InvalidDocument
from wit2scala.generator.models import (
    Case,
    Field,
    Function,
    FunctionKind,
    Interface,
    Package,
    PackageName,
    Param,
    Primitive,
    Resolve,
    TypeDef,
    TypeDefKind,
    TypeOwner,
    TypeRef,
    World,
    WorldItem,
    WorldItemKind,
)

# Legacy spellings of primitive types
PRIMITIVE_ALIASES = {
    "float32": Primitive.F32,
    "float64": Primitive.F64,
}

# "[method]file.read", "[static]file.open", "[constructor]file"
_MANGLED_NAME_RE = re.compile(r"^\[(?:method|static|constructor)\](?P<rest>.+)$")


def load_resolve(path: str | Path) -> Resolve:
    """Read and decode a resolved-graph document.

    Args:
        path: Path to a JSON or YAML document

    Returns:
        The decoded graph

    Raises:
        OSError: If the file cannot be read
        InvalidDocument: If the content cannot be decoded or is malformed
        DanglingReference: If the document refers to unknown ids
    """
    path = Path(path)
    logger.debug(f"Loading resolved graph from {path}")
    with path.open(encoding="utf-8") as f:
        try:
            document = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidDocument(f"Cannot decode document: {e}", str(path)) from e
    return parse_resolve(document)


def parse_resolve(document: Any) -> Resolve:
    """Decode an already-parsed document into a Resolve."""
    if not isinstance(document, dict):
        raise InvalidDocument("Document must be a mapping")

    resolve = Resolve(
        packages=[
            _parse_package(i, raw) for i, raw in enumerate(_list(document, "packages"))
        ],
        interfaces=[
            _parse_interface(i, raw)
            for i, raw in enumerate(_list(document, "interfaces"))
        ],
        types=[_parse_type(i, raw) for i, raw in enumerate(_list(document, "types"))],
        worlds=[
            _parse_world(i, raw) for i, raw in enumerate(_list(document, "worlds"))
        ],
    )
    _check_references(resolve)
    logger.debug(
        f"Decoded {len(resolve.packages)} package(s), "
        f"{len(resolve.interfaces)} interface(s), {len(resolve.types)} type(s), "
        f"{len(resolve.worlds)} world(s)"
    )
    return resolve


def _list(obj: Any, key: str) -> list:
    if not isinstance(obj, dict):
        raise InvalidDocument(f"Expected a mapping with '{key}', got {obj!r}")
    value = obj.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidDocument(f"'{key}' must be a list")
    return value


def _mapping(obj: dict, key: str, context: str) -> dict:
    value = obj.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidDocument(f"'{key}' must be a mapping", context)
    return value


def _string(obj: Any, key: str, context: str) -> str:
    if not isinstance(obj, dict):
        raise InvalidDocument("Expected a mapping", context)
    value = obj.get(key)
    if not isinstance(value, str) or not value:
        raise InvalidDocument(f"Missing or invalid '{key}'", context)
    return value


def _id(value: Any, context: str) -> int:
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidDocument(f"Expected an id, got {value!r}", context)
    return value


def _docs(obj: dict) -> str | None:
    docs = obj.get("docs")
    if isinstance(docs, dict):
        docs = docs.get("contents")
    if docs is not None and not isinstance(docs, str):
        raise InvalidDocument("'docs' must be a string")
    return docs


def _type_ref(value: Any, context: str) -> TypeRef:
    if isinstance(value, str):
        if value in PRIMITIVE_ALIASES:
            return PRIMITIVE_ALIASES[value]
        try:
            return Primitive(value)
        except ValueError:
            raise InvalidDocument(f"Unknown type '{value}'", context) from None
    return _id(value, context)


def _optional_ref(value: Any, context: str) -> TypeRef | None:
    return None if value is None else _type_ref(value, context)


def _single_entry(raw: Any, context: str) -> tuple[str, Any]:
    if not isinstance(raw, dict) or len(raw) != 1:
        raise InvalidDocument(f"Expected a single-key mapping, got {raw!r}", context)
    return next(iter(raw.items()))


def _parse_package(package_id: int, raw: Any) -> Package:
    context = f"package {package_id}"
    name, interface = PackageName.parse(_string(raw, "name", context))
    if interface is not None:
        raise InvalidDocument("Package name must not name an interface", context)
    return Package(
        id=package_id,
        name=name,
        interfaces={
            k: _id(v, context) for k, v in _mapping(raw, "interfaces", context).items()
        },
        worlds={k: _id(v, context) for k, v in _mapping(raw, "worlds", context).items()},
        docs=_docs(raw),
    )


def _plain_function_name(name: str) -> str:
    match = _MANGLED_NAME_RE.match(name)
    if not match:
        return name
    _, _, member = match["rest"].partition(".")
    return member or match["rest"]


def _parse_function(raw: Any, context: str) -> Function:
    name = _string(raw, "name", context)
    context = f"{context}/{name}"

    kind_raw = raw.get("kind", "freestanding")
    resource = None
    if kind_raw == "freestanding":
        kind = FunctionKind.FREESTANDING
    else:
        tag, resource = _single_entry(kind_raw, context)
        if tag not in ("method", "static", "constructor"):
            raise InvalidDocument(f"Unknown function kind '{tag}'", context)
        kind = FunctionKind[tag.upper()]
        resource = _id(resource, context)

    params = [
        Param(_string(p, "name", context), _type_ref(p.get("type"), context))
        for p in raw.get("params") or []
    ]

    if "result" in raw:
        result = _optional_ref(raw["result"], context)
        results = [] if result is None else [result]
    else:
        results = [
            _type_ref(r.get("type") if isinstance(r, dict) else r, context)
            for r in raw.get("results") or []
        ]

    return Function(
        name=_plain_function_name(name),
        kind=kind,
        params=params,
        results=results,
        resource=resource,
        docs=_docs(raw),
    )


def _parse_interface(interface_id: int, raw: Any) -> Interface:
    context = f"interface {interface_id}"
    if not isinstance(raw, dict):
        raise InvalidDocument("Expected a mapping", context)
    name = raw.get("name")
    if name is not None and not isinstance(name, str):
        raise InvalidDocument("Interface name must be a string", context)
    if name:
        context = f"interface {name}"
    package = raw.get("package")
    return Interface(
        id=interface_id,
        name=name,
        package=None if package is None else _id(package, context),
        types={k: _id(v, context) for k, v in _mapping(raw, "types", context).items()},
        functions={
            k: _parse_function(v, context)
            for k, v in _mapping(raw, "functions", context).items()
        },
        docs=_docs(raw),
    )


def _parse_owner(raw: Any, context: str) -> TypeOwner | None:
    if raw is None:
        return None
    tag, owner_id = _single_entry(raw, context)
    if tag == "interface":
        return TypeOwner(interface=_id(owner_id, context))
    if tag == "world":
        return TypeOwner(world=_id(owner_id, context))
    raise InvalidDocument(f"Unknown type owner '{tag}'", context)


def _parse_type(type_id: int, raw: Any) -> TypeDef:
    context = f"type {type_id}"
    if not isinstance(raw, dict):
        raise InvalidDocument("Expected a mapping", context)
    name = raw.get("name")
    if name is not None and not isinstance(name, str):
        raise InvalidDocument("Type name must be a string", context)
    if name:
        context = f"type {name}"

    type_def = TypeDef(
        id=type_id,
        name=name,
        kind=TypeDefKind.RESOURCE,
        owner=_parse_owner(raw.get("owner"), context),
        docs=_docs(raw),
    )

    kind = raw.get("kind")
    if kind == "resource":
        return type_def
    tag, body = _single_entry(kind, context)

    match tag:
        case "record":
            type_def.kind = TypeDefKind.RECORD
            type_def.fields = [
                Field(
                    _string(f, "name", context),
                    _type_ref(f.get("type"), context),
                    _docs(f),
                )
                for f in _list(body, "fields")
            ]
        case "variant":
            type_def.kind = TypeDefKind.VARIANT
            type_def.cases = [
                Case(
                    _string(c, "name", context),
                    _optional_ref(c.get("type"), context),
                    _docs(c),
                )
                for c in _list(body, "cases")
            ]
        case "enum":
            type_def.kind = TypeDefKind.ENUM
            type_def.cases = [
                Case(_string(c, "name", context), docs=_docs(c))
                for c in _list(body, "cases")
            ]
        case "flags":
            type_def.kind = TypeDefKind.FLAGS
            type_def.flags = [
                f if isinstance(f, str) else _string(f, "name", context)
                for f in _list(body, "flags")
            ]
        case "handle":
            type_def.kind = TypeDefKind.HANDLE
            ownership, resource = _single_entry(body, context)
            if ownership not in ("own", "borrow"):
                raise InvalidDocument(f"Unknown handle kind '{ownership}'", context)
            type_def.resource = _id(resource, context)
            type_def.borrowed = ownership == "borrow"
        case "type":
            type_def.kind = TypeDefKind.ALIAS
            type_def.element = _type_ref(body, context)
        case "list" | "option":
            type_def.kind = TypeDefKind[tag.upper()]
            type_def.element = _type_ref(body, context)
        case "future" | "stream":
            type_def.kind = TypeDefKind[tag.upper()]
            type_def.element = _optional_ref(body, context)
        case "result":
            if not isinstance(body, dict):
                raise InvalidDocument("Result must be a mapping", context)
            type_def.kind = TypeDefKind.RESULT
            type_def.ok = _optional_ref(body.get("ok"), context)
            type_def.err = _optional_ref(body.get("err"), context)
        case "tuple":
            type_def.kind = TypeDefKind.TUPLE
            type_def.items = [_type_ref(t, context) for t in _list(body, "types")]
        case _:
            raise InvalidDocument(f"Unknown type kind '{tag}'", context)
    return type_def


def _parse_world_item(raw: Any, context: str) -> WorldItem:
    tag, body = _single_entry(raw, context)
    match tag:
        case "interface":
            interface_id = body.get("id") if isinstance(body, dict) else body
            return WorldItem(WorldItemKind.INTERFACE, interface=_id(interface_id, context))
        case "function":
            return WorldItem(
                WorldItemKind.FUNCTION, function=_parse_function(body, context)
            )
        case "type":
            return WorldItem(WorldItemKind.TYPE, type=_id(body, context))
    raise InvalidDocument(f"Unknown world item '{tag}'", context)


def _parse_world(world_id: int, raw: Any) -> World:
    context = f"world {world_id}"
    name = _string(raw, "name", context)
    context = f"world {name}"
    package = raw.get("package")
    return World(
        id=world_id,
        name=name,
        package=None if package is None else _id(package, context),
        imports={
            k: _parse_world_item(v, f"{context}/{k}")
            for k, v in _mapping(raw, "imports", context).items()
        },
        exports={
            k: _parse_world_item(v, f"{context}/{k}")
            for k, v in _mapping(raw, "exports", context).items()
        },
        docs=_docs(raw),
    )


def _check_ref(resolve: Resolve, ref: TypeRef | None, context: str) -> None:
    if isinstance(ref, int):
        try:
            resolve.type_def(ref)
        except DanglingReference as e:
            raise DanglingReference(e.message, context) from None


def _check_resource(resolve: Resolve, resource_id: int, context: str) -> None:
    _check_ref(resolve, resource_id, context)
    if resolve.type_def(resource_id).kind is not TypeDefKind.RESOURCE:
        raise InvalidDocument(f"Type {resource_id} is not a resource", context)


def _check_function(resolve: Resolve, func: Function, context: str) -> None:
    context = f"{context}/{func.name}"
    for param in func.params:
        _check_ref(resolve, param.type, context)
    for result in func.results:
        _check_ref(resolve, result, context)
    if func.resource is not None:
        _check_resource(resolve, func.resource, context)


def _check_references(resolve: Resolve) -> None:
    """Verify that every id in the graph points at an existing entry."""
    for package in resolve.packages:
        context = str(package.name)
        for interface_id in package.interfaces.values():
            _check_index(resolve.interfaces, interface_id, "interface", context)
        for world_id in package.worlds.values():
            _check_index(resolve.worlds, world_id, "world", context)

    for interface in resolve.interfaces:
        context = interface.name or f"interface {interface.id}"
        if interface.package is not None:
            _check_index(resolve.packages, interface.package, "package", context)
        for type_id in interface.types.values():
            _check_ref(resolve, type_id, context)
        for func in interface.functions.values():
            _check_function(resolve, func, context)

    for type_def in resolve.types:
        context = type_def.name or f"type {type_def.id}"
        owner = type_def.owner
        if owner is not None and owner.interface is not None:
            _check_index(resolve.interfaces, owner.interface, "interface", context)
        if owner is not None and owner.world is not None:
            _check_index(resolve.worlds, owner.world, "world", context)
        refs = [
            *(f.type for f in type_def.fields),
            *(c.type for c in type_def.cases),
            type_def.element,
            type_def.ok,
            type_def.err,
            *type_def.items,
        ]
        for ref in refs:
            _check_ref(resolve, ref, context)
        if type_def.kind is TypeDefKind.HANDLE:
            _check_resource(resolve, type_def.resource, context)

    for world in resolve.worlds:
        context = world.name
        if world.package is not None:
            _check_index(resolve.packages, world.package, "package", context)
        for items in (world.imports, world.exports):
            for key, item in items.items():
                item_context = f"{context}/{key}"
                if item.kind is WorldItemKind.INTERFACE:
                    _check_index(
                        resolve.interfaces, item.interface, "interface", item_context
                    )
                elif item.kind is WorldItemKind.TYPE:
                    _check_ref(resolve, item.type, item_context)
                else:
                    _check_function(resolve, item.function, item_context)


def _check_index(arena: list, index: int, what: str, context: str) -> None:
    if not 0 <= index < len(arena):
        raise DanglingReference(f"Reference to unknown {what} id {index}", context)
