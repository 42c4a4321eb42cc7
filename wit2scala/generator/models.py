"""
Data model of the resolved interface-definition graph.

The dataclasses in this module mirror a resolved WIT package: packages own
interfaces and worlds, interfaces own type definitions and functions, and every
type definition lives in a single arena addressed by integer id. Inline
composite types (``list<u8>``, ``option<point>``, ...) are anonymous entries in
that arena, so a type reference is always either a primitive or an id.
"""

import re
from dataclasses import dataclass, field
from enum import Enum, auto

from wit2scala.generator.errors import DanglingReference, InvalidDocument


class Primitive(Enum):
    """Built-in scalar types."""

    BOOL = "bool"
    S8 = "s8"
    U8 = "u8"
    S16 = "s16"
    U16 = "u16"
    S32 = "s32"
    U32 = "u32"
    S64 = "s64"
    U64 = "u64"
    F32 = "f32"
    F64 = "f64"
    CHAR = "char"
    STRING = "string"


# A type reference: a primitive or the id of a TypeDef in Resolve.types
TypeRef = Primitive | int


class Direction(Enum):
    """Whether an item is supplied by the host or implemented by the guest."""

    IMPORT = auto()
    EXPORT = auto()

    @property
    def is_import(self) -> bool:
        return self is Direction.IMPORT


class TypeDefKind(Enum):
    """Kind tag of a type definition."""

    RECORD = auto()
    VARIANT = auto()
    ENUM = auto()
    FLAGS = auto()
    RESOURCE = auto()
    HANDLE = auto()
    ALIAS = auto()
    LIST = auto()
    OPTION = auto()
    RESULT = auto()
    TUPLE = auto()
    FUTURE = auto()
    STREAM = auto()


class FunctionKind(Enum):
    """How a function is attached to its owner."""

    FREESTANDING = auto()
    METHOD = auto()
    STATIC = auto()
    CONSTRUCTOR = auto()


class WorldItemKind(Enum):
    """What a world import or export refers to."""

    INTERFACE = auto()
    FUNCTION = auto()
    TYPE = auto()


_PACKAGE_NAME_RE = re.compile(
    r"^(?P<namespace>[^:/@]+):(?P<name>[^:/@]+)(?:/(?P<interface>[^:/@]+))?"
    r"(?:@(?P<version>\S+))?$"
)


@dataclass(frozen=True)
class PackageName:
    """Identity of a package: ``namespace:name@version``."""

    namespace: str
    name: str
    version: str | None = None

    @classmethod
    def parse(cls, text: str) -> tuple["PackageName", str | None]:
        """Parse ``ns:pkg[/iface][@version]``.

        Returns:
            Tuple of (package name, interface name or None)

        Raises:
            InvalidDocument: If the text is not a package identity
        """
        match = _PACKAGE_NAME_RE.match(text.strip())
        if not match:
            raise InvalidDocument(f"Invalid package name '{text}'")
        return (
            cls(match["namespace"], match["name"], match["version"]),
            match["interface"],
        )

    def identity(self, interface: str | None = None) -> str:
        """Render the ``ns:pkg/iface@version`` identity used by the runtime."""
        text = f"{self.namespace}:{self.name}"
        if interface:
            text += f"/{interface}"
        if self.version:
            text += f"@{self.version}"
        return text

    def __str__(self) -> str:
        return self.identity()


@dataclass(frozen=True)
class TypeOwner:
    """Interface or world that declares a type."""

    interface: int | None = None
    world: int | None = None


@dataclass
class Field:
    """Named field of a record."""

    name: str
    type: TypeRef
    docs: str | None = None


@dataclass
class Case:
    """Case of a variant (optional payload) or an enum (no payload)."""

    name: str
    type: TypeRef | None = None
    docs: str | None = None


@dataclass
class TypeDef:
    """Entry of the type arena.

    Only the attributes matching ``kind`` are meaningful:

    - RECORD: ``fields``
    - VARIANT, ENUM: ``cases``
    - FLAGS: ``flags``
    - LIST, OPTION, ALIAS, FUTURE, STREAM: ``element``
    - RESULT: ``ok`` and ``err``
    - TUPLE: ``items``
    - HANDLE: ``resource`` and ``borrowed``
    """

    id: int
    name: str | None
    kind: TypeDefKind
    owner: TypeOwner | None = None
    fields: list[Field] = field(default_factory=list)
    cases: list[Case] = field(default_factory=list)
    flags: list[str] = field(default_factory=list)
    element: TypeRef | None = None
    ok: TypeRef | None = None
    err: TypeRef | None = None
    items: list[TypeRef] = field(default_factory=list)
    resource: int | None = None
    borrowed: bool = False
    docs: str | None = None

    @property
    def is_anonymous(self) -> bool:
        return self.name is None


@dataclass
class Param:
    """Function parameter."""

    name: str
    type: TypeRef


@dataclass
class Function:
    """Function signature.

    Attributes:
        name: WIT name of the function (plain name, without ``[method]``
            prefixes)
        kind: Freestanding function or resource member
        params: Ordered parameters
        results: Ordered result types
        resource: Id of the resource for methods, statics and constructors
        docs: Documentation comment
    """

    name: str
    kind: FunctionKind = FunctionKind.FREESTANDING
    params: list[Param] = field(default_factory=list)
    results: list[TypeRef] = field(default_factory=list)
    resource: int | None = None
    docs: str | None = None


@dataclass
class Interface:
    """Named group of types and functions."""

    id: int
    name: str | None
    package: int | None = None
    types: dict[str, int] = field(default_factory=dict)
    functions: dict[str, Function] = field(default_factory=dict)
    docs: str | None = None


@dataclass
class WorldItem:
    """One import or export of a world."""

    kind: WorldItemKind
    interface: int | None = None
    function: Function | None = None
    type: int | None = None


@dataclass
class World:
    """Named bundle of imports and exports."""

    id: int
    name: str
    package: int | None = None
    imports: dict[str, WorldItem] = field(default_factory=dict)
    exports: dict[str, WorldItem] = field(default_factory=dict)
    docs: str | None = None

    def items(self, direction: Direction) -> dict[str, WorldItem]:
        return self.imports if direction.is_import else self.exports


@dataclass
class Package:
    """Package with its interfaces and worlds."""

    id: int
    name: PackageName
    interfaces: dict[str, int] = field(default_factory=dict)
    worlds: dict[str, int] = field(default_factory=dict)
    docs: str | None = None


@dataclass
class Resolve:
    """Fully resolved graph handed to the generator."""

    packages: list[Package] = field(default_factory=list)
    interfaces: list[Interface] = field(default_factory=list)
    types: list[TypeDef] = field(default_factory=list)
    worlds: list[World] = field(default_factory=list)

    def type_def(self, type_id: int) -> TypeDef:
        """Look up a type definition by id.

        Raises:
            DanglingReference: If the id is not in the arena
        """
        if not 0 <= type_id < len(self.types):
            raise DanglingReference(f"Reference to unknown type id {type_id}")
        return self.types[type_id]

    def interface(self, interface_id: int) -> Interface:
        if not 0 <= interface_id < len(self.interfaces):
            raise DanglingReference(
                f"Reference to unknown interface id {interface_id}"
            )
        return self.interfaces[interface_id]

    def package(self, package_id: int) -> Package:
        if not 0 <= package_id < len(self.packages):
            raise DanglingReference(f"Reference to unknown package id {package_id}")
        return self.packages[package_id]

    def world(self, world_id: int) -> World:
        if not 0 <= world_id < len(self.worlds):
            raise DanglingReference(f"Reference to unknown world id {world_id}")
        return self.worlds[world_id]

    def interface_package(self, interface_id: int) -> PackageName | None:
        interface = self.interface(interface_id)
        if interface.package is None:
            return None
        return self.package(interface.package).name

    def interface_identity(self, interface_id: int, key: str | None = None) -> str:
        """Identity string tagged onto the interface's annotations.

        Interfaces that belong to a package render as ``ns:pkg/iface@version``;
        inline world interfaces fall back to their world key.
        """
        interface = self.interface(interface_id)
        package = self.interface_package(interface_id)
        name = interface.name or key
        if package is not None and interface.name:
            return package.identity(interface.name)
        if name is None:
            raise InvalidDocument(f"Interface {interface_id} has no name")
        return name

    def resource_functions(self, resource_id: int) -> list[Function]:
        """Constructor, method and static signatures of a resource, in order."""
        resource = self.type_def(resource_id)
        owner = resource.owner
        if owner is None:
            return []
        if owner.interface is not None:
            candidates = list(self.interface(owner.interface).functions.values())
        elif owner.world is not None:
            world = self.world(owner.world)
            candidates = [
                item.function
                for items in (world.imports, world.exports)
                for item in items.values()
                if item.kind is WorldItemKind.FUNCTION and item.function is not None
            ]
        else:
            candidates = []
        return [
            func
            for func in candidates
            if func.kind is not FunctionKind.FREESTANDING
            and func.resource == resource_id
        ]
