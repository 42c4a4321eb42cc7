"""
Mapping of WIT type references to Scala type expressions.

Named type definitions are always rendered by reference (simple name inside
their own module, fully qualified elsewhere) and never expanded, which keeps
self-referential and mutually recursive records finite. Anonymous composites
such as ``list<string>`` are rendered structurally and cached by shape, so the
same instantiation is built once no matter how many type ids spell it.
"""

from collections.abc import Callable, Hashable

from loguru import logger

from wit2scala.generator.constants import (
    ARRAY_TYPE,
    OPTIONAL_TYPE,
    PRIMITIVE_TYPES,
    RESULT_TYPE,
    TUPLE_TYPE_PREFIX,
    UNIT_TYPE,
)
from wit2scala.generator.errors import InvalidDocument, UnsupportedFeature
from wit2scala.generator.layout import ModuleLocation
from wit2scala.generator.models import (
    Primitive,
    Resolve,
    TypeDef,
    TypeDefKind,
    TypeOwner,
    TypeRef,
)
from wit2scala.generator.naming import NameCase, Namer

Shape = Hashable


class TypeMapper:
    """Renders type references for the module currently being generated.

    Args:
        resolve: Resolved graph
        namer: Namer of the current run
        locate_owner: Returns the module location that declares the types of
            an interface or world
    """

    def __init__(
        self,
        resolve: Resolve,
        namer: Namer,
        locate_owner: Callable[[TypeOwner], ModuleLocation],
    ):
        self.resolve = resolve
        self.namer = namer
        self._locate_owner = locate_owner
        self.scope: ModuleLocation | None = None
        self._references: dict[tuple[int, ModuleLocation | None], str] = {}
        self._instantiations: dict[tuple[ModuleLocation | None, Shape], str] = {}
        self._expanding: set[int] = set()

    def set_scope(self, location: ModuleLocation | None) -> None:
        """Set the module being rendered."""
        self.scope = location

    @property
    def instantiations(self) -> dict[tuple[ModuleLocation | None, Shape], str]:
        """Rendered anonymous composites keyed by (scope, structural shape)."""
        return dict(self._instantiations)

    def render(self, ty: TypeRef) -> str:
        """Render a type reference as a Scala type expression."""
        if isinstance(ty, Primitive):
            return PRIMITIVE_TYPES[ty]
        type_def = self.resolve.type_def(ty)
        if not type_def.is_anonymous:
            return self.reference(type_def)
        return self._instantiate(type_def)

    def render_optional(self, ty: TypeRef | None) -> str:
        return UNIT_TYPE if ty is None else self.render(ty)

    def render_tuple(self, items: list[TypeRef]) -> str:
        if not items:
            return UNIT_TYPE
        rendered = ", ".join(self.render(t) for t in items)
        return f"{TUPLE_TYPE_PREFIX}{len(items)}[{rendered}]"

    def render_results(self, results: list[TypeRef]) -> str:
        """Render a function's result list: Unit, a single type or a tuple."""
        if len(results) == 1:
            return self.render(results[0])
        return self.render_tuple(results)

    def type_name(self, type_def: TypeDef) -> str:
        """Declared (unqualified) Scala name of a named type definition."""
        if type_def.name is None:
            raise InvalidDocument(f"Type {type_def.id} has no name")
        return self.namer.derive(type_def.name, NameCase.TYPE)

    def reference(self, type_def: TypeDef) -> str:
        """Reference a named type from the current scope."""
        key = (type_def.id, self.scope)
        cached = self._references.get(key)
        if cached is None:
            name = self.type_name(type_def)
            if type_def.owner is None:
                cached = name
            else:
                location = self._locate_owner(type_def.owner)
                if location == self.scope:
                    cached = name
                else:
                    cached = location.member_path(name)
            self._references[key] = cached
        return cached

    def expand(self, type_def: TypeDef) -> str:
        """Right-hand side of a named alias or named composite declaration."""
        return self._render_composite(type_def)

    def shape(self, ty: TypeRef | None) -> tuple[Shape, bool]:
        """Structural key of a type reference.

        Returns:
            Tuple of (shape, whether the shape contains named references and
            therefore renders differently per scope)

        Raises:
            UnsupportedFeature: For future and stream types
            InvalidDocument: For cycles made only of anonymous types
        """
        if ty is None or isinstance(ty, Primitive):
            return ty, False
        type_def = self.resolve.type_def(ty)
        if not type_def.is_anonymous:
            return ("named", type_def.id), True
        if type_def.id in self._expanding:
            raise InvalidDocument(f"Anonymous type {type_def.id} refers to itself")

        self._expanding.add(type_def.id)
        try:
            match type_def.kind:
                case TypeDefKind.LIST | TypeDefKind.OPTION | TypeDefKind.ALIAS:
                    children = [type_def.element]
                case TypeDefKind.RESULT:
                    children = [type_def.ok, type_def.err]
                case TypeDefKind.TUPLE:
                    children = list(type_def.items)
                case TypeDefKind.HANDLE:
                    return ("handle", type_def.resource), True
                case TypeDefKind.FUTURE | TypeDefKind.STREAM:
                    raise UnsupportedFeature(
                        f"{type_def.kind.name.lower()} types are not supported",
                        f"type {type_def.id}",
                    )
                case _:
                    raise InvalidDocument(
                        f"Anonymous {type_def.kind.name.lower()} type {type_def.id}"
                    )
            child_shapes = [self.shape(child) for child in children]
        finally:
            self._expanding.discard(type_def.id)

        scoped = any(s for _, s in child_shapes)
        return (type_def.kind.name, *(c for c, _ in child_shapes)), scoped

    def _instantiate(self, type_def: TypeDef) -> str:
        shape, scoped = self.shape(type_def.id)
        key = (self.scope if scoped else None, shape)
        cached = self._instantiations.get(key)
        if cached is None:
            cached = self._render_composite(type_def)
            self._instantiations[key] = cached
            logger.debug(f"Instantiated {cached} for type {type_def.id}")
        return cached

    def _render_composite(self, type_def: TypeDef) -> str:
        match type_def.kind:
            case TypeDefKind.LIST:
                return f"{ARRAY_TYPE}[{self.render(type_def.element)}]"
            case TypeDefKind.OPTION:
                return f"{OPTIONAL_TYPE}[{self.render(type_def.element)}]"
            case TypeDefKind.RESULT:
                ok = self.render_optional(type_def.ok)
                err = self.render_optional(type_def.err)
                return f"{RESULT_TYPE}[{ok}, {err}]"
            case TypeDefKind.TUPLE:
                return self.render_tuple(type_def.items)
            case TypeDefKind.HANDLE:
                return self.reference(self.resolve.type_def(type_def.resource))
            case TypeDefKind.ALIAS:
                return self.render(type_def.element)
        raise InvalidDocument(f"Cannot render type {type_def.id}")
