"""Declaration emitter that turns type definitions and functions into Scala."""

from dataclasses import dataclass

from loguru import logger

from wit2scala.generator import annotations
from wit2scala.generator.constants import FLAG_WIDTHS
from wit2scala.generator.errors import (
    FlagWidthOverflow,
    InvalidDocument,
    UnsupportedFeature,
)
from wit2scala.generator.formatting import CodeBlock, format_docs, format_params
from wit2scala.generator.models import (
    Direction,
    Function,
    FunctionKind,
    Resolve,
    TypeDef,
    TypeDefKind,
)
from wit2scala.generator.naming import NameCase, Namer, unescape
from wit2scala.generator.type_mapper import TypeMapper


def flag_width(name: str, count: int) -> int:
    """Smallest supported bit width that holds one bit per flag.

    Raises:
        FlagWidthOverflow: If more than 64 flags are declared
    """
    for width in FLAG_WIDTHS:
        if count <= width:
            return width
    raise FlagWidthOverflow(name, count)


@dataclass(frozen=True)
class EmitContext:
    """Module a declaration is emitted into.

    Attributes:
        direction: Import or export surface
        identity: Identity tagged onto import/export annotations
        scope: Name-registration scope of the module's members
    """

    direction: Direction
    identity: str
    scope: str


class Emitter:
    """Generates Scala declarations using a TypeMapper and a Namer."""

    def __init__(self, resolve: Resolve, mapper: TypeMapper, namer: Namer):
        self.resolve = resolve
        self.mapper = mapper
        self.namer = namer

    def emit_typedef(self, type_def: TypeDef, ctx: EmitContext) -> str:
        """Emit the declaration of a named type definition."""
        if type_def.is_anonymous:
            raise InvalidDocument(f"Cannot declare anonymous type {type_def.id}")
        logger.debug(f"Emitting {type_def.kind.name.lower()} {type_def.name}")

        match type_def.kind:
            case TypeDefKind.RECORD:
                return self._emit_record(type_def, ctx)
            case TypeDefKind.VARIANT:
                return self._emit_variant(type_def, ctx)
            case TypeDefKind.ENUM:
                return self._emit_enum(type_def, ctx)
            case TypeDefKind.FLAGS:
                return self._emit_flags(type_def, ctx)
            case TypeDefKind.RESOURCE:
                return self.emit_resource(type_def, ctx)
            case (
                TypeDefKind.ALIAS
                | TypeDefKind.LIST
                | TypeDefKind.OPTION
                | TypeDefKind.RESULT
                | TypeDefKind.TUPLE
                | TypeDefKind.HANDLE
            ):
                return self._emit_alias(type_def, ctx)
            case TypeDefKind.FUTURE | TypeDefKind.STREAM:
                raise UnsupportedFeature(
                    f"{type_def.kind.name.lower()} types are not supported",
                    type_def.name,
                )
        raise InvalidDocument(f"Unknown type kind {type_def.kind}", type_def.name)

    def _declare(self, type_def: TypeDef, ctx: EmitContext) -> str:
        return self.namer.derive(type_def.name, NameCase.TYPE, scope=ctx.scope)

    @staticmethod
    def _member_scope(ctx: EmitContext, name: str) -> str:
        return f"{ctx.scope}.{unescape(name)}"

    def _emit_record(self, type_def: TypeDef, ctx: EmitContext) -> str:
        name = self._declare(type_def, ctx)
        scope = self._member_scope(ctx, name)
        fields = [
            (
                self.namer.derive(f.name, NameCase.MEMBER, scope=scope),
                self.mapper.render(f.type),
            )
            for f in type_def.fields
        ]
        return (
            f"{format_docs(type_def.docs)}{annotations.component_record()}\n"
            f"final case class {name}({format_params(fields)})"
        )

    def _emit_variant(self, type_def: TypeDef, ctx: EmitContext) -> str:
        name = self._declare(type_def, ctx)
        scope = self._member_scope(ctx, name)
        code = CodeBlock()
        code.add_lines(format_docs(type_def.docs))
        code.add_line(annotations.component_variant())
        code.add_line(f"sealed trait {name}")
        code.add_line(f"object {name} {{")
        with code.indented():
            for case in type_def.cases:
                case_name = self.namer.derive(case.name, NameCase.TYPE, scope=scope)
                if case.type is None:
                    code.add_line(f"case object {case_name} extends {name}")
                else:
                    payload = self.mapper.render(case.type)
                    code.add_line(
                        f"final case class {case_name}(value: {payload}) extends {name}"
                    )
        code.add_line("}")
        return code.get_code()

    def _emit_enum(self, type_def: TypeDef, ctx: EmitContext) -> str:
        name = self._declare(type_def, ctx)
        scope = self._member_scope(ctx, name)
        code = CodeBlock()
        code.add_lines(format_docs(type_def.docs))
        code.add_line(annotations.component_variant())
        code.add_line(f"sealed trait {name}")
        code.add_line(f"object {name} {{")
        with code.indented():
            for case in type_def.cases:
                case_name = self.namer.derive(case.name, NameCase.TYPE, scope=scope)
                code.add_line(f"case object {case_name} extends {name}")
        code.add_line("}")
        return code.get_code()

    def _emit_flags(self, type_def: TypeDef, ctx: EmitContext) -> str:
        count = len(type_def.flags)
        width = flag_width(type_def.name, count)
        storage, one, narrow = FLAG_WIDTHS[width]
        name = self._declare(type_def, ctx)
        scope = self._member_scope(ctx, name)
        # Synthetic members of the case class companion
        for synthetic in ("apply", "unapply"):
            self.namer.register(scope, synthetic, f"<{synthetic}>")

        def wrap(expr: str) -> str:
            return f"{name}(({expr}){narrow})" if narrow else f"{name}({expr})"

        code = CodeBlock()
        code.add_lines(format_docs(type_def.docs))
        code.add_line(annotations.component_flags(count))
        code.add_line(f"final case class {name}(value: {storage}) {{")
        with code.indented():
            for op in ("|", "&", "^"):
                code.add_line(
                    f"def {op}(other: {name}): {name} = {wrap(f'value {op} other.value')}"
                )
            code.add_line(f"def unary_~ : {name} = {wrap('~value')}")
            code.add_line(
                f"def contains(other: {name}): Boolean = "
                "(value & other.value) == other.value"
            )
        code.add_line("}")
        code.add_line(f"object {name} {{")
        with code.indented():
            for bit, flag in enumerate(type_def.flags):
                flag_name = self.namer.derive(flag, NameCase.MEMBER, scope=scope)
                code.add_line(f"val {flag_name} = {wrap(f'{one} << {bit}')}")
        code.add_line("}")
        return code.get_code()

    def _emit_alias(self, type_def: TypeDef, ctx: EmitContext) -> str:
        name = self._declare(type_def, ctx)
        target = self.mapper.expand(type_def)
        return f"{format_docs(type_def.docs)}type {name} = {target}"

    def emit_resource(self, type_def: TypeDef, ctx: EmitContext) -> str:
        """Emit an imported resource as a handle trait plus companion object.

        Raises:
            UnsupportedFeature: If the resource is emitted for export
        """
        if not ctx.direction.is_import:
            raise UnsupportedFeature(
                "Resources cannot be exported by Scala components",
                f"{ctx.identity}#{type_def.name}",
            )
        name = self._declare(type_def, ctx)
        trait_scope = self._member_scope(ctx, name)
        companion_scope = f"{trait_scope}$"
        self.namer.register(trait_scope, "close", "<drop>")

        functions = self.resolve.resource_functions(type_def.id)
        code = CodeBlock()
        code.add_lines(format_docs(type_def.docs))
        code.add_line(annotations.component_resource_import(ctx.identity, type_def.name))
        code.add_line(f"trait {name} {{")
        with code.indented():
            for func in functions:
                if func.kind is FunctionKind.METHOD:
                    code.add_lines(self._emit_method(func, trait_scope))
            code.add_lines(self.emit_drop())
        code.add_line("}")
        code.add_line(f"object {name} {{")
        with code.indented():
            for index, func in enumerate(functions):
                if func.kind is FunctionKind.CONSTRUCTOR:
                    code.add_lines(
                        self._emit_constructor(func, name, companion_scope, index)
                    )
                elif func.kind is FunctionKind.STATIC:
                    code.add_lines(self._emit_static(func, companion_scope))
        code.add_line("}")
        return code.get_code()

    def _emit_method(self, func: Function, scope: str) -> str:
        name = self.namer.derive(func.name, NameCase.MEMBER, scope=scope)
        params = func.params
        # The receiver is implicit in the trait
        if params and params[0].name == "self":
            params = params[1:]
        rendered = self._render_params(params, f"{scope}.{unescape(name)}()")
        result = self.mapper.render_results(func.results)
        return (
            f"{format_docs(func.docs)}"
            f"{annotations.component_resource_method(func.name)}\n"
            f"{annotations.native_signature(name, rendered, result)}"
        )

    def _emit_constructor(
        self, func: Function, resource_name: str, scope: str, index: int
    ) -> str:
        self.namer.register(scope, "apply", "<constructor>")
        rendered = self._render_params(func.params, f"{scope}.apply({index})")
        return (
            f"{format_docs(func.docs)}"
            f"{annotations.component_resource_constructor()}\n"
            f"{annotations.native_signature('apply', rendered, resource_name)}"
        )

    def _emit_static(self, func: Function, scope: str) -> str:
        name = self.namer.derive(func.name, NameCase.MEMBER, scope=scope)
        rendered = self._render_params(func.params, f"{scope}.{unescape(name)}()")
        result = self.mapper.render_results(func.results)
        return (
            f"{format_docs(func.docs)}"
            f"{annotations.component_resource_static_method(func.name)}\n"
            f"{annotations.native_signature(name, rendered, result)}"
        )

    @staticmethod
    def emit_drop() -> str:
        """Emit the single disposal operation of a resource handle."""
        return (
            f"{annotations.component_resource_drop()}\n"
            f"{annotations.native_signature('close', [], 'Unit')}"
        )

    def _render_params(self, params: list, scope: str) -> list[tuple[str, str]]:
        return [
            (
                self.namer.derive(p.name, NameCase.MEMBER, scope=scope),
                self.mapper.render(p.type),
            )
            for p in params
        ]

    def emit_function(self, func: Function, ctx: EmitContext) -> str:
        """Emit a freestanding function.

        Imports are bound to the host with the ``native`` marker; exports are
        abstract contracts implemented by guest code.
        """
        logger.debug(f"Emitting function {func.name} ({ctx.direction.name.lower()})")
        name = self.namer.derive(func.name, NameCase.MEMBER, scope=ctx.scope)
        params = self._render_params(func.params, f"{ctx.scope}.{unescape(name)}()")
        result = self.mapper.render_results(func.results)
        docs = format_docs(func.docs)
        if ctx.direction.is_import:
            return annotations.import_function(
                ctx.identity, func.name, name, params, result, docs
            )
        return annotations.export_function(
            ctx.identity, func.name, name, params, result, docs
        )
