"""
Generation driver: selects a world and assembles the generated modules.

The Orchestrator walks the imports of the selected world, then its exports.
Every interface becomes one module per direction; bare functions and types of
the world go to a per-direction world module that is created on first use.
Named types are declared exactly once, in the module returned by
``locate_owner``: the import module of their interface if the world imports
it, otherwise the export module.
"""

from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from wit2scala.generator import annotations
from wit2scala.generator.constants import WORLD_ROOT_IDENTITY
from wit2scala.generator.emitter import EmitContext, Emitter
from wit2scala.generator.errors import (
    AmbiguousWorldSelection,
    GeneratorError,
    InvalidDocument,
    UnknownWorld,
    UnsupportedFeature,
)
from wit2scala.generator.formatting import CodeBlock, format_docs
from wit2scala.generator.layout import ModuleLocation, PackageLayout
from wit2scala.generator.models import (
    Direction,
    Function,
    FunctionKind,
    Resolve,
    TypeDef,
    TypeDefKind,
    TypeOwner,
    World,
    WorldItemKind,
)
from wit2scala.generator.naming import Namer
from wit2scala.generator.options import GeneratorOptions
from wit2scala.generator.type_mapper import TypeMapper

HEADER = "// Generated by wit2scala. DO NOT EDIT."


class Section(Enum):
    """Ordered sections of a generated module."""

    TYPES = "Type definitions"
    RESOURCES = "Resources"
    FUNCTIONS = "Functions"


@dataclass
class GeneratedModule:
    """One Scala source file under construction.

    Declarations are appended per section; ``render`` freezes the module.
    """

    location: ModuleLocation
    opener: str
    docs: str | None = None
    header: bool = True
    sections: dict[Section, list[str]] = field(
        default_factory=lambda: {section: [] for section in Section}
    )
    _rendered: str | None = field(default=None, init=False, repr=False)

    @property
    def path(self) -> str:
        return self.location.path

    @property
    def direction(self) -> Direction:
        return self.location.direction

    @property
    def package(self) -> str:
        return self.location.package

    def add(self, section: Section, declaration: str) -> None:
        """Append a declaration to a section.

        Raises:
            GeneratorError: If the module has already been rendered
        """
        if self._rendered is not None:
            raise GeneratorError("Cannot modify a rendered module", self.path)
        self.sections[section].append(declaration)

    def render(self) -> str:
        """Render the file content."""
        if self._rendered is not None:
            return self._rendered

        code = CodeBlock()
        if self.header:
            code.add_line(HEADER)
            code.add_line()
        code.add_line(f"package {self.package}")
        code.add_line()
        code.add_lines(format_docs(self.docs))
        code.add_lines(self.opener)
        with code.indented():
            for section, declarations in self.sections.items():
                if not declarations:
                    continue
                code.add_line()
                code.add_line(f"// {section.value}")
                for declaration in declarations:
                    code.add_line()
                    code.add_lines(declaration)
        code.add_line("}")

        self._rendered = code.get_code() + "\n"
        return self._rendered


def module_opener(location: ModuleLocation) -> str:
    """Opening line(s) of a module's container."""
    if location.direction.is_import:
        return f"package object {location.container} {{"
    return f"{annotations.component_export_interface()}\ntrait {location.container} {{"


class Orchestrator:
    """Runs one generation pass over a resolved graph.

    Args:
        resolve: Resolved graph
        options: Generation options
    """

    def __init__(self, resolve: Resolve, options: GeneratorOptions):
        self.resolve = resolve
        self.options = options

    def select_world(self) -> World:
        """Pick the world to generate.

        Raises:
            UnknownWorld: If the named world is missing or no world exists
            AmbiguousWorldSelection: If several worlds exist and none is named
        """
        worlds = self.resolve.worlds
        names = [w.name for w in worlds]
        if self.options.world is not None:
            for world in worlds:
                if world.name == self.options.world:
                    return world
            raise UnknownWorld(self.options.world, names)
        if not worlds:
            raise UnknownWorld(None, [])
        if len(worlds) > 1:
            raise AmbiguousWorldSelection(names)
        return worlds[0]

    def run(self) -> list[GeneratedModule]:
        """Generate every module of the selected world.

        Returns:
            Modules in generation order: imports first, then exports

        Raises:
            GeneratorError: On any failure; nothing is returned in that case
        """
        world = self.select_world()
        logger.debug(f"Generating world '{world.name}'")

        self._world = world
        self._namer = Namer()
        self._layout = PackageLayout(self.options.base_segments, self._namer)
        self._mapper = TypeMapper(self.resolve, self._namer, self.locate_owner)
        self._emitter = Emitter(self.resolve, self._mapper, self._namer)
        self._modules: dict[tuple, GeneratedModule] = {}
        self._dependencies: dict[int, None] = {}

        self._interface_keys: dict[int, str] = {}
        self._interfaces: dict[Direction, set[int]] = {d: set() for d in Direction}
        self._world_types: dict[int, Direction] = {}
        for direction in Direction:
            for key, item in world.items(direction).items():
                if item.kind is WorldItemKind.INTERFACE:
                    self._interfaces[direction].add(item.interface)
                    self._interface_keys.setdefault(item.interface, key)
                elif item.kind is WorldItemKind.TYPE:
                    self._world_types.setdefault(item.type, direction)

        for direction in Direction:
            for key, item in world.items(direction).items():
                match item.kind:
                    case WorldItemKind.INTERFACE:
                        self._generate_interface(item.interface, key, direction)
                    case WorldItemKind.FUNCTION:
                        self._generate_world_function(item.function, direction)
                    case WorldItemKind.TYPE:
                        self._generate_world_type(item.type, direction)

        # Interfaces whose types are used but which the world does not list
        while self._dependencies:
            interface_id = next(iter(self._dependencies))
            del self._dependencies[interface_id]
            self._generate_interface(
                interface_id, None, Direction.IMPORT, types_only=True
            )

        modules = list(self._modules.values())
        logger.debug(f"Generated {len(modules)} module(s) for world '{world.name}'")
        return modules

    def _interface_location(
        self, interface_id: int, direction: Direction
    ) -> ModuleLocation:
        interface = self.resolve.interface(interface_id)
        name = interface.name or self._interface_keys.get(interface_id)
        if name is None:
            raise InvalidDocument(f"Interface {interface_id} has no name")
        package = self.resolve.interface_package(interface_id)
        return self._layout.interface_location(package, name, direction)

    def locate_owner(self, owner: TypeOwner) -> ModuleLocation:
        """Module that declares the types of an interface or world."""
        if owner.interface is not None:
            interface_id = owner.interface
            if interface_id in self._interfaces[Direction.EXPORT] and (
                interface_id not in self._interfaces[Direction.IMPORT]
            ):
                return self._interface_location(interface_id, Direction.EXPORT)
            if interface_id not in self._interfaces[Direction.IMPORT]:
                key = ("interface", interface_id, Direction.IMPORT)
                if key not in self._modules:
                    self._dependencies.setdefault(interface_id, None)
            return self._interface_location(interface_id, Direction.IMPORT)
        if owner.world is not None:
            world = self.resolve.world(owner.world)
            direction = Direction.IMPORT
            if world.id == self._world.id:
                direction = self._world_owned_direction(owner.world)
            return self._layout.world_location(world.name, direction)
        raise InvalidDocument("Type owner names neither an interface nor a world")

    def _world_owned_direction(self, world_id: int) -> Direction:
        # A world's types share one module; imports take precedence
        directions = {
            direction
            for type_id, direction in self._world_types.items()
            if self.resolve.type_def(type_id).owner == TypeOwner(world=world_id)
        }
        if Direction.IMPORT in directions or not directions:
            return Direction.IMPORT
        return Direction.EXPORT

    def _module(
        self, key: tuple, location: ModuleLocation, docs: str | None
    ) -> GeneratedModule:
        module = self._modules.get(key)
        if module is None:
            module = GeneratedModule(
                location=location,
                opener=module_opener(location),
                docs=docs,
                header=self.options.header,
            )
            self._modules[key] = module
            logger.debug(f"Opened module {location.path}")
        return module

    def _emit_type(
        self, type_def: TypeDef, ctx: EmitContext, module: GeneratedModule
    ) -> None:
        declaration = self._emitter.emit_typedef(type_def, ctx)
        if type_def.kind is TypeDefKind.RESOURCE:
            module.add(Section.RESOURCES, declaration)
        else:
            module.add(Section.TYPES, declaration)

    def _generate_interface(
        self,
        interface_id: int,
        key: str | None,
        direction: Direction,
        types_only: bool = False,
    ) -> None:
        module_key = ("interface", interface_id, direction)
        if module_key in self._modules:
            return
        interface = self.resolve.interface(interface_id)
        location = self._interface_location(interface_id, direction)
        identity = self.resolve.interface_identity(
            interface_id, key or self._interface_keys.get(interface_id)
        )
        logger.debug(f"Generating {direction.name.lower()} of interface {identity}")
        if not direction.is_import:
            for type_id in interface.types.values():
                self._reject_exported_resource(self.resolve.type_def(type_id), identity)

        module = self._module(module_key, location, interface.docs)
        ctx = EmitContext(direction, identity, location.path)
        self._mapper.set_scope(location)

        if self.locate_owner(TypeOwner(interface=interface_id)) == location:
            for type_id in interface.types.values():
                self._emit_type(self.resolve.type_def(type_id), ctx, module)
        if types_only:
            return
        for func in interface.functions.values():
            if func.kind is FunctionKind.FREESTANDING:
                module.add(Section.FUNCTIONS, self._emitter.emit_function(func, ctx))

    @staticmethod
    def _reject_exported_resource(type_def: TypeDef, identity: str) -> None:
        # Also raised when the import module already declares the resource
        if type_def.kind is TypeDefKind.RESOURCE:
            raise UnsupportedFeature(
                "Resources cannot be exported by Scala components",
                f"{identity}#{type_def.name}",
            )

    def _world_module(self, direction: Direction) -> GeneratedModule:
        location = self._layout.world_location(self._world.name, direction)
        return self._module(("world", direction), location, self._world.docs)

    def _generate_world_function(self, func: Function, direction: Direction) -> None:
        if func.kind is not FunctionKind.FREESTANDING:
            # Emitted with the resource that owns it
            return
        module = self._world_module(direction)
        ctx = EmitContext(direction, WORLD_ROOT_IDENTITY, module.path)
        self._mapper.set_scope(module.location)
        module.add(Section.FUNCTIONS, self._emitter.emit_function(func, ctx))

    def _generate_world_type(self, type_id: int, direction: Direction) -> None:
        type_def = self.resolve.type_def(type_id)
        if not direction.is_import:
            self._reject_exported_resource(type_def, WORLD_ROOT_IDENTITY)
        if type_def.owner is not None:
            location = self.locate_owner(type_def.owner)
            if location.direction is not direction or (
                location != self._layout.world_location(self._world.name, direction)
            ):
                # Declared by its owner's module
                return
        module = self._world_module(direction)
        ctx = EmitContext(direction, WORLD_ROOT_IDENTITY, module.path)
        self._mapper.set_scope(module.location)
        self._emit_type(type_def, ctx, module)
