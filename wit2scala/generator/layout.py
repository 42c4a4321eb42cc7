"""
Mapping from WIT identities to Scala packages and files.

Import-direction modules live under the base package extended by the WIT
namespace and package name; export-direction modules live under a disjoint
``exports`` sub-package extended the same way:

    wasi:io/streams@0.2.0, import -> com.example.wasi.io.streams (package object)
    my:app/handler@1.0.0, export  -> com.example.exports.my.app.Handler (trait)

Versions never appear in paths.
"""

from dataclasses import dataclass

from wit2scala.generator.constants import EXPORTS_SEGMENT
from wit2scala.generator.models import Direction, PackageName
from wit2scala.generator.naming import NameCase, Namer, unescape


@dataclass(frozen=True)
class ModuleLocation:
    """Where a generated module lives.

    Attributes:
        package: Scala package clause (keywords escaped)
        container: Name of the package object or trait inside the file
        segments: Directory segments relative to the output root
        file_name: Name of the Scala file
        direction: Import or export surface
    """

    package: str
    container: str
    segments: tuple[str, ...]
    file_name: str
    direction: Direction

    @property
    def path(self) -> str:
        return "/".join((*self.segments, self.file_name))

    def member_path(self, type_name: str) -> str:
        """Fully qualified reference to a type declared in this module.

        Package objects expose their members as ``pkg.obj.Type``; types nested
        in an export trait are reached by type projection ``pkg.Trait#Type``.
        """
        if self.direction.is_import:
            return f"{self.package}.{self.container}.{type_name}"
        return f"{self.package}.{self.container}#{type_name}"


class PackageLayout:
    """Computes module locations for interfaces and worlds."""

    def __init__(self, base_segments: list[str], namer: Namer):
        self.namer = namer
        self.base = [namer.escape(s) for s in base_segments]
        self.base_scope = ".".join(base_segments)
        # The export root shares the base namespace with WIT namespaces
        self.namer.register(self.base_scope, EXPORTS_SEGMENT, f"<{EXPORTS_SEGMENT}>")

    def root(self, direction: Direction) -> list[str]:
        """Package segments of the import or export root."""
        if direction.is_import:
            return list(self.base)
        return [*self.base, EXPORTS_SEGMENT]

    def _package_segments(
        self, package: PackageName | None, direction: Direction
    ) -> list[str]:
        segments = self.root(direction)
        if package is None:
            return segments
        namespace = self.namer.derive(
            package.namespace, NameCase.MODULE, scope=self._scope(segments)
        )
        segments.append(namespace)
        name = self.namer.derive(
            package.name, NameCase.MODULE, scope=self._scope(segments)
        )
        segments.append(name)
        return segments

    @staticmethod
    def _scope(segments: list[str]) -> str:
        return ".".join(unescape(s) for s in segments)

    def interface_location(
        self,
        package: PackageName | None,
        interface_name: str,
        direction: Direction,
    ) -> ModuleLocation:
        """Location of the module generated for one interface.

        Args:
            package: Owning package, or None for interfaces declared inline in
                a world
            interface_name: Interface name (or world key for inline ones)
            direction: Import or export surface
        """
        segments = self._package_segments(package, direction)
        raw = package.identity(interface_name) if package else interface_name
        module_name = self.namer.derive(
            interface_name, NameCase.MODULE, scope=self._scope(segments)
        )
        # Different versions of one interface land on the same module
        self.namer.register(f"{self._scope(segments)}:identity", module_name, raw)

        if direction.is_import:
            container = module_name
        else:
            container = self.namer.derive(interface_name, NameCase.TYPE)
        return ModuleLocation(
            package=".".join(segments),
            container=container,
            segments=tuple(unescape(s) for s in segments),
            file_name=f"{unescape(module_name)}.scala",
            direction=direction,
        )

    def world_location(self, world_name: str, direction: Direction) -> ModuleLocation:
        """Location of the module holding a world's bare functions and types."""
        module_name = self.namer.derive(world_name, NameCase.MODULE)
        # World modules sit beside the WIT namespaces of the same root
        root_scope = self._scope(self.root(direction))
        self.namer.register(root_scope, module_name, f"<world {world_name}>")
        if direction.is_import:
            package_segments = self.root(direction)
            container = module_name
        else:
            package_segments = [*self.root(direction), module_name]
            container = self.namer.derive(world_name, NameCase.TYPE)
        directory = [*self.root(direction), module_name]
        return ModuleLocation(
            package=".".join(package_segments),
            container=container,
            segments=tuple(unescape(s) for s in directory),
            file_name="package.scala",
            direction=direction,
        )
