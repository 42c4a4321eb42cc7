"""
Declarative markers consumed by the scala-wasm component runtime.

The generator never emits marshaling code; it annotates declarations so the
runtime can bind them, and gives imported functions the ``native`` body
marker:

    @scala.scalajs.wit.annotation.WitImport("wasi:io/streams@0.2.0", "read")
    def read(len: Long): Array[Byte] = scala.scalajs.wit.native
"""

from wit2scala.generator.constants import RUNTIME_PACKAGE
from wit2scala.generator.formatting import format_params

ANNOTATION_PACKAGE = f"{RUNTIME_PACKAGE}.annotation"

NATIVE_MARKER = f"{RUNTIME_PACKAGE}.native"


def _annotation(name: str, *args: str | int) -> str:
    rendered = []
    for arg in args:
        if isinstance(arg, int):
            rendered.append(str(arg))
        else:
            escaped = arg.replace("\\", "\\\\").replace('"', '\\"')
            rendered.append(f'"{escaped}"')
    if not args:
        return f"@{ANNOTATION_PACKAGE}.{name}"
    return f"@{ANNOTATION_PACKAGE}.{name}({', '.join(rendered)})"


def component_import(identity: str, name: str) -> str:
    return _annotation("WitImport", identity, name)


def component_export(identity: str, name: str) -> str:
    return _annotation("WitExport", identity, name)


def component_record() -> str:
    return _annotation("WitRecord")


def component_variant() -> str:
    """Marker shared by variants and enums."""
    return _annotation("WitVariant")


def component_flags(count: int) -> str:
    return _annotation("WitFlags", count)


def component_resource_import(identity: str, name: str) -> str:
    return _annotation("WitResourceImport", identity, name)


def component_resource_constructor() -> str:
    return _annotation("WitResourceConstructor")


def component_resource_method(name: str) -> str:
    return _annotation("WitResourceMethod", name)


def component_resource_static_method(name: str) -> str:
    return _annotation("WitResourceStaticMethod", name)


def component_resource_drop() -> str:
    return _annotation("WitResourceDrop")


def component_export_interface() -> str:
    return _annotation("WitExportInterface")


def signature(name: str, params: list[tuple[str, str]], result: str) -> str:
    """Render ``def name(params): Result``."""
    return f"def {name}({format_params(params)}): {result}"


def native_signature(name: str, params: list[tuple[str, str]], result: str) -> str:
    """Render a signature whose body is supplied by the runtime."""
    return f"{signature(name, params, result)} = {NATIVE_MARKER}"


def import_function(
    identity: str,
    wit_name: str,
    scala_name: str,
    params: list[tuple[str, str]],
    result: str,
    docs: str = "",
) -> str:
    """Render an imported function bound to its host implementation.

    Args:
        identity: ``ns:pkg/iface@version`` of the owning interface
        wit_name: Original WIT function name
        scala_name: Derived Scala method name
        params: (name, type) pairs
        result: Scala result type
        docs: Scaladoc block, if any

    Returns:
        Declaration text ending with a newline
    """
    return (
        f"{docs}{component_import(identity, wit_name)}\n"
        f"{native_signature(scala_name, params, result)}\n"
    )


def export_function(
    identity: str,
    wit_name: str,
    scala_name: str,
    params: list[tuple[str, str]],
    result: str,
    docs: str = "",
) -> str:
    """Render an exported function contract, implemented by guest code."""
    return (
        f"{docs}{component_export(identity, wit_name)}\n"
        f"{signature(scala_name, params, result)}\n"
    )
