"""
Constants for the Scala bindings generator.

This module holds the Scala reserved words, the primitive type table and the
fully qualified names of the scala-wasm runtime types used by generated code.
"""

from wit2scala.generator.models import Primitive

# Root package of the scala-wasm component runtime
RUNTIME_PACKAGE = "scala.scalajs.wit"

# Sub-namespace that holds all export-direction modules
EXPORTS_SEGMENT = "exports"

# Identity used for functions and types attached directly to a world
WORLD_ROOT_IDENTITY = "$root"

# Scala type for each WIT primitive
PRIMITIVE_TYPES: dict[Primitive, str] = {
    Primitive.BOOL: "Boolean",
    Primitive.S8: "Byte",
    Primitive.U8: f"{RUNTIME_PACKAGE}.unsigned.UByte",
    Primitive.S16: "Short",
    Primitive.U16: f"{RUNTIME_PACKAGE}.unsigned.UShort",
    Primitive.S32: "Int",
    Primitive.U32: f"{RUNTIME_PACKAGE}.unsigned.UInt",
    Primitive.S64: "Long",
    Primitive.U64: f"{RUNTIME_PACKAGE}.unsigned.ULong",
    Primitive.F32: "Float",
    Primitive.F64: "Double",
    Primitive.CHAR: "Char",
    Primitive.STRING: "String",
}

# Container types for composites
ARRAY_TYPE = "Array"
OPTIONAL_TYPE = "java.util.Optional"
RESULT_TYPE = f"{RUNTIME_PACKAGE}.Result"
TUPLE_TYPE_PREFIX = f"{RUNTIME_PACKAGE}.Tuple"
UNIT_TYPE = "Unit"

# Flags storage: bit width -> (Scala type, literal for one, narrowing suffix)
FLAG_WIDTHS: dict[int, tuple[str, str, str]] = {
    8: ("Byte", "1", ".toByte"),
    16: ("Short", "1", ".toShort"),
    32: ("Int", "1", ""),
    64: ("Long", "1L", ""),
}

# Identifiers that must be wrapped in backticks
SCALA_KEYWORDS = frozenset(
    {
        # Scala 2 keywords
        "abstract",
        "case",
        "catch",
        "class",
        "def",
        "do",
        "else",
        "extends",
        "false",
        "final",
        "finally",
        "for",
        "forSome",
        "if",
        "implicit",
        "import",
        "lazy",
        "macro",
        "match",
        "new",
        "null",
        "object",
        "override",
        "package",
        "private",
        "protected",
        "return",
        "sealed",
        "super",
        "this",
        "throw",
        "trait",
        "true",
        "try",
        "type",
        "val",
        "var",
        "while",
        "with",
        "yield",
        # Scala 3 keywords
        "enum",
        "export",
        "given",
        "then",
        # Scala 3 soft keywords
        "as",
        "derives",
        "end",
        "extension",
        "infix",
        "inline",
        "opaque",
        "open",
        "transparent",
        "using",
        # Reserved symbols
        "_",
        ":",
        "=",
        "=>",
        "<-",
        "<:",
        "<%",
        ">:",
        "#",
        "@",
        # Members of java.lang.Object
        "equals",
        "hashCode",
        "toString",
        "wait",
        "notify",
        "notifyAll",
        "clone",
        "finalize",
        "getClass",
    }
)
