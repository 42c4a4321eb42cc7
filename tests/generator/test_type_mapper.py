"""Tests for the generator type_mapper module."""

import pytest

from wit2scala.generator.errors import (
    DanglingReference,
    InvalidDocument,
    UnsupportedFeature,
)
from wit2scala.generator.layout import ModuleLocation
from wit2scala.generator.models import (
    Direction,
    Field,
    Primitive,
    Resolve,
    TypeDef,
    TypeDefKind,
    TypeOwner,
)
from wit2scala.generator.type_mapper import TypeMapper

API = ModuleLocation(
    package="base.ns.pkg",
    container="api",
    segments=("base", "ns", "pkg"),
    file_name="api.scala",
    direction=Direction.IMPORT,
)
OTHER = ModuleLocation(
    package="base.ns.pkg",
    container="other",
    segments=("base", "ns", "pkg"),
    file_name="other.scala",
    direction=Direction.IMPORT,
)
LOCATIONS = {0: API, 1: OTHER}


def _anonymous(type_id, kind, **kwargs):
    return TypeDef(id=type_id, name=None, kind=kind, **kwargs)


@pytest.fixture
def resolve():
    """Fixture providing a type arena with named and anonymous types."""
    api = TypeOwner(interface=0)
    return Resolve(
        types=[
            TypeDef(
                0, "point", TypeDefKind.RECORD, owner=api,
                fields=[Field("x", Primitive.S32), Field("y", Primitive.S32)],
            ),
            _anonymous(1, TypeDefKind.LIST, element=Primitive.STRING),
            _anonymous(2, TypeDefKind.LIST, element=Primitive.STRING),
            TypeDef(3, "node", TypeDefKind.RECORD, owner=api, fields=[Field("next", 4)]),
            _anonymous(4, TypeDefKind.OPTION, element=3),
            _anonymous(5, TypeDefKind.LIST, element=0),
            TypeDef(6, "peer", TypeDefKind.RECORD, owner=TypeOwner(interface=1)),
            _anonymous(7, TypeDefKind.RESULT, err=Primitive.STRING),
            _anonymous(8, TypeDefKind.TUPLE, items=[Primitive.U32, Primitive.STRING]),
            _anonymous(9, TypeDefKind.FUTURE, element=Primitive.U8),
            _anonymous(10, TypeDefKind.HANDLE, resource=11),
            TypeDef(11, "file", TypeDefKind.RESOURCE, owner=api),
            _anonymous(12, TypeDefKind.OPTION, element=12),
            TypeDef(13, "size", TypeDefKind.ALIAS, owner=api, element=Primitive.U32),
        ]
    )


@pytest.fixture
def mapper(resolve, namer):
    """Fixture providing a TypeMapper rendering from the api module."""
    type_mapper = TypeMapper(resolve, namer, lambda owner: LOCATIONS[owner.interface])
    type_mapper.set_scope(API)
    return type_mapper


class TestPrimitives:
    """Tests for primitive type rendering."""

    @pytest.mark.parametrize(
        "primitive,expected",
        [
            (Primitive.BOOL, "Boolean"),
            (Primitive.S8, "Byte"),
            (Primitive.U8, "scala.scalajs.wit.unsigned.UByte"),
            (Primitive.S64, "Long"),
            (Primitive.U64, "scala.scalajs.wit.unsigned.ULong"),
            (Primitive.F32, "Float"),
            (Primitive.F64, "Double"),
            (Primitive.CHAR, "Char"),
            (Primitive.STRING, "String"),
        ],
    )
    def test_render_primitive(self, mapper, primitive, expected):
        """Test the fixed primitive table."""
        assert mapper.render(primitive) == expected


class TestNamedTypes:
    """Tests for rendering named types by reference."""

    def test_simple_name_in_own_module(self, mapper):
        """Test a type is referenced by its simple name in its module."""
        assert mapper.render(0) == "Point"

    def test_qualified_name_elsewhere(self, mapper):
        """Test a type is fully qualified from another module."""
        mapper.set_scope(OTHER)

        assert mapper.render(0) == "base.ns.pkg.api.Point"

    def test_reference_into_other_module(self, mapper):
        """Test types of other interfaces are qualified."""
        assert mapper.render(6) == "base.ns.pkg.other.Peer"

    def test_self_reference_terminates(self, mapper):
        """Test option<node> inside node renders by name."""
        assert mapper.render(4) == "java.util.Optional[Node]"
        assert mapper.render(3) == "Node"

    def test_alias_renders_by_name(self, mapper, resolve):
        """Test named aliases are referenced, and expanded only on request."""
        assert mapper.render(13) == "Size"
        assert mapper.expand(resolve.type_def(13)) == "scala.scalajs.wit.unsigned.UInt"

    def test_dangling_reference(self, mapper):
        """Test unknown ids raise DanglingReference."""
        with pytest.raises(DanglingReference):
            mapper.render(99)


class TestComposites:
    """Tests for anonymous composite rendering."""

    def test_result_with_missing_arm(self, mapper):
        """Test a missing result arm renders as Unit."""
        assert mapper.render(7) == "scala.scalajs.wit.Result[Unit, String]"

    def test_tuple(self, mapper):
        """Test tuples use the runtime tuple of matching arity."""
        assert (
            mapper.render(8)
            == "scala.scalajs.wit.Tuple2[scala.scalajs.wit.unsigned.UInt, String]"
        )

    def test_handle_renders_resource(self, mapper):
        """Test own handles render as the resource type."""
        assert mapper.render(10) == "File"

    def test_future_is_unsupported(self, mapper):
        """Test future types raise UnsupportedFeature."""
        with pytest.raises(UnsupportedFeature):
            mapper.render(9)

    def test_anonymous_cycle_is_invalid(self, mapper):
        """Test a cycle made only of anonymous types is rejected."""
        with pytest.raises(InvalidDocument):
            mapper.render(12)

    def test_render_results(self, mapper):
        """Test result lists of zero, one and several types."""
        assert mapper.render_results([]) == "Unit"
        assert mapper.render_results([Primitive.S32]) == "Int"
        assert (
            mapper.render_results([Primitive.S32, Primitive.STRING])
            == "scala.scalajs.wit.Tuple2[Int, String]"
        )


class TestInstantiationCache:
    """Tests for structural deduplication of composites."""

    def test_identical_shapes_share_one_entry(self, mapper):
        """Test two ids spelling list<string> produce one instantiation."""
        first = mapper.render(1)
        second = mapper.render(2)

        assert first == second == "Array[String]"
        assert mapper.instantiations == {(None, ("LIST", Primitive.STRING)): first}

    def test_named_shapes_are_scoped(self, mapper):
        """Test list<point> renders per module."""
        inside = mapper.render(5)
        mapper.set_scope(OTHER)
        outside = mapper.render(5)

        assert inside == "Array[Point]"
        assert outside == "Array[base.ns.pkg.api.Point]"
        assert len(mapper.instantiations) == 2

    def test_render_is_stable(self, mapper):
        """Test repeated rendering returns the cached text."""
        assert mapper.render(5) == mapper.render(5)
        assert len(mapper.instantiations) == 1
