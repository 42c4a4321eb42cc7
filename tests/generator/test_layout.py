"""Tests for the generator layout module."""

import pytest

from wit2scala.generator.errors import NameCollision
from wit2scala.generator.layout import PackageLayout
from wit2scala.generator.models import Direction, PackageName


@pytest.fixture
def layout(namer):
    """Fixture providing a layout rooted at com.example."""
    return PackageLayout(["com", "example"], namer)


class TestInterfaceLocation:
    """Tests for interface module locations."""

    def test_import(self, layout):
        """Test imports live under the base package plus namespace and package."""
        package = PackageName("wasi", "io", "0.2.0")

        location = layout.interface_location(package, "streams", Direction.IMPORT)

        assert location.package == "com.example.wasi.io"
        assert location.container == "streams"
        assert location.path == "com/example/wasi/io/streams.scala"

    def test_export(self, layout):
        """Test exports live under the disjoint exports root."""
        package = PackageName("my", "app", "1.0.0")

        location = layout.interface_location(package, "http-handler", Direction.EXPORT)

        assert location.package == "com.example.exports.my.app"
        assert location.container == "HttpHandler"
        assert location.path == "com/example/exports/my/app/http_handler.scala"

    def test_import_and_export_do_not_collide(self, layout):
        """Test one interface has distinct import and export modules."""
        package = PackageName("my", "app")

        imported = layout.interface_location(package, "api", Direction.IMPORT)
        exported = layout.interface_location(package, "api", Direction.EXPORT)

        assert imported.path != exported.path
        assert imported.package != exported.package

    def test_keyword_segments(self, layout):
        """Test package clauses escape keywords and paths do not."""
        package = PackageName("my", "type")

        location = layout.interface_location(package, "object", Direction.IMPORT)

        assert location.package == "com.example.my.`type`"
        assert location.container == "`object`"
        assert location.path == "com/example/my/type/object.scala"

    def test_inline_interface(self, layout):
        """Test interfaces without a package live directly under the root."""
        location = layout.interface_location(None, "host-api", Direction.IMPORT)

        assert location.package == "com.example"
        assert location.path == "com/example/host_api.scala"

    def test_versions_collide(self, layout):
        """Test two versions of one interface map to one module."""
        layout.interface_location(PackageName("wasi", "io", "0.2.0"), "streams", Direction.IMPORT)

        with pytest.raises(NameCollision):
            layout.interface_location(
                PackageName("wasi", "io", "0.2.1"), "streams", Direction.IMPORT
            )

    def test_exports_namespace_is_reserved(self, layout):
        """Test a WIT namespace cannot take the exports root's name."""
        with pytest.raises(NameCollision):
            layout.interface_location(
                PackageName("exports", "pkg"), "api", Direction.IMPORT
            )

    def test_member_path(self, layout):
        """Test qualified references to types of a module."""
        package = PackageName("my", "app")
        imported = layout.interface_location(package, "api", Direction.IMPORT)
        exported = layout.interface_location(package, "api", Direction.EXPORT)

        assert imported.member_path("Point") == "com.example.my.app.api.Point"
        assert exported.member_path("Point") == "com.example.exports.my.app.Api#Point"


class TestWorldLocation:
    """Tests for world module locations."""

    def test_import(self, layout):
        """Test the import world module is a package object under the root."""
        location = layout.world_location("my-world", Direction.IMPORT)

        assert location.package == "com.example"
        assert location.container == "my_world"
        assert location.path == "com/example/my_world/package.scala"

    def test_export(self, layout):
        """Test the export world module is a trait in its own package."""
        location = layout.world_location("my-world", Direction.EXPORT)

        assert location.package == "com.example.exports.my_world"
        assert location.container == "MyWorld"
        assert location.path == "com/example/exports/my_world/package.scala"

    def test_world_and_namespace_collide(self, layout):
        """Test a world cannot share its module name with a namespace."""
        layout.interface_location(PackageName("wasi", "io"), "streams", Direction.IMPORT)

        with pytest.raises(NameCollision):
            layout.world_location("wasi", Direction.IMPORT)
