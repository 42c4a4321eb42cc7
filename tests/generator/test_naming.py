"""Tests for the generator naming module."""

import pytest

from wit2scala.generator.errors import InvalidDocument, NameCollision
from wit2scala.generator.naming import (
    NameCase,
    Namer,
    split_words,
    to_member_case,
    to_module_case,
    to_type_case,
    unescape,
)


class TestCaseConversion:
    """Tests for the case conversion helpers."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("file-perms", "FilePerms"),
            ("point", "Point"),
            ("HTTP-client", "HttpClient"),
            ("input-stream", "InputStream"),
            ("%type", "Type"),
        ],
    )
    def test_type_case(self, raw, expected):
        """Test type-case capitalizes every token."""
        assert to_type_case(raw) == expected

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("file-perms", "filePerms"),
            ("get-HTTP-response", "getHttpResponse"),
            ("x", "x"),
        ],
    )
    def test_member_case(self, raw, expected):
        """Test member-case lower-cases the first token only."""
        assert to_member_case(raw) == expected

    def test_module_case(self):
        """Test module-case joins tokens with underscores."""
        assert to_module_case("file-perms") == "file_perms"
        assert to_module_case("IO") == "io"

    def test_split_words_rejects_empty(self):
        """Test an identifier without words is invalid."""
        with pytest.raises(InvalidDocument):
            split_words("--")


class TestNamer:
    """Tests for the Namer class."""

    def test_escapes_keywords(self, namer):
        """Test reserved words are wrapped in backticks, not renamed."""
        assert namer.derive("type", NameCase.MEMBER) == "`type`"
        assert namer.derive("object", NameCase.MODULE) == "`object`"
        assert namer.derive("to-string", NameCase.MEMBER) == "`toString`"

    def test_keyword_spelling_is_case_sensitive(self, namer):
        """Test type-case spellings of keywords are not escaped."""
        assert namer.derive("type", NameCase.TYPE) == "Type"

    def test_unescape(self):
        """Test unescape strips backticks only."""
        assert unescape("`type`") == "type"
        assert unescape("point") == "point"

    def test_collision_raises(self, namer):
        """Test two identifiers with one spelling collide in a scope."""
        namer.derive("http-client", NameCase.TYPE, scope="mod")

        with pytest.raises(NameCollision) as exc_info:
            namer.derive("HTTP-client", NameCase.TYPE, scope="mod")

        assert exc_info.value.identifier == "HttpClient"
        assert exc_info.value.first == "http-client"
        assert exc_info.value.second == "HTTP-client"
        assert exc_info.value.exit_code == 5

    def test_reregistration_is_idempotent(self, namer):
        """Test deriving the same identifier twice is not a collision."""
        first = namer.derive("point", NameCase.TYPE, scope="mod")
        second = namer.derive("point", NameCase.TYPE, scope="mod")

        assert first == second
        assert namer.registered("mod") == {"Point": "point"}

    def test_scopes_are_independent(self, namer):
        """Test equal spellings in different scopes do not collide."""
        namer.derive("http-client", NameCase.TYPE, scope="a")
        namer.derive("HTTP-client", NameCase.TYPE, scope="b")

        assert namer.registered("a") == {"HttpClient": "http-client"}
        assert namer.registered("b") == {"HttpClient": "HTTP-client"}

    def test_derive_without_scope_registers_nothing(self, namer):
        """Test derive only registers when a scope is given."""
        namer.derive("point", NameCase.TYPE)

        assert namer.registered("mod") == {}

    def test_custom_keywords(self):
        """Test the keyword set can be replaced."""
        namer = Namer(keywords={"point"})

        assert namer.derive("point", NameCase.MEMBER) == "`point`"
        assert namer.derive("type", NameCase.MEMBER) == "type"
