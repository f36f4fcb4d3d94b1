"""Тесты разбора и вычисления путей в контексте."""

from dataclasses import dataclass

import pytest

from kxt.template.resolver import parse_path, resolve_path


class TestParsePath:

    @pytest.mark.parametrize("text, segments", [
        ("name", ("name",)),
        ("user.name", ("user", "name")),
        ("items.[0]", ("items", "0")),
        ("items[0].title", ("items", "0", "title")),
        ("items.0", ("items", "0")),
        ("map.[key with spaces]", ("map", "key with spaces")),
        ("this", ()),
        (".", ()),
        ("this.name", ("name",)),
        ("user-id", ("user-id",)),
    ])
    def test_context_paths(self, text, segments):
        path = parse_path(text)

        assert path.segments == segments
        assert path.data is False
        assert path.original == text

    def test_data_path(self):
        path = parse_path("@root.site.title")

        assert path.data is True
        assert path.segments == ("root", "site", "title")

    def test_simple_name(self):
        assert parse_path("plusOne").is_simple_name
        assert not parse_path("a.b").is_simple_name
        assert not parse_path("@index").is_simple_name
        assert not parse_path("this").is_simple_name

    @pytest.mark.parametrize("text", ["@", "a.", "a..b", ".a", "a.[b", "a]"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_path(text)


@dataclass
class Author:
    name: str
    _secret: str = "hidden"


class TestResolvePath:

    def test_nested_mapping(self):
        context = {"user": {"profile": {"name": "Amy"}}}

        assert resolve_path(context, parse_path("user.profile.name")) == "Amy"

    def test_missing_intermediate_is_none(self):
        assert resolve_path({"user": None}, parse_path("user.profile.name")) is None
        assert resolve_path({}, parse_path("a.b.c")) is None
        assert resolve_path(None, parse_path("a")) is None

    def test_sequence_index_and_length(self):
        context = {"items": ["a", "b"]}

        assert resolve_path(context, parse_path("items.[1]")) == "b"
        assert resolve_path(context, parse_path("items.5")) is None
        assert resolve_path(context, parse_path("items.length")) == 2

    def test_integer_keys_in_mapping(self):
        assert resolve_path({"codes": {404: "Not Found"}}, parse_path("codes.404")) == "Not Found"

    def test_object_attributes(self):
        context = {"author": Author(name="Kris")}

        assert resolve_path(context, parse_path("author.name")) == "Kris"
        assert resolve_path(context, parse_path("author._secret")) is None
        assert resolve_path(context, parse_path("author.missing")) is None

    def test_string_has_no_segments(self):
        assert resolve_path({"s": "abc"}, parse_path("s.upper")) is None

    def test_this(self):
        assert resolve_path("value", parse_path("this")) == "value"

    def test_data_path(self):
        data = {"index": 3, "root": {"title": "Home"}}

        assert resolve_path(None, parse_path("@index"), data) == 3
        assert resolve_path(None, parse_path("@root.title"), data) == "Home"
        assert resolve_path(None, parse_path("@missing"), data) is None
        assert resolve_path(None, parse_path("@index"), None) is None
