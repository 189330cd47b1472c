"""Tests for the request collection document."""

import json

import pytest

from req_collection import Collection, Extracted, parse_target
from tui_errors import ParseError


@pytest.fixture
def collection() -> Collection:
    collection = Collection()
    collection.add("https://api.example.com/users", "get",
                   {"Accept": "application/json"})
    collection.add("https://api.example.com/users", "POST", {})
    collection.add("https://api.example.com/status", "GET", {})
    return collection


def line_of(text: str, needle: str) -> int:
    return next(index for index, line in enumerate(text.split("\n"))
                if needle in line)


class TestParseTarget:
    def test_splits_url(self) -> None:
        assert parse_target("https://example.com:8080/a/b?x=1") == \
            ("https", "example.com:8080", "/a/b")

    def test_empty_path_is_root(self) -> None:
        assert parse_target("http://example.com") == \
            ("http", "example.com", "/")

    @pytest.mark.parametrize("url", ["", "example.com/x", "/relative",
                                     "https://", "http://[::1"])
    def test_invalid(self, url: str) -> None:
        with pytest.raises(ParseError):
            parse_target(url)


class TestAdd:
    def test_first_add_creates_document(self) -> None:
        collection = Collection()
        assert collection.empty
        assert collection.to_text() == ""

        collection.add("https://example.com/users", "get", {"A": "1"})

        assert collection.data == {
            "name": "",
            "scheme": "https",
            "host": "example.com",
            "headers": {"A": "1"},
            "GET": {"/users": {}},
        }

    def test_repeat_add_is_idempotent(self) -> None:
        collection = Collection()
        collection.add("https://example.com/users", "GET", {})
        before = collection.to_text()
        collection.add("https://example.com/users", "GET", {})
        assert collection.to_text() == before

    def test_later_header_values_win(self) -> None:
        collection = Collection()
        collection.add("https://example.com/", "GET",
                       {"Accept": "text/plain", "X-Id": "1"})
        collection.add("https://example.com/", "GET",
                       {"Accept": "application/json"})
        assert collection.data["headers"] == {
            "Accept": "application/json",
            "X-Id": "1",
        }

    def test_scheme_and_host_fixed_by_first_add(self) -> None:
        collection = Collection()
        collection.add("https://one.test/a", "GET", {})
        collection.add("http://two.test/b", "GET", {})
        assert collection.data["host"] == "one.test"
        assert collection.data["GET"] == {"/a": {}, "/b": {}}

    def test_invalid_url_leaves_collection_untouched(
        self, collection: Collection
    ) -> None:
        before = collection.to_text()
        with pytest.raises(ParseError):
            collection.add("not a url", "DELETE", {"B": "2"})
        assert collection.to_text() == before

    def test_empty_method_rejected(self) -> None:
        collection = Collection()
        with pytest.raises(ParseError):
            collection.add("https://example.com/", "  ", {})
        assert collection.empty

    def test_text_is_indented_json(self, collection: Collection) -> None:
        text = collection.to_text()
        assert json.loads(text) == collection.data
        assert '\n  "GET": {\n    "/users": {}' in text


class TestExtract:
    def test_path_resolves_to_request(self, collection: Collection) -> None:
        text = collection.to_text()
        line = line_of(text, '"/status"')
        assert collection.extract(text, line) == Extracted(
            key="/status", method="GET",
            url="https://api.example.com/status")

    def test_method_taken_from_enclosing_key(
        self, collection: Collection
    ) -> None:
        text = collection.to_text()
        lines = text.split("\n")
        line = max(index for index, value in enumerate(lines)
                   if '"/users"' in value)
        extracted = collection.extract(text, line)
        assert extracted.method == "POST"
        assert extracted.url == "https://api.example.com/users"

    def test_top_level_key_only(self, collection: Collection) -> None:
        text = collection.to_text()
        assert collection.extract(text, line_of(text, '"host"')) == \
            Extracted(key="host")

    def test_header_key_is_not_a_request(
        self, collection: Collection
    ) -> None:
        text = collection.to_text()
        assert collection.extract(text, line_of(text, '"Accept"')) == \
            Extracted(key="Accept")

    def test_line_without_key(self, collection: Collection) -> None:
        text = collection.to_text()
        assert collection.extract(text, 0) is None
        assert collection.extract(text, len(text.split("\n")) - 1) is None
        assert collection.extract(text, 500) is None

    def test_edited_text_is_used(self, collection: Collection) -> None:
        text = collection.to_text().replace('"/status"', '"/health"')
        assert collection.extract(text, line_of(text, '"/health"')).url == \
            "https://api.example.com/health"

    def test_empty_text(self) -> None:
        assert Collection().extract("", 0) is None

    def test_invalid_json(self, collection: Collection) -> None:
        with pytest.raises(ParseError):
            collection.extract('{\n  "GET": {\n', 1)
