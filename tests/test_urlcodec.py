"""Tests for URL escaping and query string composition."""

import pytest

from oiapi import build_query, encode_url
from oiapi.urlcodec import is_json


class TestEncodeUrl:
    """Tests for the partial escaping of non-ASCII byte runs."""

    def test_ascii_url_unchanged(self) -> None:
        """Test that plain ASCII passes through untouched."""
        url = "http://oiapi.net/api/search?keyword=a b&page=1"
        assert encode_url(url) == url

    @pytest.mark.parametrize("text", ["é", "\x7f", "ñx\x7f"])
    def test_short_runs_left_literal(self, text: str) -> None:
        """Test that runs shorter than three bytes are not escaped."""
        url = f"http://oiapi.net/api/q?v={text}"
        assert encode_url(url) == url

    def test_three_byte_run_escaped(self) -> None:
        """Test that a three-byte character is percent-encoded."""
        assert encode_url("http://oiapi.net/api/q?v=中") == "http://oiapi.net/api/q?v=%E4%B8%AD"

    def test_adjacent_short_characters_form_one_run(self) -> None:
        """Test that two adjacent two-byte characters are escaped together."""
        assert encode_url("v=éé") == "v=%C3%A9%C3%A9"

    def test_mixed_runs(self) -> None:
        """Test that each run is judged on its own length."""
        assert encode_url("a=é&b=中文&c=ü") == "a=é&b=%E4%B8%AD%E6%96%87&c=ü"


class TestBuildQuery:
    """Tests for RFC 3986 query composition."""

    def test_space_encoded_as_percent20(self) -> None:
        """Test the basic mapping case."""
        query = build_query({"a": 1, "b": "x y"})
        assert query == "a=1&b=x%20y"
        assert "+" not in query

    def test_nested_values_use_brackets(self) -> None:
        """Test nested mappings and lists."""
        query = build_query({"a": {"b": 1}, "c": [1, 2]})
        assert query == "a%5Bb%5D=1&c%5B0%5D=1&c%5B1%5D=2"

    def test_booleans_and_none(self) -> None:
        """Test that booleans render as digits and None is dropped."""
        assert build_query({"t": True, "f": False, "n": None}) == "t=1&f=0"

    def test_non_ascii_and_unreserved(self) -> None:
        """Test that non-ASCII is escaped and unreserved characters kept."""
        assert build_query({"q": "中", "s": "a-b_c.d~e"}) == "q=%E4%B8%AD&s=a-b_c.d~e"

    def test_list_at_top_level(self) -> None:
        """Test that a list is keyed by index."""
        assert build_query(["x", "y"]) == "0=x&1=y"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ('{"a":1}', True),
        ("[1,2]", True),
        ("123", True),
        ("a=1&b=2", False),
        ("", False),
        (None, False),
    ],
)
def test_is_json(text: str | None, expected: bool) -> None:  # noqa: FBT001
    """Test JSON detection used for the automatic content type."""
    assert is_json(text) is expected
