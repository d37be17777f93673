"""Tests for rowkey.escaping — the escape-and-join codec."""

from __future__ import annotations

import random

import pytest

from rowkey.errors import MalformedDocIdError
from rowkey.escaping import escape_field, join_fields, split_fields, unescape_field


def roundtrip(value: str) -> str:
    return unescape_field(escape_field(value))


def random_string(choices: str, max_len: int, rng: random.Random) -> str:
    return "".join(rng.choice(choices) for _ in range(rng.randrange(max_len)))


class TestEscapeField:
    def test_plain_text_unchanged(self):
        assert escape_field("my-simple-id") == "my-simple-id"

    def test_slash_escaped(self):
        assert escape_field("5/5") == "5_/5"

    def test_escape_char_doubled(self):
        assert escape_field("a_b") == "a__b"

    def test_single_pass(self):
        assert escape_field("_/") == "___/"
        assert escape_field("/_") == "_/__"

    def test_empty(self):
        assert escape_field("") == ""


class TestSingleFieldRoundTrip:
    @pytest.mark.parametrize(
        "value",
        [
            "",
            "my-simple-id",
            "my-/simple-id",
            "my-_simple-id",
            "___",
            "my-_simp/le-id",
            "/_/_my-_/simp/le-id/_/______//_",
            "/",
            "//",
            "_",
        ],
    )
    def test_roundtrip(self, value):
        assert roundtrip(value) == value

    def test_fuzz(self):
        rng = random.Random(1234)
        choices = "13/\\45\\97_%^&%_$^)*(/<>|P{UI_TY*c"
        for _ in range(200):
            value = random_string(choices, 100, rng)
            assert roundtrip(value) == value

    def test_unescaped_separator_rejected(self):
        with pytest.raises(MalformedDocIdError):
            unescape_field("a/b")


class TestJoinAndSplit:
    def test_join_uses_unescaped_separator(self):
        assert join_fields([escape_field("5/5"), escape_field("6/6")]) == "5_/5/6_/6"

    def test_split(self):
        assert split_fields("5_/5/6_/6") == ["5/5", "6/6"]

    def test_split_empty_is_one_empty_field(self):
        assert split_fields("") == [""]

    def test_split_keeps_empty_fields(self):
        assert split_fields("/") == ["", ""]
        assert split_fields("a//b") == ["a", "", "b"]

    def test_escape_char_before_other_char_copied(self):
        assert split_fields("a_b") == ["a_b"]

    def test_trailing_escape_char_rejected(self):
        with pytest.raises(MalformedDocIdError) as exc_info:
            split_fields("abc_")
        assert exc_info.value.doc_id == "abc_"

    def test_escaped_escape_char_at_end_is_fine(self):
        assert split_fields("abc__") == ["abc_"]

    def test_slashes_at_field_edges(self):
        fields = ["5/5//", "//6/6"]
        doc_id = join_fields(escape_field(f) for f in fields)
        assert doc_id == "5_/5_/_//_/_/6_/6"
        assert split_fields(doc_id) == fields

    @pytest.mark.parametrize(
        "fields",
        [
            [""],
            ["", ""],
            ["", "_stuff/"],
            ["_stuff/", ""],
            ["/", "_", "//", "__"],
        ],
    )
    def test_list_roundtrip(self, fields):
        assert split_fields(join_fields(escape_field(f) for f in fields)) == fields

    def test_fuzz_slashes_and_escapes(self):
        rng = random.Random(42)
        for _ in range(500):
            fields = [random_string("/_", 30, rng) for _ in range(rng.randint(1, 4))]
            doc_id = join_fields(escape_field(f) for f in fields)
            assert split_fields(doc_id) == fields

    def test_distinct_lists_never_collide(self):
        rng = random.Random(7)
        seen: dict[str, tuple[str, ...]] = {}
        for _ in range(2000):
            fields = tuple(random_string("/_a", 5, rng) for _ in range(2))
            doc_id = join_fields(escape_field(f) for f in fields)
            assert seen.setdefault(doc_id, fields) == fields
