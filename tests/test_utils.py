"""Tests for _utils.py — key encoding for URL path segments."""

from urllib.parse import unquote

import pytest

from kvctl._utils import url_encode_key

KEYS = [
    "simple",
    "with/slash",
    "a/b/c/",
    "/leading",
    "with space",
    "tab\there",
    "new\nline",
    "percent%20already",
    "question?mark",
    "hash#tag",
    "plus+sign",
    "équipe",
    "日本語のキー",
    "emoji 🎉",
    "!$&'()*+,;=:@",
    "~-._",
    "",
]


class TestUrlEncodeKey:
    def test_plain_key_unchanged(self):
        assert url_encode_key("my-key_1.txt") == "my-key_1.txt"

    def test_slash_is_escaped(self):
        encoded = url_encode_key("dir/file")
        assert "/" not in encoded
        assert encoded == "dir%2Ffile"

    def test_space_is_escaped(self):
        assert url_encode_key("a b") == "a%20b"

    def test_percent_is_escaped(self):
        assert url_encode_key("100%") == "100%25"

    def test_query_and_fragment_chars_escaped(self):
        encoded = url_encode_key("a?b#c")
        assert "?" not in encoded
        assert "#" not in encoded

    def test_non_ascii_encoded_as_utf8_bytes(self):
        assert url_encode_key("é") == "%C3%A9"

    def test_sub_delims_kept_literal(self):
        assert url_encode_key("a:b@c") == "a:b@c"

    @pytest.mark.parametrize("key", KEYS)
    def test_round_trip(self, key):
        encoded = url_encode_key(key)
        assert "/" not in encoded
        assert unquote(encoded) == key

    def test_distinct_keys_stay_distinct(self):
        encoded = {url_encode_key(k) for k in KEYS}
        assert len(encoded) == len(KEYS)
