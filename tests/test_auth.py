"""Tests for bearer token extraction."""

from blobgate.core.auth import extract_token


class TestExtractToken:

    def test_bearer_header(self):
        assert extract_token("Bearer tok1", None) == "tok1"

    def test_header_trimmed(self):
        assert extract_token("Bearer  tok1  ", None) == "tok1"

    def test_header_wins_over_query(self):
        assert extract_token("Bearer  tok1  ", "tok2") == "tok1"

    def test_query_fallback(self):
        assert extract_token(None, "tok2") == "tok2"

    def test_query_trimmed(self):
        assert extract_token(None, "  tok2 ") == "tok2"

    def test_blank_header_falls_back_to_query(self):
        assert extract_token("Bearer    ", "tok2") == "tok2"
        assert extract_token("", "tok2") == "tok2"

    def test_header_without_scheme_used_verbatim(self):
        assert extract_token(" rawtoken ", "tok2") == "rawtoken"

    def test_nothing_supplied(self):
        assert extract_token(None, None) == ""
        assert extract_token("", "   ") == ""
