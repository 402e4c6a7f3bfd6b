"""Tests for log formatting and token scrubbing."""

import io
import json
import logging

import pytest

from blobgate.core.logging_config import REDACTED, build_handler, redact, request_id_var


@pytest.fixture()
def capture():
    """Logger wired to a private handler; returns (logger, stream, set_format)."""
    stream = io.StringIO()
    logger = logging.getLogger("blobgate.test.capture")
    logger.propagate = False
    logger.setLevel(logging.DEBUG)

    def _use(fmt: str) -> None:
        logger.handlers.clear()
        logger.addHandler(build_handler(fmt, stream=stream))

    _use("json")
    yield logger, stream, _use
    logger.handlers.clear()


class TestRedact:

    def test_bearer_token(self):
        assert redact("Authorization: Bearer abc.def-123").count(REDACTED) >= 1
        assert "abc.def-123" not in redact("Authorization: Bearer abc.def-123")

    def test_short_bearer_token(self):
        assert "tok1" not in redact("header was Bearer tok1")

    def test_query_key(self):
        assert redact("GET /priv/a.txt?key=s3cr3t&x=1") == f"GET /priv/a.txt?key={REDACTED}&x=1"

    def test_plain_text_untouched(self):
        assert redact("Token resolved to no roles") == "Token resolved to no roles"


class TestJsonOutput:

    def test_extra_fields_and_request_id(self, capture):
        logger, stream, _ = capture
        reset = request_id_var.set("req-42")
        try:
            logger.info("Object written", extra={"key": "public/a.txt", "size": 3})
        finally:
            request_id_var.reset(reset)

        line = json.loads(stream.getvalue())
        assert line["message"] == "Object written"
        assert line["level"] == "INFO"
        assert line["request_id"] == "req-42"
        assert line["key"] == "public/a.txt"
        assert line["size"] == 3

    def test_no_request_id_outside_requests(self, capture):
        logger, stream, _ = capture
        logger.info("startup")
        assert "request_id" not in json.loads(stream.getvalue())

    def test_arguments_are_scrubbed(self, capture):
        logger, stream, _ = capture
        logger.warning("rejected %s", "/ls?key=hunter2")
        line = json.loads(stream.getvalue())
        assert "hunter2" not in line["message"]
        assert line["message"] == f"rejected /ls?key={REDACTED}"

    def test_exception_text_is_scrubbed(self, capture):
        logger, stream, _ = capture
        try:
            raise RuntimeError("upstream said Bearer leaked-token")
        except RuntimeError:
            logger.exception("failed")
        line = json.loads(stream.getvalue())
        assert "leaked-token" not in line["exc_info"]


class TestTextOutput:

    def test_single_line_with_request_id(self, capture):
        logger, stream, use = capture
        use("text")
        reset = request_id_var.set("abc")
        try:
            logger.info("GET /healthz 200")
        finally:
            request_id_var.reset(reset)

        out = stream.getvalue()
        assert out.count("\n") == 1
        assert "[abc] GET /healthz 200" in out
        assert "blobgate.test.capture" in out
