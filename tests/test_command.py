"""Tests for curlhttp.command module."""

import io
import json

import pytest
from curlhttp.command import (
    BASE_FLAGS,
    build_args,
    encode_url,
    format_command,
    prepare_invocation,
)
from curlhttp.multipart import FileField


class TestEncodeUrl:
    """Tests for encode_url function."""

    def test_plain_url_untouched(self):
        url = "https://example.test/a/b?x=1&y=2#frag"
        assert encode_url(url) == url

    def test_spaces_and_unicode_escaped(self):
        assert encode_url("https://example.test/a b/ü") == "https://example.test/a%20b/%C3%BC"

    def test_existing_escapes_preserved(self):
        assert encode_url("https://example.test/a%20b") == "https://example.test/a%20b"

    def test_reserved_characters_kept(self):
        url = "https://user:pw@example.test/p;x=1,2/$+!*'()~"
        assert encode_url(url) == url


class TestBuildArgs:
    """Tests for build_args function."""

    def test_layout(self):
        args = build_args(
            "curl",
            "post",
            "https://example.test/x",
            {"Accept": "*/*"},
            body_flags=("--data-raw", "{}"),
            extra_args=("--max-time", "5"),
        )
        assert args == [
            "curl", *BASE_FLAGS, "-X", "POST",
            "-H", "Accept: */*",
            "--max-time", "5",
            "https://example.test/x",
            "--data-raw", "{}",
        ]

    def test_format_command_quotes(self):
        assert format_command(["curl", "-H", "A: b"]) == "curl -H 'A: b'"


class TestPrepareInvocation:
    """Tests for request shape selection."""

    def test_no_body(self):
        """Test GET without body puts nothing after the URL."""
        inv = prepare_invocation("GET", "https://example.test/ok", headers={"X-A": "1"})
        assert inv.args[-1] == "https://example.test/ok"
        assert inv.input is None
        assert inv.streaming is False
        assert inv.request.method == "GET"
        assert inv.request.headers == {"X-A": "1"}
        assert inv.request.command.startswith("curl -i -s -S -X GET")

    def test_json_body_single_argument(self):
        """Test a structured body with a JSON content type becomes one --data-raw argument."""
        inv = prepare_invocation(
            "POST",
            "https://example.test/items",
            headers={"Content-Type": "application/json"},
            data={"x": 1},
        )
        assert inv.args[-2:] == ["--data-raw", '{"x": 1}']
        assert json.loads(inv.args[-1]) == {"x": 1}
        assert inv.request.headers == {"Content-Type": "application/json"}
        assert inv.streaming is False

    def test_structured_body_gets_json_content_type(self):
        inv = prepare_invocation("PUT", "https://example.test/", data=[1, 2])
        assert inv.request.headers["Content-Type"] == "application/json"
        assert inv.args[-1] == "[1, 2]"

    def test_caller_content_type_kept_for_structured_body(self):
        inv = prepare_invocation(
            "POST", "https://example.test/", headers={"content-type": "application/hal+json"}, data={}
        )
        assert inv.request.headers == {"content-type": "application/hal+json"}

    def test_string_body_sent_as_is(self):
        """Test strings are not re-serialized, even when they look like JSON."""
        inv = prepare_invocation("POST", "https://example.test/", data='{"raw": true}')
        assert inv.args[-2:] == ["--data-raw", '{"raw": true}']
        assert "Content-Type" not in inv.request.headers

    def test_bytes_body_goes_through_input(self):
        inv = prepare_invocation("POST", "https://example.test/", data=b"\x00binary")
        assert inv.args[-2:] == ["--data-binary", "@-"]
        assert inv.input == b"\x00binary"
        assert inv.streaming is False

    def test_file_field_forces_multipart(self):
        """Test any byte-source in the mapping switches to streaming multipart."""
        inv = prepare_invocation(
            "POST",
            "https://example.test/upload",
            headers={"Content-Type": "multipart/form-data", "X-Keep": "1"},
            data={"title": "t", "file": FileField(io.BytesIO(b"x"), filename="x.txt")},
        )
        assert inv.streaming is True
        assert inv.input is None
        assert inv.args[-2:] == ["--data-binary", "@-"]
        assert inv.request.headers == {
            "X-Keep": "1",
            "Content-Type": f"multipart/form-data; boundary={inv.boundary}",
        }
        assert [name for name, _ in inv.fields] == ["title", "file"]
        # The caller's bare multipart header is replaced, not duplicated.
        assert sum(a.lower().startswith("content-type") for a in inv.args) == 1

    def test_explicit_multipart_without_files(self):
        inv = prepare_invocation(
            "POST",
            "https://example.test/",
            headers={"Content-Type": "multipart/form-data"},
            data={"a": "1"},
        )
        assert inv.streaming is True

    def test_mapping_without_files_is_json(self):
        inv = prepare_invocation("POST", "https://example.test/", data={"a": "1"})
        assert inv.streaming is False
        assert inv.args[-1] == '{"a": "1"}'

    def test_url_encoded_in_args_not_in_request(self):
        inv = prepare_invocation("GET", "https://example.test/a b")
        assert "https://example.test/a%20b" in inv.args
        assert inv.request.url == "https://example.test/a b"

    @pytest.mark.parametrize("method", ["get", "Post", "PUT"])
    def test_method_uppercased(self, method):
        inv = prepare_invocation(method, "https://example.test/")
        assert inv.args[inv.args.index("-X") + 1] == method.upper()

    def test_custom_binary_and_extra_args(self):
        inv = prepare_invocation(
            "GET", "https://example.test/", curl_binary="/opt/curl", extra_args=["-k"]
        )
        assert inv.args[0] == "/opt/curl"
        assert inv.args[-2:] == ["-k", "https://example.test/"]
