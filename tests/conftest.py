"""Pytest configuration and fixtures."""

import sys

import pytest

from curlhttp.models import Request


# Stand-in for the curl binary. It routes on the URL path so tests can pick
# the exchange they need.
FAKE_CURL = r'''
import json
import sys
import time
from urllib.parse import urlsplit

args = sys.argv[1:]
url = next(a for a in args if a.startswith(("http://", "https://")))
path = urlsplit(url).path
out = sys.stdout.buffer

if path == "/fail":
    sys.stderr.write("connection refused")
    sys.exit(7)
if path == "/hang":
    time.sleep(30)
if path == "/early-exit":
    out.write(b"HTTP/1.1 413 Payload Too Large\r\n\r\n")
    out.flush()
    sys.exit(0)

body = sys.stdin.buffer.read() if "@-" in args else b""

if path == "/echo":
    out.write(
        b"HTTP/1.1 100 Continue\r\n\r\n"
        b"HTTP/1.1 200 OK\r\nContent-Type: application/octet-stream\r\n\r\n" + body
    )
elif path == "/args":
    payload = json.dumps({"args": args, "stdin": body.decode("latin-1")}).encode()
    out.write(b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n\r\n" + payload)
elif path == "/noisy":
    sys.stderr.write("warning: something odd")
    out.write(b"HTTP/1.1 204 No Content\r\n\r\n")
elif path.startswith("/status/"):
    code = path.rsplit("/", 1)[1]
    out.write(f"HTTP/1.1 {code} Status\r\nContent-Type: text/plain\r\n\r\n{code}".encode())
'''


@pytest.fixture
def fake_curl(tmp_path):
    """Path to an executable that behaves like `curl -i` for test URLs."""
    script = tmp_path / "fake-curl"
    script.write_text(f"#!{sys.executable}\n{FAKE_CURL}")
    script.chmod(0o755)
    return str(script)


@pytest.fixture
def sample_request():
    return Request(method="GET", url="https://example.test/ok", headers={}, command="curl -i")


@pytest.fixture
def text_file(tmp_path):
    """A small text file named file1.txt."""
    path = tmp_path / "file1.txt"
    path.write_bytes(b"hello from file one\nsecond line\n")
    return path
