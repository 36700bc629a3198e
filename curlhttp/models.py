from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from .headers import get_header


@dataclass(frozen=True)
class Request:
    """Description of one logical request, kept for error reporting."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    command: str = ""


class Response:
    """
    HTTP response reconstructed from curl output.

    `data` holds the decoded JSON value when the body was classified as JSON,
    otherwise the body text. `headers` keeps names as curl printed them.
    """

    def __init__(
        self,
        status: int,
        status_text: str,
        http_version: str,
        headers: dict[str, str],
        content: bytes,
        data: Any,
        request: Request | None = None,
    ) -> None:
        self.status = status
        self.status_text = status_text
        self.http_version = http_version
        self.headers = headers
        self.content = content
        self.data = data
        self.request = request

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        return decode_text(self.content, get_header(self.headers, "Content-Type"))

    def json(self) -> object:
        return json.loads(self.text)

    def __repr__(self) -> str:
        return f"<Response [{self.status}] {len(self.content)} bytes>"


def decode_text(body: bytes, content_type: str) -> str:
    encoding = "utf-8"
    ctype = content_type.lower()
    if "charset=" in ctype:
        encoding = ctype.split("charset=")[-1].split(";")[0].strip().strip('"') or encoding
    try:
        return body.decode(encoding, errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")
