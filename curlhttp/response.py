from __future__ import annotations

import json
import logging
import re
from typing import Any

from .compression import decode_body
from .errors import HTTPStatusError
from .headers import get_header, parse_headers
from .models import Request, Response, decode_text

logger = logging.getLogger(__name__)

SEPARATOR = b"\r\n\r\n"

# e.g. "HTTP/1.1 200 OK", "HTTP/2 204 " or "HTTP/1.0 404"
_STATUS_LINE = re.compile(r"HTTP/(\d(?:\.\d)?) (\d{3})(?: (.*))?$")

_JSON_TYPES = ("application/json", "application/hal+json")


def parse_status_line(line: str) -> tuple[str, int, str]:
    """
    Return ``(http_version, status, reason)``.

    A missing or malformed line yields ``("", 0, "")`` instead of raising so
    headers and body are still surfaced.
    """
    match = _STATUS_LINE.match(line.strip(" \t"))
    if match is None:
        return "", 0, ""
    version, code, reason = match.groups()
    return version, int(code), (reason or "").strip()


def is_json_content_type(content_type: str) -> bool:
    ctype = content_type.lower()
    if any(t in ctype for t in _JSON_TYPES):
        return True
    mime = ctype.split(";", 1)[0].strip()
    return mime.endswith("+json")


def parse_json_or_fallback(text: str) -> tuple[Any, bool]:
    """
    Decode ``text`` as JSON.

    Returns ``(value, True)`` on success and ``(text, False)`` when the text
    is not valid JSON.
    """
    try:
        return json.loads(text), True
    except ValueError:
        return text, False


def _is_informational(status: int) -> bool:
    # 101 ends the HTTP exchange, so it is a final response.
    return 100 <= status < 200 and status != 101


def assemble_response(
    raw: bytes,
    request: Request | None = None,
    auto_decompress: bool = True,
) -> Response:
    """
    Build a `Response` from the combined header and body output of ``curl -i``.

    Only the first blank line separates headers from body. Informational
    responses printed ahead of the final one are skipped. Raises
    `HTTPStatusError`, with the classified response attached, when the final
    status is outside [200, 300).
    """
    start = 0
    while True:
        end = raw.find(SEPARATOR, start)
        head = raw[start:] if end == -1 else raw[start:end]
        header_block = head.decode("latin-1")
        first_line, _, rest = header_block.partition("\r\n")
        version, status, reason = parse_status_line(first_line)
        if not first_line.startswith("HTTP/"):
            rest = header_block
        if _is_informational(status) and end != -1:
            logger.debug("Skipping informational response %d %s", status, reason)
            start = end + len(SEPARATOR)
            continue
        break

    body = b"" if end == -1 else raw[end + len(SEPARATOR):]
    headers = parse_headers(rest)
    if auto_decompress:
        body = decode_body(body, get_header(headers, "Content-Encoding"))

    content_type = get_header(headers, "Content-Type")
    text = decode_text(body, content_type)
    data: Any = text
    if body and is_json_content_type(content_type):
        data, was_json = parse_json_or_fallback(text)
        if not was_json:
            logger.debug("Body declared as %s is not valid JSON, keeping text", content_type)

    response = Response(
        status=status,
        status_text=reason,
        http_version=version,
        headers=headers,
        content=body,
        data=data,
        request=request,
    )
    if not response.ok:
        raise HTTPStatusError(
            f"Request failed with status code {status}",
            request=request,
            response=response,
        )
    return response
