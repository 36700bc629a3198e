from __future__ import annotations

import json
import shlex
import urllib.parse
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .headers import get_header, header_flags, without_header
from .models import Request
from .multipart import Field, has_byte_source, make_boundary, to_fields

# Characters JavaScript's encodeURI leaves alone, plus "%" so that URLs that
# are already escaped are not escaped twice.
_URI_SAFE = ";,/?:@&=+$-_.!~*'()#%"

# -i: print the response head, -s -S: silent except for errors.
BASE_FLAGS = ("-i", "-s", "-S")

STDIN_BODY = ("--data-binary", "@-")


def encode_url(url: str) -> str:
    return urllib.parse.quote(url, safe=_URI_SAFE)


def build_args(
    curl_binary: str,
    method: str,
    url: str,
    headers: Mapping[str, str],
    body_flags: Sequence[str] = (),
    extra_args: Sequence[str] = (),
) -> list[str]:
    """
    Argument vector for one invocation:
    ``[curl, flags..., -X METHOD, -H ..., extra..., URL, body flags...]``.
    """
    return [
        curl_binary,
        *BASE_FLAGS,
        "-X",
        method.upper(),
        *header_flags(headers.items()),
        *extra_args,
        encode_url(url),
        *body_flags,
    ]


def format_command(args: Sequence[str]) -> str:
    return shlex.join(args)


@dataclass
class Invocation:
    """
    Everything needed to run one request.

    Exactly one of `input` (buffered bytes for curl's stdin) and `fields`
    (multipart parts streamed into stdin) is set when curl reads a body from
    its input; both are None when the body travels in the arguments.
    """

    args: list[str]
    request: Request
    input: bytes | None = None
    fields: list[tuple[str, Field]] | None = None
    boundary: str | None = None

    @property
    def streaming(self) -> bool:
        return self.fields is not None


def _wants_multipart(data: Any, content_type: str) -> bool:
    if has_byte_source(data):
        return True
    return isinstance(data, Mapping) and "multipart/form-data" in content_type.lower()


def prepare_invocation(
    method: str,
    url: str,
    headers: Mapping[str, str] | None = None,
    data: Any = None,
    curl_binary: str = "curl",
    extra_args: Sequence[str] = (),
) -> Invocation:
    """
    Pick the request shape for ``data``:

    - None: no body.
    - str: sent as one ``--data-raw`` argument.
    - bytes: buffered into curl's input.
    - a mapping holding any byte-source (or any mapping when the caller asked
      for multipart/form-data): multipart, streamed into curl's input.
    - anything else: serialized as JSON and sent as one argument.
    """
    hdrs = dict(headers or {})
    content_type = get_header(hdrs, "Content-Type")
    body_flags: Sequence[str] = ()
    stdin: bytes | None = None
    fields: list[tuple[str, Field]] | None = None
    boundary: str | None = None

    if data is None:
        pass
    elif _wants_multipart(data, content_type):
        boundary = make_boundary()
        fields = to_fields(data)
        hdrs = without_header(hdrs, "Content-Type")
        hdrs["Content-Type"] = f"multipart/form-data; boundary={boundary}"
        body_flags = STDIN_BODY
    elif isinstance(data, str):
        body_flags = ("--data-raw", data)
    elif isinstance(data, (bytes, bytearray)):
        stdin = bytes(data)
        body_flags = STDIN_BODY
    else:
        if not content_type:
            hdrs["Content-Type"] = "application/json"
        body_flags = ("--data-raw", json.dumps(data))

    args = build_args(curl_binary, method, url, hdrs, body_flags, extra_args)
    request = Request(
        method=method.upper(),
        url=url,
        headers=hdrs,
        body=data,
        command=format_command(args),
    )
    return Invocation(args, request, input=stdin, fields=fields, boundary=boundary)
