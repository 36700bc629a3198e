from curlhttp.client import Client
from curlhttp.aio import AsyncClient
from curlhttp.api import request, get, post, put
from curlhttp.models import Request, Response
from curlhttp.multipart import FileField, build_multipart
from curlhttp.headers import parse_headers
from curlhttp.errors import (
    CurlHTTPError,
    TransportError,
    SpawnError,
    ProcessError,
    TransportTimeout,
    HTTPStatusError,
)

__all__ = [
    "Client",
    "AsyncClient",
    "request",
    "get",
    "post",
    "put",
    "Request",
    "Response",
    "FileField",
    "build_multipart",
    "parse_headers",
    "CurlHTTPError",
    "TransportError",
    "SpawnError",
    "ProcessError",
    "TransportTimeout",
    "HTTPStatusError",
]
