"""Module-level helpers that issue one request each with a default `Client`."""

from __future__ import annotations

from typing import Any

from curlhttp.client import Client
from curlhttp.models import Response


def request(
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
    data: Any = None,
    **client_kwargs: Any,
) -> Response:
    return Client(**client_kwargs).request(method, url, headers=headers, data=data)


def get(url: str, headers: dict[str, str] | None = None, **client_kwargs: Any) -> Response:
    return request("GET", url, headers=headers, **client_kwargs)


def post(
    url: str,
    headers: dict[str, str] | None = None,
    data: Any = None,
    **client_kwargs: Any,
) -> Response:
    return request("POST", url, headers=headers, data=data, **client_kwargs)


def put(
    url: str,
    headers: dict[str, str] | None = None,
    data: Any = None,
    **client_kwargs: Any,
) -> Response:
    return request("PUT", url, headers=headers, data=data, **client_kwargs)
