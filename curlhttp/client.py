from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from curlhttp.command import Invocation, prepare_invocation
from curlhttp.models import Response
from curlhttp.multipart import DEFAULT_CHUNK_SIZE, iter_multipart
from curlhttp.response import assemble_response
from curlhttp.transport import run_buffered, run_streaming

logger = logging.getLogger(__name__)


class Client:
    """
    Synchronous HTTP client that delegates the exchange to a curl process.

    Holds configuration only; every request spawns its own process and no
    state is shared between calls.

    Args:
        curl_binary: Path or name of the curl executable (default: "curl")
        extra_args: Additional curl flags inserted before the URL
        timeout: Seconds before the process is killed, None to wait forever
        chunk_size: Read size used when streaming file fields
        auto_decompress: Decode gzip/deflate/br bodies curl passed through
    """

    def __init__(
        self,
        curl_binary: str = "curl",
        extra_args: Sequence[str] = (),
        timeout: float | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        auto_decompress: bool = True,
    ) -> None:
        self.curl_binary = curl_binary
        self.extra_args = list(extra_args)
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.auto_decompress = auto_decompress

    def _prepare(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None,
        data: Any,
    ) -> Invocation:
        return prepare_invocation(
            method,
            url,
            headers=headers,
            data=data,
            curl_binary=self.curl_binary,
            extra_args=self.extra_args,
        )

    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        data: Any = None,
    ) -> Response:
        """
        Send a request and return the parsed response.

        Raises:
            SpawnError: curl could not be started
            ProcessError: curl exited non-zero
            TransportTimeout: the timeout elapsed
            HTTPStatusError: the final status is outside [200, 300)
        """
        inv = self._prepare(method, url, headers, data)
        logger.debug("%s %s", inv.request.method, url)
        if inv.streaming:
            assert inv.fields is not None and inv.boundary is not None
            stdout = run_streaming(
                inv.args,
                iter_multipart(inv.fields, inv.boundary, self.chunk_size),
                timeout=self.timeout,
            )
        else:
            stdout = run_buffered(inv.args, input=inv.input, timeout=self.timeout)
        return assemble_response(stdout, inv.request, auto_decompress=self.auto_decompress)

    def get(self, url: str, headers: dict[str, str] | None = None) -> Response:
        return self.request("GET", url, headers=headers)

    def post(
        self, url: str, headers: dict[str, str] | None = None, data: Any = None
    ) -> Response:
        return self.request("POST", url, headers=headers, data=data)

    def put(
        self, url: str, headers: dict[str, str] | None = None, data: Any = None
    ) -> Response:
        return self.request("PUT", url, headers=headers, data=data)
