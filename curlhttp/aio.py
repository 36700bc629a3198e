from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, Sequence
from typing import Any

from curlhttp.command import prepare_invocation
from curlhttp.errors import SpawnError, TransportTimeout
from curlhttp.models import Response
from curlhttp.multipart import DEFAULT_CHUNK_SIZE, aiter_multipart
from curlhttp.response import assemble_response
from curlhttp.transport import check_exit

logger = logging.getLogger(__name__)

__all__ = ["AsyncClient", "arun_buffered", "arun_streaming"]


async def _spawn(args: Sequence[str], stdin: int) -> asyncio.subprocess.Process:
    try:
        return await asyncio.create_subprocess_exec(
            *args,
            stdin=stdin,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise SpawnError(f"Could not start {args[0]}: {exc}") from exc


async def _abort(proc: asyncio.subprocess.Process, tasks: Sequence[asyncio.Future]) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    for task in tasks:
        if not task.done():
            task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
    await proc.wait()


async def arun_buffered(
    args: Sequence[str],
    input: bytes | None = None,
    timeout: float | None = None,
) -> bytes:
    """Run curl to completion with an optional in-memory input."""
    stdin = asyncio.subprocess.PIPE if input is not None else asyncio.subprocess.DEVNULL
    proc = await _spawn(args, stdin)
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(input), timeout)
    except asyncio.TimeoutError as exc:
        await _abort(proc, ())
        raise TransportTimeout(f"curl did not finish within {timeout}s") from exc
    except BaseException:
        await _abort(proc, ())
        raise
    logger.debug("curl exited with %d", proc.returncode)
    return check_exit(proc.returncode, stdout, stderr)


async def _feed(stdin: asyncio.StreamWriter, chunks: AsyncIterable[bytes]) -> None:
    # Only write errors mean curl stopped reading; errors raised while pulling
    # a chunk belong to the byte-source and propagate.
    try:
        async for chunk in chunks:
            try:
                stdin.write(chunk)
                await stdin.drain()
            except (BrokenPipeError, ConnectionResetError):
                # curl stopped reading; its exit status tells why.
                logger.debug("curl closed its input before the body was complete")
                return
    finally:
        stdin.close()


async def _complete(proc: asyncio.subprocess.Process, tasks: Sequence[asyncio.Future]) -> None:
    await asyncio.gather(*tasks)
    await proc.wait()


async def arun_streaming(
    args: Sequence[str],
    chunks: AsyncIterable[bytes],
    timeout: float | None = None,
) -> bytes:
    """
    Run curl while feeding ``chunks`` into its input.

    The feeder and the two drainers run as independent tasks; the process is
    reaped only after all three finish. Any failure, a byte-source read error
    included, kills the process and propagates.
    """
    proc = await _spawn(args, asyncio.subprocess.PIPE)
    assert proc.stdin is not None and proc.stdout is not None and proc.stderr is not None

    feeder = asyncio.ensure_future(_feed(proc.stdin, chunks))
    out_task = asyncio.ensure_future(proc.stdout.read())
    err_task = asyncio.ensure_future(proc.stderr.read())
    tasks = (feeder, out_task, err_task)
    try:
        await asyncio.wait_for(_complete(proc, tasks), timeout)
    except asyncio.TimeoutError as exc:
        await _abort(proc, tasks)
        raise TransportTimeout(f"curl did not finish within {timeout}s") from exc
    except BaseException:
        await _abort(proc, tasks)
        raise
    logger.debug("curl exited with %d", proc.returncode)
    return check_exit(proc.returncode, out_task.result(), err_task.result())


class AsyncClient:
    """
    Async counterpart of `curlhttp.Client` built on asyncio subprocesses.

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

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        data: Any = None,
    ) -> Response:
        inv = prepare_invocation(
            method,
            url,
            headers=headers,
            data=data,
            curl_binary=self.curl_binary,
            extra_args=self.extra_args,
        )
        logger.debug("%s %s", inv.request.method, url)
        if inv.streaming:
            assert inv.fields is not None and inv.boundary is not None
            stdout = await arun_streaming(
                inv.args,
                aiter_multipart(inv.fields, inv.boundary, self.chunk_size),
                timeout=self.timeout,
            )
        else:
            stdout = await arun_buffered(inv.args, input=inv.input, timeout=self.timeout)
        return assemble_response(stdout, inv.request, auto_decompress=self.auto_decompress)

    async def get(self, url: str, headers: dict[str, str] | None = None) -> Response:
        return await self.request("GET", url, headers=headers)

    async def post(
        self, url: str, headers: dict[str, str] | None = None, data: Any = None
    ) -> Response:
        return await self.request("POST", url, headers=headers, data=data)

    async def put(
        self, url: str, headers: dict[str, str] | None = None, data: Any = None
    ) -> Response:
        return await self.request("PUT", url, headers=headers, data=data)
