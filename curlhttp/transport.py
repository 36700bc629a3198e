"""Synchronous curl process invocation."""

from __future__ import annotations

import logging
import subprocess
import threading
import time
from collections.abc import Iterable, Sequence
from typing import IO

from .errors import ProcessError, SpawnError, TransportTimeout

logger = logging.getLogger(__name__)


def check_exit(returncode: int, stdout: bytes, stderr: bytes) -> bytes:
    """Return ``stdout`` for a zero exit, raise `ProcessError` otherwise."""
    err_text = stderr.decode("utf-8", errors="replace").strip()
    if returncode != 0:
        message = f"curl failed with exit code {returncode}"
        if err_text:
            message = f"{message}: {err_text}"
        raise ProcessError(
            message,
            returncode=returncode,
            stderr=err_text,
        )
    if err_text:
        logger.warning("curl stderr: %s", err_text)
    return stdout


def run_buffered(
    args: Sequence[str],
    input: bytes | None = None,
    timeout: float | None = None,
) -> bytes:
    """Run curl to completion with an optional in-memory input."""
    logger.debug("Running %s", args[0] if args else "")
    try:
        proc = subprocess.run(
            list(args),
            input=input,
            stdin=None if input is not None else subprocess.DEVNULL,
            capture_output=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        raise TransportTimeout(f"curl did not finish within {timeout}s") from exc
    except OSError as exc:
        raise SpawnError(f"Could not start {args[0]}: {exc}") from exc
    logger.debug("curl exited with %d", proc.returncode)
    return check_exit(proc.returncode, proc.stdout, proc.stderr)


def _drain(stream: IO[bytes], sink: list[bytes]) -> None:
    while True:
        chunk = stream.read(65536)
        if not chunk:
            break
        sink.append(chunk)


def _feed(stdin: IO[bytes], chunks: Iterable[bytes]) -> None:
    for chunk in chunks:
        try:
            stdin.write(chunk)
        except BrokenPipeError:
            # curl stopped reading; its exit status tells why.
            logger.debug("curl closed its input before the body was complete")
            return


def _close(stdin: IO[bytes]) -> None:
    try:
        stdin.close()
    except BrokenPipeError:
        pass


def _kill(proc: subprocess.Popen) -> None:
    proc.kill()
    proc.wait()


def run_streaming(
    args: Sequence[str],
    chunks: Iterable[bytes],
    timeout: float | None = None,
) -> bytes:
    """
    Run curl while feeding ``chunks`` into its input.

    Feeding and the draining of output and error channels each run on their
    own thread, so a full output pipe never blocks the writer and a stalled
    byte-source cannot hold the caller past ``timeout``. Input is closed once
    feeding ends. An exception raised by ``chunks`` kills the process and
    propagates.
    """
    logger.debug("Streaming into %s", args[0] if args else "")
    try:
        proc = subprocess.Popen(
            list(args),
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as exc:
        raise SpawnError(f"Could not start {args[0]}: {exc}") from exc
    assert proc.stdin is not None and proc.stdout is not None and proc.stderr is not None
    stdin = proc.stdin

    out: list[bytes] = []
    err: list[bytes] = []
    failure: list[BaseException] = []

    def _feed_and_close() -> None:
        try:
            _feed(stdin, chunks)
        except BaseException as exc:
            failure.append(exc)
        finally:
            _close(stdin)

    drainers = [
        threading.Thread(target=_drain, args=(proc.stdout, out), daemon=True),
        threading.Thread(target=_drain, args=(proc.stderr, err), daemon=True),
    ]
    feeder = threading.Thread(target=_feed_and_close, daemon=True)
    for t in (*drainers, feeder):
        t.start()

    deadline = None if timeout is None else time.monotonic() + timeout

    def _remaining() -> float | None:
        return None if deadline is None else max(0.0, deadline - time.monotonic())

    try:
        feeder.join(_remaining())
        if feeder.is_alive():
            # The feeder may stay blocked in a read; it is a daemon thread.
            raise TransportTimeout(f"curl did not finish within {timeout}s")
        if failure:
            raise failure[0]
        returncode = proc.wait(_remaining())
    except subprocess.TimeoutExpired as exc:
        _kill(proc)
        raise TransportTimeout(f"curl did not finish within {timeout}s") from exc
    except BaseException:
        _kill(proc)
        raise
    finally:
        for t in drainers:
            t.join()
        proc.stdout.close()
        proc.stderr.close()

    logger.debug("curl exited with %d", returncode)
    return check_exit(returncode, b"".join(out), b"".join(err))
