"""
Undo Content-Encoding on bodies curl passed through untouched.

curl only decodes when it negotiates compression itself (``--compressed``).
A caller that sets Accept-Encoding by hand gets the encoded bytes in the
``curl -i`` output, so the assembler decodes them before classification.
"""

from __future__ import annotations

import gzip
import logging
import zlib
from collections.abc import Callable

import brotli

logger = logging.getLogger(__name__)


def _inflate(body: bytes) -> bytes:
    # Servers send both raw deflate and zlib-wrapped streams as "deflate".
    try:
        return zlib.decompress(body, -zlib.MAX_WBITS)
    except zlib.error:
        return zlib.decompress(body)


DECODERS: dict[str, Callable[[bytes], bytes]] = {
    "identity": lambda body: body,
    "gzip": gzip.decompress,
    "x-gzip": gzip.decompress,
    "deflate": _inflate,
    "br": brotli.decompress,
}

_DECODE_ERRORS = (OSError, EOFError, zlib.error, brotli.error)


def decode_body(body: bytes, content_encoding: str) -> bytes:
    """
    Decode ``body`` according to a Content-Encoding value.

    Codings are listed in the order they were applied, so they are undone last
    to first. The body is returned untouched when any coding is unknown or
    fails to decode; a half-decoded body is never returned.
    """
    codings = [c.strip() for c in content_encoding.lower().split(",") if c.strip()]
    if not body or not codings:
        return body

    decoded = body
    for coding in reversed(codings):
        decoder = DECODERS.get(coding)
        if decoder is None:
            logger.debug("Leaving body with unknown content coding %r as is", coding)
            return body
        try:
            decoded = decoder(decoded)
        except _DECODE_ERRORS as exc:
            logger.debug("Could not decode %s body: %s", coding, exc)
            return body
    return decoded
