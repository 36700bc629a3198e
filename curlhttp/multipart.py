"""
Streaming multipart/form-data encoder.

Parts are produced strictly in field order. Scalar and structured fields are
rendered in one chunk; file fields are drained from their byte-source chunk by
chunk so large uploads are never held in memory.
"""

from __future__ import annotations

import asyncio
import json
import os
import secrets
from collections.abc import AsyncIterator, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, BinaryIO

BOUNDARY_PREFIX = "----CurlHttpFormBoundary"
DEFAULT_CHUNK_SIZE = 64 * 1024

CONTENT_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".gif": "image/gif",
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".ppt": "application/vnd.ms-powerpoint",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".zip": "application/zip",
    ".txt": "text/plain",
    ".csv": "text/csv",
    ".json": "application/json",
    ".xml": "application/xml",
}


def guess_content_type(filename: str) -> str:
    ext = os.path.splitext(filename)[1].lower()
    return CONTENT_TYPES.get(ext, "application/octet-stream")


def make_boundary() -> str:
    return BOUNDARY_PREFIX + secrets.token_hex(16)


@dataclass(frozen=True)
class ScalarField:
    value: str | bytes


@dataclass(frozen=True)
class StructuredField:
    value: Any


@dataclass(frozen=True)
class FileField:
    """
    A byte-source upload. `filename` defaults to the basename of the source's
    ``name`` attribute; `content_type` defaults to a guess from the filename.
    """

    source: BinaryIO
    filename: str | None = None
    content_type: str | None = None

    @property
    def resolved_filename(self) -> str:
        if self.filename:
            return self.filename
        name = getattr(self.source, "name", None)
        if isinstance(name, (str, bytes, os.PathLike)):
            return os.path.basename(os.fsdecode(name))
        return "file"

    @property
    def resolved_content_type(self) -> str:
        return self.content_type or guess_content_type(self.resolved_filename)


Field = ScalarField | StructuredField | FileField


def is_byte_source(value: Any) -> bool:
    return isinstance(value, FileField) or (
        callable(getattr(value, "read", None)) and not isinstance(value, (str, bytes))
    )


def to_field(value: Any) -> Field:
    """Wrap a raw mapping value in its field variant."""
    if isinstance(value, (ScalarField, StructuredField, FileField)):
        return value
    if isinstance(value, (str, bytes, bytearray)):
        return ScalarField(bytes(value) if isinstance(value, bytearray) else value)
    if is_byte_source(value):
        return FileField(value)
    return StructuredField(value)


def to_fields(data: Mapping[str, Any]) -> list[tuple[str, Field]]:
    return [(name, to_field(value)) for name, value in data.items()]


def has_byte_source(data: Any) -> bool:
    return isinstance(data, Mapping) and any(is_byte_source(v) for v in data.values())


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\r", "").replace("\n", "")


def _part_head(boundary: str, name: str, field: Field) -> bytes:
    head = f'--{boundary}\r\nContent-Disposition: form-data; name="{_quote(name)}"'
    if isinstance(field, FileField):
        head += (
            f'; filename="{_quote(field.resolved_filename)}"\r\n'
            f"Content-Type: {field.resolved_content_type}"
        )
    return (head + "\r\n\r\n").encode("utf-8")


def _inline_value(field: ScalarField | StructuredField) -> bytes:
    if isinstance(field, ScalarField):
        value = field.value
    else:
        value = json.dumps(field.value)
    return value if isinstance(value, bytes) else value.encode("utf-8")


def _as_bytes(chunk: bytes | str) -> bytes:
    return chunk.encode("utf-8") if isinstance(chunk, str) else chunk


def closing(boundary: str) -> bytes:
    return f"--{boundary}--\r\n".encode("ascii")


def iter_multipart(
    fields: list[tuple[str, Field]],
    boundary: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Iterator[bytes]:
    """
    Yield the encoded body. A byte-source read error propagates out of the
    iterator and ends the stream.
    """
    for name, field in fields:
        if isinstance(field, FileField):
            yield _part_head(boundary, name, field)
            while True:
                chunk = field.source.read(chunk_size)
                if not chunk:
                    break
                yield _as_bytes(chunk)
            yield b"\r\n"
        else:
            yield _part_head(boundary, name, field) + _inline_value(field) + b"\r\n"
    yield closing(boundary)


async def aiter_multipart(
    fields: list[tuple[str, Field]],
    boundary: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> AsyncIterator[bytes]:
    """Async variant of `iter_multipart`; file reads run in a worker thread."""
    for name, field in fields:
        if isinstance(field, FileField):
            yield _part_head(boundary, name, field)
            while True:
                chunk = await asyncio.to_thread(field.source.read, chunk_size)
                if not chunk:
                    break
                yield _as_bytes(chunk)
            yield b"\r\n"
        else:
            yield _part_head(boundary, name, field) + _inline_value(field) + b"\r\n"
    yield closing(boundary)


def build_multipart(
    data: Mapping[str, Any],
    boundary: str | None = None,
) -> tuple[str, bytes]:
    """
    Encode ``data`` in memory. Returns ``(content_type, body)``.
    """
    boundary = boundary or make_boundary()
    body = b"".join(iter_multipart(to_fields(data), boundary))
    return f"multipart/form-data; boundary={boundary}", body
