from __future__ import annotations

from collections.abc import Iterable, Mapping


def _sanitize_header(name: str, value: str) -> tuple[str, str]:
    """
    Sanitize header name and value to prevent HTTP header injection (CRLF injection).
    Strips CR, LF, and null bytes from both name and value.
    """
    clean_name = name.replace("\r", "").replace("\n", "").replace("\x00", "")
    clean_value = value.replace("\r", "").replace("\n", "").replace("\x00", "")
    return clean_name, clean_value


def parse_headers(raw: str) -> dict[str, str]:
    """
    Parse a raw CRLF-separated header block into a mapping.

    Names keep the case of their first occurrence. Repeated names are merged
    into one value joined by ", " in the order encountered. Lines without a
    colon (the status line among them) are skipped.
    """
    headers: dict[str, str] = {}
    for line in raw.split("\r\n"):
        name, sep, value = line.partition(":")
        if not sep:
            continue
        name = name.strip()
        value = value.strip()
        if name in headers:
            headers[name] = f"{headers[name]}, {value}"
        else:
            headers[name] = value
    return headers


def get_header(headers: Mapping[str, str], name: str, default: str = "") -> str:
    """Case-insensitive lookup; storage keeps the original case."""
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return default


def without_header(headers: Mapping[str, str], name: str) -> dict[str, str]:
    wanted = name.lower()
    return {k: v for k, v in headers.items() if k.lower() != wanted}


def header_flags(headers: Iterable[tuple[str, str]]) -> list[str]:
    """Render headers as curl ``-H`` arguments."""
    flags: list[str] = []
    for name, value in headers:
        name, value = _sanitize_header(name, str(value))
        flags.extend(["-H", f"{name}: {value}"])
    return flags
