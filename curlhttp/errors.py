from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Request, Response


class CurlHTTPError(Exception):
    """Base error for curlhttp."""


class TransportError(CurlHTTPError):
    """Raised when the curl process fails before producing an HTTP exchange."""


class SpawnError(TransportError):
    """Raised when the curl process could not be started."""


class ProcessError(TransportError):
    """Raised when the curl process exits with a non-zero status."""

    def __init__(self, message: str, returncode: int, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class TransportTimeout(TransportError):
    """Raised when the curl process outlives the client timeout."""


class HTTPStatusError(CurlHTTPError):
    """
    Raised for responses with a status outside [200, 300).

    The fully parsed response stays attached so callers can inspect why the
    request failed.
    """

    def __init__(self, message: str, request: Request, response: Response) -> None:
        super().__init__(message)
        self.request = request
        self.response = response

    @property
    def status(self) -> int:
        return self.response.status
