"""Exception hierarchy for jarfetch."""

from __future__ import annotations

from pathlib import Path


class JarfetchError(Exception):
    """Base class for every error raised by jarfetch."""


class ServerError(JarfetchError):
    """
    Raised when an exchange returns a 5xx status.

    Attributes:
        status: HTTP status code
        reason: Status text sent by the server
        url: URL of the failing exchange
    """

    def __init__(self, status: int, reason: str | None, url: str) -> None:
        self.status = status
        self.reason = reason or ""
        self.url = url
        super().__init__(f"{status} {self.reason}".strip() + f" ({url})")


class RedirectError(JarfetchError):
    """Raised when a manual redirect chain cannot be followed."""

    def __init__(self, status: int, url: str, message: str | None = None) -> None:
        self.status = status
        self.url = url
        super().__init__(message or f"unsupported HTTP redirect status: {status} ({url})")


class TooManyRedirects(RedirectError):
    """Raised when a manual redirect chain exceeds the configured hop limit."""

    def __init__(self, status: int, url: str, max_redirects: int) -> None:
        self.max_redirects = max_redirects
        super().__init__(status, url, f"exceeded {max_redirects} redirects at {url}")


class PersistenceError(JarfetchError):
    """Raised when the cookie file cannot be read, parsed or written."""

    def __init__(self, path: Path | str, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"{self.path}: {message}")


class ResponseDecodeError(JarfetchError):
    """Raised when a response encoding name is not a known codec."""

    def __init__(self, encoding: str) -> None:
        self.encoding = encoding
        super().__init__(f"unknown response encoding: {encoding!r}")
