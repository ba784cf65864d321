"""Response model returned by the Fetcher."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Union

from multidict import CIMultiDictProxy


@dataclass(frozen=True)
class FetchResponse:
    """
    Immutable response of a request.

    When redirects were followed manually, every attribute except ``urls``
    describes the last response of the chain.

    Attributes:
        status: HTTP status code
        reason: HTTP status text
        headers: Response headers (case-insensitive, repeated names kept)
        content: Decoded text, or raw bytes when return_buffer was set
        urls: URLs visited while following redirects manually, the final one
            last; None when the transport followed redirects itself
    """

    status: int
    reason: str
    headers: CIMultiDictProxy[str]
    content: Union[str, bytes]
    urls: Optional[list[str]] = None

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status < 400

    def with_urls(self, urls: list[str]) -> FetchResponse:
        """Return a copy carrying the visited URL list."""
        return replace(self, urls=list(urls))
