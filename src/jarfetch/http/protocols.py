"""Protocol definitions for the single-exchange primitive."""

from __future__ import annotations

from typing import Protocol

from ..models.params import RequestParams
from ..models.response import FetchResponse


class Exchange(Protocol):
    """
    One HTTP request/response exchange, no redirect loop.

    Fetcher.request_with_headers implements this; the redirect follower only
    depends on the protocol so tests can drive it with a fake.
    """

    async def __call__(self, url: str, params: RequestParams) -> FetchResponse:
        """
        Perform one exchange.

        Args:
            url: URL to request
            params: Request parameters

        Returns:
            FetchResponse of that exchange (urls is None)

        Raises:
            ServerError: On status >= 500
        """
        ...
