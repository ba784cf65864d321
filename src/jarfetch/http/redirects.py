"""Manual redirect following.

Redirects are followed here instead of in the transport so every hop goes
through the same cookie jar and is persisted on its own. Only 301 and 302 are
followed, always with a plain GET; other 3xx statuses surface as errors.
"""

from __future__ import annotations

import logging
from urllib.parse import urljoin, urlsplit

from ..errors import RedirectError, TooManyRedirects
from ..models.params import RedirectMode, RequestParams
from ..models.response import FetchResponse
from .protocols import Exchange

logger = logging.getLogger(__name__)

FOLLOWED_STATUSES = frozenset({301, 302})
DEFAULT_MAX_REDIRECTS = 20


def url_origin(url: str) -> str:
    """Return scheme://host[:port] of an absolute URL."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def resolve_location(location: str, current_url: str, origin: str) -> tuple[str, str]:
    """
    Resolve a Location header value.

    Args:
        location: Location header value
        current_url: URL of the response carrying the header
        origin: Origin used for root-relative locations

    Returns:
        (next URL, origin for later hops)
    """
    if location.startswith("/") and not location.startswith("//"):
        return origin + location, origin

    if urlsplit(location).scheme:
        return location, url_origin(location)

    # Path-relative keeps the origin; scheme-relative (//host) moves it
    next_url = urljoin(current_url, location)
    return next_url, url_origin(next_url)


async def follow_redirects(
    exchange: Exchange,
    url: str,
    params: RequestParams,
    max_redirects: int = DEFAULT_MAX_REDIRECTS,
) -> FetchResponse:
    """
    Run a request, following 301/302 redirects by hand.

    Args:
        exchange: Single-exchange primitive
        url: Initial URL
        params: Parameters of the first exchange
        max_redirects: Maximum number of hops followed

    Returns:
        Final response; in manual mode ``urls`` lists every visited URL with
        the final one last

    Raises:
        RedirectError: On a 3xx status other than 301/302
        TooManyRedirects: When more than max_redirects hops are needed
    """
    if params.redirect == RedirectMode.FOLLOW:
        return await exchange(url, params)

    current_url = url
    origin = url_origin(url)
    visited = [url]
    hop_params = params.model_copy(update={"redirect": RedirectMode.MANUAL})

    while True:
        response = await exchange(current_url, hop_params)
        if not response.is_redirect:
            break

        if response.status not in FOLLOWED_STATUSES:
            raise RedirectError(response.status, current_url)

        locations = response.headers.getall("Location", [])
        if len(locations) != 1 or not locations[0].strip():
            logger.debug(f"{response.status} from {current_url} without a single Location, stopping")
            break

        if len(visited) > max_redirects:
            raise TooManyRedirects(response.status, current_url, max_redirects)

        current_url, origin = resolve_location(locations[0].strip(), current_url, origin)
        visited.append(current_url)
        hop_params = params.for_redirect()
        logger.debug(f"Following {response.status} redirect to {current_url}")

    return response.with_urls(visited)
