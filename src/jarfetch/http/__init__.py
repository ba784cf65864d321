"""Request encoding, response decoding and redirect handling for jarfetch."""

from .body import EncodedRequest, append_query, build_multipart, encode_request
from .decoding import AUTO_ENCODING, decode_content, resolve_encoding
from .protocols import Exchange
from .redirects import FOLLOWED_STATUSES, follow_redirects, resolve_location, url_origin

__all__ = [
    "AUTO_ENCODING",
    "EncodedRequest",
    "Exchange",
    "FOLLOWED_STATUSES",
    "append_query",
    "build_multipart",
    "decode_content",
    "encode_request",
    "follow_redirects",
    "resolve_encoding",
    "resolve_location",
    "url_origin",
]
