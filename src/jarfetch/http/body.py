"""Request body and query string encoding."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Union
from urllib.parse import urlencode, urlsplit, urlunsplit

import aiohttp
from aiohttp import hdrs
from multidict import CIMultiDict

from ..models.params import FormBody, JsonBody, MultipartBody, MultipartField, RequestParams

logger = logging.getLogger(__name__)

EncodedBody = Union[aiohttp.FormData, aiohttp.MultipartWriter, str, None]


@dataclass(frozen=True)
class EncodedRequest:
    """
    Transport-ready request produced by encode_request().

    Attributes:
        method: HTTP method
        url: Target URL including the encoded query string
        headers: Final request headers
        body: FormData, MultipartWriter, JSON text or None
    """

    method: str
    url: str
    headers: CIMultiDict[str]
    body: EncodedBody


def append_query(url: str, query: dict[str, Any]) -> str:
    """
    Append URL-encoded query parameters to a URL.

    Uses "?" when the URL has no query component yet and "&" otherwise.
    List values become repeated keys. The fragment, if any, stays last.

    Args:
        url: URL to extend
        query: Parameters to add

    Returns:
        URL with the parameters appended (unchanged when query is empty)
    """
    if not query:
        return url

    encoded = urlencode(query, doseq=True)
    parts = urlsplit(url)
    new_query = f"{parts.query}&{encoded}" if parts.query else encoded
    return urlunsplit(parts._replace(query=new_query))


def _form_pairs(fields: dict[str, Any]) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    for name, value in fields.items():
        values = value if isinstance(value, list) else [value]
        pairs.extend((name, str(item)) for item in values)
    return pairs


def _as_multipart_field(value: Any) -> MultipartField | None:
    if isinstance(value, MultipartField):
        return value
    if isinstance(value, dict) and "value" in value:
        return MultipartField.model_validate(value)
    return None


def _append_part(writer: aiohttp.MultipartWriter, name: str, value: Any) -> None:
    field = _as_multipart_field(value)
    params: dict[str, str] = {"name": name}

    if field is None:
        # Binary and file-like values are sent as they are
        payload_value = value if isinstance(value, (bytes, bytearray)) or hasattr(value, "read") else str(value)
        part = writer.append(payload_value)
    else:
        headers = {hdrs.CONTENT_TYPE: field.content_type} if field.content_type else None
        part = writer.append(field.value, headers)
        if field.filename:
            params["filename"] = field.filename

    part.set_content_disposition("form-data", **params)


def build_multipart(fields: dict[str, Any]) -> aiohttp.MultipartWriter:
    """
    Build a multipart/form-data body.

    A list value produces one part per element; a MultipartField (or a dict
    with a "value" key) carries its filename and content type; any other value
    is sent as its string form.
    """
    writer = aiohttp.MultipartWriter("form-data")
    for name, value in fields.items():
        values = value if isinstance(value, list) else [value]
        for item in values:
            _append_part(writer, name, item)
    return writer


def encode_request(url: str, params: RequestParams) -> EncodedRequest:
    """
    Turn request params into a transport-ready request.

    Pure function: ``params`` is left untouched and only the active body kind
    is encoded.

    Args:
        url: Target URL (may already carry a query string)
        params: Request parameters

    Returns:
        EncodedRequest with final URL, headers and body
    """
    headers: CIMultiDict[str] = CIMultiDict(params.headers)
    body: EncodedBody = None

    if isinstance(params.body, FormBody):
        # Transport sets application/x-www-form-urlencoded itself
        body = aiohttp.FormData(_form_pairs(params.body.fields))
    elif isinstance(params.body, MultipartBody):
        body = build_multipart(params.body.fields)
    elif isinstance(params.body, JsonBody):
        body = json.dumps(params.body.data, separators=(",", ":"), ensure_ascii=False)
        headers[hdrs.CONTENT_TYPE] = "application/json"

    final_url = append_query(url, params.query)
    logger.debug(f"Encoded {params.method} {final_url} (body: {params.body.kind if params.body else 'none'})")

    return EncodedRequest(method=params.method, url=final_url, headers=headers, body=body)
