"""Jarfetch configuration, request and response models."""

from .options import RESERVED_TRANSPORT_KEYS, FetchOptions
from .params import (
    FormBody,
    JsonBody,
    MultipartBody,
    MultipartField,
    MultipartOptions,
    RedirectMode,
    RequestBody,
    RequestParams,
)
from .response import FetchResponse

__all__ = [
    # Options
    "FetchOptions",
    "RESERVED_TRANSPORT_KEYS",
    # Params
    "FormBody",
    "JsonBody",
    "MultipartBody",
    "MultipartField",
    "MultipartOptions",
    "RedirectMode",
    "RequestBody",
    "RequestParams",
    # Response
    "FetchResponse",
]
