"""
jarfetch - HTTP requests with a persistent cookie jar and manual redirects.

Usage:
    from jarfetch import Fetcher, FetchOptions

    options = FetchOptions(cookies_filename=Path("cookies.json"))

    async with Fetcher(options) as fetcher:
        await fetcher.post("https://example.com/login", form={"user": "alice"})
        page = await fetcher.get("https://example.com/account", encoding="cp1252")
"""

__version__ = "1.0.0"

from .cookies import CookieJarDocument, CookieRecord, CookieStore, PersistentCookieJar
from .core.fetcher import Fetcher, request_blocking
from .errors import (
    JarfetchError,
    PersistenceError,
    RedirectError,
    ResponseDecodeError,
    ServerError,
    TooManyRedirects,
)
from .logging_config import setup_logging
from .models import (
    FetchOptions,
    FetchResponse,
    FormBody,
    JsonBody,
    MultipartBody,
    MultipartField,
    MultipartOptions,
    RedirectMode,
    RequestParams,
)

__all__ = [
    "__version__",
    # Core
    "Fetcher",
    "request_blocking",
    # Models
    "FetchOptions",
    "FetchResponse",
    "FormBody",
    "JsonBody",
    "MultipartBody",
    "MultipartField",
    "MultipartOptions",
    "RedirectMode",
    "RequestParams",
    # Cookies
    "CookieJarDocument",
    "CookieRecord",
    "CookieStore",
    "PersistentCookieJar",
    # Errors
    "JarfetchError",
    "PersistenceError",
    "RedirectError",
    "ResponseDecodeError",
    "ServerError",
    "TooManyRedirects",
    # Logging
    "setup_logging",
]
