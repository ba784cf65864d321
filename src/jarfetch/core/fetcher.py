"""Fetcher facade: cookie-persistent HTTP requests with manual redirects."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any, Optional, Union

import aiohttp
from multidict import CIMultiDict, CIMultiDictProxy

from ..cookies import CookieStore, PersistentCookieJar
from ..errors import ServerError
from ..http.body import encode_request
from ..http.decoding import decode_content, resolve_encoding
from ..http.redirects import follow_redirects
from ..models.options import FetchOptions
from ..models.params import RedirectMode, RequestParams
from ..models.response import FetchResponse

logger = logging.getLogger(__name__)

ParamsLike = Union[RequestParams, Mapping[str, Any], None]


class Fetcher:
    """
    HTTP client facade with a persistent cookie jar.

    Features:
    - Cookie jar restored from ``cookies_filename`` on first use and written
      back after every exchange
    - 301/302 redirects followed by hand so Set-Cookie on each hop is kept
    - Form, multipart and JSON request bodies
    - Response conversion from legacy encodings to text

    The jar and the aiohttp session are created lazily by ensure_ready().
    Requests issued concurrently on one Fetcher share the jar without any
    ordering between them; serialize them if the jar must stay consistent.

    Example:
        async with Fetcher(cookies_filename=Path("cookies.json")) as fetcher:
            await fetcher.post("https://example.com/login", form={"user": "alice"})
            html = await fetcher.get("https://example.com/account")
            print(await fetcher.get_cookie("session"))
    """

    def __init__(self, options: Optional[FetchOptions] = None, **kwargs: Any) -> None:
        """
        Initialize the Fetcher.

        Args:
            options: Facade configuration
            **kwargs: FetchOptions fields, when ``options`` is not given
        """
        if options is not None and kwargs:
            raise TypeError("Pass either FetchOptions or keyword options, not both")

        self.options = options if options is not None else FetchOptions(**kwargs)
        self._transport_options = self.options.transport_options()
        self._store = CookieStore(self.options.cookies_filename) if self.options.cookies_filename else None

        # Created by _initialize()
        self._jar: Optional[PersistentCookieJar] = None
        self._session: Optional[aiohttp.ClientSession] = None
        self._init_task: Optional[asyncio.Task[PersistentCookieJar]] = None

    @property
    def jar(self) -> Optional[PersistentCookieJar]:
        """The cookie jar, or None before the first request."""
        return self._jar

    @property
    def transport_options(self) -> dict[str, Any]:
        """Transport options applied to every exchange."""
        return dict(self._transport_options)

    async def __aenter__(self) -> Fetcher:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the transport session. A later request starts a new one."""
        if self._init_task is not None and not self._init_task.done():
            await asyncio.wait([self._init_task])

        if self._session is not None:
            await self._session.close()

        self._session = None
        self._jar = None
        self._init_task = None

    async def ensure_ready(self) -> PersistentCookieJar:
        """
        Create or restore the cookie jar and bind it to a session, once.

        Concurrent callers share one in-flight initialization. If it fails,
        the next call tries again.

        Returns:
            The cookie jar

        Raises:
            PersistenceError: If the cookie file exists but is not a valid jar
        """
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._initialize())

        task = self._init_task
        try:
            return await asyncio.shield(task)
        except Exception:
            if task.done() and self._init_task is task:
                self._init_task = None
            raise

    async def _initialize(self) -> PersistentCookieJar:
        document = await asyncio.to_thread(self._store.load) if self._store else None

        if document is None:
            jar = PersistentCookieJar(unsafe=self.options.unsafe_cookies)
        else:
            jar = PersistentCookieJar.deserialize(document, unsafe=self.options.unsafe_cookies)
            logger.info(f"Restored cookie jar from {self._store.path if self._store else ''}")

        headers = {"User-Agent": self.options.user_agent} if self.options.user_agent else None
        self._session = aiohttp.ClientSession(
            cookie_jar=jar,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=self.options.timeout),
        )
        self._jar = jar
        return jar

    @staticmethod
    def _build_params(params: ParamsLike, kwargs: dict[str, Any], method: Optional[str] = None) -> RequestParams:
        if params is not None and kwargs:
            raise TypeError("Pass either RequestParams or keyword parameters, not both")

        if params is None:
            params = RequestParams(**kwargs)
        elif not isinstance(params, RequestParams):
            params = RequestParams.model_validate(dict(params))

        return params.with_method(method) if method else params

    async def request_with_headers(self, url: str, params: ParamsLike = None, **kwargs: Any) -> FetchResponse:
        """
        Perform a single exchange without the redirect loop.

        Args:
            url: URL to request
            params: Request parameters (or pass them as keyword arguments)

        Returns:
            FetchResponse of this exchange

        Raises:
            ServerError: On status >= 500
            PersistenceError: If the jar cannot be restored or saved
            RuntimeError: If the Fetcher was closed while the request started
        """
        params = self._build_params(params, kwargs)
        await self.ensure_ready()
        session = self._session
        if session is None:
            raise RuntimeError("Fetcher is closed")

        encoded = encode_request(url, params)
        transport_options = {**self._transport_options, **params.options}

        logger.debug(f"{encoded.method} {encoded.url}")
        async with session.request(
            encoded.method,
            encoded.url,
            headers=encoded.headers,
            data=encoded.body,
            allow_redirects=params.redirect == RedirectMode.FOLLOW,
            **transport_options,
        ) as response:
            if response.status >= 500:
                raise ServerError(response.status, response.reason, encoded.url)

            raw = await response.read()
            status = response.status
            reason = response.reason or ""
            headers = CIMultiDictProxy(CIMultiDict(response.headers))

        await self.store_cookies()

        encoding = resolve_encoding(params.encoding, self.options.encoding)
        content = decode_content(raw, encoding=encoding, return_buffer=params.return_buffer)
        return FetchResponse(status=status, reason=reason, headers=headers, content=content)

    async def request_with_full_response(self, url: str, params: ParamsLike = None, **kwargs: Any) -> FetchResponse:
        """
        Perform a request, following redirects.

        Redirects are followed manually unless ``redirect`` is
        RedirectMode.FOLLOW.

        Returns:
            Final FetchResponse; ``urls`` lists the visited URLs in manual mode

        Raises:
            ServerError: On status >= 500 at any hop
            RedirectError: On a 3xx status other than 301/302
        """
        params = self._build_params(params, kwargs)
        return await follow_redirects(
            self.request_with_headers,
            url,
            params,
            max_redirects=self.options.max_redirects,
        )

    async def request(self, url: str, params: ParamsLike = None, **kwargs: Any) -> Union[str, bytes]:
        """Perform a request and return only its content."""
        response = await self.request_with_full_response(url, params, **kwargs)
        return response.content

    async def get(self, url: str, params: ParamsLike = None, **kwargs: Any) -> Union[str, bytes]:
        return await self.request(url, self._build_params(params, kwargs, "GET"))

    async def post(self, url: str, params: ParamsLike = None, **kwargs: Any) -> Union[str, bytes]:
        return await self.request(url, self._build_params(params, kwargs, "POST"))

    async def put(self, url: str, params: ParamsLike = None, **kwargs: Any) -> Union[str, bytes]:
        return await self.request(url, self._build_params(params, kwargs, "PUT"))

    async def delete(self, url: str, params: ParamsLike = None, **kwargs: Any) -> Union[str, bytes]:
        return await self.request(url, self._build_params(params, kwargs, "DELETE"))

    async def store_cookies(self) -> None:
        """Write the jar to ``cookies_filename``; no-op when none is configured."""
        jar = await self.ensure_ready()
        if self._store is None:
            return

        # Snapshot on the loop; only the file write leaves it
        document = jar.serialize()
        await asyncio.to_thread(self._store.save, document)

    async def get_cookie(self, name: str) -> Optional[str]:
        """
        Value of the first stored cookie called ``name``.

        Returns:
            The cookie value, or None if no such cookie is stored
        """
        jar = await self.ensure_ready()
        record = jar.find(name)
        return record.value if record else None

    async def get_cookies(self, url: str) -> dict[str, str]:
        """Cookies that would be sent to ``url``, as name -> value."""
        jar = await self.ensure_ready()
        return {morsel.key: morsel.value for morsel in jar.get_cookies(url)}

    async def set_cookie(self, header: str, url: str) -> None:
        """Add cookies from a Set-Cookie header value as if received from ``url``, then persist."""
        jar = await self.ensure_ready()
        jar.set_cookie(header, url)
        await self.store_cookies()


def request_blocking(url: str, options: Optional[FetchOptions] = None, **kwargs: Any) -> Union[str, bytes]:
    """
    Blocking single request for sync code.

    Runs a private event loop with a short-lived Fetcher. Cookies still go
    through ``options.cookies_filename`` so separate calls share them.

    WARNING: Do not call from within a running event loop. Use Fetcher instead.

    Args:
        url: URL to request
        options: Facade configuration
        **kwargs: RequestParams fields (method, form, json, query, ...)

    Returns:
        Response content

    Example:
        html = request_blocking(
            "https://example.com/search",
            FetchOptions(cookies_filename=Path("cookies.json")),
            query={"q": "jar"},
        )
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        raise RuntimeError("request_blocking() called from async context. Use 'async with Fetcher()' instead.")

    async def _run() -> Union[str, bytes]:
        async with Fetcher(options) as fetcher:
            return await fetcher.request(url, **kwargs)

    return asyncio.run(_run())
