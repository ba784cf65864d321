"""Cookie jar with a JSON document form.

Cookie matching and expiry stay with aiohttp's CookieJar; this module adds the
serialized document format, absolute expiries for Max-Age cookies and a few
convenience accessors.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from email.utils import formatdate
from http.cookies import Morsel, SimpleCookie
from typing import Any, Optional, Union

import aiohttp
from aiohttp.typedefs import LooseCookies
from pydantic import BaseModel, Field
from yarl import URL

logger = logging.getLogger(__name__)

JAR_DOCUMENT_VERSION = "jarfetch-cookiejar/1"


class CookieRecord(BaseModel):
    """One cookie as stored in the jar document."""

    key: str = Field(..., min_length=1)
    value: str
    domain: str = Field(..., min_length=1)
    path: str = "/"
    # Absolute; Max-Age is converted when the cookie enters the jar
    expires: Optional[str] = None
    secure: bool = False
    http_only: bool = Field(False, alias="httpOnly")
    same_site: Optional[str] = Field(None, alias="sameSite")

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @classmethod
    def from_morsel(cls, morsel: Morsel[str]) -> CookieRecord:
        """Build a record from a morsel held by the jar."""
        return cls(
            key=morsel.key,
            value=morsel.value,
            domain=morsel["domain"],
            path=morsel["path"] or "/",
            expires=morsel["expires"] or None,
            secure=bool(morsel["secure"]),
            http_only=bool(morsel["httponly"]),
            same_site=morsel["samesite"] or None,
        )

    def to_cookie(self) -> SimpleCookie:
        """Build a Set-Cookie equivalent carrying every stored attribute."""
        cookie = SimpleCookie()
        cookie[self.key] = self.value
        morsel = cookie[self.key]
        morsel["domain"] = self.domain
        morsel["path"] = self.path
        if self.expires:
            morsel["expires"] = self.expires
        if self.secure:
            morsel["secure"] = True
        if self.http_only:
            morsel["httponly"] = True
        if self.same_site:
            morsel["samesite"] = self.same_site
        return cookie

    def origin_url(self) -> URL:
        """URL the cookie is re-applied from when restoring the jar."""
        scheme = "https" if self.secure else "http"
        return URL.build(scheme=scheme, host=self.domain.lstrip("."), path=self.path)


class CookieJarDocument(BaseModel):
    """Serialized cookie jar: a version tag plus the cookie records."""

    version: str = JAR_DOCUMENT_VERSION
    cookies: list[CookieRecord] = Field(default_factory=list)

    model_config = {"extra": "ignore"}


class PersistentCookieJar(aiohttp.CookieJar):
    """
    aiohttp cookie jar that can be serialized to and restored from JSON.

    Must be created inside a running event loop, like any aiohttp jar.

    Example:
        jar = PersistentCookieJar()
        jar.set_cookie("sid=abc; Path=/", "https://example.com/login")
        document = jar.serialize()

        restored = PersistentCookieJar.deserialize(document)
        assert restored.get_cookies("https://example.com/")[0].value == "abc"
    """

    def update_cookies(self, cookies: LooseCookies, response_url: URL = URL()) -> None:
        super().update_cookies(cookies, response_url)
        self._pin_max_age()

    def update_cookies_from_headers(self, headers: Sequence[str], response_url: URL) -> None:
        # ClientSession stores response cookies through this entry point
        super().update_cookies_from_headers(headers, response_url)
        self._pin_max_age()

    def _pin_max_age(self) -> None:
        """
        Rewrite Max-Age of newly stored cookies as an absolute Expires.

        Serialized records then carry only absolute expiries.
        """
        now = time.time()
        for morsel in self:
            max_age = morsel["max-age"]
            if not max_age:
                continue

            morsel["max-age"] = ""
            try:
                seconds = int(max_age)
            except ValueError:
                continue
            morsel["expires"] = formatdate(now + max(seconds, 0), usegmt=True)

    def get_cookies(self, url: Union[str, URL]) -> list[Morsel[str]]:
        """Cookies that would be sent with a request to ``url``."""
        return list(self.filter_cookies(URL(url)).values())

    def set_cookie(self, header: str, url: Union[str, URL]) -> None:
        """Store the cookie(s) of a Set-Cookie header value received from ``url``."""
        cookie = SimpleCookie()
        cookie.load(header)
        self.update_cookies(cookie, URL(url))

    def records(self) -> list[CookieRecord]:
        return [CookieRecord.from_morsel(morsel) for morsel in self]

    def serialize(self) -> dict[str, Any]:
        """Return the jar as a JSON-compatible document."""
        document = CookieJarDocument(cookies=self.records())
        return document.model_dump(by_alias=True, exclude_none=True)

    def find(self, name: str) -> Optional[CookieRecord]:
        """First stored cookie called ``name``, regardless of domain."""
        return next((record for record in self.records() if record.key == name), None)

    @classmethod
    def deserialize(
        cls,
        document: Union[CookieJarDocument, Mapping[str, Any]],
        *,
        unsafe: bool = False,
    ) -> PersistentCookieJar:
        """
        Restore a jar from a serialized document.

        Args:
            document: Output of serialize(), parsed or as a model
            unsafe: Accept cookies for IP-address hosts

        Returns:
            New jar holding the document's cookies

        Raises:
            pydantic.ValidationError: If the document does not match the schema
        """
        if not isinstance(document, CookieJarDocument):
            document = CookieJarDocument.model_validate(document)

        jar = cls(unsafe=unsafe)
        for record in document.cookies:
            jar.update_cookies(record.to_cookie(), record.origin_url())

        logger.debug(f"Restored {len(jar)} of {len(document.cookies)} cookies")
        return jar
