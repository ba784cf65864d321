"""Tests for the manual redirect follower."""

from unittest.mock import AsyncMock

import pytest
from jarfetch.errors import RedirectError, ServerError, TooManyRedirects
from jarfetch.http.redirects import follow_redirects, resolve_location, url_origin
from jarfetch.models import FetchResponse, RedirectMode, RequestParams
from multidict import CIMultiDict, CIMultiDictProxy


def make_response(status: int, *locations: str, content: str = "") -> FetchResponse:
    headers: CIMultiDict[str] = CIMultiDict()
    for location in locations:
        headers.add("Location", location)
    return FetchResponse(status=status, reason="", headers=CIMultiDictProxy(headers), content=content)


def requested_urls(exchange: AsyncMock) -> list[str]:
    return [call.args[0] for call in exchange.await_args_list]


class TestResolveLocation:
    """Tests for Location resolution."""

    def test_root_relative_uses_origin(self):
        """Test that '/y' resolves against the current origin."""
        assert resolve_location("/y", "https://a.com/x", "https://a.com") == ("https://a.com/y", "https://a.com")

    def test_absolute_sets_new_origin(self):
        """Test that an absolute Location becomes the new origin."""
        assert resolve_location("https://b.com/z", "https://a.com/x", "https://a.com") == (
            "https://b.com/z",
            "https://b.com",
        )

    def test_path_relative_joined_with_current_url(self):
        """Test that 'next' resolves against the current URL."""
        next_url, origin = resolve_location("next", "https://a.com/dir/page", "https://a.com")
        assert next_url == "https://a.com/dir/next"
        assert origin == "https://a.com"

    def test_scheme_relative(self):
        """Test that '//c.com/p' keeps the current scheme."""
        assert resolve_location("//c.com/p", "https://a.com/x", "https://a.com") == (
            "https://c.com/p",
            "https://c.com",
        )

    def test_url_origin_keeps_port(self):
        """Test that the origin includes a non-default port."""
        assert url_origin("http://127.0.0.1:8080/a?b=1") == "http://127.0.0.1:8080"


class TestFollowRedirects:
    """Tests for follow_redirects()."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [200, 204, 404, 418, 299, 400])
    async def test_non_redirect_is_single_exchange(self, status):
        """Test that statuses outside [300, 400) stop after one exchange."""
        exchange = AsyncMock(return_value=make_response(status, content="body"))

        response = await follow_redirects(exchange, "https://a.com/x", RequestParams())

        assert exchange.await_count == 1
        assert response.status == status
        assert response.urls == ["https://a.com/x"]

    @pytest.mark.asyncio
    async def test_relative_then_absolute_then_relative(self):
        """Test origin tracking across relative and absolute Locations."""
        exchange = AsyncMock(
            side_effect=[
                make_response(302, "/y"),
                make_response(301, "https://b.com/z"),
                make_response(302, "/w"),
                make_response(200, content="done"),
            ]
        )

        response = await follow_redirects(exchange, "https://a.com/x", RequestParams())

        expected = ["https://a.com/x", "https://a.com/y", "https://b.com/z", "https://b.com/w"]
        assert requested_urls(exchange) == expected
        assert response.urls == expected
        assert response.content == "done"

    @pytest.mark.asyncio
    async def test_redirect_rewrites_to_get_without_body(self):
        """Test that the hop after 301/302 is a bodiless GET."""
        exchange = AsyncMock(side_effect=[make_response(302, "/done"), make_response(200)])
        params = RequestParams(
            method="POST",
            json={"a": 1},
            query={"q": "1"},
            headers={"X-Token": "t"},
            encoding="latin-1",
        )

        await follow_redirects(exchange, "https://a.com/submit", params)

        first = exchange.await_args_list[0].args[1]
        second = exchange.await_args_list[1].args[1]
        assert first.method == "POST"
        assert first.body is not None
        assert second.method == "GET"
        assert second.body is None
        assert second.query == {}
        assert second.headers == {}
        assert second.encoding == "latin-1"
        assert second.redirect == RedirectMode.MANUAL

    @pytest.mark.asyncio
    async def test_first_exchange_forced_manual(self):
        """Test that the first exchange runs with transport redirects off."""
        exchange = AsyncMock(return_value=make_response(200))
        await follow_redirects(exchange, "https://a.com/x", RequestParams())
        assert exchange.await_args_list[0].args[1].redirect == RedirectMode.MANUAL

    @pytest.mark.asyncio
    async def test_missing_location_is_terminal(self):
        """Test that a 302 without Location is returned as final."""
        exchange = AsyncMock(return_value=make_response(302))

        response = await follow_redirects(exchange, "https://a.com/x", RequestParams())

        assert exchange.await_count == 1
        assert response.status == 302
        assert response.urls == ["https://a.com/x"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("location", ["", "   "])
    async def test_empty_location_is_terminal(self, location):
        """Test that a blank Location stops the chain instead of looping."""
        exchange = AsyncMock(return_value=make_response(302, location))

        response = await follow_redirects(exchange, "https://a.com/x", RequestParams())

        assert exchange.await_count == 1
        assert response.status == 302
        assert response.urls == ["https://a.com/x"]

    @pytest.mark.asyncio
    async def test_multiple_locations_is_terminal(self):
        """Test that repeated Location headers stop the chain."""
        exchange = AsyncMock(return_value=make_response(301, "/a", "/b"))

        response = await follow_redirects(exchange, "https://a.com/x", RequestParams())

        assert exchange.await_count == 1
        assert response.status == 301

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [300, 303, 307, 308])
    async def test_other_redirects_raise(self, status):
        """Test that 3xx other than 301/302 raise RedirectError."""
        exchange = AsyncMock(return_value=make_response(status, "/elsewhere"))

        with pytest.raises(RedirectError) as exc_info:
            await follow_redirects(exchange, "https://a.com/x", RequestParams())

        assert exc_info.value.status == status
        assert str(status) in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_server_error_aborts_chain(self):
        """Test that a ServerError from a hop propagates unchanged."""
        exchange = AsyncMock(
            side_effect=[make_response(302, "/next"), ServerError(500, "Internal Server Error", "https://a.com/next")]
        )

        with pytest.raises(ServerError) as exc_info:
            await follow_redirects(exchange, "https://a.com/x", RequestParams())

        assert exc_info.value.status == 500
        assert exchange.await_count == 2

    @pytest.mark.asyncio
    async def test_follow_mode_delegates_to_transport(self):
        """Test that RedirectMode.FOLLOW performs one exchange and no URL list."""
        exchange = AsyncMock(return_value=make_response(200))
        params = RequestParams(redirect=RedirectMode.FOLLOW)

        response = await follow_redirects(exchange, "https://a.com/x", params)

        exchange.assert_awaited_once_with("https://a.com/x", params)
        assert response.urls is None

    @pytest.mark.asyncio
    async def test_redirect_limit(self):
        """Test that an endless loop stops at max_redirects."""
        exchange = AsyncMock(return_value=make_response(302, "/loop"))

        with pytest.raises(TooManyRedirects) as exc_info:
            await follow_redirects(exchange, "https://a.com/loop", RequestParams(), max_redirects=3)

        assert exc_info.value.max_redirects == 3
        assert exchange.await_count == 4
        assert isinstance(exc_info.value, RedirectError)
