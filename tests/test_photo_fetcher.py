"""Tests for the httpx photo fetcher."""

import asyncio

import httpx

from registration_desk.adapters.photo_fetcher import HttpxPhotoFetcher
from registration_desk.services.images import to_data_url
from tests.conftest import make_image


def test_fetches_remote_photo() -> None:
    content = make_image(20, 20)

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/storage/v1/object/public/photos/anon-1.jpg"
        return httpx.Response(200, content=content)

    fetcher = HttpxPhotoFetcher(
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )

    result = asyncio.run(
        fetcher.fetch(
            "https://example.supabase.co/storage/v1/object/public/photos/anon-1.jpg"
        )
    )

    assert result == content


def test_missing_photo_returns_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    fetcher = HttpxPhotoFetcher(
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )

    assert asyncio.run(fetcher.fetch("https://example.test/gone.jpg")) is None


def test_data_url_decoded_without_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    fetcher = HttpxPhotoFetcher(
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )
    content = make_image(10, 10)

    assert asyncio.run(fetcher.fetch(to_data_url(content))) == content
    asyncio.run(fetcher.close())
