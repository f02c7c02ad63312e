import asyncio
import base64
import time

import httpx
import pytest

from qrstyle.resolver import _is_svg, decode_image_bytes, load_image


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_data_uri_loads(png_bytes):
    uri = "data:image/png;base64," + base64.b64encode(png_bytes(20, 10)).decode()
    img = asyncio.run(load_image(uri))
    assert img is not None
    assert img.size == (20, 10)
    assert img.mode == "RGBA"


def test_undecodable_bytes_resolve_to_none():
    uri = "data:image/png;base64," + base64.b64encode(b"not an image").decode()
    assert asyncio.run(load_image(uri)) is None


def test_malformed_data_uri_resolves_to_none():
    assert asyncio.run(load_image("data:image/png;base64,@@@")) is None


def test_http_image(png_bytes):
    payload = png_bytes(32, 32)

    def handler(request):
        assert request.url.path == "/logo.png"
        return httpx.Response(200, content=payload, headers={"content-type": "image/png"})

    async def run():
        async with _client(handler) as client:
            return await load_image("https://example.com/logo.png", client=client)

    img = asyncio.run(run())
    assert img is not None
    assert img.size == (32, 32)


def test_http_error_resolves_to_none():
    def handler(request):
        return httpx.Response(404)

    async def run():
        async with _client(handler) as client:
            return await load_image("https://example.com/missing.png", client=client)

    assert asyncio.run(run()) is None


def test_timeout_resolves_to_none(png_bytes):
    payload = png_bytes(32, 32)

    async def handler(request):
        await asyncio.sleep(1.0)
        return httpx.Response(200, content=payload)

    async def run():
        async with _client(handler) as client:
            start = time.monotonic()
            img = await load_image("https://slow.example/logo.png", timeout_ms=50, client=client)
            return img, time.monotonic() - start

    img, elapsed = asyncio.run(run())
    assert img is None
    assert elapsed < 0.8


def test_missing_file_resolves_to_none(tmp_path):
    assert asyncio.run(load_image(str(tmp_path / "nope.png"))) is None


def test_local_file(tmp_path, png_bytes):
    path = tmp_path / "logo.png"
    path.write_bytes(png_bytes(16, 24))
    img = asyncio.run(load_image(str(path)))
    assert img.size == (16, 24)


def test_decode_image_bytes_rejects_garbage():
    with pytest.raises(Exception):
        decode_image_bytes(b"\x00\x01garbage")


@pytest.mark.parametrize("payload, media_type, source, expected", [
    (b"<svg xmlns='http://www.w3.org/2000/svg'/>", None, "", True),
    (b"<?xml version='1.0'?>\n<svg/>", None, "", True),
    (b"\x89PNG", "image/svg+xml", "", True),
    (b"\x89PNG", None, "https://cdn.example/icon.svg?v=2", True),
    (b"\x89PNG", "image/png", "https://cdn.example/icon.png", False),
])
def test_svg_detection(payload, media_type, source, expected):
    assert _is_svg(payload, media_type, source) is expected
