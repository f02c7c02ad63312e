"""Image resolver: load an image from a URL, data URI or file under a timeout."""

import asyncio
import io
from pathlib import Path

import httpx
from PIL import Image

from qrstyle.canvas import decode_data_uri
from qrstyle.config import ResolverConfig
from qrstyle.logging import audit, get_logger, trace

log = get_logger("resolver")

DEFAULT_TIMEOUT_MS = 5000


def _is_svg(payload: bytes, media_type: str | None, source: str) -> bool:
    if media_type and "svg" in media_type.lower():
        return True
    if source.split("?", 1)[0].lower().endswith(".svg"):
        return True
    head = payload[:512].lstrip().lower()
    return head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in payload[:2048].lower())


def decode_image_bytes(payload: bytes, media_type: str | None = None, source: str = "") -> Image.Image:
    """Decode raster or SVG bytes into an RGBA image.

    Raises on undecodable input; callers that treat failure as absence
    catch it.
    """
    if _is_svg(payload, media_type, source):
        import cairosvg

        payload = cairosvg.svg2png(bytestring=payload)
    img = Image.open(io.BytesIO(payload))
    img.load()
    return img.convert("RGBA")


def new_client(config: ResolverConfig | None = None) -> httpx.AsyncClient:
    """HTTP client with the resolver's user agent and redirect policy."""
    config = config or ResolverConfig()
    return httpx.AsyncClient(
        follow_redirects=True,
        headers={"User-Agent": config.user_agent},
        timeout=config.timeout_ms / 1000,
    )


async def _read_source(uri: str, client: httpx.AsyncClient | None, timeout_s: float) -> tuple[bytes, str | None]:
    if uri.startswith("data:"):
        media_type, payload = decode_data_uri(uri)
        return payload, media_type

    if uri.startswith(("http://", "https://")):
        if client is None:
            async with new_client() as own_client:
                return await _read_source(uri, own_client, timeout_s)
        response = await client.get(uri, timeout=timeout_s)
        response.raise_for_status()
        return response.content, response.headers.get("content-type")

    path = Path(uri)
    return await asyncio.to_thread(path.read_bytes), None


async def _fetch_and_decode(uri: str, client: httpx.AsyncClient | None, timeout_s: float) -> Image.Image:
    payload, media_type = await _read_source(uri, client, timeout_s)
    return await asyncio.to_thread(decode_image_bytes, payload, media_type, uri)


def _discard_late_result(task: asyncio.Task) -> None:
    # The timer already won; retrieve the outcome so it is never surfaced
    if task.cancelled():
        return
    exc = task.exception()
    log.debug("late result discarded: %s", type(exc).__name__ if exc else "image")


@trace
async def load_image(
    uri: str,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    client: httpx.AsyncClient | None = None,
) -> Image.Image | None:
    """Load and decode an image, racing the work against a timer.

    Accepts ``http(s)://`` URLs, ``data:`` URIs and local file paths.
    Resolves to the decoded RGBA image, or to None when decoding fails or
    *timeout_ms* elapses first. Exactly one of the two outcomes is observed;
    a late finisher is cancelled and its result dropped. No retries.
    """
    source = "data:..." if uri.startswith("data:") else uri
    timeout_s = timeout_ms / 1000
    task = asyncio.ensure_future(_fetch_and_decode(uri, client, timeout_s))

    try:
        done, _ = await asyncio.wait({task}, timeout=timeout_s)
    except asyncio.CancelledError:
        task.cancel()
        raise

    if not done:
        task.cancel()
        task.add_done_callback(_discard_late_result)
        audit("image.timeout", logger=log, uri=source[:80], timeout_ms=timeout_ms)
        return None

    try:
        image = task.result()
    except Exception as e:
        audit("image.failed", logger=log, uri=source[:80], error=f"{type(e).__name__}: {e}")
        return None

    audit("image.loaded", logger=log, uri=source[:80], size=f"{image.width}x{image.height}")
    return image


def load_image_sync(uri: str, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> Image.Image | None:
    """Blocking wrapper around :func:`load_image` for scripts and the CLI."""
    return asyncio.run(load_image(uri, timeout_ms=timeout_ms))
