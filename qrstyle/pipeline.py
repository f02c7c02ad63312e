"""Render pipeline: encode -> style -> logo -> border."""

import asyncio
from dataclasses import dataclass

import httpx
from PIL import Image
from qrcode.exceptions import DataOverflowError

from qrstyle.compose import add_border, apply_logo
from qrstyle.config import RenderOptions
from qrstyle.generator import encode, grid_dimension, render_matrix
from qrstyle.logging import audit, get_logger, trace
from qrstyle.logos import LogoItem
from qrstyle.resolver import load_image
from qrstyle.styles import DesignStyle, rasterize_style

log = get_logger("pipeline")


@dataclass
class BatchResult:
    """Outcome of one batch item: an image or an error message."""

    content: str
    image: Image.Image | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.image is not None


@trace
async def render_qr(
    content: str,
    options: RenderOptions | None = None,
    client: httpx.AsyncClient | None = None,
) -> Image.Image:
    """Render *content* into a finished, styled QR raster.

    The ``square`` style paints the base raster directly in fg/bg. Other
    styles sample a black/white base raster and redraw it. A logo that
    fails to load is skipped; the render itself still succeeds.
    """
    options = options or RenderOptions()
    style = DesignStyle(options.style)

    matrix = encode(content, options.ecc)
    cells = options.grid_dimension or grid_dimension(matrix, options.margin)

    if style == DesignStyle.SQUARE:
        image = render_matrix(matrix, size=options.size, margin=options.margin, fg=options.fg, bg=options.bg)
    else:
        base = render_matrix(matrix, size=options.size, margin=options.margin)
        image = rasterize_style(base, style, options.fg, options.bg, grid_dimension=cells)

    if options.logo is not None:
        image = await apply_logo(
            image,
            options.logo,
            shape=options.logo_shape,
            layout=options.logo_layout,
            size_percent=options.logo_size,
            bg=options.bg,
            config=options.resolver,
            client=client,
        )

    if options.border_width > 0:
        image = add_border(image, options.border_width, options.border_color)

    audit("qr.rendered", logger=log,
          data=content[:80], style=style.value, cells=cells,
          logo=options.logo is not None, border=options.border_width,
          size=f"{image.width}x{image.height}")
    return image


def render_qr_sync(content: str, options: RenderOptions | None = None) -> Image.Image:
    """Blocking wrapper around :func:`render_qr`."""
    return asyncio.run(render_qr(content, options))


@trace
async def render_batch(
    contents: list[str],
    options: RenderOptions | None = None,
    client: httpx.AsyncClient | None = None,
) -> list[BatchResult]:
    """Render items one after another, collecting per-item failures.

    A remote or file logo is loaded once up front and reused for every item.
    """
    options = options or RenderOptions()
    if isinstance(options.logo, (LogoItem, str)):
        uri = options.logo.image_data if isinstance(options.logo, LogoItem) else options.logo
        logo_image = await load_image(uri, timeout_ms=options.resolver.timeout_ms, client=client)
        options = options.with_changes(logo=logo_image)

    results = []
    for index, content in enumerate(contents):
        try:
            image = await render_qr(content, options, client=client)
        except (ValueError, DataOverflowError) as e:
            log.warning("batch item %d failed: %s", index, e)
            results.append(BatchResult(content=content, error=str(e) or type(e).__name__))
            continue
        results.append(BatchResult(content=content, image=image))

    audit("batch.rendered", logger=log,
          total=len(results), ok=sum(r.ok for r in results))
    return results
