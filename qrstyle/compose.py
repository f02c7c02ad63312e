"""Logo and border compositing on top of a styled QR raster."""

from enum import Enum

import httpx
from PIL import Image, ImageChops, ImageDraw

from qrstyle.canvas import ensure_rgba, new_canvas, parse_color
from qrstyle.config import ResolverConfig
from qrstyle.logging import audit, get_logger, trace
from qrstyle.logos import LogoItem
from qrstyle.resolver import load_image

log = get_logger("compose")

CORNER_MARGIN_RATIO = 0.08
PAD_RATIO = 0.15
ROUNDED_RADIUS_DIVISOR = 6


class LogoShape(str, Enum):
    SQUARE = "square"
    ROUNDED = "rounded"
    CIRCLE = "circle"


class LogoLayout(str, Enum):
    CENTER = "center"
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"
    WATERMARK = "watermark"


# ---------------------------------------------------------------------------
# Anchor math
# ---------------------------------------------------------------------------

def logo_anchor(
    width: float,
    height: float,
    layout: LogoLayout | str,
    logo_size: float,
) -> tuple[float, float]:
    """Top-left corner of the logo for a given layout.

    Corner layouts sit ``0.08 * width`` in from their corner; ``watermark``
    is centred horizontally and lifted ``2 * margin`` off the bottom edge.
    """
    layout = LogoLayout(layout)
    margin = width * CORNER_MARGIN_RATIO

    if layout == LogoLayout.TOP_LEFT:
        return margin, margin
    if layout == LogoLayout.TOP_RIGHT:
        return width - logo_size - margin, margin
    if layout == LogoLayout.BOTTOM_LEFT:
        return margin, height - logo_size - margin
    if layout == LogoLayout.BOTTOM_RIGHT:
        return width - logo_size - margin, height - logo_size - margin
    if layout == LogoLayout.WATERMARK:
        return (width - logo_size) / 2, height - logo_size - margin * 2
    return (width - logo_size) / 2, (height - logo_size) / 2


# ---------------------------------------------------------------------------
# Logo composite
# ---------------------------------------------------------------------------

def _draw_pad(
    draw: ImageDraw.ImageDraw,
    shape: LogoShape,
    x: float,
    y: float,
    logo_px: float,
    color: tuple[int, ...],
) -> None:
    """Background pad behind the logo, same shape as the clip."""
    pad = logo_px * PAD_RATIO
    if shape == LogoShape.CIRCLE:
        cx, cy = x + logo_px / 2, y + logo_px / 2
        r = logo_px / 2 + pad
        draw.ellipse([round(cx - r), round(cy - r), round(cx + r), round(cy + r)], fill=color)
        return

    box = [round(x - pad), round(y - pad), round(x + logo_px + pad), round(y + logo_px + pad)]
    if shape == LogoShape.ROUNDED:
        draw.rounded_rectangle(box, radius=round(logo_px / ROUNDED_RADIUS_DIVISOR), fill=color)
    else:
        draw.rectangle(box, fill=color)


def _clip_mask(shape: LogoShape, size: int) -> Image.Image | None:
    """Grayscale clip for a ``size x size`` logo; None means no clipping."""
    if shape == LogoShape.SQUARE:
        return None
    mask = Image.new("L", (size, size), 0)
    draw = ImageDraw.Draw(mask)
    if shape == LogoShape.CIRCLE:
        draw.ellipse([0, 0, size - 1, size - 1], fill=255)
    else:
        draw.rounded_rectangle([0, 0, size - 1, size - 1],
                               radius=max(1, round(size / ROUNDED_RADIUS_DIVISOR)), fill=255)
    return mask


@trace
def composite_logo(
    image: Image.Image,
    logo_image: Image.Image | None,
    shape: LogoShape | str = LogoShape.CIRCLE,
    layout: LogoLayout | str = LogoLayout.CENTER,
    size_percent: float = 20,
    bg: str | tuple = "#ffffff",
) -> Image.Image:
    """Overlay a logo inside a shaped clip with a background pad.

    The logo is scaled to ``width * size_percent / 100`` on both sides. The
    size is not clamped here. A missing logo (None) returns *image*
    unchanged. The input buffer is never mutated.
    """
    if logo_image is None:
        log.debug("no logo image, composite skipped")
        return image

    shape = LogoShape(shape)
    layout = LogoLayout(layout)
    result = ensure_rgba(image).copy()
    w, h = result.size

    logo_px = w * (size_percent / 100)
    x, y = logo_anchor(w, h, layout, logo_px)

    draw = ImageDraw.Draw(result)
    _draw_pad(draw, shape, x, y, logo_px, parse_color(bg))

    side = max(1, round(logo_px))
    logo_rgba = ensure_rgba(logo_image).resize((side, side), Image.LANCZOS)
    mask = logo_rgba.getchannel("A")
    clip = _clip_mask(shape, side)
    if clip is not None:
        mask = ImageChops.multiply(mask, clip)
    result.paste(logo_rgba, (round(x), round(y)), mask)

    audit(
        "logo.composited", logger=log,
        qr_size=f"{w}x{h}",
        logo_px=side,
        anchor=f"{round(x)},{round(y)}",
        shape=shape.value,
        layout=layout.value,
    )
    return result


@trace
async def apply_logo(
    image: Image.Image,
    logo: LogoItem | Image.Image | str | None,
    shape: LogoShape | str = LogoShape.CIRCLE,
    layout: LogoLayout | str = LogoLayout.CENTER,
    size_percent: float = 20,
    bg: str | tuple = "#ffffff",
    config: ResolverConfig | None = None,
    client: httpx.AsyncClient | None = None,
) -> Image.Image:
    """Load *logo* (item, URI or image) and composite it.

    A logo that cannot be loaded leaves *image* unchanged.
    """
    if logo is None:
        return image

    if isinstance(logo, Image.Image):
        logo_image = logo
    else:
        uri = logo.image_data if isinstance(logo, LogoItem) else str(logo)
        timeout_ms = (config or ResolverConfig()).timeout_ms
        logo_image = await load_image(uri, timeout_ms=timeout_ms, client=client)

    if logo_image is None:
        audit("logo.skipped", logger=log,
              logo=getattr(logo, "id", str(logo)[:80]), reason="load failed")
        return image
    return composite_logo(image, logo_image, shape, layout, size_percent, bg)


# ---------------------------------------------------------------------------
# Border
# ---------------------------------------------------------------------------

@trace
def add_border(image: Image.Image, width_px: int, color: str | tuple = "#000000") -> Image.Image:
    """Pad *image* with a uniform *width_px* margin of *color* on every side."""
    if width_px < 0:
        raise ValueError(f"Border width must be non-negative, got {width_px}")

    src = ensure_rgba(image)
    w, h = src.size
    out = new_canvas(w + width_px * 2, h + width_px * 2, color)
    out.paste(src, (width_px, width_px))

    audit("border.added", logger=log, width_px=width_px, size=f"{out.width}x{out.height}")
    return out
