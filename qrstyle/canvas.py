"""Pixel buffers: RGBA Pillow images plus colour parsing and encoding helpers."""

import base64
import binascii
import io

from PIL import Image

RGBA = tuple[int, int, int, int]

_FORMATS = {"png": "PNG", "jpeg": "JPEG", "jpg": "JPEG", "webp": "WEBP"}


def parse_color(value: str | tuple) -> RGBA:
    """Parse ``#rgb``, ``#rrggbb``, ``#rrggbbaa`` or an RGB(A) tuple to RGBA."""
    if isinstance(value, (tuple, list)):
        if len(value) not in (3, 4) or not all(isinstance(c, int) and 0 <= c <= 255 for c in value):
            raise ValueError(f"Invalid colour tuple: {value!r}")
        return tuple(value) + (255,) if len(value) == 3 else tuple(value)

    s = str(value).strip().lstrip("#")
    if len(s) == 3:
        s = "".join(ch * 2 for ch in s)
    if len(s) not in (6, 8):
        raise ValueError(f"Invalid colour string: {value!r}")
    try:
        channels = [int(s[i : i + 2], 16) for i in range(0, len(s), 2)]
    except ValueError:
        raise ValueError(f"Invalid colour string: {value!r}") from None
    if len(channels) == 3:
        channels.append(255)
    return tuple(channels)


def new_canvas(width: int, height: int, color: str | tuple = (255, 255, 255, 255)) -> Image.Image:
    """Allocate a ``width x height`` RGBA buffer filled with *color*."""
    if width <= 0 or height <= 0:
        raise ValueError(f"Canvas dimensions must be positive, got {width}x{height}")
    return Image.new("RGBA", (width, height), parse_color(color))


def ensure_rgba(image: Image.Image) -> Image.Image:
    """Return *image* in RGBA mode (a converted copy when needed)."""
    if image.width <= 0 or image.height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {image.width}x{image.height}")
    return image if image.mode == "RGBA" else image.convert("RGBA")


def flatten(image: Image.Image, background: str | tuple = "#ffffff") -> Image.Image:
    """Composite *image* over an opaque *background*; returns RGB."""
    base = new_canvas(image.width, image.height, background)
    base.alpha_composite(ensure_rgba(image))
    return base.convert("RGB")


def encode_image(image: Image.Image, fmt: str = "png", quality: int = 95) -> bytes:
    """Serialise a buffer to PNG, JPEG or WebP bytes."""
    key = fmt.lower()
    if key not in _FORMATS:
        raise ValueError(f"Unsupported output format: {fmt!r}")
    pil_format = _FORMATS[key]

    buf = io.BytesIO()
    if pil_format == "JPEG":
        flatten(image).save(buf, format=pil_format, quality=quality)
    elif pil_format == "WEBP":
        ensure_rgba(image).save(buf, format=pil_format, quality=quality)
    else:
        ensure_rgba(image).save(buf, format=pil_format)
    return buf.getvalue()


def to_data_uri(image: Image.Image) -> str:
    """Encode a buffer as a ``data:image/png;base64,...`` URI."""
    payload = base64.b64encode(encode_image(image, "png")).decode("ascii")
    return f"data:image/png;base64,{payload}"


def decode_data_uri(uri: str) -> tuple[str, bytes]:
    """Split a data URI into ``(media_type, payload_bytes)``.

    Raises ValueError for anything that is not a well-formed data URI.
    """
    if not uri.startswith("data:") or "," not in uri:
        raise ValueError("Not a data URI")
    header, _, payload = uri[5:].partition(",")
    parts = header.split(";")
    media_type = parts[0] or "text/plain"
    if "base64" in parts[1:]:
        try:
            return media_type, base64.b64decode(payload, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Malformed base64 payload: {e}") from None
    from urllib.parse import unquote_to_bytes
    return media_type, unquote_to_bytes(payload)
