"""Logo catalogue: preset logos, uploaded files, and the LogoItem record."""

import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from qrstyle.canvas import to_data_uri
from qrstyle.logging import audit, get_logger, trace

log = get_logger("logos")

MAX_UPLOAD_BYTES = 5 * 1024 * 1024
MAX_UPLOAD_SIDE = 512
MAX_NAME_LEN = 15

_SIMPLE_ICONS = "https://cdn.jsdelivr.net/npm/simple-icons@v9/icons/{}.svg"


class LogoKind(str, Enum):
    PRESET = "preset"
    CUSTOM = "custom"
    AUTO = "auto"


@dataclass
class LogoItem:
    """A logo the caller can hand to the compositor.

    ``image_data`` is either a URL or a ``data:`` URI.
    """

    id: str
    name: str
    kind: LogoKind
    image_data: str
    source_url: str | None = None


def _preset(slug: str, name: str) -> LogoItem:
    return LogoItem(id=slug, name=name, kind=LogoKind.PRESET, image_data=_SIMPLE_ICONS.format(slug))


PRESET_LOGOS: list[LogoItem] = [
    _preset("whatsapp", "WhatsApp"),
    _preset("instagram", "Instagram"),
    _preset("facebook", "Facebook"),
    _preset("linkedin", "LinkedIn"),
    _preset("x", "X (Twitter)"),
    _preset("youtube", "YouTube"),
    _preset("tiktok", "TikTok"),
    _preset("telegram", "Telegram"),
    _preset("snapchat", "Snapchat"),
    _preset("discord", "Discord"),
    _preset("spotify", "Spotify"),
    _preset("github", "GitHub"),
]


def find_preset(logo_id: str) -> LogoItem | None:
    """Look up a preset logo by id (case-insensitive)."""
    key = logo_id.strip().lower()
    return next((p for p in PRESET_LOGOS if p.id == key), None)


def _fit_within(size: tuple[int, int], max_side: int) -> tuple[int, int]:
    """Shrink (w, h) so neither side exceeds *max_side*, preserving aspect."""
    w, h = size
    if w <= max_side and h <= max_side:
        return w, h
    if w > h:
        return max_side, max(1, round(h / w * max_side))
    return max(1, round(w / h * max_side)), max_side


@trace
def logo_from_file(
    path: str | Path,
    max_bytes: int = MAX_UPLOAD_BYTES,
    max_side: int = MAX_UPLOAD_SIDE,
) -> LogoItem:
    """Turn an uploaded image file into a custom LogoItem.

    Raises ValueError if the file is not an image or exceeds *max_bytes*.
    Large images are downsized to fit *max_side* before encoding.
    """
    path = Path(path)
    size = path.stat().st_size
    if size > max_bytes:
        raise ValueError(f"Logo file must be smaller than {max_bytes // (1024 * 1024)}MB, got {size} bytes")

    try:
        with Image.open(path) as img:
            img.load()
            logo = img.convert("RGBA")
    except UnidentifiedImageError:
        raise ValueError(f"Not an image file: {path.name}") from None

    target = _fit_within(logo.size, max_side)
    if target != logo.size:
        logo = logo.resize(target, Image.LANCZOS)

    item = LogoItem(
        id=f"custom-{int(time.time() * 1000)}",
        name=path.stem[:MAX_NAME_LEN],
        kind=LogoKind.CUSTOM,
        image_data=to_data_uri(logo),
    )
    audit("logo.uploaded", logger=log, name=item.name, size=f"{logo.width}x{logo.height}", bytes=size)
    return item
