"""Favicon resolution: probe icon sources in priority order for a site's logo.

Probing is strictly sequential. Each candidate gets one bounded attempt
through :func:`qrstyle.resolver.load_image`; the worst case is
``len(candidates) * timeout_ms``.

    Idle -> Probing(i) -> Accepted | NextCandidate -> ... -> Resolved | Exhausted
"""

import time
from urllib.parse import urlsplit

import httpx
from PIL import Image

from qrstyle.canvas import new_canvas, to_data_uri
from qrstyle.config import ResolverConfig
from qrstyle.logging import audit, get_logger, trace
from qrstyle.logos import LogoItem, LogoKind
from qrstyle.resolver import load_image, new_client

log = get_logger("favicon")

# Third-party icon services first, then well-known paths on the site itself
ICON_SERVICES = (
    "https://www.google.com/s2/favicons?domain={domain}&sz=256",
    "https://icons.duckduckgo.com/ip3/{domain}.ico",
    "https://logo.clearbit.com/{domain}",
    "https://api.faviconkit.com/{domain}/256",
)
WELL_KNOWN_PATHS = (
    "/apple-touch-icon.png",
    "/apple-touch-icon-precomposed.png",
    "/favicon-32x32.png",
    "/favicon.ico",
)


def normalize_site_url(url: str) -> tuple[str, str, str]:
    """Return ``(normalized_url, domain, origin)``; ``https://`` is assumed.

    Raises ValueError when no host can be extracted.
    """
    normalized = url.strip()
    if not normalized.startswith(("http://", "https://")):
        normalized = "https://" + normalized

    parts = urlsplit(normalized)
    try:
        domain = parts.hostname
        port = parts.port
    except ValueError:
        raise ValueError(f"Invalid site URL: {url!r}") from None
    if not domain or " " in domain:
        raise ValueError(f"Invalid site URL: {url!r}")

    origin = f"{parts.scheme}://{domain}" + (f":{port}" if port else "")
    return normalized, domain, origin


def favicon_candidates(site_url: str) -> list[str]:
    """Ordered icon URLs to try for *site_url*, highest priority first."""
    _, domain, origin = normalize_site_url(site_url)
    return [tpl.format(domain=domain) for tpl in ICON_SERVICES] + [origin + p for p in WELL_KNOWN_PATHS]


def normalize_icon(image: Image.Image, size: int = 256) -> Image.Image:
    """Fit *image* into a white ``size x size`` square, centred, aspect kept."""
    canvas = new_canvas(size, size, "#ffffff")
    src = image.convert("RGBA")
    scale = min(size / src.width, size / src.height)
    w = max(1, round(src.width * scale))
    h = max(1, round(src.height * scale))
    resized = src.resize((w, h), Image.LANCZOS)
    canvas.alpha_composite(resized, dest=((size - w) // 2, (size - h) // 2))
    return canvas


async def _probe(candidates: list[str], config: ResolverConfig, client: httpx.AsyncClient) -> Image.Image | None:
    for index, url in enumerate(candidates):
        audit("favicon.probing", logger=log, url=url, index=index, total=len(candidates))
        image = await load_image(url, timeout_ms=config.timeout_ms, client=client)
        if image is None:
            continue
        if image.width < config.min_icon_px or image.height < config.min_icon_px:
            audit("favicon.rejected", logger=log, url=url, size=f"{image.width}x{image.height}",
                  min_px=config.min_icon_px)
            continue

        audit("favicon.accepted", logger=log, url=url, index=index, size=f"{image.width}x{image.height}")
        return normalize_icon(image, config.icon_canvas_px)
    return None


@trace
async def resolve_favicon(
    site_url: str,
    config: ResolverConfig | None = None,
    client: httpx.AsyncClient | None = None,
) -> Image.Image | None:
    """Resolve the best available icon for *site_url*.

    Returns a square RGBA image on a white background, or None when every
    candidate failed (including unparseable URLs). Never raises for
    retrieval failures.
    """
    config = config or ResolverConfig()
    try:
        candidates = favicon_candidates(site_url)
    except ValueError as e:
        audit("favicon.exhausted", logger=log, site=site_url[:80], reason=str(e))
        return None

    if client is None:
        async with new_client(config) as own_client:
            icon = await _probe(candidates, config, own_client)
    else:
        icon = await _probe(candidates, config, client)

    if icon is None:
        audit("favicon.exhausted", logger=log, site=site_url[:80], tried=len(candidates))
    else:
        audit("favicon.resolved", logger=log, site=site_url[:80])
    return icon


@trace
async def fetch_favicon_logo(
    site_url: str,
    config: ResolverConfig | None = None,
    client: httpx.AsyncClient | None = None,
) -> LogoItem | None:
    """Resolve a favicon and wrap it as an ``auto`` LogoItem.

    None means "try uploading a logo manually".
    """
    icon = await resolve_favicon(site_url, config=config, client=client)
    if icon is None:
        return None
    normalized, domain, _ = normalize_site_url(site_url)
    return LogoItem(
        id=f"favicon-{int(time.time() * 1000)}",
        name=domain,
        kind=LogoKind.AUTO,
        image_data=to_data_uri(icon),
        source_url=normalized,
    )
