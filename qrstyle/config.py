"""Runtime configuration: resolver limits and render options."""

import os
from dataclasses import dataclass, field, replace

from qrstyle.logging import get_logger

log = get_logger("config")

# Caller-level policy for logo size as a percentage of buffer width
LOGO_SIZE_MIN = 10
LOGO_SIZE_MAX = 25


def _int_env(name: str, default: int, *, minimum: int, maximum: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        log.warning("Ignoring non-integer %s=%r", name, raw)
        return default
    return max(minimum, min(maximum, value))


@dataclass(frozen=True)
class ResolverConfig:
    """Limits for remote image and favicon retrieval."""

    timeout_ms: int = 5000
    min_icon_px: int = 16
    icon_canvas_px: int = 256
    max_logo_bytes: int = 5 * 1024 * 1024
    user_agent: str = "qrstyle/0.1 (+favicon-resolver)"

    @classmethod
    def from_env(cls) -> "ResolverConfig":
        """Build a config from ``QRSTYLE_*`` environment variables."""
        defaults = cls()
        return cls(
            timeout_ms=_int_env("QRSTYLE_TIMEOUT_MS", defaults.timeout_ms, minimum=100, maximum=60_000),
            min_icon_px=_int_env("QRSTYLE_MIN_ICON_PX", defaults.min_icon_px, minimum=1, maximum=512),
            icon_canvas_px=_int_env("QRSTYLE_ICON_CANVAS_PX", defaults.icon_canvas_px, minimum=16, maximum=2048),
        )


def clamp_logo_size(size_percent: float) -> float:
    """Clamp a logo size percentage into the supported 10-25% band."""
    return max(LOGO_SIZE_MIN, min(LOGO_SIZE_MAX, size_percent))


@dataclass
class RenderOptions:
    """Every knob of the render pipeline.

    ``logo`` may be a LogoItem, a PIL image, a URI string, or None.
    ``grid_dimension=None`` means "use the encoded symbol's real cell count".
    """

    size: int = 800
    ecc: str = "H"
    margin: int = 2
    style: str = "square"
    fg: str | tuple = "#000000"
    bg: str | tuple = "#ffffff"
    logo: object = None
    logo_shape: str = "circle"
    logo_layout: str = "center"
    logo_size: float = 20
    border_width: int = 0
    border_color: str | tuple = "#000000"
    grid_dimension: int | None = None
    resolver: ResolverConfig = field(default_factory=ResolverConfig)

    def __post_init__(self):
        if self.size <= 0:
            raise ValueError(f"size must be positive, got {self.size}")
        if self.margin < 0:
            raise ValueError(f"margin must be non-negative, got {self.margin}")
        if self.border_width < 0:
            raise ValueError(f"border_width must be non-negative, got {self.border_width}")
        self.logo_size = clamp_logo_size(self.logo_size)

    def with_changes(self, **changes) -> "RenderOptions":
        return replace(self, **changes)
