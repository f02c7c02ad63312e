"""Named colour presets and output quality sizes."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ColorPreset:
    id: str
    name: str
    fg: str
    bg: str


COLOR_PRESETS: dict[str, ColorPreset] = {
    p.id: p
    for p in [
        ColorPreset("classic", "Classic", "#000000", "#ffffff"),
        ColorPreset("midnight", "Midnight", "#1a1a2e", "#eaeaea"),
        ColorPreset("ocean", "Ocean", "#0077b6", "#caf0f8"),
        ColorPreset("forest", "Forest", "#1b4332", "#d8f3dc"),
        ColorPreset("sunset", "Sunset", "#9d4edd", "#ffecd2"),
        ColorPreset("berry", "Berry", "#7b2cbf", "#e0aaff"),
        ColorPreset("coral", "Coral", "#d62828", "#ffeae0"),
        ColorPreset("gold", "Gold", "#9a6700", "#fff8e0"),
        ColorPreset("mint", "Mint", "#087f5b", "#c3fae8"),
        ColorPreset("lavender", "Lavender", "#5f3dc4", "#e5dbff"),
        ColorPreset("slate", "Slate", "#334155", "#f1f5f9"),
        ColorPreset("rose", "Rose", "#be185d", "#fce7f3"),
    ]
}

# Output quality -> pixel size of the square QR raster
QUALITY_SIZES = {
    "standard": 512,
    "high": 1024,
    "ultra": 2048,
    "4k": 4096,
}


def get_color_preset(preset_id: str) -> ColorPreset:
    try:
        return COLOR_PRESETS[preset_id.lower()]
    except KeyError:
        raise ValueError(f"Unknown colour preset {preset_id!r}; choose from {', '.join(COLOR_PRESETS)}") from None
