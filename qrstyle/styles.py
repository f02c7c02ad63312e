"""Style rasterizer: redraw the dark modules of a QR raster as decorative shapes.

Shapes are computed from the cell size ``s`` with an inset padding
``p = 0.1 * s`` and a drawable extent ``d = s - 2p``:

    rounded         rounded square, radius d/4
    dots            circle, radius d/2.2
    classy          flat square of extent d
    classy-rounded  rounded square, radius d/3
    extra-rounded   rounded square, radius d/2
    diamond         midpoints of the four inset edges
    star            4-pointed star, outer d/2, inner half of that
    fluid           rounded square, radius d/2.5
"""

import math
from dataclasses import dataclass
from enum import Enum

from PIL import Image, ImageDraw

from qrstyle.canvas import ensure_rgba, new_canvas, parse_color
from qrstyle.logging import audit, get_logger, trace
from qrstyle.sampler import DEFAULT_GRID_DIMENSION, estimate_cell_size, sample_modules

log = get_logger("styles")

PADDING_RATIO = 0.1
STAR_POINTS = 4
STAR_INNER_RATIO = 0.5


class DesignStyle(str, Enum):
    SQUARE = "square"
    ROUNDED = "rounded"
    DOTS = "dots"
    CLASSY = "classy"
    CLASSY_ROUNDED = "classy-rounded"
    EXTRA_ROUNDED = "extra-rounded"
    DIAMOND = "diamond"
    STAR = "star"
    FLUID = "fluid"


# Corner radius as a divisor of the drawable extent d
_ROUNDED_DIVISORS = {
    DesignStyle.ROUNDED: 4,
    DesignStyle.CLASSY_ROUNDED: 3,
    DesignStyle.EXTRA_ROUNDED: 2,
    DesignStyle.FLUID: 2.5,
}


@dataclass(frozen=True)
class ModuleShape:
    """Continuous geometry for one module.

    kind is one of ``rect``, ``rounded_rect``, ``ellipse`` or ``polygon``.
    ``box`` is ``(x0, y0, x1, y1)`` with an exclusive far edge; for polygons
    it is the inset bounding box and the outline lives in ``points``.
    """

    kind: str
    box: tuple[float, float, float, float] | None = None
    radius: float = 0.0
    points: tuple[tuple[float, float], ...] = ()


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

def star_points(
    cx: float,
    cy: float,
    radius: float,
    points: int = STAR_POINTS,
) -> tuple[tuple[float, float], ...]:
    """Alternate outer/inner vertices around (cx, cy), starting at the top."""
    verts = []
    for i in range(points * 2):
        r = radius if i % 2 == 0 else radius * STAR_INNER_RATIO
        angle = i * math.pi / points - math.pi / 2
        verts.append((cx + r * math.cos(angle), cy + r * math.sin(angle)))
    return tuple(verts)


def module_shape(style: DesignStyle | str, x: float, y: float, s: float) -> ModuleShape:
    """Geometry of one dark module whose cell starts at (x, y) with size s."""
    style = DesignStyle(style)
    p = s * PADDING_RATIO
    d = s - p * 2
    inset = (x + p, y + p, x + p + d, y + p + d)
    cx, cy = x + s / 2, y + s / 2

    if style in _ROUNDED_DIVISORS:
        return ModuleShape("rounded_rect", box=inset, radius=d / _ROUNDED_DIVISORS[style])
    if style == DesignStyle.DOTS:
        r = d / 2.2
        return ModuleShape("ellipse", box=(cx - r, cy - r, cx + r, cy + r))
    if style == DesignStyle.CLASSY:
        return ModuleShape("rect", box=inset)
    if style == DesignStyle.DIAMOND:
        return ModuleShape("polygon", box=inset, points=(
            (cx, y + p),
            (x + s - p, cy),
            (cx, y + s - p),
            (x + p, cy),
        ))
    if style == DesignStyle.STAR:
        return ModuleShape("polygon", box=inset, points=star_points(cx, cy, d / 2))
    # square: the whole cell
    return ModuleShape("rect", box=(x, y, x + s, y + s))


# ---------------------------------------------------------------------------
# Drawing
# ---------------------------------------------------------------------------

def _pixel_box(box: tuple[float, float, float, float]) -> list[int]:
    """Continuous [x0, x1) box to Pillow's inclusive integer coordinates."""
    x0, y0, x1, y1 = (round(v) for v in box)
    return [x0, y0, max(x0, x1 - 1), max(y0, y1 - 1)]


def draw_module(draw: ImageDraw.ImageDraw, shape: ModuleShape, color: tuple[int, ...]) -> None:
    """Fill one module shape."""
    xy = _pixel_box(shape.box)
    if shape.kind == "polygon":
        # Vertices on the far inset edge would otherwise round onto the next pixel
        x0, y0, x1, y1 = xy
        draw.polygon([(min(max(round(px), x0), x1), min(max(round(py), y0), y1))
                      for px, py in shape.points], fill=color)
    elif shape.kind == "ellipse":
        draw.ellipse(xy, fill=color)
    elif shape.kind == "rounded_rect" and round(shape.radius) > 0:
        draw.rounded_rectangle(xy, radius=round(shape.radius), fill=color)
    else:
        draw.rectangle(xy, fill=color)


@trace
def rasterize_style(
    image: Image.Image,
    style: DesignStyle | str,
    fg: str | tuple = "#000000",
    bg: str | tuple = "#ffffff",
    grid_dimension: int = DEFAULT_GRID_DIMENSION,
) -> Image.Image:
    """Redraw every dark module of *image* in the given style.

    ``square`` returns *image* itself. Any other style allocates a new buffer
    of the same size filled with *bg* and draws one *fg* shape per dark cell.
    *grid_dimension* is the number of cells across the raster; it sets the
    sampling step, so it must match how the base raster was drawn.
    """
    style = DesignStyle(style)
    if style == DesignStyle.SQUARE:
        return image

    src = ensure_rgba(image)
    cell = estimate_cell_size(src.width, grid_dimension)
    grid = sample_modules(src, cell)

    fg_rgba = parse_color(fg)
    out = new_canvas(src.width, src.height, bg)
    draw = ImageDraw.Draw(out)

    drawn = 0
    for x, y in grid.cells():
        draw_module(draw, module_shape(style, x, y, cell), fg_rgba)
        drawn += 1

    audit("style.rasterized", logger=log,
          style=style.value, cell_px=cell,
          grid=f"{grid.shape[1]}x{grid.shape[0]}",
          modules_drawn=drawn)
    return out
