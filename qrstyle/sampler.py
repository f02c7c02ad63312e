"""Module sampler: classify each grid cell of a base raster as dark or light."""

from dataclasses import dataclass
from collections.abc import Iterator

import numpy as np
from PIL import Image

from qrstyle.logging import get_logger

log = get_logger("sampler")

# Cell count assumed when the caller does not know the real grid size.
# Matches a version-4 symbol (33 modules) with a 2-module quiet zone; other
# versions sample off-grid unless the true dimension is passed in.
DEFAULT_GRID_DIMENSION = 37

DARK_THRESHOLD = 128


@dataclass
class ModuleGrid:
    """Dark/light flags per sampled cell plus the cell size in pixels."""

    dark: np.ndarray  # bool, (rows, cols)
    cell_size: int

    @property
    def shape(self) -> tuple[int, int]:
        return self.dark.shape

    def cells(self) -> Iterator[tuple[int, int]]:
        """Yield the pixel origin ``(x, y)`` of every dark cell, row-major."""
        rows, cols = np.nonzero(self.dark)
        for r, c in zip(rows.tolist(), cols.tolist()):
            yield c * self.cell_size, r * self.cell_size


def estimate_cell_size(width: int, grid_dimension: int = DEFAULT_GRID_DIMENSION) -> int:
    """Cell size in pixels: ``floor(width / grid_dimension)``."""
    if width <= 0 or grid_dimension <= 0:
        raise ValueError(f"width and grid_dimension must be positive, got {width}, {grid_dimension}")
    cell = width // grid_dimension
    if cell == 0:
        raise ValueError(f"Buffer width {width} is smaller than the grid dimension {grid_dimension}")
    return cell


def sample_modules(image: Image.Image, cell_size: int) -> ModuleGrid:
    """Sample one pixel at each cell origin; dark when red < 128.

    Origins step by *cell_size* from (0, 0) across the whole buffer, so a
    partial cell at the right/bottom edge is sampled too.
    """
    if cell_size <= 0:
        raise ValueError(f"cell_size must be positive, got {cell_size}")

    red = np.asarray(image.convert("RGBA"))[..., 0]
    samples = red[::cell_size, ::cell_size]
    grid = ModuleGrid(dark=samples < DARK_THRESHOLD, cell_size=cell_size)
    log.debug("sampled %dx%d cells at %dpx (%d dark)",
              grid.shape[1], grid.shape[0], cell_size, int(grid.dark.sum()))
    return grid
