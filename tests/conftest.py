import io

import pytest
from PIL import Image, ImageDraw


def _png_bytes(width: int, height: int, color=(255, 0, 0, 255)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


def _grid_image(dark_cells, cell: int = 12, cells: int = 10) -> Image.Image:
    """White raster of ``cells x cells`` with the given (row, col) cells black."""
    img = Image.new("RGBA", (cell * cells, cell * cells), (255, 255, 255, 255))
    draw = ImageDraw.Draw(img)
    for r, c in dark_cells:
        draw.rectangle([c * cell, r * cell, c * cell + cell - 1, r * cell + cell - 1], fill=(0, 0, 0, 255))
    return img


@pytest.fixture
def png_bytes():
    return _png_bytes


@pytest.fixture
def grid_image():
    return _grid_image
