import asyncio

import numpy as np
from PIL import Image

from qrstyle.canvas import to_data_uri
from qrstyle.config import RenderOptions
from qrstyle.generator import encode, grid_dimension
from qrstyle.logos import logo_from_file
from qrstyle.pipeline import render_batch, render_qr, render_qr_sync

FG = (0x1b, 0x43, 0x32, 255)
BG = (0xd8, 0xf3, 0xdc, 255)
URL = "https://example.com"


def _padded_modules(content, margin=2):
    matrix = encode(content)
    cells = grid_dimension(matrix, margin)
    padded = np.zeros((cells, cells), dtype=bool)
    padded[margin:margin + matrix.dimension, margin:margin + matrix.dimension] = matrix.modules
    return padded


def test_dots_style_follows_modules():
    options = RenderOptions(size=400, style="dots", fg="#1b4332", bg="#d8f3dc")
    img = render_qr_sync(URL, options)
    assert img.size == (400, 400)

    padded = _padded_modules(URL)
    cell = 400 // padded.shape[0]
    arr = np.asarray(img)
    centre = cell // 2
    for r in range(padded.shape[0]):
        for c in range(padded.shape[1]):
            pixel = tuple(arr[r * cell + centre, c * cell + centre])
            assert pixel == (FG if padded[r, c] else BG)
    # cell corners are never painted by a dot
    assert tuple(arr[2 * cell, 2 * cell]) == BG


def test_square_style_uses_colours_directly():
    img = render_qr_sync(URL, RenderOptions(size=330, fg="#1b4332", bg="#d8f3dc"))
    assert {c for _, c in img.getcolors()} == {FG, BG}


def test_border_grows_canvas():
    img = render_qr_sync(URL, RenderOptions(size=400, style="rounded", border_width=10, border_color="#ff0000"))
    assert img.size == (420, 420)
    assert img.getpixel((0, 0)) == (255, 0, 0, 255)
    assert img.getpixel((419, 419)) == (255, 0, 0, 255)


def test_failed_logo_renders_without_logo(tmp_path):
    plain = render_qr_sync(URL, RenderOptions(size=300, style="classy"))
    broken = render_qr_sync(URL, RenderOptions(size=300, style="classy", logo=str(tmp_path / "gone.png")))
    assert broken.tobytes() == plain.tobytes()


def test_logo_lands_in_centre():
    logo = Image.new("RGBA", (16, 16), (255, 0, 0, 255))
    img = render_qr_sync(URL, RenderOptions(size=400, style="star", logo=logo, logo_shape="square"))
    assert img.getpixel((200, 200)) == (255, 0, 0, 255)


def test_batch_collects_errors():
    logo = to_data_uri(Image.new("RGBA", (16, 16), (255, 0, 0, 255)))
    options = RenderOptions(size=200, style="dots", logo=logo, logo_size=15)

    results = asyncio.run(render_batch(["one", "", "three"], options))
    assert [r.ok for r in results] == [True, False, True]
    assert results[1].error
    assert results[0].image.getpixel((100, 100)) == (255, 0, 0, 255)


def test_render_qr_defaults():
    img = asyncio.run(render_qr("hello"))
    assert img.size == (800, 800)


def test_uploaded_logo_is_composited(tmp_path):
    path = tmp_path / "brand.png"
    Image.new("RGBA", (64, 64), (255, 0, 0, 255)).save(path)
    options = RenderOptions(size=400, style="dots", logo=logo_from_file(path), logo_shape="square")
    img = render_qr_sync(URL, options)
    assert img.getpixel((200, 200)) == (255, 0, 0, 255)
