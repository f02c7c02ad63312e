import base64

import pytest
from PIL import Image

from qrstyle.canvas import decode_data_uri, encode_image, flatten, new_canvas, parse_color, to_data_uri


@pytest.mark.parametrize("value, expected", [
    ("#000", (0, 0, 0, 255)),
    ("#fff", (255, 255, 255, 255)),
    ("#1a2B3c", (0x1a, 0x2b, 0x3c, 255)),
    ("1a2b3c80", (0x1a, 0x2b, 0x3c, 0x80)),
    ((10, 20, 30), (10, 20, 30, 255)),
    ((10, 20, 30, 40), (10, 20, 30, 40)),
])
def test_parse_color(value, expected):
    assert parse_color(value) == expected


@pytest.mark.parametrize("bad", ["", "#12", "#12345", "#gggggg", (1, 2), (0, 0, 300), "red"])
def test_parse_color_rejects(bad):
    with pytest.raises(ValueError):
        parse_color(bad)


def test_new_canvas():
    img = new_canvas(3, 2, "#ff0000")
    assert img.mode == "RGBA"
    assert img.size == (3, 2)
    assert img.getcolors() == [(6, (255, 0, 0, 255))]


@pytest.mark.parametrize("w, h", [(0, 5), (5, 0), (-1, 5)])
def test_new_canvas_rejects_empty(w, h):
    with pytest.raises(ValueError):
        new_canvas(w, h)


def test_flatten_drops_alpha():
    out = flatten(Image.new("RGBA", (2, 2), (0, 0, 0, 0)), "#00ff00")
    assert out.mode == "RGB"
    assert out.getpixel((0, 0)) == (0, 255, 0)


def test_encode_formats():
    img = new_canvas(8, 8, "#123456")
    assert encode_image(img, "png").startswith(b"\x89PNG")
    assert encode_image(img, "JPEG").startswith(b"\xff\xd8")
    assert encode_image(img, "webp")[8:12] == b"WEBP"
    with pytest.raises(ValueError):
        encode_image(img, "gif")


def test_data_uri_round_trip():
    img = new_canvas(4, 4, "#abcdef")
    media_type, payload = decode_data_uri(to_data_uri(img))
    assert media_type == "image/png"
    assert payload.startswith(b"\x89PNG")


def test_decode_percent_encoded_data_uri():
    assert decode_data_uri("data:image/svg+xml,%3Csvg%2F%3E") == ("image/svg+xml", b"<svg/>")


@pytest.mark.parametrize("bad", [
    "https://example.com/a.png",
    "data:image/png;base64",
    "data:image/png;base64,!!!" + base64.b64encode(b"x").decode(),
])
def test_decode_data_uri_rejects(bad):
    with pytest.raises(ValueError):
        decode_data_uri(bad)
