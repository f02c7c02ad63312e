import pytest
from PIL import Image

from qrstyle.canvas import decode_data_uri
from qrstyle.logos import PRESET_LOGOS, LogoKind, find_preset, logo_from_file


def test_presets():
    assert len(PRESET_LOGOS) == 12
    assert all(p.kind == LogoKind.PRESET for p in PRESET_LOGOS)
    github = find_preset(" GitHub ")
    assert github.name == "GitHub"
    assert github.image_data.endswith("/github.svg")
    assert find_preset("myspace") is None


def test_logo_from_file_downsizes(tmp_path):
    path = tmp_path / "a-very-long-company-logo.png"
    Image.new("RGBA", (1024, 256), (0, 128, 0, 255)).save(path)

    item = logo_from_file(path)
    assert item.kind == LogoKind.CUSTOM
    assert item.id.startswith("custom-")
    assert item.name == "a-very-long-com"

    media_type, payload = decode_data_uri(item.image_data)
    assert media_type == "image/png"
    (tmp_path / "out.png").write_bytes(payload)
    with Image.open(tmp_path / "out.png") as img:
        assert img.size == (512, 128)


def test_small_logo_kept(tmp_path):
    path = tmp_path / "tiny.png"
    Image.new("RGB", (40, 30), "white").save(path)
    _, payload = decode_data_uri(logo_from_file(path).image_data)
    (tmp_path / "out.png").write_bytes(payload)
    with Image.open(tmp_path / "out.png") as img:
        assert img.size == (40, 30)


def test_rejects_non_image(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello")
    with pytest.raises(ValueError):
        logo_from_file(path)


def test_rejects_oversized(tmp_path):
    path = tmp_path / "big.png"
    Image.new("RGB", (64, 64), "white").save(path)
    with pytest.raises(ValueError):
        logo_from_file(path, max_bytes=10)
