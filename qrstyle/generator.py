"""Encoder boundary: turn text into a QR module matrix and a base raster."""

from dataclasses import dataclass
from enum import Enum

import numpy as np
import qrcode
import qrcode.constants
from PIL import Image

from qrstyle.canvas import parse_color
from qrstyle.logging import audit, get_logger, trace

log = get_logger("generator")


class ECCLevel(Enum):
    L = qrcode.constants.ERROR_CORRECT_L  # 7%
    M = qrcode.constants.ERROR_CORRECT_M  # 15%
    Q = qrcode.constants.ERROR_CORRECT_Q  # 25%
    H = qrcode.constants.ERROR_CORRECT_H  # 30%


ECC_NAMES = {"L": ECCLevel.L, "M": ECCLevel.M, "Q": ECCLevel.Q, "H": ECCLevel.H}


def ecc_level(ecc: str) -> ECCLevel:
    try:
        return ECC_NAMES[ecc.upper()]
    except (KeyError, AttributeError):
        raise ValueError(f"Unknown error-correction level: {ecc!r} (expected L/M/Q/H)") from None


@dataclass
class ModuleMatrix:
    """Encoded QR symbol: dark/light modules without quiet zone."""

    modules: np.ndarray  # bool, (n, n), True = dark
    version: int

    @property
    def dimension(self) -> int:
        return self.modules.shape[0]


@trace
def encode(content: str, ecc: str = "H") -> ModuleMatrix:
    """Encode *content* into the smallest QR symbol that fits at *ecc*."""
    if not content:
        raise ValueError("Cannot encode empty content")

    qr = qrcode.QRCode(
        version=None,
        error_correction=ecc_level(ecc).value,
        box_size=1,
        border=0,
    )
    qr.add_data(content)
    qr.make(fit=True)

    matrix = ModuleMatrix(modules=np.array(qr.modules, dtype=bool), version=qr.version)
    audit("qr.encoded", logger=log,
          data=content[:80], version=matrix.version,
          size=f"{matrix.dimension}x{matrix.dimension}", ecc=ecc.upper())
    return matrix


def grid_dimension(matrix: ModuleMatrix, margin: int = 2) -> int:
    """Number of cells across the base raster, quiet zone included."""
    return matrix.dimension + 2 * margin


@trace
def render_matrix(
    matrix: ModuleMatrix,
    size: int = 800,
    margin: int = 2,
    fg: str | tuple = "#000000",
    bg: str | tuple = "#ffffff",
) -> Image.Image:
    """Render a module matrix into a ``size x size`` RGBA raster.

    Cells are ``size // (n + 2*margin)`` pixels and the symbol is anchored
    top-left; leftover pixels on the right and bottom edges stay *bg*.
    """
    cells = grid_dimension(matrix, margin)
    box = size // cells
    if box < 1:
        raise ValueError(f"size={size} is too small for a {cells}-cell symbol")

    padded = np.zeros((cells, cells), dtype=bool)
    padded[margin : margin + matrix.dimension, margin : margin + matrix.dimension] = matrix.modules
    dark = np.zeros((size, size), dtype=bool)
    dark[: cells * box, : cells * box] = np.kron(padded, np.ones((box, box), dtype=bool))

    arr = np.empty((size, size, 4), dtype=np.uint8)
    arr[...] = parse_color(bg)
    arr[dark] = parse_color(fg)
    return Image.fromarray(arr, "RGBA")


@trace
def generate_qr(
    content: str,
    size: int = 800,
    ecc: str = "H",
    margin: int = 2,
    fg: str | tuple = "#000000",
    bg: str | tuple = "#ffffff",
) -> Image.Image:
    """Encode *content* and render the base raster in one step.

    Args:
        content: The string to encode (URL, text, wifi payload, etc.)
        size: Output width and height in pixels.
        ecc: Error correction level: L/M/Q/H
        margin: Quiet zone width in modules.
        fg: Dark module colour.
        bg: Light module / quiet zone colour.

    Returns:
        RGBA PIL Image of the QR code.
    """
    matrix = encode(content, ecc)
    img = render_matrix(matrix, size=size, margin=margin, fg=fg, bg=bg)
    audit("qr.generated", logger=log,
          data=content[:80], version=matrix.version,
          cells=grid_dimension(matrix, margin),
          cell_px=size // grid_dimension(matrix, margin),
          image_px=f"{img.size[0]}x{img.size[1]}")
    return img
