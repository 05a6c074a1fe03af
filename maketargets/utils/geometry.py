"""Canvas geometry: sizes, centered coordinate grids and rotations.

Coordinate frame:
    - Origin at the canvas centre, +X right, +Y down (image frame)
    - Column i ↔ x = i - W//2, row j ↔ y = j - H//2
    - Valid coordinates span [-W/2, W/2) × [-H/2, H/2)

Two sampling conventions are used by the pattern library:
    - Integer coordinates (pixel corners): periodic formulas, so that the
      origin lands exactly on pixel (0, 0)
    - Pixel centres (x + 0.5): coverage and parity tests for drawn shapes
"""

import math
from typing import NamedTuple, Tuple

import numpy as np

_QUARTER_TURNS = ((1.0, 0.0), (0.0, 1.0), (-1.0, 0.0), (0.0, -1.0))


class Size(NamedTuple):
    """Canvas size in pixels."""

    width: int
    height: int

    @property
    def long_edge(self) -> int:
        return max(self.width, self.height)

    @property
    def half(self) -> Tuple[int, int]:
        """Integer half extents (W//2, H//2)."""
        return self.width // 2, self.height // 2

    @property
    def half_diagonal(self) -> float:
        hx, hy = self.half
        return math.sqrt(hx * hx + hy * hy)

    @property
    def shape(self) -> Tuple[int, int]:
        """numpy (rows, cols) shape."""
        return self.height, self.width


def centered_axes(
    size: Size,
    rows: slice = slice(None),
    centers: bool = False,
) -> Tuple[np.ndarray, np.ndarray]:
    """Return broadcastable centered coordinates.

    Parameters
    ----------
    size : Size
        Canvas size
    rows : slice
        Row range to cover (for banded evaluation), default all rows
    centers : bool
        Sample at pixel centres (+0.5) instead of integer corners

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        x of shape (1, W) and y of shape (h, 1), float64
    """
    hx, hy = size.half
    offset = 0.5 if centers else 0.0
    start, stop, _ = rows.indices(size.height)
    x = np.arange(size.width, dtype=np.float64) - hx + offset
    y = np.arange(start, stop, dtype=np.float64) - hy + offset
    return x[np.newaxis, :], y[:, np.newaxis]


def rotate(
    x: np.ndarray,
    y: np.ndarray,
    degrees: float
) -> Tuple[np.ndarray, np.ndarray]:
    """Map device coordinates into a frame rotated by ``degrees``.

    Returns (u, v) such that a shape drawn at u in the rotated frame
    covers device point (x, y).
    """
    if degrees % 90 == 0:
        # exact for quarter turns; cos(pi/2) is not 0.0 in floating point
        c, s = _QUARTER_TURNS[int(degrees // 90) % 4]
    else:
        theta = math.radians(degrees)
        c, s = math.cos(theta), math.sin(theta)
    u = x * c + y * s
    v = -x * s + y * c
    return u, v


def to_pixel(x, y, size: Size) -> Tuple[np.ndarray, np.ndarray]:
    """Convert centered coordinates to array (column, row) coordinates."""
    hx, hy = size.half
    return np.asarray(x, dtype=np.float64) + hx, np.asarray(y, dtype=np.float64) + hy
