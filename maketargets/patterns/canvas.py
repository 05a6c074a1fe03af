"""Canvas primitives shared by every pattern family.

Provides:
    - Named 16-bit shades (BLACK, DARK_GRAY, MID_GRAY, WHITE)
    - gray(): map z ∈ [-1, 1] to a 16-bit gray level
    - unit_from_gray(): inverse of gray()
    - to_rgba(): expand an (H, W) gray plane to an opaque RGBA16 canvas
    - blend(): composite a foreground shade over a plane by coverage
    - correct_edges(): border-row/column correction for parity rasterizers
    - pixel_at(): read a canvas through centered coordinates

Canvas layout:
    (H, W, 4) uint16, RGBA, origin at [H//2, W//2]
"""

from typing import NamedTuple, Tuple

import numpy as np

from maketargets.utils.geometry import Size

MAX_VALUE = 65535

BLACK = 0
DARK_GRAY = 16383
MID_GRAY = 32767
WHITE = MAX_VALUE

_GRAY_SCALE = 32767.5


class SynthResult(NamedTuple):
    """Output of one synthesis function.

    Attributes
    ----------
    pixels : np.ndarray
        (H, W, 4) uint16 RGBA canvas
    needs_post_process : bool
        Whether a post-processed variant should also be emitted
    """

    pixels: np.ndarray
    needs_post_process: bool


def gray(z):
    """Map z ∈ [-1, 1] to a 16-bit gray level: round((z + 1) · 32767.5).

    Accepts scalars or arrays; values outside [-1, 1] are clipped.
    Returns uint16 (numpy scalar or array).
    """
    v = np.rint((np.asarray(z, dtype=np.float64) + 1.0) * _GRAY_SCALE)
    return np.clip(v, 0, MAX_VALUE).astype(np.uint16)


def unit_from_gray(v):
    """Inverse of gray(): 16-bit level → z ∈ [-1, 1]."""
    return np.asarray(v, dtype=np.float64) / _GRAY_SCALE - 1.0


def plane(size: Size, value: int) -> np.ndarray:
    """Allocate an (H, W) uint16 plane filled with ``value``."""
    return np.full(size.shape, value, dtype=np.uint16)


def to_rgba(gray_plane: np.ndarray) -> np.ndarray:
    """Expand an (H, W) gray plane to an opaque (H, W, 4) RGBA16 canvas."""
    h, w = gray_plane.shape
    out = np.empty((h, w, 4), dtype=np.uint16)
    out[..., :3] = gray_plane[..., np.newaxis]
    out[..., 3] = MAX_VALUE
    return out


def blend(base: np.ndarray, shade: int, coverage: np.ndarray) -> np.ndarray:
    """Composite a solid shade over ``base`` by fractional coverage.

    Parameters
    ----------
    base : np.ndarray
        (H, W) uint16 plane
    shade : int
        Foreground 16-bit level
    coverage : np.ndarray
        Broadcastable to base, values in [0, 1]

    Returns
    -------
    np.ndarray
        New (H, W) uint16 plane
    """
    out = base + (float(shade) - base) * coverage
    return np.clip(np.rint(out), 0, MAX_VALUE).astype(np.uint16)


def correct_edges(a: np.ndarray) -> Tuple[str, ...]:
    """Overwrite border rows/columns that disagree with their inner neighbor.

    Parity rasterizers leave a one-pixel seam at the frame edge when a bucket
    boundary falls between the border and its neighbor. Each of the four
    borders is compared with the adjacent interior row/column and, when they
    differ anywhere, replaced by it.

    Parameters
    ----------
    a : np.ndarray
        (H, W) or (H, W, C) array, modified in place; H and W must be ≥ 2

    Returns
    -------
    tuple[str, ...]
        Borders that were corrected, in order of inspection
        ("top", "bottom", "left", "right")
    """
    if a.shape[0] < 2 or a.shape[1] < 2:
        return ()

    fixed = []
    if not np.array_equal(a[0], a[1]):
        a[0] = a[1]
        fixed.append("top")
    if not np.array_equal(a[-1], a[-2]):
        a[-1] = a[-2]
        fixed.append("bottom")
    if not np.array_equal(a[:, 0], a[:, 1]):
        a[:, 0] = a[:, 1]
        fixed.append("left")
    if not np.array_equal(a[:, -1], a[:, -2]):
        a[:, -1] = a[:, -2]
        fixed.append("right")
    return tuple(fixed)


def pixel_at(pixels: np.ndarray, x: int, y: int) -> np.ndarray:
    """Read the pixel at centered coordinates (x, y)."""
    h, w = pixels.shape[:2]
    col, row = x + w // 2, y + h // 2
    if not (0 <= col < w and 0 <= row < h):
        raise IndexError(f"({x}, {y}) outside [{-(w // 2)}, {w - w // 2}) × [{-(h // 2)}, {h - h // 2})")
    return pixels[row, col]
