"""Vector-shape family: polka dots, honeycomb, radial wedges, S-curve.

Shapes are explicit geometric primitives placed on a regular lattice sized by
``long_edge / density``:

    - Dots: filled circles with exact anti-aliased coverage
    - Honeycomb / S-curve: polylines rasterized with OpenCV (16-bit planes,
      4 fractional bits of sub-pixel precision)
    - Wedges: alternating angular sectors around a (possibly off-canvas) centre

Density meaning:
    - polka*: lattice divisions per long edge; (n-1)² dots
    - honeycomb: hexagon diameters per long edge
    - radialWedge*: number of black sectors (out of 2n)
    - ss: strings per quadrant

A lattice too fine to draw (dot radius or hexagon radius below one pixel)
yields no image.
"""

import logging
import math
from typing import List, Optional, Tuple

import cv2
import numpy as np

from maketargets.utils.compute import eval_banded
from maketargets.utils.geometry import Size, centered_axes, to_pixel

from .canvas import BLACK, DARK_GRAY, MID_GRAY, WHITE, SynthResult, blend, plane, to_rgba

logger = logging.getLogger(__name__)

DOT_RADIUS_DIVISOR = 5
STROKE_FRACTION = 0.06
MAX_STROKE_WIDTH = 6.0
WEDGE_START = math.pi / 4

# Fixed-point bits for cv2 polyline coordinates
_SHIFT = 4
_ONE = 1 << _SHIFT


# ---------------------------------------------------------------------------
# Polka dots
# ---------------------------------------------------------------------------


def dot_offsets(size: Size, n: int) -> List[int]:
    """Lattice coordinates shared by both axes: longMin + long·i // n, i = 1..n-1.

    The lattice spans the long edge; along the short edge some dots fall
    outside the canvas and are clipped.
    """
    long_edge = size.long_edge
    hx, hy = size.half
    long_min = -hy if size.height > size.width else -hx
    return [long_min + long_edge * i // n for i in range(1, n)]


def polka_dot_centers(size: Size, n: int) -> List[Tuple[int, int]]:
    """Centres (centered coordinates) of every dot placed for density n."""
    offsets = dot_offsets(size, n)
    return [(x, y) for x in offsets for y in offsets]


def dot_radius(size: Size, n: int) -> int:
    return (size.long_edge // n) // DOT_RADIUS_DIVISOR


def _nearest_distance(values: np.ndarray, offsets: np.ndarray) -> np.ndarray:
    """Distance from each value to the nearest sorted offset."""
    idx = np.searchsorted(offsets, values)
    lo = offsets[np.clip(idx - 1, 0, len(offsets) - 1)]
    hi = offsets[np.clip(idx, 0, len(offsets) - 1)]
    return np.minimum(np.abs(values - lo), np.abs(values - hi))


def _dots(size: Size, n: int, foreground: int, background: int) -> Optional[SynthResult]:
    radius = dot_radius(size, n)
    if radius == 0:
        return None

    offsets = np.asarray(dot_offsets(size, n), dtype=np.float64)
    if len(offsets) == 0:
        return SynthResult(to_rgba(plane(size, background)), False)

    def band(rows):
        x, y = centered_axes(size, rows, centers=True)
        # product lattice: the nearest dot is nearest in x and nearest in y
        dist = np.hypot(_nearest_distance(x, offsets), _nearest_distance(y, offsets))
        coverage = np.clip(radius + 0.5 - dist, 0.0, 1.0)
        base = plane(Size(size.width, rows.stop - rows.start), background)
        return blend(base, foreground, coverage)

    return SynthResult(to_rgba(eval_banded(band, size)), False)


def polka_dot(size: Size, n: int) -> Optional[SynthResult]:
    """Black dots on white."""
    return _dots(size, n, BLACK, WHITE)


def polka_dark(size: Size, n: int) -> Optional[SynthResult]:
    """White dots on dark gray."""
    return _dots(size, n, WHITE, DARK_GRAY)


def polka_mid(size: Size, n: int) -> Optional[SynthResult]:
    """White dots on mid gray."""
    return _dots(size, n, WHITE, MID_GRAY)


# ---------------------------------------------------------------------------
# Polylines
# ---------------------------------------------------------------------------


def stroke_width(size: Size, n: int) -> int:
    """Integer stroke width for cv2: min(0.06 · long / n, 6), at least 1 px."""
    width = min(STROKE_FRACTION * size.long_edge / n, MAX_STROKE_WIDTH)
    return max(1, int(round(width)))


def _fixed_point(size: Size, pts: np.ndarray) -> List[np.ndarray]:
    """(N, k, 2) centered float points → list of int32 fixed-point polylines."""
    px, py = to_pixel(pts[..., 0], pts[..., 1], size)
    fixed = np.rint(np.stack([px, py], axis=-1) * _ONE).astype(np.int32)
    return list(fixed)


def hexagon_centers(size: Size, n: int) -> np.ndarray:
    """Centres of a flat-top hexagon tiling with diameter long / n.

    Columns alternate between a base row set and one shifted by half a
    hexagon vertically; both start at the top-left canvas corner.
    """
    d = size.long_edge / n
    r = d / 2.0
    inner = r * math.cos(math.pi / 6)
    side = d * math.sin(math.pi / 6)
    wedge = side * math.cos(math.pi / 3)
    half_w, half_h = size.width / 2.0, size.height / 2.0

    ys = np.arange(-half_h, half_h + inner, 2.0 * inner)
    xs_a = np.arange(-half_w, half_w + inner, d + side)
    xs_b = np.arange(-half_w + wedge + side, half_w + inner, d + side)

    ax, ay = np.meshgrid(xs_a, ys)
    bx, by = np.meshgrid(xs_b, ys + inner)
    return np.concatenate([
        np.stack([ax.ravel(), ay.ravel()], axis=1),
        np.stack([bx.ravel(), by.ravel()], axis=1),
    ])


def honeycomb(size: Size, n: int) -> Optional[SynthResult]:
    """Black hexagon outlines on white."""
    r = size.long_edge / n / 2.0
    if r < 1.0:
        return None

    centers = hexagon_centers(size, n)
    angles = -math.pi / 3 + np.arange(6) * (math.pi / 3)
    ring = np.stack([np.cos(angles), np.sin(angles)], axis=1) * r
    hexagons = centers[:, np.newaxis, :] + ring[np.newaxis, :, :]

    canvas = plane(size, WHITE)
    cv2.polylines(
        canvas, _fixed_point(size, hexagons), isClosed=True, color=BLACK,
        thickness=stroke_width(size, n), lineType=cv2.LINE_8, shift=_SHIFT,
    )
    return SynthResult(to_rgba(canvas), False)


def ss(size: Size, n: int) -> SynthResult:
    """S-curve string art: in each quadrant, n+1 lines join the two axes.

    Line i runs from (0, H/2 - i·dy) to (i·dx, 0), mirrored into every
    quadrant, so the envelope is a parabolic curve.
    """
    half_w, half_h = size.width / 2.0, size.height / 2.0
    i = np.arange(n + 1, dtype=np.float64)
    xd = half_w / n * i
    yd = half_h - half_h / n * i
    zero = np.zeros_like(i)

    def seg(x0, y0, x1, y1):
        return np.stack([np.stack([x0, y0], axis=1), np.stack([x1, y1], axis=1)], axis=1)

    segments = np.concatenate([
        seg(zero, yd, xd, zero),
        seg(xd, zero, zero, -yd),
        seg(zero, -yd, -xd, zero),
        seg(-xd, zero, zero, yd),
    ])

    canvas = plane(size, WHITE)
    cv2.polylines(
        canvas, _fixed_point(size, segments), isClosed=False, color=BLACK,
        thickness=stroke_width(size, n), lineType=cv2.LINE_8, shift=_SHIFT,
    )
    return SynthResult(to_rgba(canvas), False)


# ---------------------------------------------------------------------------
# Radial wedges
# ---------------------------------------------------------------------------


def _wedges(size: Size, n: int, offset_x: float, offset_y: float) -> SynthResult:
    sectors = 2 * n
    step = 2.0 * math.pi / sectors
    cx = size.width / 2.0 * offset_x
    cy = size.height / 2.0 * offset_y

    def band(rows):
        x, y = centered_axes(size, rows, centers=True)
        theta = np.arctan2(y - cy, x - cx)
        k = np.floor(np.mod(theta - WEDGE_START, 2.0 * math.pi) / step).astype(np.int64)
        # sector index can reach `sectors` through rounding at 2π
        return np.where(k % sectors % 2 == 0, BLACK, WHITE).astype(np.uint16)

    return SynthResult(to_rgba(eval_banded(band, size)), False)


def radial_wedge(size: Size, n: int) -> SynthResult:
    """n black sectors alternating with n white ones around the origin."""
    return _wedges(size, n, 0.0, 0.0)


def radial_wedge_offset_x(size: Size, n: int) -> SynthResult:
    """Wedges centred 1.5 half-widths left of the origin (off canvas)."""
    return _wedges(size, n, -1.5, 0.0)


def radial_wedge_offset_y(size: Size, n: int) -> SynthResult:
    """Wedges centred 1.5 half-heights below the origin (off canvas)."""
    return _wedges(size, n, 0.0, 1.5)
