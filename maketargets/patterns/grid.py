"""Grid/line family: jails, checkerboards, stripes, diamond, crosshatch.

Every pattern here rasterizes by integer bucketing of a (possibly rotated)
pixel-centre coordinate against the cell size ``long_edge / density``:

    - Line lattices ("jail"): distance to the nearest lattice line, turned
      into exact 1-D box coverage for a line of width
      ``min(0.05 · long / n, 5)`` px
    - Parity fills (checkerboard, stripes): bucket index parity

Bucketing leaves a one-pixel seam at the frame border whenever a bucket
boundary falls between the border and its neighbor, so every result goes
through canvas.correct_edges() before it is returned.

Density meaning:
    - jail*, diamond, crosshatch: lattice lines per long edge
    - check, jailCheck: cells per long edge
    - stripes*: stripe cells per long edge

None of these patterns request a post-processed variant.
"""

import logging
import math

import numpy as np

from maketargets.utils.compute import eval_banded
from maketargets.utils.geometry import Size, centered_axes, rotate

from .canvas import (
    BLACK,
    DARK_GRAY,
    MID_GRAY,
    WHITE,
    SynthResult,
    blend,
    correct_edges,
    gray,
    plane,
    to_rgba,
)

logger = logging.getLogger(__name__)

MAX_JAIL_LINE_WIDTH = 5.0
JAIL_LINE_FRACTION = 0.05
JAIL_CHECK_SHADE = int(gray(0.25))


def line_coverage(u: np.ndarray, spacing: float, line_width: float) -> np.ndarray:
    """Fraction of each pixel covered by a lattice of lines.

    Parameters
    ----------
    u : np.ndarray
        Pixel-centre coordinate across the lines
    spacing : float
        Distance between lines; a line passes through u = 0
    line_width : float
        Line width (px)

    Returns
    -------
    np.ndarray
        Coverage in [0, 1], same shape as u
    """
    d = np.abs(u - np.rint(u / spacing) * spacing)
    half = line_width / 2.0
    return np.clip(np.minimum(d + 0.5, half) - np.maximum(d - 0.5, -half), 0.0, 1.0)


def jail_line_width(long_edge: float, divisor: float) -> float:
    """Line width for a lattice of ``divisor`` lines per long edge."""
    return min(JAIL_LINE_FRACTION * long_edge / divisor, MAX_JAIL_LINE_WIDTH)


def _jail_coverage(size: Size, rows: slice, divisor: float, angle: float = 0.0) -> np.ndarray:
    x, y = centered_axes(size, rows, centers=True)
    if angle:
        x, y = rotate(x, y, angle)
    spacing = size.long_edge / divisor
    width = jail_line_width(size.long_edge, divisor)
    return np.maximum(line_coverage(x, spacing, width), line_coverage(y, spacing, width))


def _checker_black(size: Size, rows: slice, n: int) -> np.ndarray:
    """Boolean mask of filled checker cells (cell size long / n)."""
    x, y = centered_axes(size, rows, centers=True)
    f = size.long_edge / n
    kx = np.floor(x / f + n / 2.0).astype(np.int64)
    ky = np.floor(y / f + n / 2.0).astype(np.int64)
    return (kx + ky) % 2 == 0


def _finish(name: str, gray_plane: np.ndarray) -> SynthResult:
    fixed = correct_edges(gray_plane)
    if fixed:
        logger.debug("%s: corrected border %s", name, ", ".join(fixed))
    return SynthResult(to_rgba(gray_plane), False)


def _jail(size: Size, n: int, background: int, line: int, angle: float = 0.0) -> np.ndarray:
    def band(rows):
        base = plane(Size(size.width, rows.stop - rows.start), background)
        return blend(base, line, _jail_coverage(size, rows, float(n), angle))

    return eval_banded(band, size)


def jail_white(size: Size, n: int) -> SynthResult:
    """Black line lattice on white."""
    return _finish("jailWhite", _jail(size, n, WHITE, BLACK))


def jail_black(size: Size, n: int) -> SynthResult:
    """White line lattice on black."""
    return _finish("jailBlack", _jail(size, n, BLACK, WHITE))


def jail_dark(size: Size, n: int) -> SynthResult:
    """White line lattice on dark gray."""
    return _finish("jailDark", _jail(size, n, DARK_GRAY, WHITE))


def jail_mid(size: Size, n: int) -> SynthResult:
    """White line lattice on mid gray."""
    return _finish("jailMid", _jail(size, n, MID_GRAY, WHITE))


def jail_check(size: Size, n: int) -> SynthResult:
    """Gray checkerboard on white with a black line lattice on top."""
    def band(rows):
        base = np.where(_checker_black(size, rows, n), JAIL_CHECK_SHADE, WHITE).astype(np.uint16)
        return blend(base, BLACK, _jail_coverage(size, rows, float(n)))

    return _finish("jailCheck", eval_banded(band, size))


def check(size: Size, n: int) -> SynthResult:
    """Black and white checkerboard with ``n`` cells per long edge.

    Notes
    -----
    Cell columns are indexed by floor(x/f + n/2), so for odd ``n`` the
    origin falls mid-cell.
    """
    def band(rows):
        return np.where(_checker_black(size, rows, n), BLACK, WHITE).astype(np.uint16)

    return _finish("check", eval_banded(band, size))


def diamond(size: Size, n: int) -> SynthResult:
    """Black line lattice rotated 45°, on white."""
    return _finish("diamond", _jail(size, n, WHITE, BLACK, angle=45.0))


def crosshatch(size: Size, n: int) -> SynthResult:
    """Axis-aligned lattice overlaid with a 45° lattice of divisor n/√2.

    The diagonal lattice uses the same line spacing measured along the axes.
    """
    def band(rows):
        coverage = np.maximum(
            _jail_coverage(size, rows, float(n)),
            _jail_coverage(size, rows, n / math.sqrt(2.0), angle=45.0),
        )
        base = plane(Size(size.width, rows.stop - rows.start), WHITE)
        return blend(base, BLACK, coverage)

    return _finish("crosshatch", eval_banded(band, size))


def _stripes(size: Size, n: int, angle: float) -> np.ndarray:
    f = size.long_edge / n

    def band(rows):
        x, y = centered_axes(size, rows, centers=True)
        u, _ = rotate(x, y, angle)
        k = np.floor(u / f).astype(np.int64)
        # filled cells start at -n and step by two
        return np.where((k - n) % 2 == 0, BLACK, WHITE).astype(np.uint16)

    return eval_banded(band, size)


def stripes_v(size: Size, n: int) -> SynthResult:
    """Vertical stripes."""
    return _finish("stripesv", _stripes(size, n, 0.0))


def stripes_h(size: Size, n: int) -> SynthResult:
    """Horizontal stripes."""
    return _finish("stripesh", _stripes(size, n, 90.0))


def stripes_dl(size: Size, n: int) -> SynthResult:
    """Diagonal stripes at +45°."""
    return _finish("stripesdl", _stripes(size, n, 45.0))


def stripes_dr(size: Size, n: int) -> SynthResult:
    """Diagonal stripes at -45°."""
    return _finish("stripesdr", _stripes(size, n, -45.0))
