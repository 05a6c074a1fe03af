"""Banded evaluation of per-pixel formulas.

Provides:
    - band_slices(): split a canvas height into row bands
    - eval_banded(): fill an (H, W) buffer band by band

Per-pixel formulas broadcast an (h, 1) y-axis against a (1, W) x-axis and
allocate several float64 temporaries of size h × W. On a 7680×4320 canvas a
single full-frame temporary is ~265 MB, so formulas are evaluated in bands
to keep peak memory per worker bounded.
"""

from typing import Callable, List

import numpy as np

from .geometry import Size

# Rows per band; 256 rows × 7680 cols × 8 bytes ≈ 16 MB per temporary
DEFAULT_BAND = 256


def band_slices(height: int, band: int = DEFAULT_BAND) -> List[slice]:
    """Compute row slices covering [0, height).

    Parameters
    ----------
    height : int
        Number of rows
    band : int
        Rows per band; 0 means a single full-height band

    Returns
    -------
    list[slice]
        Contiguous, non-overlapping slices in row order
    """
    if height <= 0:
        raise ValueError(f"height must be positive, got {height}")
    if band <= 0:
        return [slice(0, height)]
    return [slice(y, min(y + band, height)) for y in range(0, height, band)]


def eval_banded(
    fn: Callable[[slice], np.ndarray],
    size: Size,
    dtype=np.uint16,
    band: int = DEFAULT_BAND
) -> np.ndarray:
    """Evaluate ``fn`` band by band into a new (H, W) buffer.

    Parameters
    ----------
    fn : Callable[[slice], np.ndarray]
        Receives a row slice, returns an array broadcastable to
        (rows in slice, W)
    size : Size
        Canvas size
    dtype : numpy dtype
        Output dtype, default uint16
    band : int
        Rows per band, default DEFAULT_BAND

    Returns
    -------
    np.ndarray
        (H, W) buffer
    """
    out = np.empty(size.shape, dtype=dtype)
    for rows in band_slices(size.height, band):
        out[rows] = fn(rows)
    return out
