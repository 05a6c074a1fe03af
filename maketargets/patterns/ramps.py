"""Calibration ramps: stepped intensity ramps with a dithered reference.

Layout (every ramp):
    - Even scan rows: a per-column linear ramp from black (left) to white
      (right), quantized to ``n`` equal-width steps
    - Odd scan rows: an ordered reference for the same ramp, white where
      ``lut[draw] < ramp(column)`` and black elsewhere, with ``draw`` taken
      from a fixed-seed generator

The reference rows therefore average to the fraction of draws the LUT maps
below the ramp value; comparing them with the continuous rows on a display
shows whether its transfer curve matches the LUT:

    - ramp: identity LUT
    - gammaRamp: gamma-2.2 encode LUT (x^2.2)
    - inverseGammaRamp: gamma-2.2 decode LUT (x^(1/2.2))

Density meaning: number of ramp steps across the width (n ≥ 2 for a ramp;
n = 1 gives a black field).
"""

import numpy as np

from maketargets.utils.color import TransferLUT, TransferLUTs
from maketargets.utils.geometry import Size

from .canvas import BLACK, MAX_VALUE, WHITE, SynthResult, to_rgba

RAMP_SEED = 0x7A3E


def ramp_levels(width: int, n: int) -> np.ndarray:
    """Stepped ramp value per column (uint16, length ``width``).

    Column c falls in step floor(c · n / width); step k has level
    round(k · 65535 / (n - 1)).
    """
    steps = np.minimum(np.arange(width, dtype=np.int64) * n // width, n - 1)
    if n == 1:
        return np.zeros(width, dtype=np.uint16)
    return np.rint(steps * (MAX_VALUE / (n - 1))).astype(np.uint16)


def _ramp(size: Size, n: int, lut: TransferLUT) -> SynthResult:
    levels = ramp_levels(size.width, n)
    out = np.empty(size.shape, dtype=np.uint16)
    out[0::2] = levels

    reference_rows = size.height // 2
    rng = np.random.default_rng(RAMP_SEED)
    draws = rng.integers(0, MAX_VALUE + 1, size=(reference_rows, size.width), dtype=np.uint16)
    out[1::2] = np.where(lut(draws) < levels, WHITE, BLACK).astype(np.uint16)
    return SynthResult(to_rgba(out), False)


def linear_ramp(size: Size, n: int, luts: TransferLUTs) -> SynthResult:
    """Ramp referenced through the identity LUT."""
    return _ramp(size, n, luts.linear)


def gamma_ramp(size: Size, n: int, luts: TransferLUTs) -> SynthResult:
    """Ramp referenced through the gamma-2.2 encode LUT."""
    return _ramp(size, n, luts.gamma22_encode)


def inverse_gamma_ramp(size: Size, n: int, luts: TransferLUTs) -> SynthResult:
    """Ramp referenced through the gamma-2.2 decode LUT."""
    return _ramp(size, n, luts.gamma22_decode)
