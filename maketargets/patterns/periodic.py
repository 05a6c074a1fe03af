"""Radial/periodic family: continuous-tone trigonometric fields.

Every pattern samples a formula at integer centered coordinates, so the
origin is exactly pixel (0, 0), and maps the result z ∈ [-1, 1] through
canvas.gray(). Polar quantities:

    r = √(x² + y²)        θ = atan2(y, x)

Density meaning:
    - radial: chirp divisor, z = cos(r² · (π/n) / diag)
    - rings: rings per long edge, z = cos(2π r / (long // n))
    - ringFade: rings per half-diagonal, z = sin ρ / ρ with ρ = 2π r n / diag
    - wavy: half-periods per long edge, z = (cos(x·s) + cos(y·s)) / 2, s = π n / long
    - radialWave: angular cycles, z = cos(π + nθ)
    - ringWave: both, z = cos(π + nθ) · cos(2π r / (long // n))
    - squareWave: exponent × 100, z = cos(|x|^(n/100)) · cos(|y|^(n/100))
    - field: gray level out of 480 (uniform)

All but ringFade request a post-processed variant; ringFade is exact at
every pixel and is excluded.
"""

import math

import numpy as np

from maketargets.utils.compute import eval_banded
from maketargets.utils.geometry import Size, centered_axes

from .canvas import WHITE, MAX_VALUE, SynthResult, gray, plane, to_rgba

SQUARE_WAVE_EXP = 100.0
FIELD_STEPS = 480


def _render(size: Size, formula) -> np.ndarray:
    def band(rows):
        x, y = centered_axes(size, rows)
        return gray(formula(x, y))

    return eval_banded(band, size)


def _ring_frequency(size: Size, n: int) -> float:
    """Angular frequency of n rings across the long edge.

    The ring period is a whole number of pixels, long // n (at least 1).
    """
    return 2.0 * math.pi / max(size.long_edge // n, 1)


def radial(size: Size, n: int) -> SynthResult:
    """Radial chirp: spatial frequency grows linearly with the radius."""
    slope = (math.pi / n) / size.half_diagonal

    def formula(x, y):
        return np.cos((x * x + y * y) * slope)

    return SynthResult(to_rgba(_render(size, formula)), True)


def rings(size: Size, n: int) -> SynthResult:
    """Concentric cosine rings, peak intensity at the origin."""
    f = _ring_frequency(size, n)

    def formula(x, y):
        return np.cos(np.hypot(x, y) * f)

    return SynthResult(to_rgba(_render(size, formula)), True)


def ring_fade(size: Size, n: int) -> SynthResult:
    """Rings fading with distance: z = sin(ρ)/ρ.

    The origin (ρ = 0) is set to maximum intensity instead of dividing by zero.
    """
    f = 2.0 * math.pi / (size.half_diagonal / n)

    def formula(x, y):
        rho = np.hypot(x, y) * f
        at_origin = rho == 0.0
        safe = np.where(at_origin, 1.0, rho)
        return np.where(at_origin, 1.0, np.sin(safe) / safe)

    pixels = _render(size, formula)
    hx, hy = size.half
    pixels[hy, hx] = WHITE
    return SynthResult(to_rgba(pixels), False)


def wavy(size: Size, n: int) -> SynthResult:
    """Egg-crate field: mean of a horizontal and a vertical cosine."""
    scale = math.pi / (size.long_edge / n)

    def formula(x, y):
        return (np.cos(x * scale) + np.cos(y * scale)) / 2.0

    return SynthResult(to_rgba(_render(size, formula)), True)


def radial_wave(size: Size, n: int) -> SynthResult:
    """Angular cosine: n dark/light cycles around the origin."""
    def formula(x, y):
        return np.cos(math.pi + np.arctan2(y, x) * n)

    return SynthResult(to_rgba(_render(size, formula)), True)


def ring_wave(size: Size, n: int) -> SynthResult:
    """Product of radialWave and rings."""
    f = _ring_frequency(size, n)

    def formula(x, y):
        theta = np.arctan2(y, x)
        return np.cos(math.pi + theta * n) * np.cos(np.hypot(x, y) * f)

    return SynthResult(to_rgba(_render(size, formula)), True)


def square_wave(size: Size, n: int) -> SynthResult:
    """Separable power-law chirp along both axes."""
    p = n / SQUARE_WAVE_EXP

    def formula(x, y):
        return np.cos(np.power(np.abs(x), p)) * np.cos(np.power(np.abs(y), p))

    return SynthResult(to_rgba(_render(size, formula)), True)


def field(size: Size, n: int) -> SynthResult:
    """Uniform gray of level n / 480."""
    level = min(n * MAX_VALUE // FIELD_STEPS, MAX_VALUE)
    return SynthResult(to_rgba(plane(size, level)), True)
