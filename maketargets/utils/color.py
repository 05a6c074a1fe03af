"""Transfer-function lookup tables and the LUT color pipeline.

Provides:
    - build_lut(): one 16-bit → 16-bit transfer table
    - build_luts(): all tables, built once at startup
    - convert(): apply a table to R, G, B of an RGBA16 buffer

Tables:
    - LINEAR: identity
    - SRGB_ENCODE: linear light → sRGB (piecewise, exact sRGB curve)
    - SRGB_DECODE: sRGB → linear light
    - GAMMA22_ENCODE: x^2.2
    - GAMMA22_DECODE: x^(1/2.2)

Invariants:
    - 65536 entries, dtype uint16, indexed by a uint16 sample
    - Monotonically non-decreasing
    - Read-only after construction (numpy writeable flag cleared), so the
      same arrays can be shared by every worker thread without locking
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict

import numpy as np

LUT_SIZE = 65536
MAX_VALUE = LUT_SIZE - 1

# sRGB transfer constants
_SRGB_A = 0.055
_SRGB_EXP = 2.4
_SRGB_LINEAR_CUTOFF = 0.0031308
_SRGB_ENCODED_CUTOFF = 0.04045

GAMMA = 2.2


class LUTKind(str, Enum):
    """Available transfer functions."""

    LINEAR = "linear"
    SRGB_ENCODE = "srgb_encode"
    SRGB_DECODE = "srgb_decode"
    GAMMA22_ENCODE = "gamma22_encode"
    GAMMA22_DECODE = "gamma22_decode"


@dataclass(frozen=True)
class TransferLUT:
    """Immutable 16-bit transfer table.

    Attributes
    ----------
    kind : LUTKind
        Transfer function the table samples
    table : np.ndarray
        (65536,) uint16, read-only
    """

    kind: LUTKind
    table: np.ndarray

    def __post_init__(self):
        if self.table.shape != (LUT_SIZE,) or self.table.dtype != np.uint16:
            raise ValueError(
                f"LUT must be ({LUT_SIZE},) uint16, got {self.table.shape} {self.table.dtype}"
            )
        self.table.flags.writeable = False

    def __call__(self, values: np.ndarray) -> np.ndarray:
        """Look up uint16 samples (any shape)."""
        return self.table[values]


@dataclass(frozen=True)
class TransferLUTs:
    """Bundle of every transfer table, shared read-only by all workers."""

    tables: Dict[LUTKind, TransferLUT]

    def __getitem__(self, kind) -> TransferLUT:
        return self.tables[LUTKind(kind)]

    @property
    def linear(self) -> TransferLUT:
        return self.tables[LUTKind.LINEAR]

    @property
    def srgb_encode(self) -> TransferLUT:
        return self.tables[LUTKind.SRGB_ENCODE]

    @property
    def srgb_decode(self) -> TransferLUT:
        return self.tables[LUTKind.SRGB_DECODE]

    @property
    def gamma22_encode(self) -> TransferLUT:
        return self.tables[LUTKind.GAMMA22_ENCODE]

    @property
    def gamma22_decode(self) -> TransferLUT:
        return self.tables[LUTKind.GAMMA22_DECODE]


def linear_to_srgb(x: np.ndarray) -> np.ndarray:
    """Encode linear light [0,1] to sRGB [0,1].

    Notes
    -----
    Linear segment x * 12.92 below 0.0031308, otherwise
    1.055 * x^(1/2.4) - 0.055.
    """
    x = np.clip(x, 0.0, 1.0)
    power = (1.0 + _SRGB_A) * np.power(x, 1.0 / _SRGB_EXP) - _SRGB_A
    return np.where(x <= _SRGB_LINEAR_CUTOFF, x * 12.92, power)


def srgb_to_linear(x: np.ndarray) -> np.ndarray:
    """Decode sRGB [0,1] to linear light [0,1] (inverse of linear_to_srgb)."""
    x = np.clip(x, 0.0, 1.0)
    power = np.power((x + _SRGB_A) / (1.0 + _SRGB_A), _SRGB_EXP)
    return np.where(x <= _SRGB_ENCODED_CUTOFF, x / 12.92, power)


_TRANSFER_FUNCS = {
    LUTKind.LINEAR: lambda x: x,
    LUTKind.SRGB_ENCODE: linear_to_srgb,
    LUTKind.SRGB_DECODE: srgb_to_linear,
    LUTKind.GAMMA22_ENCODE: lambda x: np.power(x, GAMMA),
    LUTKind.GAMMA22_DECODE: lambda x: np.power(x, 1.0 / GAMMA),
}


def build_lut(kind) -> TransferLUT:
    """Sample a transfer function over the full 16-bit domain.

    Parameters
    ----------
    kind : LUTKind or str
        Transfer function to tabulate

    Returns
    -------
    TransferLUT
        Read-only table of 65536 uint16 samples

    Notes
    -----
    Outputs are rounded to nearest and clipped to [0, 65535]; every curve
    is non-decreasing on [0, 1] so rounding keeps the table monotonic.
    """
    kind = LUTKind(kind)
    x = np.arange(LUT_SIZE, dtype=np.float64) / MAX_VALUE
    y = _TRANSFER_FUNCS[kind](x)
    table = np.clip(np.rint(y * MAX_VALUE), 0, MAX_VALUE).astype(np.uint16)
    return TransferLUT(kind=kind, table=table)


def build_luts() -> TransferLUTs:
    """Build every transfer table (call once, before scheduling)."""
    return TransferLUTs(tables={kind: build_lut(kind) for kind in LUTKind})


def convert(pixels: np.ndarray, lut: TransferLUT) -> np.ndarray:
    """Apply a transfer table to each color channel.

    Parameters
    ----------
    pixels : np.ndarray
        (H, W, 4) uint16 RGBA buffer
    lut : TransferLUT
        Table applied to R, G and B

    Returns
    -------
    np.ndarray
        New (H, W, 4) uint16 buffer; alpha copied verbatim

    Notes
    -----
    Never mutates ``pixels``.
    """
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(f"Expected shape (H, W, 4), got {pixels.shape}")
    if pixels.dtype != np.uint16:
        raise ValueError(f"Expected uint16 pixels, got {pixels.dtype}")

    out = np.empty_like(pixels)
    out[..., :3] = lut.table[pixels[..., :3]]
    out[..., 3] = pixels[..., 3]
    return out
