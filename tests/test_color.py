"""Test transfer LUTs and the color pipeline.

Tests for maketargets.utils.color:
    - Every LUT is monotonically non-decreasing over the full domain
    - Identity LUT maps i → i
    - Endpoints map 0 → 0 and 65535 → 65535
    - sRGB encode/decode agree with the analytic curves
    - Tables are read-only
    - convert() replaces RGB, copies alpha, never mutates its input

Run:
    pytest tests/test_color.py -v
"""

import numpy as np
import pytest

from maketargets.utils import color


# ============================================================================
# LUT BUILDER
# ============================================================================

@pytest.mark.parametrize("kind", list(color.LUTKind))
def test_lut_monotonic(luts, kind):
    """lut[i] <= lut[i+1] for every 16-bit input."""
    table = luts[kind].table
    assert table.shape == (65536,)
    assert table.dtype == np.uint16
    assert np.all(np.diff(table.astype(np.int64)) >= 0)


@pytest.mark.parametrize("kind", list(color.LUTKind))
def test_lut_endpoints(luts, kind):
    table = luts[kind].table
    assert table[0] == 0
    assert table[65535] == 65535


def test_linear_lut_is_identity(luts):
    np.testing.assert_array_equal(luts.linear.table, np.arange(65536, dtype=np.uint16))


def test_srgb_encode_known_values(luts):
    """Mid-gray linear light encodes to ~0.7354 in sRGB."""
    mid = luts.srgb_encode.table[32768] / 65535.0
    assert abs(mid - 0.7354) < 1e-3
    # linear segment below the cutoff: 12.92 * x
    small = 100
    expected = round(small / 65535.0 * 12.92 * 65535.0)
    assert abs(int(luts.srgb_encode.table[small]) - expected) <= 1


def test_srgb_decode_inverts_encode(luts):
    x = np.arange(0, 65536, 257, dtype=np.uint16)
    roundtrip = luts.srgb_decode.table[luts.srgb_encode.table[x]]
    # decode is steep near zero; allow a few codes of quantization error
    assert np.max(np.abs(roundtrip.astype(np.int64) - x.astype(np.int64))) <= 8


def test_gamma_luts_bend_opposite_ways(luts):
    assert luts.gamma22_encode.table[32768] < 32768
    assert luts.gamma22_decode.table[32768] > 32768
    expected = round(0.5 ** 2.2 * 65535)
    assert abs(int(luts.gamma22_encode.table[32768]) - expected) <= 1


def test_lut_tables_are_read_only(luts):
    with pytest.raises(ValueError):
        luts.linear.table[0] = 1


def test_build_lut_accepts_string_kind():
    lut = color.build_lut("gamma22_decode")
    assert lut.kind is color.LUTKind.GAMMA22_DECODE


def test_transfer_lut_rejects_wrong_shape():
    with pytest.raises(ValueError, match="65536"):
        color.TransferLUT(kind=color.LUTKind.LINEAR, table=np.zeros(10, dtype=np.uint16))


def test_analytic_srgb_roundtrip():
    x = np.linspace(0.0, 1.0, 101)
    np.testing.assert_allclose(color.srgb_to_linear(color.linear_to_srgb(x)), x, atol=1e-9)


# ============================================================================
# CONVERT
# ============================================================================

def test_convert_replaces_rgb_and_copies_alpha(luts):
    rng = np.random.default_rng(3)
    pixels = rng.integers(0, 65536, size=(6, 7, 4), dtype=np.uint16)
    before = pixels.copy()

    out = color.convert(pixels, luts.srgb_encode)

    assert out.shape == pixels.shape
    assert out.dtype == np.uint16
    np.testing.assert_array_equal(out[..., :3], luts.srgb_encode.table[pixels[..., :3]])
    np.testing.assert_array_equal(out[..., 3], pixels[..., 3])
    np.testing.assert_array_equal(pixels, before)


def test_convert_identity(luts):
    pixels = np.full((3, 3, 4), 1234, dtype=np.uint16)
    out = color.convert(pixels, luts.linear)
    np.testing.assert_array_equal(out, pixels)
    assert out is not pixels


def test_convert_rejects_bad_input(luts):
    with pytest.raises(ValueError, match="Expected shape"):
        color.convert(np.zeros((4, 4), dtype=np.uint16), luts.linear)
    with pytest.raises(ValueError, match="uint16"):
        color.convert(np.zeros((4, 4, 4), dtype=np.uint8), luts.linear)
