"""Test pattern synthesis and the registry.

Tests:
    - Registry: unique names, render order, lookup errors, density guard
    - Every pattern: RGBA16 layout, opacity, determinism, post-process flag
    - Grid family: checkerboard border correction, quadrants, stripes, jail
    - Periodic family: ring period and origin, radialWave phase, field level
    - Shape family: polka dot count and degenerate sizes, wedges, honeycomb
    - Ramps: stepped levels, reference rows, LUT-dependent reference density

Run:
    pytest tests/test_patterns.py -v
"""

import cv2
import numpy as np
import pytest

from maketargets.patterns import grid, periodic, ramps, registry, shapes
from maketargets.patterns.canvas import BLACK, DARK_GRAY, WHITE, correct_edges, pixel_at
from maketargets.utils.compute import eval_banded
from maketargets.utils.geometry import Size
from maketargets.utils.hashing import sha256_array

POST_PROCESSED = {"radial", "rings", "wavy", "radialWave", "ringWave", "squareWave", "field"}


def red(result):
    return result.pixels[..., 0]


# ============================================================================
# REGISTRY
# ============================================================================

def test_registry_lists_every_pattern_once():
    names = registry.pattern_names()
    assert len(names) == 31
    assert len(set(names)) == len(names)
    assert names[0] == "jailWhite"
    assert names[-1] == "inverseGammaRamp"


def test_registry_families():
    families = {p.family for p in registry.PATTERNS.values()}
    assert families == set(registry.Family)
    ramps_ = [p.name for p in registry.PATTERNS.values() if p.uses_luts]
    assert ramps_ == ["ramp", "gammaRamp", "inverseGammaRamp"]


def test_get_pattern_unknown():
    with pytest.raises(KeyError, match="nope"):
        registry.get_pattern("nope")


def test_render_rejects_non_positive_density(small_size):
    with pytest.raises(ValueError, match="positive"):
        registry.get_pattern("rings").render(small_size, 0)


def test_ramp_requires_luts(small_size):
    with pytest.raises(ValueError, match="LUTs"):
        registry.get_pattern("ramp").render(small_size, 5)


@pytest.mark.parametrize("name", registry.pattern_names())
def test_every_pattern_renders_rgba16(name, small_size, luts):
    result = registry.synthesize(registry.PatternSpec(name, small_size, 5), luts)

    assert result is not None
    assert result.pixels.shape == (48, 64, 4)
    assert result.pixels.dtype == np.uint16
    assert np.all(result.pixels[..., 3] == 65535)
    np.testing.assert_array_equal(result.pixels[..., 0], result.pixels[..., 1])
    np.testing.assert_array_equal(result.pixels[..., 0], result.pixels[..., 2])
    assert result.needs_post_process == (name in POST_PROCESSED)


@pytest.mark.parametrize("name", registry.pattern_names())
def test_every_pattern_is_deterministic(name, small_size, luts):
    spec = registry.PatternSpec(name, small_size, 5)
    first = registry.synthesize(spec, luts)
    second = registry.synthesize(spec, luts)
    assert sha256_array(first.pixels) == sha256_array(second.pixels)


# ============================================================================
# GRID FAMILY
# ============================================================================

def test_checkerboard_borders_match_neighbors():
    """After correction each border equals the raw interior row/column."""
    size = Size(100, 100)
    raw = eval_banded(
        lambda rows: np.where(grid._checker_black(size, rows, 10), BLACK, WHITE).astype(np.uint16),
        size,
    )
    expected = raw.copy()
    correct_edges(expected)

    out = red(grid.check(size, 10))

    np.testing.assert_array_equal(out, expected)
    np.testing.assert_array_equal(out[0], out[1])
    np.testing.assert_array_equal(out[-1], out[-2])
    np.testing.assert_array_equal(out[:, 0], out[:, 1])
    np.testing.assert_array_equal(out[:, -1], out[:, -2])


def test_checkerboard_sliver_column_is_corrected():
    """21 px wide with 2 cells of 10.5 px: the last column is a sliver of a third cell."""
    size = Size(21, 10)
    raw = np.where(grid._checker_black(size, slice(0, size.height), 2), BLACK, WHITE).astype(np.uint16)
    assert not np.array_equal(raw[:, -1], raw[:, -2])

    fixed = correct_edges(raw.copy())
    out = red(grid.check(size, 2))

    assert fixed == ("right",)
    np.testing.assert_array_equal(out[:, -1], out[:, -2])
    np.testing.assert_array_equal(out[:, -1], raw[:, -2])
    np.testing.assert_array_equal(out[:, :-1], raw[:, :-1])


def test_check_quadrants():
    px = grid.check(Size(100, 100), 2).pixels
    assert pixel_at(px, -10, -10)[0] == BLACK
    assert pixel_at(px, 10, -10)[0] == WHITE
    assert pixel_at(px, -10, 10)[0] == WHITE
    assert pixel_at(px, 10, 10)[0] == BLACK


def test_check_is_half_black():
    out = red(grid.check(Size(120, 80), 12))
    assert abs(np.mean(out == BLACK) - 0.5) < 0.05


def test_stripes_vertical_and_horizontal():
    size = Size(100, 100)
    v = grid.stripes_v(size, 2).pixels
    assert pixel_at(v, 10, 0)[0] == BLACK
    assert pixel_at(v, -10, 0)[0] == WHITE
    # vertical stripes are constant down each column
    assert np.all(v[:, :, 0] == v[:1, :, 0])

    h = grid.stripes_h(size, 2).pixels
    assert pixel_at(h, 0, 10)[0] == BLACK
    assert pixel_at(h, 0, -10)[0] == WHITE


def test_diagonal_stripes_mirror():
    size = Size(80, 80)
    dl = red(grid.stripes_dl(size, 8))
    dr = red(grid.stripes_dr(size, 8))
    assert set(np.unique(dl)) == {BLACK, WHITE}
    assert not np.array_equal(dl, dr)


def test_jail_line_width_capped():
    assert grid.jail_line_width(100, 2) == 2.5
    assert grid.jail_line_width(7680, 2) == 5.0


def test_jail_white_lines_through_origin():
    px = grid.jail_white(Size(100, 100), 2).pixels
    assert pixel_at(px, 0, 10)[0] == BLACK
    assert pixel_at(px, -1, 10)[0] == BLACK
    assert pixel_at(px, 20, 20)[0] == WHITE


def test_jail_backgrounds():
    size = Size(100, 100)
    assert pixel_at(grid.jail_black(size, 2).pixels, 20, 20)[0] == BLACK
    assert pixel_at(grid.jail_dark(size, 2).pixels, 20, 20)[0] == DARK_GRAY
    assert pixel_at(grid.jail_black(size, 2).pixels, 0, 10)[0] == WHITE


def test_jail_check_has_gray_cells():
    out = red(grid.jail_check(Size(100, 100), 2))
    assert np.any(out == grid.JAIL_CHECK_SHADE)
    assert np.any(out == WHITE)
    assert np.any(out == BLACK)


def test_crosshatch_covers_more_than_jail():
    size = Size(120, 90)
    jail = red(grid.jail_white(size, 6))
    hatch = red(grid.crosshatch(size, 6))
    assert np.mean(hatch) < np.mean(jail)


# ============================================================================
# PERIODIC FAMILY
# ============================================================================

def test_rings_peak_at_origin_and_period():
    """Rings on 512×512 at density 10 repeat every 512 // 10 = 51 px along +x."""
    px = periodic.rings(Size(512, 512), 10).pixels
    assert pixel_at(px, 0, 0)[0] == WHITE

    row = px[256, 256:, 0].astype(np.int64)
    peaks = [i for i in range(1, len(row) - 1) if row[i] > row[i - 1] and row[i] >= row[i + 1]]
    assert peaks == [51, 102, 153, 204]
    assert all(row[p] == WHITE for p in peaks)


def test_ring_period_is_whole_pixels():
    """100 // 3 = 33: rings peak exactly at r = 33, not at 33.3."""
    px = periodic.rings(Size(100, 100), 3).pixels
    assert pixel_at(px, 33, 0)[0] == WHITE
    assert pixel_at(px, 0, 33)[0] == WHITE
    assert pixel_at(px, -33, 0)[0] == WHITE
    # ringWave shares the ring period: cos(π + 3·π) · cos(2π) = 1 on the -x axis
    assert pixel_at(periodic.ring_wave(Size(100, 100), 3).pixels, -33, 0)[0] == WHITE


def test_ring_period_floor_is_one_pixel():
    px = periodic.rings(Size(8, 8), 480).pixels
    assert np.all(px[4, 4:, 0] == WHITE)


def test_ring_fade_origin_is_white():
    result = periodic.ring_fade(Size(200, 120), 10)
    assert pixel_at(result.pixels, 0, 0)[0] == WHITE
    assert result.needs_post_process is False


def test_radial_and_wavy_peak_at_origin():
    size = Size(160, 90)
    for fn in (periodic.radial, periodic.wavy, periodic.square_wave):
        assert pixel_at(fn(size, 10).pixels, 0, 0)[0] == WHITE


def test_radial_wave_is_dark_on_positive_x():
    px = periodic.radial_wave(Size(100, 100), 4).pixels
    assert pixel_at(px, 10, 0)[0] == BLACK


def test_ring_wave_is_product():
    size = Size(64, 64)
    a = red(periodic.ring_wave(size, 3)).astype(np.float64) / 32767.5 - 1.0
    b = red(periodic.radial_wave(size, 3)).astype(np.float64) / 32767.5 - 1.0
    c = red(periodic.rings(size, 3)).astype(np.float64) / 32767.5 - 1.0
    np.testing.assert_allclose(a, b * c, atol=1e-3)


@pytest.mark.parametrize("n, level", [(240, 32767), (480, 65535), (960, 65535), (2, 273)])
def test_field_level(n, level):
    out = red(periodic.field(Size(8, 6), n))
    assert np.all(out == level)


# ============================================================================
# SHAPE FAMILY
# ============================================================================

@pytest.mark.parametrize("size, n", [(Size(100, 100), 5), (Size(200, 100), 4), (Size(90, 160), 7)])
def test_polka_dot_center_count(size, n):
    assert len(shapes.polka_dot_centers(size, n)) == (n - 1) ** 2


def test_polka_dots_render_one_blob_per_center():
    out = red(shapes.polka_dot(Size(100, 100), 5))
    mask = (out < 32768).astype(np.uint8)
    num_labels, _ = cv2.connectedComponents(mask)
    assert num_labels - 1 == 16


def test_polka_dot_radius_zero_is_skipped():
    assert shapes.dot_radius(Size(32, 24), 30) == 0
    assert shapes.polka_dot(Size(32, 24), 30) is None
    assert registry.get_pattern("polkaMid").render(Size(32, 24), 30) is None


def test_polka_variants_backgrounds():
    size = Size(100, 100)
    assert pixel_at(shapes.polka_dark(size, 5).pixels, 0, 0)[0] == DARK_GRAY
    # dot at (-30, -30)
    assert pixel_at(shapes.polka_mid(size, 5).pixels, -30, -30)[0] == WHITE
    assert pixel_at(shapes.polka_dot(size, 5).pixels, -30, -30)[0] == BLACK


def test_honeycomb_draws_outlines():
    result = shapes.honeycomb(Size(120, 80), 6)
    out = red(result)
    assert result.needs_post_process is False
    assert 0.0 < np.mean(out == BLACK) < 0.5


def test_honeycomb_degenerate():
    assert shapes.honeycomb(Size(32, 24), 30) is None


def test_ss_lines_meet_at_origin():
    px = shapes.ss(Size(100, 100), 5).pixels
    assert pixel_at(px, 0, 0)[0] == BLACK
    assert pixel_at(px, -49, -49)[0] == WHITE


def test_stroke_width_bounds():
    assert shapes.stroke_width(Size(7680, 4320), 2) == 6
    assert shapes.stroke_width(Size(100, 100), 480) == 1


def test_radial_wedge_sectors():
    px = shapes.radial_wedge(Size(100, 100), 2).pixels
    assert pixel_at(px, 0, 20)[0] == BLACK
    assert pixel_at(px, 20, 0)[0] == WHITE
    assert abs(np.mean(px[..., 0] == BLACK) - 0.5) < 0.05


def test_offset_wedges_differ_from_centered():
    size = Size(120, 80)
    centered = red(shapes.radial_wedge(size, 30))
    assert not np.array_equal(centered, red(shapes.radial_wedge_offset_x(size, 30)))
    assert not np.array_equal(centered, red(shapes.radial_wedge_offset_y(size, 30)))


# ============================================================================
# RAMPS
# ============================================================================

def test_ramp_levels():
    levels = ramps.ramp_levels(64, 64)
    assert levels[0] == 0
    assert levels[-1] == 65535
    assert np.all(np.diff(levels.astype(np.int64)) > 0)
    assert set(ramps.ramp_levels(64, 2).tolist()) == {0, 65535}
    assert np.all(ramps.ramp_levels(10, 1) == 0)


def test_ramp_layout(luts):
    out = red(ramps.linear_ramp(Size(64, 8), 2, luts))
    assert out[0, 0] == 0
    assert out[0, 63] == 65535
    assert np.all(out[1::2, :32] == BLACK)
    assert np.mean(out[1::2, 32:] == WHITE) > 0.99
    assert set(np.unique(out[1::2])) <= {BLACK, WHITE}


def test_gamma_ramp_reference_is_lighter(luts):
    size = Size(64, 400)
    linear = red(ramps.linear_ramp(size, 64, luts))[1::2]
    gamma = red(ramps.gamma_ramp(size, 64, luts))[1::2]
    inverse = red(ramps.inverse_gamma_ramp(size, 64, luts))[1::2]
    mid = slice(24, 40)
    assert np.mean(gamma[:, mid] == WHITE) > np.mean(linear[:, mid] == WHITE)
    assert np.mean(inverse[:, mid] == WHITE) < np.mean(linear[:, mid] == WHITE)
