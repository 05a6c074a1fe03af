"""Pattern registry: explicit name → synthesis capability table.

Each entry records the name used in output file names, the family, what the
density parameter means for that pattern, and whether the synthesis function
needs the transfer LUTs. Registry order is render order.

Usage:
    from maketargets.patterns import registry

    pattern = registry.get_pattern("rings")
    result = pattern.render(Size(512, 512), 10, luts)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from maketargets.utils.color import TransferLUTs
from maketargets.utils.geometry import Size

from . import grid, periodic, ramps, shapes
from .canvas import SynthResult

logger = logging.getLogger(__name__)


class Family(str, Enum):
    """Computational contract a pattern follows."""

    GRID = "grid"
    PERIODIC = "periodic"
    SHAPE = "shape"
    RAMP = "ramp"


@dataclass(frozen=True)
class PatternSpec:
    """One fully specified synthesis request."""

    name: str
    size: Size
    density: int


@dataclass(frozen=True)
class Pattern:
    """Registry entry.

    Attributes
    ----------
    name : str
        Identifier used in output file names
    family : Family
        Pattern family
    fn : Callable
        ``fn(size, density)`` or, when ``uses_luts``, ``fn(size, density, luts)``;
        returns a SynthResult, or None for a degenerate size/density
    density_meaning : str
        What the density parameter controls for this pattern
    uses_luts : bool
        Whether ``fn`` takes the transfer LUTs
    """

    name: str
    family: Family
    fn: Callable[..., Optional[SynthResult]]
    density_meaning: str
    uses_luts: bool = False

    def render(self, size: Size, density: int, luts: Optional[TransferLUTs] = None) -> Optional[SynthResult]:
        """Synthesize this pattern.

        Raises
        ------
        ValueError
            If density is not positive, or LUTs are required but missing
        """
        if density <= 0:
            raise ValueError(f"{self.name}: density must be positive, got {density}")
        if self.uses_luts:
            if luts is None:
                raise ValueError(f"{self.name}: transfer LUTs required")
            return self.fn(size, density, luts)
        return self.fn(size, density)


_LINES = "lattice lines per long edge"
_CELLS = "cells per long edge"

_PATTERNS: List[Pattern] = [
    Pattern("jailWhite", Family.GRID, grid.jail_white, _LINES),
    Pattern("jailBlack", Family.GRID, grid.jail_black, _LINES),
    Pattern("jailDark", Family.GRID, grid.jail_dark, _LINES),
    Pattern("jailMid", Family.GRID, grid.jail_mid, _LINES),
    Pattern("jailCheck", Family.GRID, grid.jail_check, _CELLS),
    Pattern("check", Family.GRID, grid.check, _CELLS),
    Pattern("radial", Family.PERIODIC, periodic.radial, "chirp divisor"),
    Pattern("rings", Family.PERIODIC, periodic.rings, "rings per long edge"),
    Pattern("ringFade", Family.PERIODIC, periodic.ring_fade, "rings per half-diagonal"),
    Pattern("wavy", Family.PERIODIC, periodic.wavy, "half-periods per long edge"),
    Pattern("radialWave", Family.PERIODIC, periodic.radial_wave, "angular cycles"),
    Pattern("ringWave", Family.PERIODIC, periodic.ring_wave, "rings per long edge and angular cycles"),
    Pattern("stripesh", Family.GRID, grid.stripes_h, _CELLS),
    Pattern("stripesv", Family.GRID, grid.stripes_v, _CELLS),
    Pattern("stripesdl", Family.GRID, grid.stripes_dl, _CELLS),
    Pattern("stripesdr", Family.GRID, grid.stripes_dr, _CELLS),
    Pattern("polkaDot", Family.SHAPE, shapes.polka_dot, "lattice divisions per long edge"),
    Pattern("polkaDark", Family.SHAPE, shapes.polka_dark, "lattice divisions per long edge"),
    Pattern("polkaMid", Family.SHAPE, shapes.polka_mid, "lattice divisions per long edge"),
    Pattern("field", Family.PERIODIC, periodic.field, "gray level out of 480"),
    Pattern("radialWedge", Family.SHAPE, shapes.radial_wedge, "black sectors"),
    Pattern("radialWedgeOffsetX", Family.SHAPE, shapes.radial_wedge_offset_x, "black sectors"),
    Pattern("radialWedgeOffsetY", Family.SHAPE, shapes.radial_wedge_offset_y, "black sectors"),
    Pattern("diamond", Family.GRID, grid.diamond, _LINES),
    Pattern("crosshatch", Family.GRID, grid.crosshatch, _LINES),
    Pattern("honeycomb", Family.SHAPE, shapes.honeycomb, "hexagon diameters per long edge"),
    Pattern("ss", Family.SHAPE, shapes.ss, "strings per quadrant"),
    Pattern("squareWave", Family.PERIODIC, periodic.square_wave, "exponent x100"),
    Pattern("ramp", Family.RAMP, ramps.linear_ramp, "ramp steps", uses_luts=True),
    Pattern("gammaRamp", Family.RAMP, ramps.gamma_ramp, "ramp steps", uses_luts=True),
    Pattern("inverseGammaRamp", Family.RAMP, ramps.inverse_gamma_ramp, "ramp steps", uses_luts=True),
]

PATTERNS: Dict[str, Pattern] = {p.name: p for p in _PATTERNS}


def pattern_names() -> List[str]:
    """All registered names, in render order."""
    return list(PATTERNS)


def get_pattern(name: str) -> Pattern:
    """Look up a pattern by name.

    Raises
    ------
    KeyError
        If no pattern has that name
    """
    try:
        return PATTERNS[name]
    except KeyError:
        raise KeyError(f"Unknown pattern {name!r}") from None


def synthesize(spec: PatternSpec, luts: Optional[TransferLUTs] = None) -> Optional[SynthResult]:
    """Render a PatternSpec through the registry."""
    return get_pattern(spec.name).render(spec.size, spec.density, luts)
