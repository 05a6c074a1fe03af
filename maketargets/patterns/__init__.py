"""Pattern library: pure synthesis functions and their registry.

Families:
    - grid: line lattices and parity fills (edge-corrected)
    - periodic: trigonometric continuous-tone fields
    - shapes: dots, hexagons, wedges, string art
    - ramps: stepped ramps with a LUT-referenced dither row

Every synthesis function maps (Size, density) to a SynthResult holding an
(H, W, 4) uint16 canvas and a post-process flag, or to None when the
size/density combination cannot be drawn.
"""

from .canvas import SynthResult, gray
from .registry import PATTERNS, Family, Pattern, PatternSpec, get_pattern, pattern_names, synthesize

__all__ = [
    'PATTERNS',
    'Family',
    'Pattern',
    'PatternSpec',
    'SynthResult',
    'get_pattern',
    'gray',
    'pattern_names',
    'synthesize',
]
