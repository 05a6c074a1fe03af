"""maketargets: procedural display test-target renderer.

Layers (lowest first):
    - utils: LUTs and color pipeline, geometry, banded evaluation, atomic
      I/O, configuration, logging
    - patterns: pure synthesis functions and their registry
    - postprocess: dither / threshold-and-smooth variants
    - scheduler: job enumeration and the worker pool
    - cli: argument parsing and process exit codes
"""

__version__ = "1.0.0"
