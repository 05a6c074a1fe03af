"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - Transfer LUTs and the color pipeline (color)
    - Canvas geometry and centered coordinates (geometry)
    - Banded per-pixel evaluation (compute)
    - Atomic image / YAML I/O (fs)
    - Hashing for output provenance (hashing)
    - Static configuration models (validators)
    - Wall-clock timing (profiler)
    - Unified logging (logging_config)

No module in utils/ may import from upper layers (patterns, postprocess,
scheduler).

Convenience imports:
    from maketargets.utils import color, fs, validators
    from maketargets.utils.logging_config import setup_logging, push_context
"""

from . import color
from . import compute
from . import fs
from . import geometry
from . import hashing
from . import logging_config
from . import profiler
from . import validators

from .logging_config import push_context, setup_logging

__all__ = [
    'color',
    'compute',
    'fs',
    'geometry',
    'hashing',
    'logging_config',
    'profiler',
    'validators',
    'setup_logging',
    'push_context',
]
