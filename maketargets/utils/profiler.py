"""Lightweight wall-clock timing.

Provides:
    - timer(): Context manager for wall-clock timing with optional sink

Used to measure per-job synthesis, conversion and encode time; timings go to
DEBUG logging by default.
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@contextmanager
def timer(name: str, sink: Optional[Callable[[str, float], None]] = None):
    """Context manager for wall-clock timing.

    Parameters
    ----------
    name : str
        Timer name (for logging/display)
    sink : Optional[Callable[[str, float], None]]
        Optional callback(name, elapsed_seconds)
        If None, logs at DEBUG level

    Yields
    ------
    None

    Examples
    --------
    >>> with timer("tv_rings_010"):
    ...     result = pattern.render(size, 10, luts)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if sink is not None:
            sink(name, elapsed)
        else:
            logger.debug("%s: %.3f s", name, elapsed)
