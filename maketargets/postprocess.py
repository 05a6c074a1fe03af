"""Post-processing strategies producing the secondary 1-bit variants.

Strategies:
    - dither(): stochastic halftone, white where a fresh uint16 draw is
      below the source red channel (suffix "_dith")
    - threshold_and_smooth(): hard threshold at mid gray followed by a
      Gaussian blur of σ = 1 px (suffix "_clamp")

Both read the synthesized (pre-conversion) buffer of a RenderedImage, return a
new RGBA16 buffer of identical dimensions, and never mutate their input.
The dither generator is re-seeded with DITHER_SEED for every image, so a
given source always dithers to the same bits.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

from maketargets.patterns.canvas import BLACK, MID_GRAY, WHITE, to_rgba

DITHER_SEED = 0x1D17
SMOOTH_SIGMA = 1.0

SUFFIXES = {
    "clamp": "_clamp",
    "dither": "_dith",
}


@dataclass(frozen=True)
class RenderedImage:
    """One job's result after synthesis and color conversion.

    Attributes
    ----------
    stem : str
        Output file name without extension
    pixels : np.ndarray
        (H, W, 4) uint16, transfer-encoded
    source : np.ndarray
        (H, W, 4) uint16, as synthesized
    needs_post_process : bool
        Copied from the pattern's SynthResult
    """

    stem: str
    pixels: np.ndarray
    source: np.ndarray
    needs_post_process: bool


def dither(image: RenderedImage, seed: int = DITHER_SEED) -> np.ndarray:
    """Stochastic 1-bit halftone of the source red channel.

    Parameters
    ----------
    image : RenderedImage
        Input image
    seed : int
        Generator seed, default DITHER_SEED

    Returns
    -------
    np.ndarray
        (H, W, 4) uint16, every pixel pure black or pure white
    """
    red = image.source[..., 0]
    rng = np.random.default_rng(seed)
    draws = rng.integers(0, WHITE + 1, size=red.shape, dtype=np.uint16)
    return to_rgba(np.where(draws < red, WHITE, BLACK).astype(np.uint16))


def threshold_and_smooth(image: RenderedImage, sigma: float = SMOOTH_SIGMA) -> np.ndarray:
    """Threshold the source red channel at mid gray, then soften the edges.

    Parameters
    ----------
    image : RenderedImage
        Input image
    sigma : float
        Gaussian blur sigma in pixels, default 1.0

    Returns
    -------
    np.ndarray
        (H, W, 4) uint16
    """
    red = image.source[..., 0]
    hard = np.where(red > MID_GRAY, WHITE, BLACK).astype(np.uint16)
    smooth = cv2.GaussianBlur(hard, (0, 0), sigmaX=sigma, sigmaY=sigma, borderType=cv2.BORDER_REPLICATE)
    return to_rgba(smooth)


_STRATEGIES = {
    "clamp": threshold_and_smooth,
    "dither": dither,
}


def post_process(image: RenderedImage, mode: str) -> Optional[Tuple[str, np.ndarray]]:
    """Produce the post-processed variant requested by ``mode``.

    Parameters
    ----------
    image : RenderedImage
        Input image
    mode : str
        "clamp", "dither" or "none"

    Returns
    -------
    Optional[Tuple[str, np.ndarray]]
        (variant stem, pixels), or None when the image does not ask for a
        variant or mode is "none"

    Raises
    ------
    ValueError
        If mode is unknown
    """
    if mode != "none" and mode not in _STRATEGIES:
        raise ValueError(f"Unknown post-process mode: {mode}. Use 'clamp', 'dither' or 'none'.")
    if mode == "none" or not image.needs_post_process:
        return None
    return image.stem + SUFFIXES[mode], _STRATEGIES[mode](image)
