"""Atomic filesystem operations: image persistence and YAML manifests.

Provides:
    - Atomic writes: tmp file → fsync → rename (no partially written outputs)
    - 16-bit RGBA PNG encoding via OpenCV
    - YAML dump for run manifests
    - Directory creation with exist_ok semantics

Every failure to create or encode an output raises PersistenceError, which
the scheduler treats as fatal for the whole run.

All paths use pathlib.Path for cross-platform compatibility.

Usage:
    from maketargets.utils import fs
    fs.atomic_save_image(pixels, out_dir / "tv_rings_010.png")
    fs.atomic_yaml_dump(manifest, out_dir / "manifest.yaml")
"""

import os
from pathlib import Path
from typing import Any, Union

import cv2
import numpy as np
import yaml

IMAGE_EXTENSION = ".png"


class PersistenceError(RuntimeError):
    """Raised when an output file cannot be created or encoded."""

    pass


def ensure_dir(p: Union[str, Path]) -> Path:
    """Create directory if it doesn't exist, return Path object.

    Parameters
    ----------
    p : Union[str, Path]
        Directory path

    Returns
    -------
    Path
        Path object (guaranteed to exist)

    Notes
    -----
    Thread-safe (mkdir with exist_ok=True).
    """
    p = Path(p)
    try:
        p.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PersistenceError(f"Cannot create directory {p}: {e}") from e
    return p


def atomic_write_bytes(
    path: Union[str, Path],
    data: bytes,
    tmp_suffix: str = ".tmp"
) -> None:
    """Write bytes to file atomically (tmp → fsync → rename).

    Parameters
    ----------
    path : Union[str, Path]
        Target file path
    data : bytes
        Data to write
    tmp_suffix : str
        Temporary file suffix, default ".tmp"

    Notes
    -----
    Uses same directory for tmp file to ensure atomic rename on same filesystem.
    """
    path = Path(path)
    ensure_dir(path.parent)

    tmp_path = path.with_suffix(path.suffix + tmp_suffix)

    try:
        with open(tmp_path, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

        # Atomic rename (overwrites existing file on POSIX)
        tmp_path.replace(path)
    except OSError as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise PersistenceError(f"Failed to write {path} atomically: {e}") from e


def encode_png(pixels: np.ndarray) -> bytes:
    """Encode an RGBA16 buffer as a 16-bit PNG.

    Parameters
    ----------
    pixels : np.ndarray
        (H, W, 4) uint16 RGBA

    Returns
    -------
    bytes
        PNG file contents

    Notes
    -----
    OpenCV expects BGRA channel order.
    """
    if pixels.ndim != 3 or pixels.shape[2] != 4 or pixels.dtype != np.uint16:
        raise PersistenceError(
            f"Expected (H, W, 4) uint16 pixels, got {pixels.shape} {pixels.dtype}"
        )
    bgra = cv2.cvtColor(pixels, cv2.COLOR_RGBA2BGRA)
    ok, buf = cv2.imencode(IMAGE_EXTENSION, bgra)
    if not ok:
        raise PersistenceError("PNG encoder rejected the buffer")
    return buf.tobytes()


def atomic_save_image(pixels: np.ndarray, path: Union[str, Path]) -> Path:
    """Encode and save an RGBA16 image atomically.

    Parameters
    ----------
    pixels : np.ndarray
        (H, W, 4) uint16 RGBA
    path : Union[str, Path]
        Target path; IMAGE_EXTENSION is appended when missing

    Returns
    -------
    Path
        Path written
    """
    path = Path(path)
    if path.suffix != IMAGE_EXTENSION:
        path = path.with_name(path.name + IMAGE_EXTENSION)
    atomic_write_bytes(path, encode_png(pixels))
    return path


def load_image(path: Union[str, Path]) -> np.ndarray:
    """Read a PNG written by atomic_save_image back as RGBA16.

    Raises
    ------
    FileNotFoundError
        If the file is missing or cannot be decoded
    """
    path = Path(path)
    bgra = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if bgra is None:
        raise FileNotFoundError(f"Cannot read image: {path}")
    return cv2.cvtColor(bgra, cv2.COLOR_BGRA2RGBA)


def atomic_yaml_dump(obj: Any, path: Union[str, Path]) -> None:
    """Save object as YAML atomically.

    Parameters
    ----------
    obj : Any
        Python object (dict, list, primitives)
    path : Union[str, Path]
        Target YAML file path

    Notes
    -----
    Uses PyYAML safe_dump; preserves insertion order.
    """
    yaml_str = yaml.safe_dump(
        obj,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True
    )
    atomic_write_bytes(path, yaml_str.encode('utf-8'))


def load_yaml(path: Union[str, Path]) -> Any:
    """Load a YAML file safely (used to read manifests back)."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f)
