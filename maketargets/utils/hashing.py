"""SHA-256 hashing for output provenance.

Provides:
    - sha256_file(): Hash file contents (written targets)
    - sha256_array(): Hash array values (in-memory buffers)

Used by the run manifest to record a digest for every written image, so two
runs can be compared for byte-identical output.

Deterministic hashing:
    - Arrays hashed over shape, dtype and C-ordered bytes
    - Files read in chunks (1 MB default) for memory efficiency
    - Results are hex strings (64 chars)

Note: Module named `hashing.py` to avoid shadowing builtin `hash()`.
"""

import hashlib
from pathlib import Path
from typing import Union

import numpy as np


def sha256_file(path: Union[str, Path], chunk_size: int = 1 << 20) -> str:
    """Compute SHA-256 hash of file contents.

    Parameters
    ----------
    path : Union[str, Path]
        File path
    chunk_size : int
        Read chunk size in bytes, default 1 MB

    Returns
    -------
    str
        SHA-256 hex digest (64 characters)

    Raises
    ------
    FileNotFoundError
        If file doesn't exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    sha256 = hashlib.sha256()

    with open(path, 'rb') as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            sha256.update(chunk)

    return sha256.hexdigest()


def sha256_array(a: np.ndarray) -> str:
    """Compute SHA-256 hash of array values.

    Parameters
    ----------
    a : np.ndarray
        Any array

    Returns
    -------
    str
        SHA-256 hex digest; equal for arrays with equal shape, dtype
        and contents
    """
    sha256 = hashlib.sha256()
    sha256.update(str(a.shape).encode('utf-8'))
    sha256.update(a.dtype.str.encode('utf-8'))
    sha256.update(np.ascontiguousarray(a).tobytes())
    return sha256.hexdigest()
