"""
Cache fingerprinting

Computes a deterministic SHA-256 over the files extensions declare as cache
inputs, so identical local and CI runs can reuse the same cache directories.
"""

import hashlib
import logging
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)


def compute_fingerprint(base_dir: Path, inputs: Iterable[str]) -> str:
    """
    Hash the content identity of ``inputs`` relative to ``base_dir``

    Inputs are sorted first so the result does not depend on extension order.
    A missing file is not an error; its absence is mixed into the hash.

    Returns:
        Hex digest

    Raises:
        OSError: If an existing input cannot be read
    """
    hasher = hashlib.sha256()

    for name in sorted(set(inputs)):
        path = Path(base_dir) / name
        hasher.update(name.encode("utf-8"))
        hasher.update(b"\0")

        if path.is_file():
            content = path.read_bytes()
            hasher.update(content)
            logger.debug(f"fingerprint: mixed {name} ({len(content)} bytes)")
        else:
            hasher.update(b"missing\0")
            logger.debug(f"fingerprint: input {name} is absent")

    return hasher.hexdigest()
