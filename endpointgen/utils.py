# File: endpointgen/utils.py
"""
endpointgen - Utility Functions & Helpers
==========================================
Output and timing helpers for the resolver and the CLI.
"""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import List, Optional

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("endpointgen.utils")


# ---------------------------------------------------------------------------
# Symbol table output
# ---------------------------------------------------------------------------


def write_file(path: Path, content: str) -> int:
    """
    Write *content* to *path* as UTF-8 and return the number of bytes written.

    Missing parent directories are created.  The bytes land in a temporary
    sibling first and replace *path* in one rename, so readers never see a
    truncated symbol table.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    encoded: bytes = content.encode("utf-8")

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(encoded)
        os.replace(tmp_name, path)
    except OSError:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.debug("Wrote %d bytes to %s", len(encoded), path)
    return len(encoded)


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class Timer:
    """Context manager recording how long its block took in ``elapsed``."""

    __slots__ = ("label", "_start", "elapsed")

    def __init__(self, label: str) -> None:
        self.label: str = label
        self._start: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.elapsed = time.perf_counter() - self._start

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


__all__: List[str] = [
    "write_file",
    "sha256_hex",
    "Timer",
]
