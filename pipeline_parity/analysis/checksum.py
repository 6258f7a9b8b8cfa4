from __future__ import annotations

"""Byte-level comparators: content hash (with size fallback) and size-only.

Hashing is a two-stage strategy. The content hash is attempted first; if it
cannot be computed on either side (permissions, unknown algorithm, ...) the
verdict falls back to size equality and the detail says so explicitly. A
failed hash attempt is never reported as "files differ".
"""

import hashlib
import logging
from pathlib import Path
from typing import Optional, Tuple

from pipeline_parity.models.config import DEFAULT_HASH_ALGORITHM, DEFAULT_HASH_CHUNK_BYTES, CompareConfig
from pipeline_parity.models.entries import CheckOutcome, MismatchKind, Verdict


logger = logging.getLogger(__name__)


def file_digest(
    path: str | Path,
    algorithm: str = DEFAULT_HASH_ALGORITHM,
    chunk_bytes: int = DEFAULT_HASH_CHUNK_BYTES,
) -> str:
    """Hex digest of a file, streamed in chunks."""
    h = hashlib.new(algorithm)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_bytes), b""):
            h.update(chunk)
    return h.hexdigest()


def _sizes(new_path: str | Path, old_path: str | Path) -> Tuple[int, int]:
    return int(Path(new_path).stat().st_size), int(Path(old_path).stat().st_size)


def compare_checksum(
    new_path: str | Path,
    old_path: str | Path,
    config: Optional[CompareConfig] = None,
) -> CheckOutcome:
    """
    Compare two files by content hash, falling back to byte size.

    The absolute size difference is always reported in ``size_delta_bytes``.
    """
    cfg = config or CompareConfig()
    try:
        size_new, size_old = _sizes(new_path, old_path)
    except OSError as e:
        return CheckOutcome.error(f"Failed to stat files: {e}")
    delta = abs(size_new - size_old)
    label = cfg.hash_algorithm.upper()

    try:
        hash_new = file_digest(new_path, cfg.hash_algorithm, cfg.hash_chunk_bytes)
        hash_old = file_digest(old_path, cfg.hash_algorithm, cfg.hash_chunk_bytes)
    except (OSError, ValueError) as e:
        logger.warning("%s computation failed for %s, falling back to size: %s", label, Path(new_path).name, e)
        reason = f"{label} unavailable: {type(e).__name__}: {e}"
        if delta == 0:
            return CheckOutcome.from_ok(True, f"Same file size ({size_new} bytes), {reason}", size_delta_bytes=0)
        return CheckOutcome.from_ok(
            False,
            f"Size differ: NEW={size_new} OLD={size_old} (Δ={delta}), {reason}",
            size_delta_bytes=delta,
            kind=MismatchKind.CONTENT_MISMATCH,
        )

    if hash_new == hash_old:
        return CheckOutcome.from_ok(True, f"{label} match ({hash_new})", size_delta_bytes=delta)
    return CheckOutcome.from_ok(
        False,
        f"{label} differ: NEW={hash_new} OLD={hash_old} (Δbytes={delta})",
        size_delta_bytes=delta,
        kind=MismatchKind.CONTENT_MISMATCH,
    )


def compare_size_only(
    new_path: str | Path,
    old_path: str | Path,
    config: Optional[CompareConfig] = None,
) -> CheckOutcome:
    """
    Byte-size comparison for rendered media (images, figures, HDF5).

    A size difference is advisory: WARN, never FAIL.
    """
    try:
        size_new, size_old = _sizes(new_path, old_path)
    except OSError as e:
        return CheckOutcome.error(f"Failed to stat files: {e}")
    delta = abs(size_new - size_old)
    if delta == 0:
        return CheckOutcome(Verdict.PASS, f"Same file size ({size_new} bytes)", size_delta_bytes=0)
    return CheckOutcome(
        Verdict.WARN,
        f"File size differ: NEW={size_new} OLD={size_old} (Δ={delta})",
        size_delta_bytes=delta,
        kind=MismatchKind.CONTENT_MISMATCH,
    )
