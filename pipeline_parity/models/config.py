from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


# Absolute element-wise tolerance shared by every numeric comparison.
DEFAULT_TOLERANCE: float = 1e-6

# Intermediate/staging folders written by the sorter; never part of a comparison.
DEFAULT_EXCLUDE_DIR_PATTERNS: Tuple[str, ...] = ("combinatostuff_*",)

DEFAULT_HASH_ALGORITHM = "sha256"
DEFAULT_HASH_CHUNK_BYTES = 1 << 20
DEFAULT_MISMATCH_PREVIEW = 5


@dataclass(frozen=True)
class CompareConfig:
    """Configuration for one NEW-vs-OLD session comparison.

    The same instance is handed to the dispatcher and to every comparator call,
    so comparators never read global state.

    Attributes
    ----------
    tolerance:
        Maximum allowed absolute element-wise deviation for numeric data.
    exclude_dir_patterns:
        fnmatch patterns; a file is ignored on both sides when any directory
        component of its relative path matches one of them.
    hash_algorithm:
        Name understood by ``hashlib.new``.
    hash_chunk_bytes:
        Read size used when streaming files through the hash.
    mismatch_preview:
        Maximum number of individual cell mismatches quoted in a detail message.
    """

    tolerance: float = DEFAULT_TOLERANCE
    exclude_dir_patterns: Tuple[str, ...] = DEFAULT_EXCLUDE_DIR_PATTERNS
    hash_algorithm: str = DEFAULT_HASH_ALGORITHM
    hash_chunk_bytes: int = DEFAULT_HASH_CHUNK_BYTES
    mismatch_preview: int = DEFAULT_MISMATCH_PREVIEW

    def __post_init__(self) -> None:
        if not self.tolerance >= 0.0:
            raise ValueError(f"tolerance must be >= 0, got {self.tolerance!r}")
        if self.hash_chunk_bytes <= 0:
            raise ValueError(f"hash_chunk_bytes must be > 0, got {self.hash_chunk_bytes!r}")
        if self.mismatch_preview < 0:
            raise ValueError(f"mismatch_preview must be >= 0, got {self.mismatch_preview!r}")
        # Accept any iterable of patterns (e.g. a list from argparse).
        object.__setattr__(self, "exclude_dir_patterns", tuple(self.exclude_dir_patterns))
