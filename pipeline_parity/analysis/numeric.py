from __future__ import annotations

"""Shared numeric deviation helpers and the .mat file-pair wrapper.

Deviation policy
----------------
The deviation between two equally shaped arrays is ``max |a - b|`` computed in
float64 (complex128 for complex data). Two special cases:

- NaN on both sides at the same position, and identical infinities, count as
  equal (deviation 0 at that position).
- NaN on one side only counts as an infinite deviation, so it always exceeds
  the tolerance.

Empty arrays of equal shape have deviation 0.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import numpy as np

from pipeline_parity.exceptions import LoadFailure
from pipeline_parity.ingest.loaders import load_mat
from pipeline_parity.models.config import CompareConfig
from pipeline_parity.models.entries import CheckOutcome, MismatchKind
from pipeline_parity.models.values import LoadedData, as_float_array, format_shape


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NumericDeviation:
    """Result of comparing two numeric arrays."""

    shape_new: tuple
    shape_old: tuple
    max_abs: float = 0.0

    @property
    def same_shape(self) -> bool:
        return self.shape_new == self.shape_old

    def within(self, tol: float) -> bool:
        return self.same_shape and not (self.max_abs > tol)

    def describe(self) -> str:
        if not self.same_shape:
            return f"size mismatch {format_shape(self.shape_new)} vs {format_shape(self.shape_old)}"
        return format_max_abs(self.max_abs)


def max_abs_diff(a: np.ndarray, b: np.ndarray) -> float:
    """
    Maximum absolute element-wise difference of two equally shaped arrays.

    Examples
    --------
    >>> max_abs_diff(np.array([1.0, 2.0]), np.array([1.0, 2.5]))
    0.5
    >>> max_abs_diff(np.array([np.nan]), np.array([np.nan]))
    0.0
    >>> max_abs_diff(np.array([np.nan]), np.array([1.0]))
    inf
    """
    x = as_float_array(a)
    y = as_float_array(b)
    if x.shape != y.shape:
        raise ValueError(f"shape mismatch: {x.shape} vs {y.shape}")
    if x.size == 0:
        return 0.0

    same = (x == y) | (np.isnan(x) & np.isnan(y))
    with np.errstate(invalid="ignore"):
        d = np.abs(x - y)
    d = np.where(same, 0.0, d)
    d = np.where(np.isnan(d), np.inf, d)
    return float(np.max(d))


def numeric_deviation(a: np.ndarray, b: np.ndarray) -> NumericDeviation:
    shape_a = tuple(int(n) for n in np.shape(a))
    shape_b = tuple(int(n) for n in np.shape(b))
    if shape_a != shape_b:
        return NumericDeviation(shape_new=shape_a, shape_old=shape_b, max_abs=float("nan"))
    return NumericDeviation(shape_new=shape_a, shape_old=shape_b, max_abs=max_abs_diff(a, b))


def format_max_abs(value: float) -> str:
    return f"max |Δ| = {value:.3g}"


def compare_mat_files(
    compare: Callable[..., CheckOutcome],
    new_path: str | Path,
    old_path: str | Path,
    config: Optional[CompareConfig] = None,
    **kwargs,
) -> CheckOutcome:
    """
    Load both .mat files and run ``compare(new, old, tol=..., **kwargs)``.

    A file that cannot be loaded turns into an ERROR outcome carrying the reason.
    """
    cfg = config or CompareConfig()
    try:
        new: LoadedData = load_mat(new_path)
        old: LoadedData = load_mat(old_path)
    except LoadFailure as e:
        logger.warning("%s", e)
        return CheckOutcome.error(str(e), kind=MismatchKind.LOAD_FAILURE)
    return compare(new, old, tol=cfg.tolerance, **kwargs)
