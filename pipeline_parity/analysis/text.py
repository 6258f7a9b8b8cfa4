from __future__ import annotations

"""Comparators for text files: exact line match and CSV tables."""

from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
from pandas.api.types import is_numeric_dtype

from pipeline_parity.exceptions import LoadFailure
from pipeline_parity.ingest.loaders import read_lines, read_table
from pipeline_parity.models.config import DEFAULT_TOLERANCE, CompareConfig
from pipeline_parity.models.entries import CheckOutcome, MismatchKind

from .numeric import format_max_abs, max_abs_diff


# ---------------------------------------------------------------------------
# Exact line comparison (ChannelNames.txt, do_sort_pos.txt, ...)
# ---------------------------------------------------------------------------


def compare_lines(new_lines: Sequence[str], old_lines: Sequence[str]) -> CheckOutcome:
    """
    Compare two line sequences after stripping surrounding whitespace.

    Examples
    --------
    >>> compare_lines(["a", "b "], ["a", " b"]).detail
    'Identical (2 lines)'
    >>> compare_lines(["a"], ["a", "b"]).detail
    'Different number of lines: NEW=1 OLD=2'
    """
    a = [s.strip() for s in new_lines]
    b = [s.strip() for s in old_lines]

    if len(a) != len(b):
        return CheckOutcome.from_ok(
            False,
            f"Different number of lines: NEW={len(a)} OLD={len(b)}",
            kind=MismatchKind.SHAPE_MISMATCH,
        )

    for i, (x, y) in enumerate(zip(a, b)):
        if x != y:
            return CheckOutcome.from_ok(
                False,
                f'Mismatch at line {i + 1}: NEW="{x}" | OLD="{y}"',
                kind=MismatchKind.CONTENT_MISMATCH,
            )

    return CheckOutcome.from_ok(True, f"Identical ({len(a)} lines)")


def compare_text_exact(
    new_path: str | Path,
    old_path: str | Path,
    config: Optional[CompareConfig] = None,
) -> CheckOutcome:
    try:
        new_lines = read_lines(new_path)
        old_lines = read_lines(old_path)
    except LoadFailure as e:
        return CheckOutcome.error(f"Error comparing text files: {e}")
    return compare_lines(new_lines, old_lines)


# ---------------------------------------------------------------------------
# Structured CSV tables
# ---------------------------------------------------------------------------


def _column_as_text(s: pd.Series) -> np.ndarray:
    return s.astype(object).where(s.notna(), "").astype(str).str.strip().to_numpy()


def compare_tables(new_df: pd.DataFrame, old_df: pd.DataFrame, *, tol: float = DEFAULT_TOLERANCE) -> CheckOutcome:
    """
    Column-wise comparison of two tables.

    - Column-name sets must agree and row counts must match.
    - Columns numeric on both sides: ``max |Δ|`` within tol (NaN policy of
      :func:`~pipeline_parity.analysis.numeric.max_abs_diff`).
    - Any other column: exact text comparison, NaN read as empty.
    """
    cols_new = [str(c) for c in new_df.columns]
    cols_old = [str(c) for c in old_df.columns]
    if sorted(cols_new) != sorted(cols_old):
        detail = "Column mismatch:\n  NEW: {}\n  OLD: {}".format(", ".join(cols_new), ", ".join(cols_old))
        return CheckOutcome.from_ok(False, detail, kind=MismatchKind.SCHEMA_MISMATCH)

    if len(new_df) != len(old_df):
        return CheckOutcome.from_ok(
            False,
            f"Different number of rows: NEW={len(new_df)} OLD={len(old_df)}",
            kind=MismatchKind.SHAPE_MISMATCH,
        )

    old_by_name = {str(c): c for c in old_df.columns}
    ok = True
    kind: Optional[MismatchKind] = None
    lines: List[str] = []
    for col in new_df.columns:
        name = str(col)
        a = new_df[col]
        b = old_df[old_by_name[name]]

        if is_numeric_dtype(a) and is_numeric_dtype(b):
            d = max_abs_diff(
                a.to_numpy(dtype=np.float64, na_value=np.nan),
                b.to_numpy(dtype=np.float64, na_value=np.nan),
            )
            lines.append(f"{name}: {format_max_abs(d)}")
            if d > tol:
                ok = False
                kind = kind or MismatchKind.TOLERANCE_EXCEEDED
            continue

        ta = _column_as_text(a)
        tb = _column_as_text(b)
        bad = np.flatnonzero(ta != tb)
        if bad.size:
            ok = False
            kind = kind or MismatchKind.CONTENT_MISMATCH
            i = int(bad[0])
            lines.append(f'{name}: {bad.size} text mismatches (first at row {i}: NEW="{ta[i]}" | OLD="{tb[i]}")')
        else:
            lines.append(f"{name}: identical text")

    if not lines:
        return CheckOutcome.from_ok(True, "Both tables empty")
    return CheckOutcome.from_ok(ok, "; ".join(lines), kind=kind)


def compare_structured_csv(
    new_path: str | Path,
    old_path: str | Path,
    config: Optional[CompareConfig] = None,
) -> CheckOutcome:
    cfg = config or CompareConfig()
    try:
        new_df = read_table(new_path)
        old_df = read_table(old_path)
    except LoadFailure as e:
        return CheckOutcome.error(str(e))
    return compare_tables(new_df, old_df, tol=cfg.tolerance)
