from __future__ import annotations

"""Cell-by-cell comparison of heterogeneous (cell array) .mat variables.

Used for ``cluster_info.mat``. The first variable (in NEW order) that is a cell
array in both files is compared; cells may independently hold numeric arrays,
text or nothing.

Per-cell rules
--------------
- numeric vs numeric: same shape, then ``max |Δ|`` within tolerance
- text vs text:       exact equality
- empty vs empty:     equal (e.g. ``[]`` vs ``''``)
- anything else:      type mismatch

Positions are reported 1-based as ``(row,col)``, the way MATLAB shows them.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

from pipeline_parity.models.config import DEFAULT_MISMATCH_PREVIEW, DEFAULT_TOLERANCE, CompareConfig
from pipeline_parity.models.entries import CheckOutcome, MismatchKind
from pipeline_parity.models.values import LoadedData, LoadedValue, ValueKind, format_shape

from .numeric import compare_mat_files, numeric_deviation


@dataclass(frozen=True)
class CellMismatch:
    row: int  # 1-based
    col: int  # 1-based
    kind: MismatchKind
    description: str

    def __str__(self) -> str:
        return f"({self.row},{self.col}): {self.description}"


def first_shared_variable(new: LoadedData, old: LoadedData, kind: ValueKind) -> Optional[str]:
    """First variable name, in NEW order, holding a value of ``kind`` on both sides."""
    for name, value in new.items():
        other = old.get(name)
        if other is not None and value.kind is kind and other.kind is kind:
            return name
    return None


def compare_cell(x: LoadedValue, y: LoadedValue, *, tol: float) -> Optional[Tuple[MismatchKind, str]]:
    """Compare two cells; None when they match, else (kind, short description)."""
    if x.kind is ValueKind.NUMERIC and y.kind is ValueKind.NUMERIC:
        dev = numeric_deviation(x.data, y.data)
        if not dev.same_shape:
            return MismatchKind.SHAPE_MISMATCH, "size mismatch"
        if dev.max_abs > tol:
            return MismatchKind.TOLERANCE_EXCEEDED, f"|Δ|={dev.max_abs:.3g}"
        return None
    if x.kind is ValueKind.TEXT and y.kind is ValueKind.TEXT:
        if x.data != y.data:
            return MismatchKind.CONTENT_MISMATCH, f"text mismatch ({x.data} ≠ {y.data})"
        return None
    if x.is_empty and y.is_empty:
        return None
    return MismatchKind.TYPE_MISMATCH, f"type mismatch ({x.label} vs {y.label})"


def compare_cellwise(
    new: LoadedData,
    old: LoadedData,
    *,
    tol: float = DEFAULT_TOLERANCE,
    preview: int = DEFAULT_MISMATCH_PREVIEW,
) -> CheckOutcome:
    """
    Compare the main cell array of two loaded files.

    Every mismatching position is counted; the detail previews the first
    ``preview`` of them in row-major order.
    """
    if not set(new) & set(old):
        return CheckOutcome.from_ok(False, "No common variables found.", kind=MismatchKind.SCHEMA_MISMATCH)

    var = first_shared_variable(new, old, ValueKind.HETEROGENEOUS)
    if var is None:
        return CheckOutcome.from_ok(
            False,
            "No heterogeneous collection found in shared variables.",
            kind=MismatchKind.SCHEMA_MISMATCH,
        )

    a: np.ndarray = new[var].data
    b: np.ndarray = old[var].data
    if a.shape != b.shape:
        return CheckOutcome.from_ok(
            False,
            f"Size mismatch in {var}: {format_shape(a.shape)} vs {format_shape(b.shape)}",
            kind=MismatchKind.SHAPE_MISMATCH,
        )

    n_rows, n_cols = a.shape
    mismatches: List[CellMismatch] = []
    for r in range(n_rows):
        for c in range(n_cols):
            res = compare_cell(a[r, c], b[r, c], tol=tol)
            if res is not None:
                mismatches.append(CellMismatch(row=r + 1, col=c + 1, kind=res[0], description=res[1]))

    if not mismatches:
        return CheckOutcome.from_ok(True, f"{var}: all {n_rows}x{n_cols} cells match within tolerance")

    shown = mismatches[: max(0, int(preview))]
    detail = "{}: {} mismatches (showing {}): {}".format(
        var, len(mismatches), len(shown), "; ".join(str(m) for m in shown)
    )
    return CheckOutcome.from_ok(False, detail, kind=mismatches[0].kind)


def compare_cellwise_mat(
    new_path: str | Path,
    old_path: str | Path,
    config: Optional[CompareConfig] = None,
) -> CheckOutcome:
    cfg = config or CompareConfig()
    return compare_mat_files(compare_cellwise, new_path, old_path, cfg, preview=cfg.mismatch_preview)
