from __future__ import annotations

"""Element-wise comparison of numeric .mat files.

Used for ``times_CSC*.mat``, ``CSC*_spikes.mat`` and ``channels.mat``.

Checks performed
----------------
1. Same set of variable names in both files (order-independent).
2. Equal shapes for every numeric variable.
3. ``max |Δ|`` per numeric variable within tolerance.

Non-numeric variables are listed as skipped and never fail the file.
"""

from pathlib import Path
from typing import List, Optional

from pipeline_parity.models.config import DEFAULT_TOLERANCE, CompareConfig
from pipeline_parity.models.entries import CheckOutcome, MismatchKind
from pipeline_parity.models.values import LoadedData, ValueKind, format_shape

from .numeric import compare_mat_files, format_max_abs, numeric_deviation


def compare_elementwise(new: LoadedData, old: LoadedData, *, tol: float = DEFAULT_TOLERANCE) -> CheckOutcome:
    """
    Compare every shared numeric variable of two loaded files.

    Parameters
    ----------
    new, old:
        Loaded variables of the NEW and OLD file.
    tol:
        Absolute tolerance on the maximum element-wise deviation.

    Returns
    -------
    CheckOutcome
        PASS only if the name sets agree and every numeric variable has the
        same shape and a deviation <= tol. The detail lists one
        ``name: summary`` entry per variable, in NEW declaration order.
    """
    names_new = list(new)
    names_old = list(old)

    if sorted(names_new) != sorted(names_old):
        detail = "Variable mismatch:\n  NEW: {}\n  OLD: {}".format(", ".join(names_new), ", ".join(names_old))
        return CheckOutcome.from_ok(False, detail, kind=MismatchKind.SCHEMA_MISMATCH)

    ok = True
    kind: Optional[MismatchKind] = None
    lines: List[str] = []
    for name in names_new:
        a = new[name]
        b = old[name]
        if a.kind is not ValueKind.NUMERIC or b.kind is not ValueKind.NUMERIC:
            lines.append(f"{name}: Skipped (non-numeric)")
            continue

        dev = numeric_deviation(a.data, b.data)
        if not dev.same_shape:
            ok = False
            kind = kind or MismatchKind.SHAPE_MISMATCH
            lines.append(f"{name}: Size mismatch: {format_shape(dev.shape_new)} vs {format_shape(dev.shape_old)}")
            continue

        lines.append(f"{name}: {format_max_abs(dev.max_abs)}")
        if dev.max_abs > tol:
            ok = False
            kind = kind or MismatchKind.TOLERANCE_EXCEEDED

    return CheckOutcome.from_ok(ok, "; ".join(lines), kind=kind)


def compare_elementwise_mat(
    new_path: str | Path,
    old_path: str | Path,
    config: Optional[CompareConfig] = None,
) -> CheckOutcome:
    return compare_mat_files(compare_elementwise, new_path, old_path, config)
