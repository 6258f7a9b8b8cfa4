from __future__ import annotations

"""Recursive field-wise comparison of struct-based metric files.

Used for ``*qMetrics*.mat`` and ``reflookup.mat``.

The report lists *every* numeric field's deviation, passing or not, so one run
shows the whole picture instead of the first failure only. Field paths are
written ``var.field.subfield``.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from pipeline_parity.models.config import DEFAULT_TOLERANCE, CompareConfig
from pipeline_parity.models.entries import CheckOutcome, MismatchKind
from pipeline_parity.models.values import LoadedData, LoadedValue, ValueKind, format_shape

from .cellwise import first_shared_variable
from .numeric import compare_mat_files, format_max_abs, numeric_deviation


@dataclass
class NestedDiff:
    """Accumulated result of a recursive struct comparison."""

    ok: bool = True
    lines: List[str] = field(default_factory=list)
    kind: Optional[MismatchKind] = None

    def fail(self, kind: MismatchKind) -> None:
        self.ok = False
        if self.kind is None:
            self.kind = kind

    @property
    def message(self) -> str:
        return "; ".join(self.lines)


def compare_nested(
    a: Mapping[str, LoadedValue],
    b: Mapping[str, LoadedValue],
    *,
    tol: float = DEFAULT_TOLERANCE,
    prefix: str = "",
) -> NestedDiff:
    """
    Compare two field mappings recursively.

    Rules
    -----
    1. Field-name sets must agree at this level; otherwise this level fails
       with one line naming both sets and its fields are not compared.
    2. struct vs struct recurses; a failing child marks the whole diff failed
       but siblings are still compared.
    3. numeric vs numeric: size check, then ``max |Δ|`` (always reported).
    4. Any other combination is listed as skipped and does not fail.
    """
    out = NestedDiff()
    fields_a = list(a)
    fields_b = list(b)

    if sorted(fields_a) != sorted(fields_b):
        out.fail(MismatchKind.SCHEMA_MISMATCH)
        out.lines.append(
            "{}: field mismatch (NEW: {} | OLD: {})".format(prefix, ",".join(fields_a), ",".join(fields_b))
        )
        return out

    for name in fields_a:
        full_name = f"{prefix}.{name}" if prefix else name
        va = a[name]
        vb = b[name]

        if va.kind is ValueKind.NESTED and vb.kind is ValueKind.NESTED:
            sub = compare_nested(va.fields, vb.fields, tol=tol, prefix=full_name)
            if not sub.ok:
                out.fail(sub.kind or MismatchKind.TOLERANCE_EXCEEDED)
            if sub.lines:
                out.lines.append(sub.message)

        elif va.kind is ValueKind.NUMERIC and vb.kind is ValueKind.NUMERIC:
            dev = numeric_deviation(va.data, vb.data)
            if not dev.same_shape:
                out.fail(MismatchKind.SHAPE_MISMATCH)
                out.lines.append(
                    f"{full_name}: size mismatch {format_shape(dev.shape_new)} vs {format_shape(dev.shape_old)}"
                )
                continue
            out.lines.append(f"{full_name}: {format_max_abs(dev.max_abs)}")
            if dev.max_abs > tol:
                out.fail(MismatchKind.TOLERANCE_EXCEEDED)

        else:
            out.lines.append(
                f"{full_name}: skipped (non-numeric or type mismatch: {va.label} vs {vb.label})"
            )

    return out


def compare_struct_metrics(new: LoadedData, old: LoadedData, *, tol: float = DEFAULT_TOLERANCE) -> CheckOutcome:
    """Compare the first struct variable shared by both files."""
    if not set(new) & set(old):
        return CheckOutcome.from_ok(False, "No common variables found.", kind=MismatchKind.SCHEMA_MISMATCH)

    var = first_shared_variable(new, old, ValueKind.NESTED)
    if var is None:
        return CheckOutcome.from_ok(
            False, "No struct variables found in shared variables.", kind=MismatchKind.SCHEMA_MISMATCH
        )

    diff = compare_nested(new[var].fields, old[var].fields, tol=tol, prefix=var)
    return CheckOutcome.from_ok(diff.ok, diff.message, kind=diff.kind)


def compare_struct_metrics_mat(
    new_path: str | Path,
    old_path: str | Path,
    config: Optional[CompareConfig] = None,
) -> CheckOutcome:
    return compare_mat_files(compare_struct_metrics, new_path, old_path, config)
