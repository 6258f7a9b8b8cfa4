from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Verdict(str, Enum):
    """Per-file outcome."""

    PASS = "PASS"
    FAIL = "FAIL"
    WARN = "WARN"
    SKIP = "SKIP"
    ERROR = "ERROR"


# Order used by summaries and counts.
VERDICT_ORDER: Tuple[Verdict, ...] = (
    Verdict.PASS,
    Verdict.FAIL,
    Verdict.WARN,
    Verdict.SKIP,
    Verdict.ERROR,
)


class MismatchKind(str, Enum):
    """Why a check did not pass. Informational; the verdict is what counts."""

    LOAD_FAILURE = "load_failure"
    SCHEMA_MISMATCH = "schema_mismatch"
    SHAPE_MISMATCH = "shape_mismatch"
    TOLERANCE_EXCEEDED = "tolerance_exceeded"
    TYPE_MISMATCH = "type_mismatch"
    CONTENT_MISMATCH = "content_mismatch"
    PRESENCE_MISMATCH = "presence_mismatch"
    HELPER_UNAVAILABLE = "helper_unavailable"


@dataclass(frozen=True)
class CheckOutcome:
    """What a comparator reports for one file pair.

    Attributes
    ----------
    verdict:
        PASS/FAIL/WARN/SKIP/ERROR.
    detail:
        Human-readable explanation (deviation summary or first mismatch).
    size_delta_bytes:
        Absolute byte-size difference; only the size-based checks set it.
    kind:
        Optional classification of the failure.
    """

    verdict: Verdict
    detail: str = ""
    size_delta_bytes: Optional[int] = None
    kind: Optional[MismatchKind] = None

    @property
    def ok(self) -> bool:
        return self.verdict is Verdict.PASS

    @classmethod
    def from_ok(
        cls,
        ok: bool,
        detail: str = "",
        *,
        size_delta_bytes: Optional[int] = None,
        kind: Optional[MismatchKind] = None,
    ) -> "CheckOutcome":
        return cls(
            verdict=Verdict.PASS if ok else Verdict.FAIL,
            detail=detail,
            size_delta_bytes=size_delta_bytes,
            kind=None if ok else kind,
        )

    @classmethod
    def error(cls, detail: str, kind: MismatchKind = MismatchKind.LOAD_FAILURE) -> "CheckOutcome":
        return cls(verdict=Verdict.ERROR, detail=detail, kind=kind)


# Stable column order of the report table.
REPORT_COLUMNS: Tuple[str, ...] = (
    "file_rel",
    "file_type",
    "check",
    "result",
    "detail",
    "size_diff_bytes",
)


@dataclass(frozen=True)
class ComparisonEntry:
    """One row of the session report: a single relative path and its verdict.

    Entries are immutable; the dispatcher builds each one exactly once, after
    the verdict for its path is known.
    """

    file_rel: str
    file_type: str
    check: str
    result: Verdict
    detail: str
    size_diff_bytes: Optional[int] = None

    @classmethod
    def from_outcome(cls, file_rel: str, file_type: str, check: str, outcome: CheckOutcome) -> "ComparisonEntry":
        return cls(
            file_rel=file_rel,
            file_type=file_type,
            check=check,
            result=outcome.verdict,
            detail=outcome.detail,
            size_diff_bytes=outcome.size_delta_bytes,
        )

    def to_record(self) -> Dict[str, Any]:
        """Plain dict in REPORT_COLUMNS order, verdict as text."""
        d = asdict(self)
        d["result"] = self.result.value
        return {k: d[k] for k in REPORT_COLUMNS}
