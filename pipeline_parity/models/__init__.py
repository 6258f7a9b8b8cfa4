from .catalog import SessionTree
from .config import DEFAULT_TOLERANCE, CompareConfig
from .entries import (
    REPORT_COLUMNS,
    VERDICT_ORDER,
    CheckOutcome,
    ComparisonEntry,
    MismatchKind,
    Verdict,
)
from .values import LoadedData, LoadedValue, ValueKind, format_shape

__all__ = [
    "SessionTree",
    "DEFAULT_TOLERANCE",
    "CompareConfig",
    "REPORT_COLUMNS",
    "VERDICT_ORDER",
    "CheckOutcome",
    "ComparisonEntry",
    "MismatchKind",
    "Verdict",
    "LoadedData",
    "LoadedValue",
    "ValueKind",
    "format_shape",
]
