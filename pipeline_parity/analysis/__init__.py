"""Comparison package.

Design principle:
  - Ingest produces LoadedData (tagged values) or raw paths.
  - Comparators consume a NEW/OLD pair and return a CheckOutcome; they never
    raise for bad input data and never decide anything about other files.

Each comparator exists at two levels:
  - a pure function on loaded data (compare_elementwise, compare_cellwise, ...)
  - a file-level wrapper ``fn(new_path, old_path, config)`` used by the dispatcher.
"""

from .cellwise import compare_cellwise, compare_cellwise_mat
from .checksum import compare_checksum, compare_size_only, file_digest
from .classify import (
    CHECK_CELLWISE,
    CHECK_CHECKSUM,
    CHECK_ELEMENTWISE,
    CHECK_SIZE_ONLY,
    CHECK_STRUCT_METRICS,
    CHECK_STRUCTURED_CSV,
    CHECK_TEXT_EXACT,
    ROUTES,
    Route,
    classify_file,
    route_for,
)
from .elementwise import compare_elementwise, compare_elementwise_mat
from .numeric import max_abs_diff, numeric_deviation
from .struct_metrics import compare_nested, compare_struct_metrics, compare_struct_metrics_mat
from .text import compare_lines, compare_structured_csv, compare_tables, compare_text_exact

# Registry: check name -> file-level comparator fn(new_path, old_path, config).
COMPARATORS = {
    CHECK_TEXT_EXACT: compare_text_exact,
    CHECK_STRUCTURED_CSV: compare_structured_csv,
    CHECK_ELEMENTWISE: compare_elementwise_mat,
    CHECK_CELLWISE: compare_cellwise_mat,
    CHECK_STRUCT_METRICS: compare_struct_metrics_mat,
    CHECK_CHECKSUM: compare_checksum,
    CHECK_SIZE_ONLY: compare_size_only,
}

__all__ = [
    "COMPARATORS",
    "ROUTES",
    "Route",
    "classify_file",
    "route_for",
    "compare_cellwise",
    "compare_cellwise_mat",
    "compare_checksum",
    "compare_size_only",
    "file_digest",
    "compare_elementwise",
    "compare_elementwise_mat",
    "max_abs_diff",
    "numeric_deviation",
    "compare_nested",
    "compare_struct_metrics",
    "compare_struct_metrics_mat",
    "compare_lines",
    "compare_structured_csv",
    "compare_tables",
    "compare_text_exact",
]
