"""Pipeline Parity -- NEW-vs-OLD output validation for a spike-sorting session.

Two runs of the same processing pipeline over one recording session should
produce equivalent outputs. This package walks both output trees, pairs files
by relative path and applies a check chosen from the file name and extension:

- Exact line comparison for small deterministic text files
- Tolerance-based element-wise comparison of numeric MATLAB variables
- Cell-by-cell comparison of mixed numeric/text cell arrays
- Recursive field-wise comparison of nested struct metrics
- Column-wise comparison of CSV tables
- SHA-256 checksum (size-only fallback), or size-only for rendered media

Key principles:
- One verdict per relative path: PASS, FAIL, WARN, SKIP or ERROR
- A single absolute tolerance, threaded explicitly into every comparator
- A problem with one file never aborts the run

Main subpackages:
- analysis: File classification, routing table and the comparators
- ingest: Session tree discovery and data-file loaders
- models: Loaded value variants, outcomes, report entries, configuration
- validation: Session dispatcher, report aggregation/export and CLI
"""

__version__ = "0.3.0"

__all__ = ["__version__"]
