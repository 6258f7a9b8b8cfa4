"""Validation utilities.

This package contains the *non-interactive* session comparison workflow.

Design goals
------------
1) Keep the dispatcher free of file-format knowledge (routing table + registry).
2) Make comparisons reproducible and scriptable (CLI-style entry point).
3) Never let one file's problem abort a whole session comparison.
"""

from .session_runner import (
    SessionReport,
    compare_pair,
    compare_sessions,
    dispatch_pair,
    export_report,
    main,
    run_metadata,
)

__all__ = [
    "SessionReport",
    "compare_pair",
    "compare_sessions",
    "dispatch_pair",
    "export_report",
    "main",
    "run_metadata",
]
