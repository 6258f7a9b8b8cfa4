"""Ingest package - session discovery and data-file readers.

This package handles:
- Listing the files of a session output folder (relative path -> absolute path)
- Excluding staging directories (combinatostuff_* by default)
- Reading MATLAB .mat files into tagged LoadedValue mappings
- Reading text lines and CSV tables

Key entry points:
- SessionDiscovery / discover_session: build a SessionTree for one folder
- load_mat, read_lines, read_table: raise LoadFailure on unreadable input

Design principle:
- Readers never decide verdicts; they either return data or raise LoadFailure
"""

from .discovery import SessionDiscovery, discover_session, is_excluded, union_of_paths
from .loaders import load_mat, read_lines, read_table, wrap_value, wrap_variables

__all__ = [
    "SessionDiscovery",
    "discover_session",
    "is_excluded",
    "union_of_paths",
    "load_mat",
    "read_lines",
    "read_table",
    "wrap_value",
    "wrap_variables",
]
