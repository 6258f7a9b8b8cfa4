from __future__ import annotations

"""File classification and the file -> comparator routing table.

Classification looks at the file name only (never the content) and is total:
every relative path gets exactly one ``file_type`` tag. Routing is a static,
ordered table; the first matching :class:`Route` decides which check runs.
Adding a new file convention means adding a row, not a branch.
"""

import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import FrozenSet, Optional, Pattern, Tuple


MAT_EXTENSION = ".mat"

# Check names (keys of the comparator registry, and the report's 'check' column).
CHECK_TEXT_EXACT = "text-exact"
CHECK_STRUCTURED_CSV = "csv-structured"
CHECK_ELEMENTWISE = "elementwise_mat"
CHECK_CELLWISE = "cellwise_mat"
CHECK_STRUCT_METRICS = "struct_metrics"
CHECK_CHECKSUM = "checksum"
CHECK_SIZE_ONLY = "size_only"

MEDIA_EXTENSIONS = frozenset({".h5", ".png", ".jpg", ".jpeg", ".tif", ".tiff", ".eps", ".fig"})
NONDETERMINISTIC_EXTENSIONS = frozenset({".log", ".json", ".yaml", ".yml", ".pdf"})
DETERMINISTIC_TEXT_STEMS = frozenset({"channelnames", "channels", "do_sort_pos"})


@dataclass(frozen=True)
class TypeRule:
    """Map a .mat file to a type tag when ``pattern`` matches.

    The pattern is searched in the lower-cased stem, or in the lower-cased
    full file name when ``on_name`` is set.
    """

    file_type: str
    pattern: Pattern[str]
    on_name: bool = False

    def matches(self, stem: str, name: str) -> bool:
        return self.pattern.search(name if self.on_name else stem) is not None


# Priority order matters: the first matching rule wins.
MAT_TYPE_RULES: Tuple[TypeRule, ...] = (
    TypeRule("mat_times", re.compile(r"^times_csc")),
    TypeRule("mat_spikes", re.compile(r"^csc\d+_spikes$")),
    TypeRule("mat_clusterinfo", re.compile(r"^cluster_info\.mat$"), on_name=True),
    TypeRule("mat_qmetrics", re.compile(r"qmetrics")),
    TypeRule("mat_numeric_generic", re.compile(r"^channels$")),
    TypeRule("mat_struct_generic", re.compile(r"^reflookup$")),
)
MAT_OTHER = "mat_other"


def split_name(rel_path: str) -> Tuple[str, str]:
    """Return (stem, extension) of the last path component; extension lower-cased."""
    p = PurePosixPath(rel_path.replace("\\", "/"))
    ext = p.suffix.lower()
    stem = p.name[: len(p.name) - len(ext)] if ext else p.name
    return stem, ext


def classify_file(rel_path: str) -> str:
    """
    Assign the semantic type tag of a file from its name.

    Examples
    --------
    >>> classify_file("CSC12/times_CSC12.mat")
    'mat_times'
    >>> classify_file("CSC3_spikes.mat")
    'mat_spikes'
    >>> classify_file("sort/cluster_info.mat")
    'mat_clusterinfo'
    >>> classify_file("notes.TXT")
    'generic.txt'
    """
    stem, ext = split_name(rel_path)
    if ext != MAT_EXTENSION:
        return f"generic{ext}"
    lower_stem = stem.lower()
    lower_name = f"{lower_stem}{ext}"
    for rule in MAT_TYPE_RULES:
        if rule.matches(lower_stem, lower_name):
            return rule.file_type
    return MAT_OTHER


@dataclass(frozen=True)
class Route:
    """One row of the routing table.

    Empty filter sets match anything. ``check=None`` means the file is skipped
    unconditionally with ``skip_reason``.
    """

    check: Optional[str]
    extensions: FrozenSet[str] = frozenset()
    file_types: FrozenSet[str] = frozenset()
    stems: FrozenSet[str] = frozenset()
    skip_reason: str = ""

    def matches(self, *, ext: str, stem: str, file_type: str) -> bool:
        if self.extensions and ext not in self.extensions:
            return False
        if self.file_types and file_type not in self.file_types:
            return False
        if self.stems and stem.lower() not in self.stems:
            return False
        return True

    @property
    def is_skip(self) -> bool:
        return self.check is None


ROUTES: Tuple[Route, ...] = (
    Route(CHECK_TEXT_EXACT, extensions=frozenset({".txt"}), stems=DETERMINISTIC_TEXT_STEMS),
    Route(None, extensions=frozenset({".txt"}), skip_reason="Skipped (non-deterministic text)"),
    Route(CHECK_STRUCTURED_CSV, extensions=frozenset({".csv"})),
    Route(CHECK_ELEMENTWISE, file_types=frozenset({"mat_times", "mat_spikes", "mat_numeric_generic"})),
    Route(CHECK_CELLWISE, file_types=frozenset({"mat_clusterinfo"})),
    Route(CHECK_STRUCT_METRICS, file_types=frozenset({"mat_qmetrics", "mat_struct_generic"})),
    Route(CHECK_CHECKSUM, extensions=frozenset({MAT_EXTENSION})),
    Route(CHECK_SIZE_ONLY, extensions=MEDIA_EXTENSIONS),
    Route(
        None,
        extensions=NONDETERMINISTIC_EXTENSIONS,
        skip_reason="Skipped (non-deterministic log/config/pdf)",
    ),
    Route(CHECK_CHECKSUM),
)


def route_for(rel_path: str, file_type: Optional[str] = None, routes: Tuple[Route, ...] = ROUTES) -> Route:
    """First route matching rel_path. The last row of ROUTES matches everything."""
    stem, ext = split_name(rel_path)
    ft = classify_file(rel_path) if file_type is None else file_type
    for route in routes:
        if route.matches(ext=ext, stem=stem, file_type=ft):
            return route
    raise LookupError(f"No route for {rel_path!r} (type {ft!r})")
