"""Session parity runner - compare a NEW and an OLD pipeline output folder.

This module provides a reusable API for:
1. Discovering both session trees and pairing files by relative path
2. Dispatching every pair to the comparator chosen by the routing table
3. Aggregating one ComparisonEntry per path into a SessionReport
4. Exporting the report (CSV with metadata header + JSON sidecar)

Design goals:
- One verdict per relative path, assigned once
- A problem with one file (unreadable, missing comparator, unexpected
  exception) is confined to that file's entry; the run always completes
- Deterministic output: entries sorted case-insensitively by path
"""

from __future__ import annotations

import json
import logging
import platform
import socket
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

import pipeline_parity
from pipeline_parity.analysis import COMPARATORS
from pipeline_parity.analysis.classify import classify_file, route_for
from pipeline_parity.ingest.discovery import SessionDiscovery, union_of_paths
from pipeline_parity.models.catalog import SessionTree
from pipeline_parity.models.config import DEFAULT_TOLERANCE, CompareConfig
from pipeline_parity.models.entries import (
    REPORT_COLUMNS,
    VERDICT_ORDER,
    CheckOutcome,
    ComparisonEntry,
    MismatchKind,
    Verdict,
)


logger = logging.getLogger(__name__)

Comparator = Callable[[Path, Path, CompareConfig], CheckOutcome]

TOOL_NAME = "pipeline_parity"


# ---------------------------------------------------------------------------
# Report model
# ---------------------------------------------------------------------------


def _path_sort_key(entry: ComparisonEntry):
    return (entry.file_rel.lower(), entry.file_rel)


@dataclass
class SessionReport:
    """All per-file verdicts of one NEW-vs-OLD comparison."""

    new_dir: Path
    old_dir: Path
    config: CompareConfig
    entries: List[ComparisonEntry] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.entries = sorted(self.entries, key=_path_sort_key)

    def __len__(self) -> int:
        return len(self.entries)

    def entry(self, file_rel: str) -> ComparisonEntry:
        for e in self.entries:
            if e.file_rel == file_rel:
                return e
        raise KeyError(file_rel)

    def counts(self) -> Dict[Verdict, int]:
        out = {v: 0 for v in VERDICT_ORDER}
        for e in self.entries:
            out[e.result] += 1
        return out

    @property
    def has_failures(self) -> bool:
        c = self.counts()
        return (c[Verdict.FAIL] + c[Verdict.ERROR]) > 0

    def summary_line(self) -> str:
        c = self.counts()
        return "Summary: {} PASS, {} FAIL, {} WARN, {} SKIP, {} ERROR (Total: {})".format(
            c[Verdict.PASS], c[Verdict.FAIL], c[Verdict.WARN], c[Verdict.SKIP], c[Verdict.ERROR], len(self.entries)
        )

    def format_table(self, path_width: int = 40) -> str:
        """Fixed-width listing of path / type / check / result plus the summary line."""
        rule = "-" * 61
        header = f"{'File':<{path_width}} | {'Type':<9} | {'Check':<10} | {'Result':<6}"
        lines = [rule, header, rule]
        for e in self.entries:
            shown = e.file_rel
            if len(shown) > path_width:
                shown = "..." + shown[-(path_width - 4):]
            lines.append(f"{shown:<{path_width}} | {e.file_type:<9} | {e.check:<10} | {e.result.value:<6}")
        lines.append(rule)
        lines.append(self.summary_line())
        return "\n".join(lines)

    def to_records(self) -> List[Dict[str, Any]]:
        return [e.to_record() for e in self.entries]

    def to_dataframe(self) -> pd.DataFrame:
        df = pd.DataFrame(self.to_records(), columns=list(REPORT_COLUMNS))
        # Keep the column numeric-with-gaps rather than object.
        df["size_diff_bytes"] = df["size_diff_bytes"].astype("Int64")
        return df


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


def dispatch_pair(
    rel_path: str,
    file_type: str,
    new_tree: SessionTree,
    old_tree: SessionTree,
    config: CompareConfig,
    comparators: Mapping[str, Comparator],
) -> Tuple[str, CheckOutcome]:
    """Decide (check name, outcome) for one relative path. Check name is '' when nothing ran."""
    in_new = rel_path in new_tree
    in_old = rel_path in old_tree

    # Presence first; file type plays no role here.
    if not in_new and not in_old:
        # Cannot happen for a path taken from the union; kept as a no-op guard.
        logger.warning("%s: missing in both trees (unexpected)", rel_path)
        return "", CheckOutcome(Verdict.SKIP, "Missing in both (unexpected)")
    if not in_old:
        return "", CheckOutcome(Verdict.FAIL, "Missing in OLD", kind=MismatchKind.PRESENCE_MISMATCH)
    if not in_new:
        return "", CheckOutcome(Verdict.FAIL, "Missing in NEW", kind=MismatchKind.PRESENCE_MISMATCH)

    route = route_for(rel_path, file_type)
    if route.is_skip:
        return "", CheckOutcome(Verdict.SKIP, route.skip_reason)

    fn = comparators.get(route.check)
    if fn is None:
        logger.warning("%s: no comparator registered for check '%s'", rel_path, route.check)
        return "", CheckOutcome(Verdict.SKIP, f"Helper {route.check} missing", kind=MismatchKind.HELPER_UNAVAILABLE)

    try:
        outcome = fn(new_tree.resolve(rel_path), old_tree.resolve(rel_path), config)
    except Exception as e:
        logger.exception("%s: comparator '%s' raised", rel_path, route.check)
        outcome = CheckOutcome(Verdict.ERROR, f"{route.check} raised {type(e).__name__}: {e}")
    return route.check, outcome


def compare_pair(
    rel_path: str,
    new_tree: SessionTree,
    old_tree: SessionTree,
    config: CompareConfig,
    comparators: Mapping[str, Comparator] = COMPARATORS,
) -> ComparisonEntry:
    """Build the single entry for one relative path."""
    file_type = classify_file(rel_path)
    check, outcome = dispatch_pair(rel_path, file_type, new_tree, old_tree, config, comparators)
    return ComparisonEntry.from_outcome(rel_path, file_type, check, outcome)


def compare_sessions(
    new_dir: str | Path,
    old_dir: str | Path,
    config: Optional[CompareConfig] = None,
    comparators: Optional[Mapping[str, Comparator]] = None,
) -> SessionReport:
    """
    Compare two session output folders file by file.

    Parameters
    ----------
    new_dir, old_dir : str or Path
        Roots of the NEW and OLD pipeline outputs.
    config : CompareConfig, optional
        Tolerance, exclusions and hashing settings. Defaults to CompareConfig().
    comparators : mapping, optional
        Check name -> file-level comparator. Defaults to the built-in registry.
        A check without an entry here yields SKIP "Helper <check> missing".

    Returns
    -------
    SessionReport
        One entry per relative path in the union of both trees, sorted
        case-insensitively.
    """
    cfg = config or CompareConfig()
    registry = COMPARATORS if comparators is None else comparators

    discovery = SessionDiscovery(exclude_dir_patterns=cfg.exclude_dir_patterns)
    new_tree = discovery.build_tree(new_dir)
    old_tree = discovery.build_tree(old_dir)
    logger.info(
        "Comparing %d NEW / %d OLD files (%d / %d excluded)",
        len(new_tree), len(old_tree), new_tree.n_excluded, old_tree.n_excluded,
    )

    entries: List[ComparisonEntry] = []
    for rel_path in union_of_paths(new_tree, old_tree):
        entries.append(compare_pair(rel_path, new_tree, old_tree, cfg, registry))

    warnings: List[str] = []
    if not entries:
        warnings.append("No files found in either folder")

    return SessionReport(
        new_dir=new_tree.root_dir,
        old_dir=old_tree.root_dir,
        config=cfg,
        entries=entries,
        warnings=warnings,
    )


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def run_metadata(report: SessionReport) -> Dict[str, Any]:
    """Provenance of a run: when, where, with which tool and settings."""
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "tool": TOOL_NAME,
        "tool_version": pipeline_parity.__version__,
        "python_version": platform.python_version(),
        "hostname": socket.gethostname(),
        "new_dir": str(report.new_dir),
        "old_dir": str(report.old_dir),
        "tolerance": report.config.tolerance,
        "exclude_dir_patterns": list(report.config.exclude_dir_patterns),
    }


def export_report(
    report: SessionReport,
    out_dir: str | Path,
    *,
    metadata: Optional[Dict[str, Any]] = None,
    write_sidecar_json: bool = True,
) -> Path:
    """
    Write the report table to ``comparison_results_<timestamp>.csv``.

    Parameters
    ----------
    report : SessionReport
        Report to write.
    out_dir : Path
        Output directory (created if needed).
    metadata : dict, optional
        Run provenance; defaults to run_metadata(report). Written as
        ``# key: value`` lines above the table.
    write_sidecar_json : bool
        If True, also write the metadata and verdict counts to a JSON file
        with the same stem.

    Returns
    -------
    Path
        Path to the written CSV file.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    meta = dict(metadata) if metadata is not None else run_metadata(report)

    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_csv = out_dir / f"comparison_results_{stamp}.csv"

    with open(out_csv, "w", newline="", encoding="utf-8") as f:
        f.write("# SESSION PARITY LOG\n")
        for key, value in meta.items():
            f.write(f"# {key}: {value}\n")
        report.to_dataframe().to_csv(f, index=False)

    if write_sidecar_json:
        sidecar = dict(meta)
        sidecar["counts"] = {v.value: n for v, n in report.counts().items()}
        sidecar["warnings"] = list(report.warnings)
        with open(out_csv.with_suffix(".json"), "w", encoding="utf-8") as f:
            json.dump(sidecar, f, indent=2, default=str)

    return out_csv


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def main(argv: Optional[Sequence[str]] = None) -> int:
    import argparse
    import textwrap

    p = argparse.ArgumentParser(
        prog="python -m pipeline_parity",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=textwrap.dedent(
            """\
            Compare the outputs of a NEW and an OLD pipeline run for one session.

            Files are paired by relative path. Each pair gets one verdict
            (PASS/FAIL/WARN/SKIP/ERROR) from a check chosen by file name/extension.
            """
        ),
    )
    p.add_argument("new_dir", help="NEW pipeline output folder")
    p.add_argument("old_dir", help="OLD pipeline output folder")
    p.add_argument("--tol", type=float, default=DEFAULT_TOLERANCE, help="Absolute numeric tolerance (default: 1e-6)")
    p.add_argument(
        "--exclude",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Directory-name pattern to exclude (repeatable; default: combinatostuff_*)",
    )
    p.add_argument("--out-dir", default=None, help="Report directory (default: ./logs)")
    p.add_argument("--no-report", action="store_true", help="Do not write the CSV/JSON report")
    p.add_argument("-v", "--verbose", action="store_true", help="Log progress at INFO level")

    ns = p.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(
        level=logging.INFO if ns.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    for d in (ns.new_dir, ns.old_dir):
        if not Path(d).expanduser().is_dir():
            print(f"[error] not a directory: {d}", file=sys.stderr)
            return 2

    cfg_kwargs: Dict[str, Any] = {"tolerance": float(ns.tol)}
    if ns.exclude:
        cfg_kwargs["exclude_dir_patterns"] = tuple(ns.exclude)
    try:
        cfg = CompareConfig(**cfg_kwargs)
    except ValueError as e:
        print(f"[error] {e}", file=sys.stderr)
        return 2

    print(f"\nComparing session folders:\n  NEW: {ns.new_dir}\n  OLD: {ns.old_dir}\n")
    report = compare_sessions(ns.new_dir, ns.old_dir, config=cfg)
    print(report.format_table())
    for w in report.warnings:
        print(f"[warn] {w}")

    if not ns.no_report:
        out_dir = Path(ns.out_dir) if ns.out_dir else Path.cwd() / "logs"
        out_csv = export_report(report, out_dir)
        print(f"\nReport written: {out_csv}")

    return 1 if report.has_failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
