from __future__ import annotations

"""Tests for text, CSV, checksum and size-only comparators."""

import hashlib
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from pipeline_parity.analysis.checksum import compare_checksum, compare_size_only, file_digest
from pipeline_parity.analysis.text import compare_lines, compare_structured_csv, compare_tables, compare_text_exact
from pipeline_parity.models.config import CompareConfig
from pipeline_parity.models.entries import MismatchKind, Verdict


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class TestTextExact:
    def test_identical_after_strip(self, tmp_path: Path) -> None:
        a = _write(tmp_path / "a.txt", "CSC1\nCSC2  \n")
        b = _write(tmp_path / "b.txt", "CSC1\r\n  CSC2\r\n")
        out = compare_text_exact(a, b)
        assert out.verdict is Verdict.PASS
        assert out.detail == "Identical (2 lines)"

    def test_line_count(self, tmp_path: Path) -> None:
        a = _write(tmp_path / "a.txt", "\n".join(f"CSC{i}" for i in range(11)))
        b = _write(tmp_path / "b.txt", "\n".join(f"CSC{i}" for i in range(10)))
        out = compare_text_exact(a, b)
        assert out.verdict is Verdict.FAIL
        assert out.kind is MismatchKind.SHAPE_MISMATCH
        assert out.detail == "Different number of lines: NEW=11 OLD=10"

    def test_first_mismatch_is_one_based(self) -> None:
        out = compare_lines(["a", "b", "c"], ["a", "x", "y"])
        assert out.verdict is Verdict.FAIL
        assert out.detail == 'Mismatch at line 2: NEW="b" | OLD="x"'

    def test_empty_files_are_identical(self) -> None:
        assert compare_lines([], []).detail == "Identical (0 lines)"

    def test_missing_file_is_error(self, tmp_path: Path) -> None:
        a = _write(tmp_path / "a.txt", "x\n")
        out = compare_text_exact(a, tmp_path / "gone.txt")
        assert out.verdict is Verdict.ERROR
        assert out.detail.startswith("Error comparing text files: Failed to load gone.txt:")


class TestStructuredCsv:
    def test_identical_tables(self, tmp_path: Path) -> None:
        text = "cluster,rate,label\n1,0.5,good\n2,1.25,mua\n"
        a = _write(tmp_path / "a.csv", text)
        b = _write(tmp_path / "b.csv", text)
        out = compare_structured_csv(a, b, CompareConfig())
        assert out.verdict is Verdict.PASS
        assert out.detail == "cluster: max |Δ| = 0; rate: max |Δ| = 0; label: identical text"

    def test_numeric_tolerance(self) -> None:
        new = pd.DataFrame({"rate": [0.5, 1.0]})
        old = pd.DataFrame({"rate": [0.5, 1.0 + 1e-3]})
        out = compare_tables(new, old, tol=1e-6)
        assert out.verdict is Verdict.FAIL
        assert out.kind is MismatchKind.TOLERANCE_EXCEEDED
        assert compare_tables(new, old, tol=1e-2).ok

    def test_nan_positions_must_agree(self) -> None:
        new = pd.DataFrame({"v": [np.nan, 1.0]})
        assert compare_tables(new, new.copy(), tol=1e-6).ok
        out = compare_tables(new, pd.DataFrame({"v": [0.0, 1.0]}), tol=1e-6)
        assert out.detail == "v: max |Δ| = inf"

    def test_text_mismatch_names_first_row(self) -> None:
        new = pd.DataFrame({"label": ["good", "mua", "noise"]})
        old = pd.DataFrame({"label": ["good", "sua", "art"]})
        out = compare_tables(new, old, tol=1e-6)
        assert out.verdict is Verdict.FAIL
        assert out.kind is MismatchKind.CONTENT_MISMATCH
        assert out.detail == 'label: 2 text mismatches (first at row 1: NEW="mua" | OLD="sua")'

    def test_column_and_row_mismatch(self) -> None:
        out = compare_tables(pd.DataFrame({"a": [1], "b": [2]}), pd.DataFrame({"a": [1], "c": [2]}), tol=1e-6)
        assert out.kind is MismatchKind.SCHEMA_MISMATCH
        assert out.detail == "Column mismatch:\n  NEW: a, b\n  OLD: a, c"

        out = compare_tables(pd.DataFrame({"a": [1, 2]}), pd.DataFrame({"a": [1]}), tol=1e-6)
        assert out.kind is MismatchKind.SHAPE_MISMATCH
        assert out.detail == "Different number of rows: NEW=2 OLD=1"

    def test_unreadable_csv_is_error(self, tmp_path: Path) -> None:
        a = _write(tmp_path / "a.csv", "x,y\n1,2\n")
        out = compare_structured_csv(a, tmp_path / "b.csv")
        assert out.verdict is Verdict.ERROR
        assert out.detail.startswith("Failed to load b.csv:")

    def test_empty_csv_files_are_identical(self, tmp_path: Path) -> None:
        a = tmp_path / "a.csv"
        b = tmp_path / "b.csv"
        a.write_bytes(b"")
        b.write_bytes(b"")
        out = compare_structured_csv(a, b)
        assert out.verdict is Verdict.PASS
        assert out.detail == "Both tables empty"

    def test_empty_vs_populated_csv_fails(self, tmp_path: Path) -> None:
        a = tmp_path / "a.csv"
        a.write_bytes(b"")
        b = _write(tmp_path / "b.csv", "x,y\n1,2\n")
        out = compare_structured_csv(a, b)
        assert out.verdict is Verdict.FAIL
        assert out.kind is MismatchKind.SCHEMA_MISMATCH
        assert out.detail == "Column mismatch:\n  NEW: \n  OLD: x, y"


class TestChecksum:
    def test_file_digest_matches_hashlib(self, tmp_path: Path) -> None:
        payload = bytes(range(256)) * 50
        p = tmp_path / "data.bin"
        p.write_bytes(payload)
        assert file_digest(p, "sha256", chunk_bytes=100) == hashlib.sha256(payload).hexdigest()

    def test_identical_files_pass(self, tmp_path: Path) -> None:
        a = tmp_path / "a.bin"
        b = tmp_path / "b.bin"
        a.write_bytes(b"\x01\x02\x03")
        b.write_bytes(b"\x01\x02\x03")
        expected = hashlib.sha256(b"\x01\x02\x03").hexdigest()
        out = compare_checksum(a, b, CompareConfig())
        assert out.verdict is Verdict.PASS
        assert out.detail == f"SHA256 match ({expected})"
        assert out.size_delta_bytes == 0

    def test_same_size_different_content_fails(self, tmp_path: Path) -> None:
        a = tmp_path / "a.bin"
        b = tmp_path / "b.bin"
        a.write_bytes(b"abcd")
        b.write_bytes(b"abce")
        out = compare_checksum(a, b)
        assert out.verdict is Verdict.FAIL
        assert out.detail.startswith("SHA256 differ: NEW=")
        assert out.detail.endswith("(Δbytes=0)")
        assert out.size_delta_bytes == 0

    def test_size_delta_is_absolute(self, tmp_path: Path) -> None:
        a = tmp_path / "a.bin"
        b = tmp_path / "b.bin"
        a.write_bytes(b"ab")
        b.write_bytes(b"abcde")
        assert compare_checksum(a, b).size_delta_bytes == 3

    def test_hash_failure_falls_back_to_size(self, tmp_path: Path) -> None:
        a = tmp_path / "a.bin"
        b = tmp_path / "b.bin"
        a.write_bytes(b"abcd")
        b.write_bytes(b"wxyz")
        cfg = CompareConfig(hash_algorithm="no-such-hash")
        out = compare_checksum(a, b, cfg)
        assert out.verdict is Verdict.PASS
        assert out.detail.startswith("Same file size (4 bytes), NO-SUCH-HASH unavailable: ")
        assert out.size_delta_bytes == 0

        b.write_bytes(b"wxyz!")
        out = compare_checksum(a, b, cfg)
        assert out.verdict is Verdict.FAIL
        assert out.detail.startswith("Size differ: NEW=4 OLD=5 (Δ=1), NO-SUCH-HASH unavailable")
        assert out.size_delta_bytes == 1

    def test_missing_file_is_error(self, tmp_path: Path) -> None:
        a = tmp_path / "a.bin"
        a.write_bytes(b"x")
        out = compare_checksum(a, tmp_path / "gone.bin")
        assert out.verdict is Verdict.ERROR
        assert out.detail.startswith("Failed to stat files:")


class TestSizeOnly:
    @pytest.mark.parametrize("payload_old, verdict", [(b"12345", Verdict.PASS), (b"123", Verdict.WARN)])
    def test_verdicts(self, tmp_path: Path, payload_old: bytes, verdict: Verdict) -> None:
        a = tmp_path / "new.png"
        b = tmp_path / "old.png"
        a.write_bytes(b"abcde")
        b.write_bytes(payload_old)
        out = compare_size_only(a, b)
        assert out.verdict is verdict

    def test_warn_detail(self, tmp_path: Path) -> None:
        a = tmp_path / "new.png"
        b = tmp_path / "old.png"
        a.write_bytes(b"a" * 10)
        b.write_bytes(b"a" * 7)
        out = compare_size_only(a, b)
        assert out.verdict is Verdict.WARN
        assert out.detail == "File size differ: NEW=10 OLD=7 (Δ=3)"
        assert out.size_delta_bytes == 3

    def test_same_size_different_content_passes(self, tmp_path: Path) -> None:
        a = tmp_path / "new.png"
        b = tmp_path / "old.png"
        a.write_bytes(b"aaaa")
        b.write_bytes(b"bbbb")
        out = compare_size_only(a, b)
        assert out.verdict is Verdict.PASS
        assert out.detail == "Same file size (4 bytes)"
