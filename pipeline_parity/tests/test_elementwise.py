from __future__ import annotations

"""Tests for element-wise numeric comparison and the shared deviation helper."""

from pathlib import Path

import numpy as np
import pytest
from scipy.io import savemat

from pipeline_parity.analysis.elementwise import compare_elementwise, compare_elementwise_mat
from pipeline_parity.analysis.numeric import max_abs_diff, numeric_deviation
from pipeline_parity.ingest.loaders import wrap_variables
from pipeline_parity.models.config import CompareConfig
from pipeline_parity.models.entries import MismatchKind, Verdict


def _write_mat(path: Path, variables: dict) -> Path:
    savemat(str(path), variables)
    return path


class TestMaxAbsDiff:
    """NaN/inf policy of max_abs_diff()."""

    def test_plain(self) -> None:
        assert max_abs_diff(np.array([1.0, 2.0]), np.array([1.0, 2.5])) == pytest.approx(0.5)

    def test_empty_is_zero(self) -> None:
        assert max_abs_diff(np.zeros((0, 3)), np.zeros((0, 3))) == 0.0

    def test_nan_both_sides_is_equal(self) -> None:
        a = np.array([np.nan, 1.0])
        assert max_abs_diff(a, a.copy()) == 0.0

    def test_nan_one_side_is_infinite(self) -> None:
        assert max_abs_diff(np.array([np.nan]), np.array([0.0])) == np.inf

    def test_matching_infinities_are_equal(self) -> None:
        a = np.array([np.inf, -np.inf])
        assert max_abs_diff(a, a.copy()) == 0.0
        assert max_abs_diff(np.array([np.inf]), np.array([-np.inf])) == np.inf

    def test_integer_and_bool_promoted(self) -> None:
        assert max_abs_diff(np.array([1, 2], dtype=np.uint8), np.array([2, 1], dtype=np.uint8)) == 1.0
        assert max_abs_diff(np.array([True]), np.array([False])) == 1.0

    def test_complex(self) -> None:
        assert max_abs_diff(np.array([1 + 1j]), np.array([1 + 0j])) == pytest.approx(1.0)

    def test_shape_mismatch_raises(self) -> None:
        with pytest.raises(ValueError):
            max_abs_diff(np.zeros(2), np.zeros(3))

    def test_numeric_deviation_reports_shapes(self) -> None:
        dev = numeric_deviation(np.zeros((1, 3)), np.zeros((3, 1)))
        assert not dev.same_shape
        assert not dev.within(1.0)
        assert dev.describe() == "size mismatch [1 3] vs [3 1]"


class TestCompareElementwise:
    """compare_elementwise() on in-memory data."""

    def test_identical(self) -> None:
        data = wrap_variables({"t": np.arange(6, dtype=float).reshape(2, 3)})
        out = compare_elementwise(data, data, tol=1e-6)
        assert out.verdict is Verdict.PASS
        assert out.detail == "t: max |Δ| = 0"

    def test_name_sets_compared_order_independent(self) -> None:
        new = wrap_variables({"a": np.ones(2), "b": np.zeros(2)})
        old = wrap_variables({"b": np.zeros(2), "a": np.ones(2)})
        out = compare_elementwise(new, old, tol=1e-6)
        assert out.ok
        assert out.detail == "a: max |Δ| = 0; b: max |Δ| = 0"

    def test_variable_mismatch(self) -> None:
        new = wrap_variables({"a": np.ones(2), "b": np.ones(2)})
        old = wrap_variables({"a": np.ones(2), "c": np.ones(2)})
        out = compare_elementwise(new, old, tol=1e-6)
        assert out.verdict is Verdict.FAIL
        assert out.kind is MismatchKind.SCHEMA_MISMATCH
        assert out.detail == "Variable mismatch:\n  NEW: a, b\n  OLD: a, c"

    def test_size_mismatch_continues_with_other_variables(self) -> None:
        new = wrap_variables({"x": np.zeros((1, 3)), "y": np.ones((2, 2))})
        old = wrap_variables({"x": np.zeros((1, 4)), "y": np.ones((2, 2))})
        out = compare_elementwise(new, old, tol=1e-6)
        assert out.verdict is Verdict.FAIL
        assert out.kind is MismatchKind.SHAPE_MISMATCH
        assert out.detail == "x: Size mismatch: [1 3] vs [1 4]; y: max |Δ| = 0"

    def test_non_numeric_skipped_never_fails(self) -> None:
        new = wrap_variables({"label": "CSC1", "v": np.ones(3)})
        old = wrap_variables({"label": "CSC2", "v": np.ones(3)})
        out = compare_elementwise(new, old, tol=1e-6)
        assert out.ok
        assert "label: Skipped (non-numeric)" in out.detail

    def test_tolerance_is_inclusive(self) -> None:
        new = wrap_variables({"v": np.array([0.0, 0.5])})
        old = wrap_variables({"v": np.array([0.0, 1.0])})
        assert compare_elementwise(new, old, tol=0.5).ok
        out = compare_elementwise(new, old, tol=0.25)
        assert out.verdict is Verdict.FAIL
        assert out.kind is MismatchKind.TOLERANCE_EXCEEDED


class TestElementwiseMatFiles:
    """File-level wrapper on real .mat files."""

    def test_self_compare_passes(self, tmp_path: Path) -> None:
        spikes = np.random.default_rng(0).normal(size=(10, 64))
        p = _write_mat(tmp_path / "CSC1_spikes.mat", {"spikes": spikes, "index": np.arange(10.0)})
        out = compare_elementwise_mat(p, p, CompareConfig())
        assert out.verdict is Verdict.PASS
        assert out.detail == "spikes: max |Δ| = 0; index: max |Δ| = 0"

    def test_deviation_above_tolerance_fails(self, tmp_path: Path) -> None:
        old = np.array([[1.0, 2.0, 3.0]])
        p_new = _write_mat(tmp_path / "new.mat", {"spikes": old + 2e-6})
        p_old = _write_mat(tmp_path / "old.mat", {"spikes": old})
        out = compare_elementwise_mat(p_new, p_old, CompareConfig())
        assert out.verdict is Verdict.FAIL
        assert out.detail == "spikes: max |Δ| = 2e-06"

    def test_deviation_within_custom_tolerance_passes(self, tmp_path: Path) -> None:
        old = np.array([[1.0, 2.0, 3.0]])
        p_new = _write_mat(tmp_path / "new.mat", {"spikes": old + 2e-6})
        p_old = _write_mat(tmp_path / "old.mat", {"spikes": old})
        assert compare_elementwise_mat(p_new, p_old, CompareConfig(tolerance=1e-5)).ok

    def test_row_vs_column_is_shape_mismatch(self, tmp_path: Path) -> None:
        p_new = _write_mat(tmp_path / "new.mat", {"t": np.zeros((1, 3))})
        p_old = _write_mat(tmp_path / "old.mat", {"t": np.zeros((3, 1))})
        out = compare_elementwise_mat(p_new, p_old)
        assert out.verdict is Verdict.FAIL
        assert out.detail == "t: Size mismatch: [1 3] vs [3 1]"

    def test_unreadable_file_is_error(self, tmp_path: Path) -> None:
        p_new = tmp_path / "broken.mat"
        p_new.write_bytes(b"")
        p_old = _write_mat(tmp_path / "old.mat", {"t": np.zeros(3)})
        out = compare_elementwise_mat(p_new, p_old)
        assert out.verdict is Verdict.ERROR
        assert out.kind is MismatchKind.LOAD_FAILURE
        assert out.detail.startswith("Failed to load broken.mat:")


def test_empty_cell_variable_is_skipped(tmp_path: Path) -> None:
    """An empty cell ({}) next to numeric data loads and is listed as non-numeric."""
    variables = {"spikes": np.ones((3, 4)), "notes": np.empty((0, 0), dtype=object)}
    p_new = _write_mat(tmp_path / "new.mat", variables)
    p_old = _write_mat(tmp_path / "old.mat", variables)

    out = compare_elementwise_mat(p_new, p_old, CompareConfig())
    assert out.verdict is Verdict.PASS
    assert "notes: Skipped (non-numeric)" in out.detail
    assert "spikes: max |Δ| = 0" in out.detail


def test_logical_variables_compared_as_numbers() -> None:
    """MATLAB logicals are compared as 0/1 values, so a flipped flag fails."""
    new = wrap_variables({"accepted": np.array([[True, False, True]])})
    old = wrap_variables({"accepted": np.array([[True, True, True]])})
    out = compare_elementwise(new, old, tol=1e-6)
    assert out.verdict is Verdict.FAIL
    assert out.detail == "accepted: max |Δ| = 1"
    assert compare_elementwise(new, new, tol=1e-6).ok
