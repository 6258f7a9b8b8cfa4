from __future__ import annotations

"""Readers for the file formats the comparators understand.

Every reader raises :class:`~pipeline_parity.exceptions.LoadFailure` on any
read/decode problem, with the underlying reason in the message. Nothing here
decides a verdict.

MATLAB files are read with ``scipy.io.loadmat`` using:

- ``squeeze_me=False``: keep MATLAB's 2-D shapes, so a 1x3 row and a 3x1 column
  do not compare equal.
- ``struct_as_record=False``: structs come back as ``mat_struct`` objects with
  ordered ``_fieldnames``.
- ``chars_as_strings=True``: char arrays come back as unicode arrays.

MATLAB v7.3 files are HDF5 containers that loadmat cannot read; they are
reported as load failures.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any, List

import numpy as np
import pandas as pd
from scipy.io import loadmat
from scipy.io.matlab import MatlabFunction, MatlabObject, MatlabOpaque, mat_struct

from pipeline_parity.exceptions import LoadFailure
from pipeline_parity.models.values import LoadedData, LoadedValue, ValueKind


_NUMERIC_KINDS = "biufc"
_TEXT_KINDS = "US"


def _is_struct(obj: Any) -> bool:
    return isinstance(obj, (mat_struct, Mapping))


def _wrap_text_array(arr: np.ndarray) -> LoadedValue:
    if arr.size == 0:
        return LoadedValue(ValueKind.TEXT, "")
    rows = []
    for item in arr.ravel():
        rows.append(item.decode("utf-8", "replace") if isinstance(item, bytes) else str(item))
    return LoadedValue(ValueKind.TEXT, "\n".join(rows))


def _wrap_object_array(arr: np.ndarray) -> LoadedValue:
    if arr.ndim == 0:
        return wrap_value(arr.item())

    if arr.size == 1 and _is_struct(arr.flat[0]):
        return wrap_value(arr.flat[0])
    if arr.size > 1 and all(_is_struct(x) for x in arr.flat):
        return LoadedValue(ValueKind.UNSUPPORTED, type_name="struct array")

    # Cell arrays are 2-D in MATLAB; fold anything else to (rows, cols).
    # An empty cell ({} is 0x0) keeps its shape.
    if arr.ndim == 1:
        grid = arr.reshape(1, arr.shape[0])
    else:
        grid = arr.reshape(arr.shape[0], int(np.prod(arr.shape[1:])))

    out = np.empty(grid.shape, dtype=object)
    for idx, item in np.ndenumerate(grid):
        out[idx] = wrap_value(item)
    return LoadedValue(ValueKind.HETEROGENEOUS, out)


def _wrap_record_array(arr: np.ndarray) -> LoadedValue:
    # Only reached for struct_as_record=True style payloads.
    if arr.size != 1:
        return LoadedValue(ValueKind.UNSUPPORTED, type_name="struct array")
    rec = arr.flat[0]
    return LoadedValue(ValueKind.NESTED, {str(name): wrap_value(rec[name]) for name in arr.dtype.names})


def wrap_value(obj: Any) -> LoadedValue:
    """
    Resolve the tag of a raw loaded object once.

    Accepts what loadmat produces as well as plain Python/numpy objects:
    None, str, bytes, numbers, numpy arrays, dicts (as structs) and
    scipy ``mat_struct`` instances. Anything else is UNSUPPORTED.

    Examples
    --------
    >>> wrap_value(np.zeros((2, 3))).kind
    <ValueKind.NUMERIC: 'numeric'>
    >>> wrap_value({"a": 1.0}).kind
    <ValueKind.NESTED: 'struct'>
    >>> wrap_value("CSC1").data
    'CSC1'
    """
    if isinstance(obj, LoadedValue):
        return obj
    if obj is None:
        return LoadedValue(ValueKind.EMPTY)
    # MATLAB class instances, function handles and opaque objects: no comparable payload.
    if isinstance(obj, (MatlabObject, MatlabFunction, MatlabOpaque)):
        return LoadedValue(ValueKind.UNSUPPORTED, type_name=type(obj).__name__)
    if isinstance(obj, str):
        return LoadedValue(ValueKind.TEXT, obj)
    if isinstance(obj, bytes):
        return LoadedValue(ValueKind.TEXT, obj.decode("utf-8", "replace"))
    if isinstance(obj, Mapping):
        return LoadedValue(ValueKind.NESTED, {str(k): wrap_value(v) for k, v in obj.items()})
    if isinstance(obj, mat_struct):
        return LoadedValue(
            ValueKind.NESTED,
            {str(name): wrap_value(getattr(obj, name)) for name in obj._fieldnames},
        )
    if isinstance(obj, (bool, int, float, complex, np.number, np.bool_)):
        return LoadedValue(ValueKind.NUMERIC, np.asarray(obj))
    if isinstance(obj, np.ndarray):
        kind = obj.dtype.kind
        if kind in _NUMERIC_KINDS:
            return LoadedValue(ValueKind.NUMERIC, obj)
        if kind in _TEXT_KINDS:
            return _wrap_text_array(obj)
        if kind == "O":
            return _wrap_object_array(obj)
        if kind == "V" and obj.dtype.names:
            return _wrap_record_array(obj)
        return LoadedValue(ValueKind.UNSUPPORTED, type_name=f"ndarray[{obj.dtype}]")
    return LoadedValue(ValueKind.UNSUPPORTED, type_name=type(obj).__name__)


def wrap_variables(variables: Mapping[str, Any]) -> LoadedData:
    """Wrap a name -> raw value mapping, preserving order."""
    return {str(name): wrap_value(v) for name, v in variables.items()}


def load_mat(path: str | Path) -> LoadedData:
    """Load a MATLAB .mat file into an ordered name -> LoadedValue mapping."""
    path = Path(path)
    try:
        raw = loadmat(str(path), squeeze_me=False, struct_as_record=False, chars_as_strings=True)
    except NotImplementedError as e:
        raise LoadFailure(path, f"unsupported MAT version (v7.3/HDF5?): {e}") from e
    except Exception as e:
        raise LoadFailure(path, f"{type(e).__name__}: {e}") from e

    # loadmat adds __header__, __version__ and __globals__.
    try:
        return wrap_variables({k: v for k, v in raw.items() if not k.startswith("__")})
    except Exception as e:
        raise LoadFailure(path, f"cannot decode variables: {type(e).__name__}: {e}") from e


def read_lines(path: str | Path) -> List[str]:
    """Read a text file as a list of lines (no line terminators)."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise LoadFailure(path, str(e)) from e
    return text.splitlines()


def read_table(path: str | Path) -> pd.DataFrame:
    """Read a delimited table with pandas (header row expected).

    A zero-byte file is an empty table, not a read error.
    """
    path = Path(path)
    try:
        return pd.read_csv(path)
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    except Exception as e:
        raise LoadFailure(path, f"{type(e).__name__}: {e}") from e
