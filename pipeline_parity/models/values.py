from __future__ import annotations

"""Tagged representation of values loaded from a data file.

Every variable read from a ``.mat`` file is converted once, at load time, into a
:class:`LoadedValue` whose ``kind`` tells the comparators how to treat it. The
comparators dispatch on the tag only and never inspect the payload type.

Payload per kind
----------------
NUMERIC        numpy array (numeric or bool dtype), any shape
TEXT           str
NESTED         dict[str, LoadedValue] in field-declaration order
HETEROGENEOUS  2-D numpy object array whose items are LoadedValue
EMPTY          None
UNSUPPORTED    None (``type_name`` keeps the source type for messages)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Tuple

import numpy as np


class ValueKind(str, Enum):
    NUMERIC = "numeric"
    TEXT = "text"
    NESTED = "struct"
    HETEROGENEOUS = "cell"
    EMPTY = "empty"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, eq=False)
class LoadedValue:
    kind: ValueKind
    data: Any = None
    type_name: str = ""

    @property
    def is_empty(self) -> bool:
        if self.kind is ValueKind.EMPTY:
            return True
        if self.kind in (ValueKind.NUMERIC, ValueKind.HETEROGENEOUS):
            return int(self.data.size) == 0
        if self.kind is ValueKind.TEXT:
            return self.data == ""
        return False

    @property
    def shape(self) -> Tuple[int, ...]:
        if self.kind in (ValueKind.NUMERIC, ValueKind.HETEROGENEOUS):
            return tuple(int(n) for n in self.data.shape)
        return ()

    @property
    def label(self) -> str:
        """Short type label used in mismatch messages."""
        if self.kind is ValueKind.UNSUPPORTED and self.type_name:
            return self.type_name
        return self.kind.value

    @property
    def fields(self) -> Mapping[str, "LoadedValue"]:
        if self.kind is not ValueKind.NESTED:
            raise TypeError(f"{self.kind.value} value has no fields")
        return self.data


# Ordered mapping variable name -> value, in the order the file declares them.
LoadedData = Dict[str, LoadedValue]


def format_shape(shape: Tuple[int, ...]) -> str:
    """Render a shape the way MATLAB prints ``size()``: ``[3 4]``."""
    return "[" + " ".join(str(int(n)) for n in shape) + "]"


def as_float_array(x: np.ndarray) -> np.ndarray:
    """Promote a numeric/bool array for subtraction (complex stays complex)."""
    x = np.asarray(x)
    if np.iscomplexobj(x):
        return x.astype(np.complex128)
    return x.astype(np.float64)
