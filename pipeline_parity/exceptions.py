from __future__ import annotations

from pathlib import Path


class ParityError(Exception):
    """Base class for errors raised by pipeline_parity."""


class LoadFailure(ParityError):
    """A data file could not be read or decoded.

    Comparators catch this and turn it into an ERROR verdict for the
    offending path; it never escapes the session dispatcher.
    """

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = str(reason)
        super().__init__(f"Failed to load {self.path.name}: {self.reason}")
