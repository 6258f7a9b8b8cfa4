from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional


@dataclass(frozen=True)
class SessionTree:
    """
    Discovery output: what exists under one session output folder.

    Notes
    - files is keyed by the POSIX-style relative path ('sub/dir/name.ext') so both
      sides of a comparison share the same keys regardless of the host OS.
    - Files under excluded directories are not in 'files'; only their count is kept.
    """
    root_dir: Path
    files: Dict[str, Path]
    n_excluded: int = 0

    @property
    def relative_paths(self) -> List[str]:
        return sorted(self.files)

    def __contains__(self, rel_path: object) -> bool:
        return rel_path in self.files

    def __len__(self) -> int:
        return len(self.files)

    def get(self, rel_path: str) -> Optional[Path]:
        return self.files.get(rel_path)

    def resolve(self, rel_path: str) -> Path:
        """Absolute path for rel_path (whether or not the file exists)."""
        return self.files.get(rel_path, self.root_dir.joinpath(*rel_path.split("/")))
