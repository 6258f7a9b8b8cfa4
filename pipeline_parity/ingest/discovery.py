from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple

from pipeline_parity.models.catalog import SessionTree
from pipeline_parity.models.config import DEFAULT_EXCLUDE_DIR_PATTERNS


def is_excluded(rel_path: str, patterns: Sequence[str]) -> bool:
    """
    True if any *directory* component of rel_path matches one of the patterns.

    The file name itself is never matched: the patterns describe staging folders,
    not files.
    """
    dir_parts = rel_path.split("/")[:-1]
    return any(fnmatchcase(part, pat) for part in dir_parts for pat in patterns)


@dataclass
class SessionDiscovery:
    """
    Build the file inventory of one session output folder.

    Every regular file below the root is listed by its POSIX relative path,
    except files living under an excluded directory (see is_excluded()).
    """
    exclude_dir_patterns: Tuple[str, ...] = DEFAULT_EXCLUDE_DIR_PATTERNS

    def build_tree(self, root_dir: str | Path) -> SessionTree:
        root = Path(root_dir).expanduser().resolve()
        if not root.exists() or not root.is_dir():
            raise NotADirectoryError(f"Not a directory: {root}")

        files: Dict[str, Path] = {}
        n_excluded = 0
        for p in root.rglob("*"):
            if not p.is_file():
                continue
            rel = p.relative_to(root).as_posix()
            if is_excluded(rel, self.exclude_dir_patterns):
                n_excluded += 1
                continue
            files[rel] = p

        return SessionTree(root_dir=root, files=files, n_excluded=n_excluded)


def discover_session(
    root_dir: str | Path,
    exclude_dir_patterns: Iterable[str] = DEFAULT_EXCLUDE_DIR_PATTERNS,
) -> SessionTree:
    return SessionDiscovery(exclude_dir_patterns=tuple(exclude_dir_patterns)).build_tree(root_dir)


def union_of_paths(new: SessionTree, old: SessionTree) -> List[str]:
    """Sorted union of the relative paths present in either tree."""
    return sorted(set(new.files) | set(old.files))
