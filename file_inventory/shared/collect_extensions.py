# file_inventory/shared/collect_extensions.py
from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional


@dataclass(frozen=True)
class ExtensionStat:
    name: str
    count: int = 0
    size: int = 0


class ExtensionTable:
    """
    Extension -> ExtensionStat, filled once per visited file.

    Entries are only ever created or incremented; nothing is removed.
    """

    def __init__(self) -> None:
        self._stats: Dict[str, ExtensionStat] = {}

    def add(self, name: str, size: int) -> None:
        if size < 0:
            raise ValueError(f"Negative file size for extension {name!r}: {size}")
        st = self._stats.get(name)
        if st is None:
            self._stats[name] = ExtensionStat(name=name, count=1, size=size)
        else:
            self._stats[name] = ExtensionStat(name=name, count=st.count + 1, size=st.size + size)

    def get(self, name: str) -> Optional[ExtensionStat]:
        return self._stats.get(name)

    def stats(self) -> List[ExtensionStat]:
        return list(self._stats.values())

    def total_size(self) -> int:
        return sum(s.size for s in self._stats.values())

    def total_count(self) -> int:
        return sum(s.count for s in self._stats.values())

    def as_dict(self) -> Dict[str, tuple]:
        return {k: (s.count, s.size) for k, s in self._stats.items()}

    def __contains__(self, name: str) -> bool:
        return name in self._stats

    def __len__(self) -> int:
        return len(self._stats)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ExtensionTable):
            return NotImplemented
        return self.as_dict() == other.as_dict()


@dataclass
class TraversalIssue:
    path: Path
    error: OSError
    structural: bool  # True: a directory could not be listed (subtree missing)


@dataclass
class CollectResult:
    table: ExtensionTable
    issues: List[TraversalIssue] = field(default_factory=list)
    files_seen: int = 0
    dirs_seen: int = 0

    @property
    def first_error(self) -> Optional[TraversalIssue]:
        return self.issues[0] if self.issues else None

    @property
    def structural_issues(self) -> List[TraversalIssue]:
        return [i for i in self.issues if i.structural]


def extension_of(name: str) -> str:
    # last-dot rule: ".gitignore" -> ".gitignore", "a.tar.GZ" -> ".gz", "README" -> ""
    i = name.rfind(".")
    if i < 0:
        return ""
    return name[i:].lower()


def printable(text) -> str:
    # undecodable filename bytes arrive as lone surrogates; show them as \udcXX
    return str(text).encode("utf-8", "backslashreplace").decode("utf-8")


def fmt_elapsed(sec: float) -> str:
    sec = int(sec)
    h = sec // 3600
    m = (sec % 3600) // 60
    s = sec % 60
    return f"{h:02d}:{m:02d}:{s:02d}"


def collect_extensions(root, progress_every: int = 0, table: Optional[ExtensionTable] = None) -> CollectResult:
    """
    Walk `root` and aggregate every non-directory entry by extension.

    The caller validates `root` (see check_input_dir). Unreadable directories
    and entries that cannot be stat'ed are recorded as issues and the walk
    carries on. Symlinks are never followed; they count as files.
    """
    result = CollectResult(table=table if table is not None else ExtensionTable())
    t0 = time.time()
    last_dir = ""

    stack: List[Path] = [Path(root)]
    while stack:
        current = stack.pop()
        result.dirs_seen += 1
        last_dir = str(current)

        try:
            with os.scandir(current) as it:
                entries = list(it)
        except OSError as e:
            result.issues.append(TraversalIssue(path=current, error=e, structural=True))
            continue

        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    stack.append(Path(entry.path))
                    continue
                size = entry.stat(follow_symlinks=False).st_size
            except OSError as e:
                result.issues.append(TraversalIssue(path=Path(entry.path), error=e, structural=False))
                continue

            result.table.add(extension_of(entry.name), size)
            result.files_seen += 1

            if progress_every > 0 and result.files_seen % progress_every == 0:
                print(
                    f"PROGRESS {result.files_seen} files | elapsed {fmt_elapsed(time.time() - t0)} | last={printable(last_dir)}",
                    flush=True,
                )

    if progress_every > 0:
        print(
            f"PROGRESS {result.files_seen} files | elapsed {fmt_elapsed(time.time() - t0)} | done",
            flush=True,
        )
    return result
