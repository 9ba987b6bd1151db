"""Directory walking that selects files eligible for analysis."""

from __future__ import annotations

import os
from pathlib import Path
from typing import FrozenSet, List, Tuple

from .logging import get_logger
from .models import FileCandidate

ALLOWED_EXTENSIONS = frozenset(
    {
        ".js",
        ".ts",
        ".jsx",
        ".tsx",
        ".json",
        ".md",
        ".txt",
        ".yml",
        ".yaml",
        ".sh",
    }
)

SIZE_CEILING = 100 * 1024

_IGNORED_NAMES = frozenset({"node_modules", ".git"})

_Identity = Tuple[int, int]
_WorkItem = Tuple[os.DirEntry, str, FrozenSet[_Identity]]


def is_ignored_name(name: str) -> bool:
    """Return True when an entry with this name must never be visited."""
    return name in _IGNORED_NAMES or name.startswith(".")


class TreeScanner:
    """Walks a directory tree and returns the files worth sending for analysis.

    The walk is depth-first over an explicit work-list. Directories are
    identified by ``(st_dev, st_ino)``; a directory already open on the
    current path (a symlink pointing back up the tree) is not re-entered,
    while the same directory reached along separate paths is listed under
    each of them. Entries that cannot be listed or stat'ed are
    skipped and counted in :attr:`skipped`.
    """

    def __init__(self) -> None:
        self.logger = get_logger("scanner")
        self.skipped = 0

    def scan(self, root: str | Path) -> List[FileCandidate]:
        """Return the eligible files under ``root``.

        The caller is responsible for checking that ``root`` exists.
        """
        root_path = Path(root).expanduser().resolve()
        self.skipped = 0

        candidates: List[FileCandidate] = []
        stack: List[_WorkItem] = []
        self._push_directory(root_path, "", stack, frozenset())

        while stack:
            entry, rel_path, ancestors = stack.pop()
            try:
                if entry.is_dir():
                    self._push_directory(Path(entry.path), rel_path, stack, ancestors)
                    continue
                if not entry.is_file():
                    continue
                extension = os.path.splitext(entry.name)[1]
                if extension not in ALLOWED_EXTENSIONS:
                    continue
                size = entry.stat().st_size
            except OSError as exc:
                self._record_skip(rel_path, exc)
                continue

            if size >= SIZE_CEILING:
                continue

            candidates.append(
                FileCandidate(
                    path=rel_path,
                    size_bytes=size,
                    extension=extension,
                    location=Path(entry.path),
                )
            )

        self.logger.debug(
            "Scanned %s: %d candidates, %d skipped entries",
            root_path,
            len(candidates),
            self.skipped,
        )
        return candidates

    def _push_directory(
        self,
        directory: Path,
        rel_dir: str,
        stack: List[_WorkItem],
        ancestors: FrozenSet[_Identity],
    ) -> None:
        try:
            stat_result = directory.stat()
            identity = (stat_result.st_dev, stat_result.st_ino)
            if identity in ancestors:
                self.logger.debug("Skipping symlink cycle at %s", directory)
                return
            with os.scandir(directory) as iterator:
                entries = sorted(iterator, key=lambda item: item.name)
        except OSError as exc:
            self._record_skip(rel_dir or ".", exc)
            return

        lineage = ancestors | {identity}
        # Reverse so the first entry by name is popped first.
        for entry in reversed(entries):
            if is_ignored_name(entry.name):
                continue
            rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            stack.append((entry, rel_path, lineage))

    def _record_skip(self, rel_path: str, exc: OSError) -> None:
        self.skipped += 1
        self.logger.debug("Skipping %s: %s", rel_path, exc)


def scan(root: str | Path) -> List[FileCandidate]:
    """Scan ``root`` with a fresh :class:`TreeScanner`."""
    return TreeScanner().scan(root)


__all__ = ["ALLOWED_EXTENSIONS", "SIZE_CEILING", "TreeScanner", "is_ignored_name", "scan"]
