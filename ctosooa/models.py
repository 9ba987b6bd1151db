"""Core data models shared across ctosooa components."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class FileCandidate:
    """A scanned file that is eligible for analysis."""

    path: str
    size_bytes: int
    extension: str
    location: Path

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def directory(self) -> str:
        """Containing directory as ``/<relative dir>``, or ``""`` at the root."""
        head, sep, _ = self.path.rpartition("/")
        return f"/{head}" if sep else ""


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate paired with the priority score it was ranked by."""

    candidate: FileCandidate
    score: int
