"""ctosooa: a small command dispatcher with codebase analysis helpers."""

from .models import FileCandidate
from .prioritizer import prioritize
from .scanner import TreeScanner, scan

__version__ = "1.0.0"

__all__ = ["FileCandidate", "TreeScanner", "prioritize", "scan", "__version__"]
