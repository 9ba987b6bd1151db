"""Project scaffolding commands."""

from .symfony import ScaffoldError, ScaffoldResult, SymfonyScaffolder

__all__ = ["ScaffoldError", "ScaffoldResult", "SymfonyScaffolder"]
