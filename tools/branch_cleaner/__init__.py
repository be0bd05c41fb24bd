"""Stale Branch Cleaner - Delete branches whose last commit predates a cutoff."""

from .cleaner import BranchCleaner
from .models import CleanupConfig

__all__ = ["BranchCleaner", "CleanupConfig"]
