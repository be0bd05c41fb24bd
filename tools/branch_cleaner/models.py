"""Data model for the branch cleaner."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union

DRY_RUN_SENTINEL = "DRY-RUN"

DEFAULT_PRIMARY_BRANCH = "main"
DEFAULT_LEGACY_BRANCHES = ("master",)
DEFAULT_REMOTE = "origin"


@dataclass(frozen=True)
class CommitMeta:
    """Last commit on a branch."""

    date: datetime
    hash: str
    message: str
    author: str


@dataclass(frozen=True)
class LogEntry:
    """Audit record for a deleted (or would-be-deleted) branch."""

    branch: str
    last_commit_date: datetime
    deleted_at: Union[datetime, str]
    commit_hash: str
    commit_message: str
    author: str
    merged_to_main: bool


@dataclass(frozen=True)
class CleanupConfig:
    """
    Run configuration, built once at startup.

    Attributes:
        repo_url: Repository location passed to git clone
        cutoff_date: Branches with a last commit at or before this are deleted
        dry_run: Report only; never delete or write the audit log
        primary_branch: Integration branch checked out and never deleted
        legacy_branches: Alternate primary-branch names never deleted
        protected_branches: Additional names never deleted
        remote_name: Remote whose branches are enumerated
        delete_remote: Also delete qualifying branches on the remote
        remove_clone: Remove the temporary clone after the run
        log_dir: Directory receiving the audit CSV
        started_at: Wall-clock start of the run
    """

    repo_url: str
    cutoff_date: datetime
    dry_run: bool = False
    primary_branch: str = DEFAULT_PRIMARY_BRANCH
    legacy_branches: Tuple[str, ...] = DEFAULT_LEGACY_BRANCHES
    protected_branches: Tuple[str, ...] = ()
    remote_name: str = DEFAULT_REMOTE
    delete_remote: bool = False
    remove_clone: bool = False
    log_dir: Path = field(default_factory=Path.cwd)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def excluded_branches(self) -> Tuple[str, ...]:
        """Branch names that are never candidates for deletion."""
        return (self.primary_branch, *self.legacy_branches, *self.protected_branches)


class BranchOutcome(str, Enum):
    """What happened to a branch during a run."""

    DELETED = "deleted"
    WOULD_DELETE = "would-delete"
    KEPT = "kept"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class BranchResult:
    """Per-branch result of a cleanup run."""

    branch: str
    outcome: BranchOutcome
    commit: Optional[CommitMeta] = None
    merged: bool = False
    reason: Optional[str] = None
    deleted_at: Optional[Union[datetime, str]] = None

    @property
    def log_entry(self) -> Optional[LogEntry]:
        """Audit record, for deleted and would-be-deleted branches only."""
        if self.outcome not in (BranchOutcome.DELETED, BranchOutcome.WOULD_DELETE):
            return None
        if self.commit is None or self.deleted_at is None:
            return None

        return LogEntry(
            branch=self.branch,
            last_commit_date=self.commit.date,
            deleted_at=self.deleted_at,
            commit_hash=self.commit.hash,
            commit_message=self.commit.message,
            author=self.commit.author,
            merged_to_main=self.merged,
        )


@dataclass
class CleanupReport:
    """Outcome of a full run."""

    clone_path: Path
    results: List[BranchResult] = field(default_factory=list)
    log_file: Optional[Path] = None

    def _with_outcome(self, outcome: BranchOutcome) -> List[BranchResult]:
        return [r for r in self.results if r.outcome == outcome]

    @property
    def deleted(self) -> List[BranchResult]:
        return self._with_outcome(BranchOutcome.DELETED)

    @property
    def would_delete(self) -> List[BranchResult]:
        return self._with_outcome(BranchOutcome.WOULD_DELETE)

    @property
    def kept(self) -> List[BranchResult]:
        return self._with_outcome(BranchOutcome.KEPT)

    @property
    def skipped(self) -> List[BranchResult]:
        return self._with_outcome(BranchOutcome.SKIPPED)

    @property
    def failed(self) -> List[BranchResult]:
        return self._with_outcome(BranchOutcome.FAILED)

    @property
    def log_entries(self) -> List[LogEntry]:
        entries = (r.log_entry for r in self.results)
        return [e for e in entries if e is not None]
