"""Core stale-branch cleanup pipeline."""

import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from shared.logger import get_logger

from .audit import build_log_filename, write_audit_log
from .models import (
    DRY_RUN_SENTINEL,
    BranchOutcome,
    BranchResult,
    CleanupConfig,
    CleanupReport,
    CommitMeta,
)
from .vcs import GitPythonClient, VersionControl

logger = get_logger(__name__)

# date, hash, author, subject; separated by ASCII unit separators
FIELD_SEP = "\x1f"
LAST_COMMIT_FORMAT = "--format=%cI%x1f%H%x1f%an%x1f%s"


def parse_cutoff_date(value: str) -> datetime:
    """
    Parse an ISO-8601 cutoff date.

    Dates without a UTC offset are taken as UTC.

    Args:
        value: e.g. "2025-07-01", "2025-07-01T00:00:00" or "2025-07-01T00:00:00+02:00"

    Returns:
        Timezone-aware datetime

    Raises:
        ValueError: If the value is not a valid ISO-8601 date
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_commit_line(output: str) -> CommitMeta:
    """
    Parse the output of ``git log -1`` in LAST_COMMIT_FORMAT.

    Raises:
        ValueError: If the output is malformed or the date cannot be parsed
    """
    parts = output.strip().split(FIELD_SEP, 3)
    if len(parts) != 4:
        raise ValueError(f"Unexpected log output: {output.strip()!r}")

    date_str, commit_hash, author, message = parts
    try:
        date = datetime.fromisoformat(date_str.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(f"Invalid commit date: {date_str!r}")
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)

    return CommitMeta(date=date, hash=commit_hash, message=message, author=author)


def _default_temp_dir() -> Path:
    return Path(tempfile.mkdtemp(prefix="repo-"))


class BranchCleaner:
    """
    Deletes branches whose last commit is at or before a cutoff date.

    Attributes:
        config: Run configuration
        vcs: Version-control client operating on the temporary clone
    """

    def __init__(
        self,
        config: CleanupConfig,
        vcs: Optional[VersionControl] = None,
        make_temp_dir: Optional[Callable[[], Path]] = None,
    ):
        """
        Initialize branch cleaner.

        Args:
            config: Run configuration
            vcs: Version-control client (defaults to GitPython)
            make_temp_dir: Factory for the clone directory (defaults to a fresh temp dir)
        """
        self.config = config
        self.vcs = vcs or GitPythonClient()
        self._make_temp_dir = make_temp_dir or _default_temp_dir

    def prepare_clone(self) -> Path:
        """
        Clone the repository into a fresh directory and check out the primary branch.

        Any failure here propagates to the caller.

        Returns:
            Path of the clone
        """
        clone_path = self._make_temp_dir()
        logger.info(f"Cloning {self.config.repo_url} into {clone_path}")

        self.vcs.clone(self.config.repo_url, clone_path)
        self.vcs.fetch_all()
        self.vcs.checkout(self.config.primary_branch)
        return clone_path

    def list_branches(self) -> List[str]:
        """
        List candidate branch names from the remote.

        Symbolic refs (``origin/HEAD -> origin/main``), the primary branch,
        legacy aliases and protected names are left out. The remote prefix
        is stripped, so ``origin/feature/x`` becomes ``feature/x``.
        """
        prefix = f"{self.config.remote_name}/"
        excluded = set(self.config.excluded_branches)
        branches = []

        for line in self.vcs.list_remote_branches():
            line = line.strip()
            if not line or "->" in line:
                continue
            if not line.startswith(prefix):
                logger.debug(f"Ignoring branch from another remote: {line}")
                continue

            name = line[len(prefix):]
            if name in excluded or name in branches:
                continue
            branches.append(name)

        return branches

    def ensure_local_branch(self, branch: str) -> None:
        """Create a local branch tracking the remote one unless it already exists."""
        if branch not in self.vcs.local_branches():
            self.vcs.create_tracking_branch(branch, f"{self.config.remote_name}/{branch}")

    def remote_ref(self, branch: str) -> str:
        return f"{self.config.remote_name}/{branch}"

    def get_last_commit(self, branch: str) -> CommitMeta:
        """
        Read metadata of the last commit on a branch.

        Dry runs read the remote-tracking ref and leave local branches alone;
        otherwise a local tracking branch is created first.

        Raises:
            ValueError: If the commit date cannot be parsed
        """
        if self.config.dry_run:
            ref = self.remote_ref(branch)
        else:
            self.ensure_local_branch(branch)
            ref = branch

        # "--" keeps branch names like "docs" from being read as paths
        output = self.vcs.raw("log", "-1", LAST_COMMIT_FORMAT, ref, "--")
        return parse_commit_line(output)

    def is_merged(self, branch: str) -> bool:
        """
        Check whether a branch is listed as merged into the primary branch.

        Query failures count as not merged.
        """
        if self.config.dry_run:
            args = ("branch", "-r", "--merged", self.config.primary_branch)
            target = self.remote_ref(branch)
        else:
            args = ("branch", "--merged", self.config.primary_branch)
            target = branch

        try:
            output = self.vcs.raw(*args)
        except Exception as e:
            logger.debug(f"Could not compute merge status for {branch}: {e}")
            return False

        for line in output.splitlines():
            name = line.strip().lstrip("*+").strip()
            if name == target:
                return True
        return False

    def is_stale(self, commit: CommitMeta) -> bool:
        """A commit at or before the cutoff is stale."""
        return commit.date <= self.config.cutoff_date

    def delete_branch(self, branch: str) -> None:
        """Delete a branch locally, and on the remote if configured."""
        # Never delete the checked-out branch
        self.vcs.checkout(self.config.primary_branch)
        self.vcs.delete_local_branch(branch, force=True)

        if self.config.delete_remote:
            self.vcs.delete_remote_branch(self.config.remote_name, branch)

    def process_branch(self, branch: str) -> BranchResult:
        """
        Classify one branch and delete it if it is stale.

        Failures are reported in the result instead of being raised.
        """
        try:
            commit = self.get_last_commit(branch)
        except Exception as e:
            logger.warning(f"Skipping {branch}: failed to read last commit: {e}")
            return BranchResult(branch=branch, outcome=BranchOutcome.SKIPPED, reason=str(e))

        logger.debug(
            f"{branch} commit={commit.date.isoformat()} "
            f"cutoff={self.config.cutoff_date.isoformat()}"
        )
        merged = self.is_merged(branch)

        if not self.is_stale(commit):
            return BranchResult(branch=branch, outcome=BranchOutcome.KEPT, commit=commit, merged=merged)

        if self.config.dry_run:
            logger.info(f"Would delete branch: {branch}")
            return BranchResult(
                branch=branch,
                outcome=BranchOutcome.WOULD_DELETE,
                commit=commit,
                merged=merged,
                deleted_at=DRY_RUN_SENTINEL,
            )

        try:
            self.delete_branch(branch)
        except Exception as e:
            logger.warning(f"Failed to delete branch {branch}: {e}")
            return BranchResult(
                branch=branch,
                outcome=BranchOutcome.FAILED,
                commit=commit,
                merged=merged,
                reason=str(e),
            )

        logger.info(f"Deleted branch: {branch}")
        return BranchResult(
            branch=branch,
            outcome=BranchOutcome.DELETED,
            commit=commit,
            merged=merged,
            deleted_at=datetime.now(timezone.utc),
        )

    def run(self) -> CleanupReport:
        """
        Run the full pipeline: clone, classify, delete, write the audit log.

        Returns:
            CleanupReport with one result per candidate branch
        """
        clone_path = self.prepare_clone()
        report = CleanupReport(clone_path=clone_path)

        branches = self.list_branches()
        logger.info(f"Found {len(branches)} branches")

        for branch in branches:
            report.results.append(self.process_branch(branch))

        entries = report.log_entries
        if not self.config.dry_run and entries:
            log_path = self.config.log_dir / build_log_filename(self.config.started_at)
            report.log_file = write_audit_log(entries, log_path)

        if self.config.remove_clone:
            self.remove_clone(clone_path)

        return report

    def remove_clone(self, clone_path: Path) -> None:
        """Remove the temporary clone directory."""
        try:
            shutil.rmtree(clone_path)
            logger.debug(f"Removed clone at {clone_path}")
        except OSError as e:
            logger.warning(f"Failed to remove clone at {clone_path}: {e}")
