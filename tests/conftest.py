"""Shared fixtures for the test suite."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

import pytest

from tools.branch_cleaner.models import CleanupConfig
from tools.branch_cleaner.vcs import VersionControl


class FakeVersionControl(VersionControl):
    """In-memory stand-in for a cloned repository."""

    def __init__(
        self,
        commits: Optional[Dict[str, Tuple[str, str, str, str]]] = None,
        merged: Optional[Set[str]] = None,
        remote: str = "origin",
        primary: str = "main",
    ):
        # branch -> (ISO date, hash, author, subject)
        self.commits = commits or {}
        self.merged = set(merged or ())
        self.remote = remote
        self.primary = primary
        self.extra_remote_lines: List[str] = [f"{remote}/HEAD -> {remote}/{primary}", f"{remote}/{primary}"]
        self.local = {primary}
        self.deleted: List[str] = []
        self.remote_deleted: List[str] = []
        self.checkouts: List[str] = []
        self.calls: List[str] = []
        self.raw_calls: List[Tuple[str, ...]] = []
        # names that also exist as paths in the working tree
        self.paths: Set[str] = set()
        self.fail_log: Set[str] = set()
        self.fail_delete: Set[str] = set()
        self.fail_merged_query = False
        self.fail_clone = False

    def clone(self, url: str, dest: Path) -> None:
        self.calls.append("clone")
        if self.fail_clone:
            raise RuntimeError(f"could not clone {url}")

    def fetch_all(self) -> None:
        self.calls.append("fetch_all")

    def checkout(self, ref: str) -> None:
        self.checkouts.append(ref)

    def list_remote_branches(self) -> List[str]:
        lines = list(self.extra_remote_lines)
        lines.extend(f"{self.remote}/{name}" for name in self.commits)
        return [f"  {line}" for line in lines] + [""]

    def local_branches(self) -> List[str]:
        return sorted(self.local)

    def create_tracking_branch(self, name: str, upstream: str) -> None:
        self.calls.append(f"track {name} {upstream}")
        self.local.add(name)

    def raw(self, *args: str) -> str:
        self.raw_calls.append(args)
        if args[0] == "log":
            revs = list(args[3:])
            if revs[-1] == "--":
                revs.pop()
            elif revs[-1] in self.paths:
                raise RuntimeError(f"ambiguous argument '{revs[-1]}': both revision and filename")
            ref = revs[-1]
            prefix = f"{self.remote}/"
            if ref.startswith(prefix):
                branch = ref[len(prefix):]
            elif ref in self.local:
                branch = ref
            else:
                raise RuntimeError(f"bad revision '{ref}'")
            if branch in self.fail_log:
                raise RuntimeError(f"bad revision '{ref}'")
            return "\x1f".join(self.commits[branch]) + "\n"
        if args[0] == "branch" and "--merged" in args:
            if self.fail_merged_query:
                raise RuntimeError("merged query failed")
            if "-r" in args:
                return "\n".join(f"  {self.remote}/{n}" for n in sorted(self.merged | {self.primary}))
            names = sorted(self.merged | {self.primary})
            return "\n".join(f"* {n}" if n == self.primary else f"  {n}" for n in names)
        raise AssertionError(f"unexpected git command: {args}")

    def delete_local_branch(self, name: str, force: bool = False) -> None:
        if name in self.fail_delete:
            raise RuntimeError(f"cannot delete {name}")
        self.local.discard(name)
        self.deleted.append(name)

    def delete_remote_branch(self, remote: str, name: str) -> None:
        self.remote_deleted.append(f"{remote}/{name}")


@pytest.fixture
def fake_vcs():
    """Repository with one stale unmerged and one recent merged branch."""
    return FakeVersionControl(
        commits={
            "feature/a": ("2025-06-01T12:00:00+00:00", "a" * 40, "Alice", "Add feature a"),
            "feature/b": ("2025-08-01T12:00:00+00:00", "b" * 40, "Bob", "Add feature b"),
        },
        merged={"feature/b"},
    )


@pytest.fixture
def make_config(tmp_path):
    """Build a CleanupConfig writing logs into tmp_path."""

    def _make(**overrides) -> CleanupConfig:
        values = dict(
            repo_url="git@example.com:org/repo.git",
            cutoff_date=datetime(2025, 7, 1, tzinfo=timezone.utc),
            log_dir=tmp_path / "logs",
            started_at=datetime(2025, 9, 1, 8, 30, 15, 123000, tzinfo=timezone.utc),
        )
        values.update(overrides)
        return CleanupConfig(**values)

    return _make


@pytest.fixture
def clone_dir(tmp_path):
    path = tmp_path / "clone"
    path.mkdir()
    return path


@pytest.fixture
def fake_vcs_class():
    return FakeVersionControl
