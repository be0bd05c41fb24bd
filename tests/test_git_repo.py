"""End-to-end tests against a real temporary git repository."""

import csv
import shutil
from datetime import datetime, timezone
from pathlib import Path

import pytest
from git import Actor, Repo

from tools.branch_cleaner.cleaner import BranchCleaner
from tools.branch_cleaner.models import BranchOutcome, CleanupConfig

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")

ALICE = Actor("Alice", "alice@example.com")


def git_date(year: int, month: int, day: int) -> str:
    """Raw git date ("<epoch> <offset>") for midday UTC."""
    stamp = int(datetime(year, month, day, 12, tzinfo=timezone.utc).timestamp())
    return f"{stamp} +0000"


def commit_file(repo: Repo, relpath: str, content: str, message: str, date: str) -> None:
    path = Path(repo.working_tree_dir) / relpath
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.index.add([relpath])
    repo.index.commit(message, author=ALICE, committer=ALICE, author_date=date, commit_date=date)


@pytest.fixture
def origin_repo(tmp_path):
    """
    Source repository with:

    - main: contains a docs/ directory
    - feature/a: last commit 2025-06-01, unmerged
    - docs: last commit 2025-06-15, unmerged, same name as a directory
    - feature/b: last commit 2025-08-01, merged into main
    """
    repo = Repo.init(tmp_path / "origin")
    commit_file(repo, "docs/readme.md", "readme\n", "Initial commit", git_date(2025, 1, 1))
    repo.git.branch("-M", "main")

    repo.git.checkout("-b", "feature/a", "main")
    commit_file(repo, "a.txt", "a\n", "Add feature a", git_date(2025, 6, 1))

    repo.git.checkout("-b", "docs", "main")
    commit_file(repo, "docs/notes.md", "notes\n", "Add notes", git_date(2025, 6, 15))

    repo.git.checkout("-b", "feature/b", "main")
    commit_file(repo, "b.txt", "b\n", "Add feature b", git_date(2025, 8, 1))

    repo.git.checkout("main")
    repo.git.merge("feature/b")
    return repo


def make_config(origin_repo, tmp_path, **overrides):
    values = dict(
        repo_url=origin_repo.working_tree_dir,
        cutoff_date=datetime(2025, 7, 1, tzinfo=timezone.utc),
        log_dir=tmp_path / "logs",
    )
    values.update(overrides)
    return CleanupConfig(**values)


def run_cleaner(config, tmp_path):
    clone_dir = tmp_path / "clone"
    clone_dir.mkdir()
    return BranchCleaner(config, make_temp_dir=lambda: clone_dir).run()


class TestRealRepository:
    """Run the cleaner against a cloned on-disk repository."""

    def test_deletes_stale_branches_including_path_named(self, origin_repo, tmp_path):
        report = run_cleaner(make_config(origin_repo, tmp_path), tmp_path)

        outcomes = {r.branch: r.outcome for r in report.results}
        assert outcomes == {
            "feature/a": BranchOutcome.DELETED,
            "docs": BranchOutcome.DELETED,
            "feature/b": BranchOutcome.KEPT,
        }
        assert next(r for r in report.results if r.branch == "feature/b").merged is True

        with open(report.log_file, newline="") as f:
            rows = list(csv.DictReader(f))
        assert sorted(row["Branch Name"] for row in rows) == ["docs", "feature/a"]
        assert all(row["Merged to Main"] == "false" for row in rows)

        clone = Repo(report.clone_path)
        local = {head.name for head in clone.heads}
        assert "docs" not in local
        assert "feature/a" not in local

    def test_dry_run_leaves_clone_untouched(self, origin_repo, tmp_path):
        report = run_cleaner(make_config(origin_repo, tmp_path, dry_run=True), tmp_path)

        assert sorted(r.branch for r in report.would_delete) == ["docs", "feature/a"]
        assert next(r for r in report.results if r.branch == "feature/b").merged is True
        assert report.log_file is None

        clone = Repo(report.clone_path)
        assert {head.name for head in clone.heads} == {"main"}
        assert clone.active_branch.name == "main"
