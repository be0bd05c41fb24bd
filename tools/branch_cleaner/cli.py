"""CLI interface for the Stale Branch Cleaner."""

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import click

from shared.cli import create_table, error, handle_errors, info, print_table, success, warning
from shared.logger import setup_logger

from .cleaner import BranchCleaner, parse_cutoff_date
from .models import DEFAULT_LEGACY_BRANCHES, BranchOutcome, BranchResult, CleanupConfig, CleanupReport

OUTCOME_STYLES = {
    BranchOutcome.DELETED: "red",
    BranchOutcome.WOULD_DELETE: "yellow",
    BranchOutcome.KEPT: "green",
    BranchOutcome.SKIPPED: "dim",
    BranchOutcome.FAILED: "bold red",
}


def format_time_ago(dt: datetime, now: Optional[datetime] = None) -> str:
    """
    Format datetime as relative time ago.

    Args:
        dt: Timezone-aware datetime to format
        now: Reference time (defaults to current UTC time)

    Returns:
        Human-readable time ago string
    """
    now = now or datetime.now(timezone.utc)
    diff = now - dt

    if diff.days > 365:
        years = diff.days // 365
        return f"{years} year{'s' if years != 1 else ''} ago"
    elif diff.days > 30:
        months = diff.days // 30
        return f"{months} month{'s' if months != 1 else ''} ago"
    elif diff.days > 0:
        return f"{diff.days} day{'s' if diff.days != 1 else ''} ago"
    elif diff.seconds > 3600:
        hours = diff.seconds // 3600
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    elif diff.seconds > 60:
        minutes = diff.seconds // 60
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    else:
        return "just now"


def display_results(results: List[BranchResult], title: str = "Branches") -> None:
    """
    Display per-branch results in a table.

    Args:
        results: Results to display
        title: Table title
    """
    if not results:
        info("No branches found")
        return

    table = create_table(title=title)
    table.add_column("Branch", style="cyan")
    table.add_column("Last Commit", style="yellow")
    table.add_column("Age", style="yellow")
    table.add_column("Author", style="dim")
    table.add_column("Merged", style="magenta")
    table.add_column("Outcome")

    for result in results:
        if result.commit:
            last_commit = result.commit.date.isoformat()
            age = format_time_ago(result.commit.date)
            author = result.commit.author
        else:
            last_commit, age, author = "-", "-", "-"

        style = OUTCOME_STYLES.get(result.outcome, "")
        table.add_row(
            result.branch,
            last_commit,
            age,
            author,
            "yes" if result.merged else "no",
            f"[{style}]{result.outcome.value}[/{style}]",
        )

    print_table(table)


def display_summary(report: CleanupReport, dry_run: bool) -> None:
    """Print per-outcome counts and output locations."""
    info("Summary:")
    if dry_run:
        info(f"  Would delete: {len(report.would_delete)}")
        for result in report.would_delete:
            info(f"    Would delete branch: {result.branch}")
    else:
        info(f"  Deleted: {len(report.deleted)}")
    info(f"  Kept: {len(report.kept)}")

    if report.skipped:
        warning(f"  Skipped: {len(report.skipped)}")
    if report.failed:
        warning(f"  Failed: {len(report.failed)}")
        for result in report.failed:
            warning(f"    {result.branch}: {result.reason}")

    if report.log_file:
        success(f"Log written to {report.log_file}")
    if report.clone_path.exists():
        info(f"Repo folder: {report.clone_path}")


@click.command()
@click.argument("repo_url", required=False)
@click.argument("cutoff_date", required=False)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would be deleted without deleting or writing a log",
)
@click.option(
    "--primary-branch",
    "-b",
    default="main",
    show_default=True,
    envvar="BRANCH_CLEANER_PRIMARY_BRANCH",
    help="Primary integration branch (never deleted)",
)
@click.option(
    "--legacy-branch",
    multiple=True,
    help="Legacy primary-branch name to protect besides \"master\" (can be repeated)",
)
@click.option(
    "--protected",
    multiple=True,
    help="Additional branches to protect from deletion (can be specified multiple times)",
)
@click.option(
    "--remote",
    default="origin",
    show_default=True,
    help="Remote whose branches are cleaned",
)
@click.option(
    "--delete-remote",
    is_flag=True,
    help="Also delete stale branches on the remote (default: local clone only)",
)
@click.option(
    "--remove-clone",
    is_flag=True,
    help="Remove the temporary clone after the run (default: keep it for inspection)",
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    envvar="BRANCH_CLEANER_LOG_DIR",
    help="Directory for the CSV audit log (defaults to current directory)",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@handle_errors
def main(
    repo_url: Optional[str],
    cutoff_date: Optional[str],
    dry_run: bool,
    primary_branch: str,
    legacy_branch: tuple,
    protected: tuple,
    remote: str,
    delete_remote: bool,
    remove_clone: bool,
    log_dir: Optional[Path],
    verbose: bool,
):
    """
    Stale Branch Cleaner - Delete branches whose last commit is older than a cutoff.

    The repository is cloned into a fresh temporary directory. Every remote
    branch except the primary branch and its legacy alias is inspected, and
    branches whose last commit is at or before CUTOFF_DATE are deleted. A CSV
    audit log is written for each run that deletes something.

    Examples:

        \b
        # Preview what would be deleted
        branch-cleaner git@github.com:org/repo.git 2025-07-01 --dry-run

        \b
        # Delete branches with no commits since July 2025
        branch-cleaner https://github.com/org/repo.git 2025-07-01T00:00:00

        \b
        # Repository whose primary branch is "trunk"
        branch-cleaner git@github.com:org/repo.git 2025-07-01 --primary-branch trunk

        \b
        # Also remove the branches from the remote
        branch-cleaner git@github.com:org/repo.git 2025-07-01 --delete-remote
    """
    # Setup logging
    log_level = "DEBUG" if verbose else "INFO"
    setup_logger(__package__, level=log_level)

    info(f"Dry run: {'enabled' if dry_run else 'disabled'}")

    if not repo_url or not cutoff_date:
        error("Usage: branch-cleaner <repo-url> <cutoff-date> [--dry-run]")
        sys.exit(1)

    try:
        cutoff = parse_cutoff_date(cutoff_date)
    except ValueError:
        error('Invalid date format. Use "YYYY-MM-DD" or ISO format.')
        sys.exit(1)

    info(f"Repo URL: {repo_url}")
    info(f"Cutoff date: {cutoff.isoformat()}")

    config = CleanupConfig(
        repo_url=repo_url,
        cutoff_date=cutoff,
        dry_run=dry_run,
        primary_branch=primary_branch,
        legacy_branches=tuple(dict.fromkeys(DEFAULT_LEGACY_BRANCHES + legacy_branch)),
        protected_branches=tuple(protected),
        remote_name=remote,
        delete_remote=delete_remote,
        remove_clone=remove_clone,
        log_dir=log_dir or Path.cwd(),
    )

    cleaner = BranchCleaner(config)
    report = cleaner.run()

    title = "Branches (Dry Run)" if dry_run else "Branches"
    display_results(report.results, title=title)
    display_summary(report, dry_run=dry_run)

    if dry_run:
        info(f"Dry run complete. {len(report.would_delete)} branch(es) would be deleted")
    else:
        success("Cleanup complete")


if __name__ == "__main__":
    main()
