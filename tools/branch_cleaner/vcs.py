"""Version-control client used by the branch cleaner."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from git import Repo

from shared.logger import get_logger

logger = get_logger(__name__)


class VersionControl(ABC):
    """Interface for the Git operations the cleaner needs."""

    @abstractmethod
    def clone(self, url: str, dest: Path) -> None:
        """
        Clone a repository.

        Args:
            url: Any location accepted by git (SSH or HTTPS)
            dest: Empty directory to clone into
        """
        ...

    @abstractmethod
    def fetch_all(self) -> None:
        """Fetch refs from all remotes."""
        ...

    @abstractmethod
    def checkout(self, ref: str) -> None:
        """Check out an existing ref."""
        ...

    @abstractmethod
    def list_remote_branches(self) -> List[str]:
        """
        List remote-tracking branches.

        Returns:
            Raw listing lines, e.g. "origin/feature/x" or "origin/HEAD -> origin/main"
        """
        ...

    @abstractmethod
    def local_branches(self) -> List[str]:
        """Names of local branches."""
        ...

    @abstractmethod
    def create_tracking_branch(self, name: str, upstream: str) -> None:
        """
        Create and check out a local branch pointing at an upstream ref.

        Args:
            name: Local branch name
            upstream: Start point, e.g. "origin/feature/x"
        """
        ...

    @abstractmethod
    def raw(self, *args: str) -> str:
        """
        Run an arbitrary git subcommand.

        Args:
            args: Subcommand and arguments, e.g. ("log", "-1", "main")

        Returns:
            Command stdout
        """
        ...

    @abstractmethod
    def delete_local_branch(self, name: str, force: bool = False) -> None:
        """Delete a local branch."""
        ...

    @abstractmethod
    def delete_remote_branch(self, remote: str, name: str) -> None:
        """
        Delete a branch on a remote.

        Args:
            remote: Remote name, e.g. "origin"
            name: Branch name without the remote prefix
        """
        ...


class GitPythonClient(VersionControl):
    """VersionControl implementation backed by GitPython."""

    def __init__(self, repo: Optional[Repo] = None):
        self._repo = repo

    @property
    def repo(self) -> Repo:
        if self._repo is None:
            raise RuntimeError("No repository loaded; clone one first")
        return self._repo

    def clone(self, url: str, dest: Path) -> None:
        logger.debug(f"Cloning {url} into {dest}")
        self._repo = Repo.clone_from(url, str(dest))

    def fetch_all(self) -> None:
        self.repo.git.fetch("--all")

    def checkout(self, ref: str) -> None:
        self.repo.git.checkout(ref)

    def list_remote_branches(self) -> List[str]:
        return self.raw("branch", "-r").splitlines()

    def local_branches(self) -> List[str]:
        return [head.name for head in self.repo.heads]

    def create_tracking_branch(self, name: str, upstream: str) -> None:
        self.repo.git.checkout("-b", name, upstream)

    def raw(self, *args: str) -> str:
        return self.repo.git.execute(["git", *args])

    def delete_local_branch(self, name: str, force: bool = False) -> None:
        self.repo.delete_head(name, force=force)

    def delete_remote_branch(self, remote: str, name: str) -> None:
        results = self.repo.remote(remote).push(refspec=f":{name}")
        results.raise_if_error()
