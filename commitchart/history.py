"""
Git history provider for commitchart.

Clones a repository and collects the committer timestamp of every commit
reachable from its default branch head.
"""
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol

import git

from commitchart.errors import FetchError


class HistoryProvider(Protocol):
    """Anything that can list the commit timestamps of a repository."""

    def fetch(self, url: str) -> list[datetime]:
        ...


class GitHistoryProvider:
    """Fetches commit history by cloning with GitPython."""

    def __init__(self, work_dir: Optional[Path] = None):
        """
        Initialize the provider.

        Args:
            work_dir: Parent directory for temporary clones (default: system temp)
        """
        self.work_dir = Path(work_dir) if work_dir else None

    def fetch(self, url: str) -> list[datetime]:
        """
        Collect commit timestamps from the head of the default branch.

        Args:
            url: Clone URL or local path of the repository

        Returns:
            Committer timestamps in UTC, newest first
        """
        with tempfile.TemporaryDirectory(dir=self.work_dir) as tmpdir:
            try:
                repo = git.Repo.clone_from(url, Path(tmpdir) / "repo", bare=True)
            except git.GitError as exc:
                raise FetchError(url, _describe(exc)) from exc

            try:
                return commit_timestamps(repo)
            except ValueError as exc:
                # An empty repository has no HEAD commit
                raise FetchError(url, str(exc)) from exc
            except git.GitError as exc:
                raise FetchError(url, _describe(exc)) from exc
            finally:
                repo.close()


def commit_timestamps(repo: git.Repo) -> list[datetime]:
    """List committer timestamps of every commit reachable from HEAD."""
    head = repo.head.commit
    return [
        datetime.fromtimestamp(commit.committed_date, tz=timezone.utc)
        for commit in repo.iter_commits(head)
    ]


def _describe(exc: git.GitError) -> str:
    stderr = getattr(exc, "stderr", "") or ""
    stderr = stderr.strip()
    return stderr or str(exc)
