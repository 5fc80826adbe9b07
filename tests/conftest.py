"""Pytest fixtures and test utilities."""
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest
import git

from commitchart.config import ChartConfig, TrackedRepository
from commitchart.errors import FetchError, RenderError

# 2020-01-01T00:00:00Z
BASE_EPOCH = 1577836800
DAY = 24 * 60 * 60

# Commit times of the sample repository, oldest first
SAMPLE_COMMIT_EPOCHS = [
    BASE_EPOCH,
    BASE_EPOCH + 3600,
    BASE_EPOCH + 8 * DAY,
    BASE_EPOCH + 9 * DAY,
]


def utc(epoch_seconds):
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)


def make_commit(repo, repo_path, filename, content, epoch_seconds, message):
    (repo_path / filename).write_text(content)
    repo.index.add([filename])
    date = f"{epoch_seconds} +0000"
    return repo.index.commit(message, author_date=date, commit_date=date)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_git_repo(temp_dir):
    """
    Create a sample Git repository with known commit dates.

    Creates a repository with:
    - 4 commits on the default branch, two in each of two epoch weeks
    - 1 commit on a side branch that is not reachable from HEAD
    """
    repo_path = temp_dir / "sample_repo"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)

    # Configure git user (required for commits)
    with repo.config_writer() as config:
        config.set_value("user", "name", "Test User")
        config.set_value("user", "email", "test@example.com")

    for i, epoch in enumerate(SAMPLE_COMMIT_EPOCHS):
        make_commit(repo, repo_path, "file_a.py", f"# Version {i}\n", epoch, f"Commit {i}")

    default_branch = repo.active_branch
    side = repo.create_head("side")
    side.checkout()
    make_commit(repo, repo_path, "side.py", "# Side\n", BASE_EPOCH + 20 * DAY, "Side branch work")
    default_branch.checkout()

    yield repo_path


@pytest.fixture
def empty_git_repo(temp_dir):
    """A repository with no commits at all."""
    repo_path = temp_dir / "empty_repo"
    repo_path.mkdir()
    git.Repo.init(repo_path)
    yield repo_path


@pytest.fixture
def two_repo_config(temp_dir):
    """Synthetic configuration with two repositories."""
    return ChartConfig(
        repositories=(
            TrackedRepository("https://example.com/alpha.git", "Alpha"),
            TrackedRepository("https://example.com/beta.git", "Beta: Tools"),
        ),
        cache_path=temp_dir / "cache" / "data.json",
        output_dir=temp_dir / "output",
    )


class FakeProvider:
    """History provider returning canned commits and recording calls."""

    def __init__(self, histories=None, failing=(), on_fetch=None):
        self.histories = histories or {}
        self.failing = set(failing)
        self.on_fetch = on_fetch
        self.calls = []

    def fetch(self, url):
        self.calls.append(url)
        if self.on_fetch:
            self.on_fetch(url)
        if url in self.failing:
            raise FetchError(url, "repository not found")
        return list(self.histories.get(url, []))


class FakeRenderer:
    """Renderer that records what it was asked to draw."""

    def __init__(self, output_dir, failing=()):
        self.output_dir = Path(output_dir)
        self.failing = set(failing)
        self.rendered = []

    def render(self, name, series, ticks):
        if name in self.failing:
            raise RenderError(name, "disk full")
        self.rendered.append((name, series, list(ticks)))
        return self.output_dir / f"{name}.png"
