"""
Error types for commitchart.

Every failure of a run is a CommitChartError. The CLI reports them with a
message on stderr and a non-zero exit status.
"""
from pathlib import Path
from typing import Optional


class CommitChartError(Exception):
    """Base class for all run failures."""


class ConfigError(CommitChartError):
    """Invalid repository configuration."""


class CacheReadError(CommitChartError):
    """The cache file exists but could not be read or decoded."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        super().__init__(f"Cannot read cache {self.path}: {reason}")


class CacheWriteError(CommitChartError):
    """The cache file could not be written."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        super().__init__(f"Cannot write cache {self.path}: {reason}")


class FetchError(CommitChartError):
    """Commit history could not be fetched for a repository."""

    def __init__(self, url: str, reason: str):
        self.url = url
        super().__init__(f"Cannot fetch history of {url}: {reason}")


class RenderError(CommitChartError):
    """A chart could not be produced."""

    def __init__(self, name: str, reason: str, path: Optional[Path] = None):
        self.name = name
        self.path = path
        super().__init__(f"Cannot render chart '{name}': {reason}")


class RunTimeout(CommitChartError):
    """The run did not finish before its deadline."""

    def __init__(self, seconds: float, stage: str):
        self.seconds = seconds
        self.stage = stage
        super().__init__(f"Run exceeded its {seconds:g}s deadline ({stage})")
