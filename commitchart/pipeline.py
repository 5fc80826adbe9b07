"""
Run orchestration for commitchart.

A run loads the cache, fetches the histories it is missing, saves the cache
when anything was fetched, and renders one chart per configured repository.
"""
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from commitchart.aggregation import WEEK_SECONDS, WeeklySeries, aggregate_weekly
from commitchart.cache import CommitCache
from commitchart.config import ChartConfig
from commitchart.errors import CommitChartError, FetchError, RenderError, RunTimeout
from commitchart.history import GitHistoryProvider, HistoryProvider
from commitchart.render import ChartRenderer
from commitchart.ticks import generate_ticks


class Deadline:
    """Wall-clock budget of a run, checked between steps."""

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        self.seconds = seconds
        self.clock = clock
        self.expires_at = clock() + seconds

    def check(self, stage: str) -> None:
        if self.clock() >= self.expires_at:
            raise RunTimeout(self.seconds, stage)


@dataclass
class RepositoryFailure:
    """A fetch or render failure recorded instead of aborting the run."""

    url: str
    stage: str
    error: CommitChartError


@dataclass
class RunSummary:
    """What a run did."""

    cache_found: bool = False
    fetched: list[str] = field(default_factory=list)
    cache_saved: bool = False
    charts: dict[str, Path] = field(default_factory=dict)
    failures: list[RepositoryFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class ActivityPipeline:
    """
    Produces weekly activity charts for the configured repositories.

    By default the first fetch or render failure aborts the run. With
    keep_going=True those failures are collected in the RunSummary instead;
    cache and timeout failures always abort.
    """

    def __init__(
        self,
        config: ChartConfig,
        provider: HistoryProvider,
        renderer: Optional[ChartRenderer] = None,
        cache: Optional[CommitCache] = None,
        keep_going: bool = False,
        now: Optional[datetime] = None,
        deadline: Optional[Deadline] = None,
        progress: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            config: Repositories and paths of the run
            provider: Source of commit histories
            renderer: Chart writer (default: ChartRenderer on config.output_dir)
            cache: Commit store (default: CommitCache on config.cache_path)
            keep_going: Record per-repository failures instead of aborting
            now: Run time; later commits are not charted (default: current time)
            deadline: Run budget (default: config.timeout seconds from now)
            progress: Callback receiving progress messages
        """
        self.config = config
        self.provider = provider
        self.renderer = renderer or ChartRenderer(config.output_dir, config.image_format)
        if cache is None:
            cache = CommitCache(config.cache_path, config.repositories)
        self.cache = cache
        self.keep_going = keep_going
        self.now = now or datetime.now(timezone.utc)
        self.deadline = deadline or Deadline(config.timeout)
        self.progress = progress or (lambda message: None)

    def fetch_missing(self, summary: RunSummary) -> None:
        """Fetch every repository whose cached history is empty."""
        for url in self.cache.pending():
            self.deadline.check(f"before fetching {url}")
            self.progress(f"clone {url}")
            try:
                commits = self.provider.fetch(url)
            except FetchError as exc:
                if not self.keep_going:
                    raise
                summary.failures.append(RepositoryFailure(url, "fetch", exc))
                continue
            self.cache.update(url, commits)
            summary.fetched.append(url)

    def series_for(self, url: str) -> WeeklySeries:
        return aggregate_weekly(self.cache[url].commits, now=self.now)

    def render_all(self, summary: RunSummary) -> None:
        failed = {failure.url for failure in summary.failures}
        for url in self.cache:
            if url in failed:
                continue
            self.deadline.check(f"before rendering {url}")
            series = self.series_for(url)
            ticks = self._ticks(series)
            try:
                path = self.renderer.render(self.cache[url].name, series, ticks)
            except RenderError as exc:
                if not self.keep_going:
                    raise
                summary.failures.append(RepositoryFailure(url, "render", exc))
                continue
            summary.charts[url] = path

    def _ticks(self, series: WeeklySeries):
        if series.start is None:
            return []
        return generate_ticks(
            series.start, series.end, WEEK_SECONDS, label_every=self.config.label_every
        )

    def run(self) -> RunSummary:
        """
        Execute the full run.

        Returns:
            RunSummary describing fetches, cache writes, charts and failures
        """
        summary = RunSummary()

        self.deadline.check("before loading the cache")
        summary.cache_found = self.cache.load()

        self.fetch_missing(summary)

        if summary.fetched:
            self.deadline.check("before saving the cache")
            self.cache.save()
            summary.cache_saved = True

        self.render_all(summary)
        return summary


def build_pipeline(
    config: ChartConfig,
    provider: Optional[HistoryProvider] = None,
    keep_going: bool = False,
    progress: Optional[Callable[[str], None]] = None,
) -> ActivityPipeline:
    """Create a pipeline backed by git clones and matplotlib charts."""
    if provider is None:
        provider = GitHistoryProvider()
    return ActivityPipeline(config, provider, keep_going=keep_going, progress=progress)
