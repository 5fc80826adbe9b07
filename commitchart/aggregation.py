"""
Weekly aggregation of commit timestamps.

Buckets are WEEK_SECONDS wide and aligned to the Unix epoch, not to calendar
weeks, so a timestamp lands in the same bucket in every timezone.
"""
import math
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

import pandas as pd

WEEK_SECONDS = 7 * 24 * 60 * 60


@dataclass
class WeeklySeries:
    """Sparse weekly commit counts of one repository."""

    buckets: list[tuple[int, int]]
    max_count: int

    @property
    def total(self) -> int:
        return sum(count for _, count in self.buckets)

    @property
    def start(self) -> Optional[int]:
        return self.buckets[0][0] if self.buckets else None

    @property
    def end(self) -> Optional[int]:
        return self.buckets[-1][0] if self.buckets else None

    def to_dataframe(self) -> pd.DataFrame:
        """
        Convert the series to a DataFrame.

        Returns:
            DataFrame with a UTC 'week_start' column and a 'commits' column
        """
        return pd.DataFrame(
            {
                "week_start": pd.to_datetime([start for start, _ in self.buckets], unit="s", utc=True),
                "commits": [count for _, count in self.buckets],
            }
        )


def bucket_start(epoch_seconds: int, width: int = WEEK_SECONDS) -> int:
    """Start of the epoch-aligned bucket containing a timestamp."""
    return (epoch_seconds // width) * width


def aggregate_weekly(
    commits: Iterable[datetime], now: Optional[datetime] = None, width: int = WEEK_SECONDS
) -> WeeklySeries:
    """
    Count commits per epoch-aligned week.

    Args:
        commits: Commit timestamps, in any order
        now: Run time; commits strictly after it are ignored (default: current time)
        width: Bucket width in seconds

    Returns:
        WeeklySeries sorted by bucket start, without empty buckets
    """
    if now is None:
        now = datetime.now(timezone.utc)
    cutoff = _epoch(now)

    counts = Counter()
    for ts in commits:
        seconds = _epoch(ts)
        if seconds > cutoff:
            continue
        counts[bucket_start(math.floor(seconds), width)] += 1

    buckets = sorted(counts.items())
    max_count = max(counts.values()) if counts else 0
    return WeeklySeries(buckets=buckets, max_count=max_count)


def _epoch(ts: datetime) -> float:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.timestamp()
