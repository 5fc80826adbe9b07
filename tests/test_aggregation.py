"""Tests for weekly commit aggregation."""
from datetime import datetime, timedelta, timezone

import pandas as pd

from commitchart.aggregation import WEEK_SECONDS, aggregate_weekly, bucket_start
from tests.conftest import utc

FAR_FUTURE = datetime(2100, 1, 1, tzinfo=timezone.utc)


class TestWeeklyAggregation:
    """Bucketing commit timestamps into epoch-aligned weeks."""

    def test_week_width(self):
        assert WEEK_SECONDS == 604800

    def test_two_weeks_of_two_commits(self):
        commits = [utc(s) for s in (0, 86400, 604800, 604800 + 3600)]
        series = aggregate_weekly(commits, now=FAR_FUTURE)

        assert series.buckets == [(0, 2), (604800, 2)]
        assert series.max_count == 2
        assert series.total == 4

    def test_buckets_are_sorted_regardless_of_input_order(self):
        commits = [utc(s) for s in (3 * WEEK_SECONDS, 0, 2 * WEEK_SECONDS + 5, 10)]
        series = aggregate_weekly(commits, now=FAR_FUTURE)

        starts = [start for start, _ in series.buckets]
        assert starts == sorted(starts)
        assert series.start == 0
        assert series.end == 3 * WEEK_SECONDS

    def test_empty_weeks_are_not_materialized(self):
        commits = [utc(0), utc(5 * WEEK_SECONDS)]
        series = aggregate_weekly(commits, now=FAR_FUTURE)

        assert series.buckets == [(0, 1), (5 * WEEK_SECONDS, 1)]

    def test_future_commits_are_excluded(self):
        now = utc(WEEK_SECONDS * 10)
        commits = [utc(0), now, now + timedelta(seconds=1)] + [now + timedelta(days=1)] * 5
        series = aggregate_weekly(commits, now=now)

        assert series.total == 2, "A commit exactly at run time is kept, later ones are not"
        assert series.max_count == 1, "Future commits must not inflate the maximum"

    def test_bucket_starts_are_epoch_aligned(self):
        for seconds in (1, 604799, 604800, 1577836800, 1700000000):
            start = bucket_start(seconds)
            assert start % WEEK_SECONDS == 0
            assert start <= seconds < start + WEEK_SECONDS

    def test_same_week_in_any_timezone(self):
        instant = datetime(2020, 1, 1, tzinfo=timezone.utc)
        shifted = instant.astimezone(timezone(timedelta(hours=-7)))
        series = aggregate_weekly([instant, shifted], now=FAR_FUTURE)

        assert series.buckets == [(bucket_start(1577836800), 2)]

    def test_naive_timestamps_are_utc(self):
        series = aggregate_weekly([datetime(1970, 1, 8)], now=FAR_FUTURE)
        assert series.buckets == [(WEEK_SECONDS, 1)]

    def test_run_time_defaults_to_now(self):
        next_year = datetime.now(timezone.utc) + timedelta(days=365)
        series = aggregate_weekly([utc(0), next_year])

        assert series.buckets == [(bucket_start(0), 1)], "Commits after the current time should be dropped"

    def test_empty_history(self):
        series = aggregate_weekly([], now=FAR_FUTURE)

        assert series.buckets == []
        assert series.max_count == 0
        assert series.start is None and series.end is None

    def test_to_dataframe(self):
        series = aggregate_weekly([utc(0), utc(WEEK_SECONDS)], now=FAR_FUTURE)
        df = series.to_dataframe()

        assert list(df.columns) == ["week_start", "commits"]
        assert df["commits"].tolist() == [1, 1]
        assert df["week_start"].iloc[1] == pd.Timestamp("1970-01-08", tz="UTC")
