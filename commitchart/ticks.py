"""
Time axis ticks for weekly charts.

One tick per bucket width across the axis range; every `label_every`-th tick
carries a date label, which with weekly buckets is roughly once a quarter.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from commitchart.aggregation import WEEK_SECONDS

DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class Tick:
    """A tick position in epoch seconds and its label, if it has one."""

    value: float
    label: Optional[str] = None

    @property
    def is_labeled(self) -> bool:
        return self.label is not None


def tick_count(min_value: float, max_value: float, width: int = WEEK_SECONDS) -> int:
    """Number of ticks for an axis range; zero for an empty or inverted range."""
    if max_value <= min_value:
        return 0
    return math.floor((max_value - min_value) / width)


def format_tick(value: float, date_format: str = DATE_FORMAT) -> str:
    """Render a tick position as a UTC date."""
    return datetime.fromtimestamp(value, tz=timezone.utc).strftime(date_format)


def generate_ticks(
    min_value: float,
    max_value: float,
    width: int = WEEK_SECONDS,
    label_every: int = 13,
    date_format: str = DATE_FORMAT,
) -> list[Tick]:
    """
    Generate evenly spaced ticks for a time axis.

    Args:
        min_value: Axis minimum in epoch seconds
        max_value: Axis maximum in epoch seconds
        width: Spacing between ticks in seconds
        label_every: Every n-th tick, starting with the first, gets a label
        date_format: strftime format of the labels

    Returns:
        Ticks at min_value + i * width for i in range(tick_count(...))
    """
    ticks = []
    for i in range(tick_count(min_value, max_value, width)):
        value = min_value + i * width
        label = format_tick(value, date_format) if i % label_every == 0 else None
        ticks.append(Tick(value=value, label=label))
    return ticks
