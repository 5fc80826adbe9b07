"""
Commit cache for commitchart.

Keeps the commit timestamps of every configured repository, keyed by URL, and
persists them as a JSON document so a history is only ever fetched once.
"""
import json
import os
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator, Optional

from commitchart.config import TrackedRepository
from commitchart.errors import CacheReadError, CacheWriteError

_FRACTION = re.compile(r"\.(\d+)")


@dataclass
class CommitSeries:
    """Display name plus the commit timestamps of one repository."""

    name: str
    commits: list[datetime] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.commits


def format_timestamp(ts: datetime) -> str:
    """Encode a timestamp as ISO-8601 UTC with a 'Z' suffix."""
    ts = to_utc(ts)
    if ts.microsecond:
        return ts.strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    return ts.strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_timestamp(value: str) -> datetime:
    """Decode an ISO-8601 timestamp with any offset into UTC."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    # fromisoformat only takes 3 or 6 fractional digits before Python 3.11
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text)
    return to_utc(datetime.fromisoformat(text))


def to_utc(ts: datetime) -> datetime:
    # Naive values are taken to be UTC already
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _field(entry: dict, key: str):
    # Documents written by older releases capitalise their field names
    if key in entry:
        return entry[key]
    return entry.get(key.capitalize())


def decode_document(document, path: Path) -> dict[str, CommitSeries]:
    """Turn a parsed cache document into CommitSeries, validating its shape."""
    if not isinstance(document, dict):
        raise CacheReadError(path, "top level is not an object")

    snapshot = {}
    for url, entry in document.items():
        if not isinstance(entry, dict):
            raise CacheReadError(path, f"entry for {url} is not an object")

        raw_commits = _field(entry, "commits")
        # A null list is how an unfetched history used to be written
        if raw_commits is None:
            raw_commits = []
        if not isinstance(raw_commits, list):
            raise CacheReadError(path, f"commits of {url} is not a list")

        try:
            commits = [parse_timestamp(value) for value in raw_commits]
        except (TypeError, ValueError, AttributeError) as exc:
            raise CacheReadError(path, f"bad timestamp in {url}: {exc}") from exc

        snapshot[url] = CommitSeries(name=str(_field(entry, "name") or ""), commits=commits)

    return snapshot


def read_snapshot(path: Path) -> Optional[dict[str, CommitSeries]]:
    """
    Read a persisted cache document.

    Args:
        path: Location of the cache file

    Returns:
        Mapping of URL to CommitSeries, or None when there is no cache file yet
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise CacheReadError(path, str(exc)) from exc

    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CacheReadError(path, f"invalid JSON ({exc})") from exc

    return decode_document(document, path)


class CommitCache:
    """
    In-memory commit store for the configured repositories.

    Entries are created empty, in configuration order, from the tracked
    repositories. Loading a snapshot only fills entries that are configured;
    saving writes every entry.
    """

    def __init__(self, path: Path, repositories: Iterable[TrackedRepository]):
        """
        Initialize the cache.

        Args:
            path: Location of the persisted cache document
            repositories: Tracked repositories, in iteration order
        """
        self.path = Path(path)
        self.entries: dict[str, CommitSeries] = {
            repo.url: CommitSeries(name=repo.name) for repo in repositories
        }

    def __getitem__(self, url: str) -> CommitSeries:
        return self.entries[url]

    def __contains__(self, url: str) -> bool:
        return url in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def pending(self) -> list[str]:
        """URLs whose history has not been captured yet, in configuration order."""
        return [url for url, series in self.entries.items() if series.is_empty]

    def merge(self, snapshot: dict[str, CommitSeries]) -> int:
        """
        Copy persisted commits into the configured entries.

        Persisted URLs that are not configured are ignored; configured URLs
        missing from the snapshot keep their current commits.

        Returns:
            Number of entries taken from the snapshot
        """
        merged = 0
        for url, series in self.entries.items():
            stored = snapshot.get(url)
            if stored is None:
                continue
            series.commits = list(stored.commits)
            merged += 1
        return merged

    def load(self) -> bool:
        """
        Merge the persisted cache file into this store.

        Returns:
            False if no cache file exists yet, True otherwise
        """
        snapshot = read_snapshot(self.path)
        if snapshot is None:
            return False
        self.merge(snapshot)
        return True

    def update(self, url: str, commits: Iterable[datetime]) -> None:
        """Replace the commits of a configured repository."""
        self.entries[url].commits = [to_utc(ts) for ts in commits]

    def to_document(self) -> dict:
        return {
            url: {
                "name": series.name,
                "commits": [format_timestamp(ts) for ts in series.commits],
            }
            for url, series in self.entries.items()
        }

    def dumps(self) -> str:
        """Serialize the whole store deterministically."""
        return json.dumps(self.to_document(), indent=2, sort_keys=True, ensure_ascii=False) + "\n"

    def save(self) -> None:
        """Overwrite the cache file with the current store."""
        try:
            text = self.dumps()
        except (TypeError, ValueError) as exc:
            raise CacheWriteError(self.path, f"cannot encode cache ({exc})") from exc

        # Written beside the target and swapped in, so a failed write never
        # leaves a truncated cache behind
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            if tmp_path.is_file():
                tmp_path.unlink()
            raise CacheWriteError(self.path, str(exc)) from exc
