"""
Tracking of how long a working tree has been left dirty.

The cache maps an absolute repository path to the moment its working tree was
first seen dirty (advanced to the last commit date when that is newer). A path
is present exactly while the repository is dirty. The file is rewritten in
full after every mutation, one ``path<TAB>timestamp`` line per repository.
"""

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Dict, Iterator, Optional

from .platform import write_text_atomic

STALE_AFTER = timedelta(days=30)


def local_now() -> datetime:
    """Current wall-clock time with the local UTC offset attached."""
    return datetime.now().astimezone()


def _parse_timestamp(value: str) -> datetime:
    timestamp = datetime.fromisoformat(value)
    if timestamp.tzinfo is None:
        # entries written without an offset are local time
        timestamp = timestamp.astimezone()
    return timestamp


class StalenessCache:
    """Persistent path -> dirty-since mapping."""

    def __init__(self, cache_file: Path, entries: Optional[Dict[str, datetime]] = None):
        self.cache_file = cache_file
        self._entries: Dict[str, datetime] = dict(entries or {})
        self.logger = logging.getLogger('gitarchive.staleness')

    @classmethod
    def load(cls, cache_file: Path) -> "StalenessCache":
        """Read the cache file; a missing file is an empty cache."""
        logger = logging.getLogger('gitarchive.staleness')
        entries: Dict[str, datetime] = {}

        if not cache_file.exists():
            logger.debug(f"No staleness cache at {cache_file}")
            return cls(cache_file, entries)

        for number, line in enumerate(cache_file.read_text(encoding='utf-8').splitlines(), start=1):
            if not line.strip():
                continue
            path, sep, value = line.partition("\t")
            if not sep:
                logger.warning(f"Ignoring malformed line {number} in {cache_file}")
                continue
            try:
                entries[path] = _parse_timestamp(value.strip())
            except ValueError:
                logger.warning(f"Ignoring unparseable timestamp on line {number} in {cache_file}")

        logger.debug(f"Loaded {len(entries)} staleness entries from {cache_file}")
        return cls(cache_file, entries)

    def save(self) -> None:
        content = "".join(f"{path}\t{timestamp.isoformat()}\n" for path, timestamp in self._entries.items())
        self.cache_file.parent.mkdir(parents=True, exist_ok=True)
        write_text_atomic(self.cache_file, content)

    def get(self, path: str) -> Optional[datetime]:
        return self._entries.get(path)

    def set(self, path: str, timestamp: datetime) -> None:
        self._entries[path] = timestamp
        self.save()

    def remove(self, path: str) -> None:
        if self._entries.pop(path, None) is not None:
            self.save()

    def __contains__(self, path: str) -> bool:
        return path in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def as_dict(self) -> Dict[str, datetime]:
        return dict(self._entries)


class StalenessTracker:
    """Drives the clean/dirty transitions of the cache for each health check."""

    def __init__(self, cache: StalenessCache, clock: Callable[[], datetime] = local_now):
        self.cache = cache
        self.clock = clock
        self.logger = logging.getLogger('gitarchive.staleness')

    def update(self, repo_path: str, is_clean: bool,
               last_commit_date: Callable[[], Optional[datetime]]) -> bool:
        """
        Record the latest observation of ``repo_path``.

        Args:
            repo_path: Absolute repository path, the cache key
            is_clean: Whether ``git status`` reported a clean tree
            last_commit_date: Called only when an already-dirty tree is seen
                again; returns the date of the last commit, or None when the
                repository has no commit to report

        Returns:
            True if the tree has been dirty for longer than STALE_AFTER
        """
        if is_clean:
            if repo_path in self.cache:
                self.logger.info(f"Working tree is clean again: {repo_path}")
                self.cache.remove(repo_path)
            return False

        dirty_since = self.cache.get(repo_path)
        if dirty_since is None:
            now = self.clock()
            self.logger.info(f"Working tree first seen dirty at {now.isoformat()}: {repo_path}")
            self.cache.set(repo_path, now)
            return False

        committed = last_commit_date()
        if committed is not None and committed > dirty_since:
            dirty_since = committed
            self.cache.set(repo_path, dirty_since)

        self.logger.info(f"Dirty since {dirty_since.isoformat()}: {repo_path}")

        if self.clock() - dirty_since > STALE_AFTER:
            self.logger.warning(f"Uncommitted changes older than {STALE_AFTER.days} days: {repo_path}")
            return True
        return False
