"""Shared record table written by fetch workers."""

import logging
import threading
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from gh_pr_stats.models import PullRequest

logger = logging.getLogger(__name__)


class RecordTable:
    """Mapping of pull request id to record, safe for concurrent merges.

    A whole page is merged under a single lock acquisition. Records are
    immutable, so readers of a snapshot never observe a partially written
    record.
    """

    def __init__(self) -> None:
        self._records: dict[int, PullRequest] = {}
        self._lock = threading.Lock()
        self.duplicates = 0

    def merge(self, records: Iterable[PullRequest]) -> int:
        """Insert or replace records by id.

        Merging the same records twice leaves the table unchanged apart from
        the ``duplicates`` counter.

        Args:
            records: Records of one page.

        Returns:
            Number of records merged.
        """
        batch = list(records)
        with self._lock:
            for record in batch:
                if record.id in self._records:
                    self.duplicates += 1
                    logger.debug("Pull request %d already in table, replacing", record.id)
                self._records[record.id] = record
        return len(batch)

    def snapshot(self) -> Mapping[int, PullRequest]:
        """Return a read-only copy of the current contents."""
        with self._lock:
            return MappingProxyType(dict(self._records))

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        with self._lock:
            return record_id in self._records
