"""Summary statistics over a finished record table.

Computes:
    - top_authors: authors ranked by pull request count
    - turnaround: seconds from creation to close for closed pull requests,
      reduced to its fastest and slowest values
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import NamedTuple

import polars as pl

from gh_pr_stats.models import PullRequest

logger = logging.getLogger(__name__)

# Sources that report merges as their own state are counted as closed too.
CLOSED_STATES = ["closed", "merged"]

SCHEMA = {
    "id": pl.Int64,
    "number": pl.Int64,
    "state": pl.Utf8,
    "created_at": pl.Datetime("us"),
    "closed_at": pl.Datetime("us"),
    "merged_at": pl.Datetime("us"),
    "url": pl.Utf8,
    "comments": pl.Int64,
    "additions": pl.Int64,
    "changed_files": pl.Int64,
    "author": pl.Utf8,
}


class TurnaroundRange(NamedTuple):
    """Fastest and slowest time-to-close, in seconds."""

    fastest: float
    slowest: float


@dataclass
class Summary:
    """Printable summary of one fetch."""

    record_count: int
    top_authors: list[tuple[str, int]] = field(default_factory=list)
    turnaround: TurnaroundRange | None = None


class SummaryReducer:
    """Read-only aggregations over fetched pull requests."""

    def __init__(self, records: Mapping[int, PullRequest] | Iterable[PullRequest]) -> None:
        """Build the frame once from a table snapshot or any iterable of records."""
        values = records.values() if isinstance(records, Mapping) else records
        rows = [record.as_row() for record in values]
        if rows:
            self._frame = pl.DataFrame(rows, schema=SCHEMA)
        else:
            self._frame = pl.DataFrame(schema=SCHEMA)

    def __len__(self) -> int:
        return self._frame.height

    def top_authors(self, n: int = 3) -> list[tuple[str, int]]:
        """Authors with the most pull requests.

        Ties on count are ordered by author handle so the result is
        deterministic.

        Args:
            n: Maximum number of entries.

        Returns:
            Up to n (author, count) pairs, highest count first.
        """
        if n <= 0 or self._frame.is_empty():
            return []

        ranked = (
            self._frame.group_by("author")
            .agg(pl.len().cast(pl.Int64).alias("count"))
            .sort(["count", "author"], descending=[True, False])
            .head(n)
            .select("author", "count")
        )
        return [(author, count) for author, count in ranked.iter_rows()]

    def turnaround_durations(self) -> list[float]:
        """Seconds between creation and close of every closed pull request.

        Closed records without a close timestamp are skipped with a warning.

        Returns:
            Durations in ascending order; empty if nothing is closed.
        """
        closed = self._frame.filter(pl.col("state").is_in(CLOSED_STATES))

        missing = closed.filter(pl.col("closed_at").is_null()).height
        if missing:
            logger.warning("Skipping %d closed pull requests without closed_at", missing)

        durations = (
            closed.filter(pl.col("closed_at").is_not_null())
            .select(
                (
                    (pl.col("closed_at") - pl.col("created_at")).dt.total_microseconds()
                    / 1_000_000
                ).alias("seconds")
            )
            .sort("seconds")
        )
        return durations.get_column("seconds").to_list()

    def turnaround_range(self) -> TurnaroundRange | None:
        """Fastest and slowest turnaround, or None when there is no data."""
        durations = self.turnaround_durations()
        if not durations:
            return None
        return TurnaroundRange(fastest=durations[0], slowest=durations[-1])

    def summarize(self, top_n: int = 3) -> Summary:
        return Summary(
            record_count=len(self),
            top_authors=self.top_authors(top_n),
            turnaround=self.turnaround_range(),
        )
