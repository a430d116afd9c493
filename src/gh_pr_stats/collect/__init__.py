"""Concurrent collection of pull request pages."""

from gh_pr_stats.collect.fetcher import (
    ALL_PAGES,
    FetchResult,
    PageSource,
    PaginatedFetcher,
    enqueued_page_count,
    pages_to_fetch,
)
from gh_pr_stats.collect.orchestrator import StatsReport, fetch_and_summarize
from gh_pr_stats.collect.queue import END_OF_QUEUE, EndOfQueue, QueueClosedError, TaskQueue
from gh_pr_stats.collect.table import RecordTable

__all__ = [
    "ALL_PAGES",
    "END_OF_QUEUE",
    "EndOfQueue",
    "FetchResult",
    "PageSource",
    "PaginatedFetcher",
    "QueueClosedError",
    "RecordTable",
    "StatsReport",
    "TaskQueue",
    "enqueued_page_count",
    "fetch_and_summarize",
    "pages_to_fetch",
]
