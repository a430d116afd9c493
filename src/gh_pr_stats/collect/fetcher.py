"""Concurrent paginated pull request fetcher.

Fetches page 1 eagerly, reads the last-page link from its response, queues
the remaining page numbers and drains them with a fixed pool of async
workers that merge into one shared RecordTable.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from gh_pr_stats.collect.queue import END_OF_QUEUE, TaskQueue
from gh_pr_stats.collect.table import RecordTable
from gh_pr_stats.github.pagination import PaginationMetadataError
from gh_pr_stats.github.pulls import Page

logger = logging.getLogger(__name__)

ALL_PAGES = -1

PageCallback = Callable[[int, int], None]


class PageSource(Protocol):
    """Remote collection that serves one page per request."""

    per_page: int

    async def fetch_page(self, repo: str, state: str, page: int) -> Page: ...

    async def fetch_url(self, url: str) -> Page: ...


@dataclass
class FetchResult:
    """Outcome of one complete fetch."""

    table: RecordTable
    elapsed_seconds: float
    pages_fetched: int
    last_page: int | None
    total_estimate: int
    rejected: int = 0


def pages_to_fetch(max_pages: int, last_page: int | None) -> int:
    """Highest page number a fetch should request.

    Args:
        max_pages: ALL_PAGES (-1) for every page, otherwise an upper bound.
        last_page: Last page index from pagination metadata, None if absent.

    Returns:
        Upper page bound; page 1 is always fetched regardless.
    """
    last = last_page if last_page is not None else 1
    if max_pages == ALL_PAGES:
        return last
    return min(max_pages, last)


def enqueued_page_count(max_pages: int, last_page: int | None) -> int:
    """Number of page tasks queued for workers (pages 2..bound)."""
    return max(0, pages_to_fetch(max_pages, last_page) - 1)


class PaginatedFetcher:
    """Fetch every page of a repository's pull requests with a worker pool.

    One instance represents one fetch session: it owns the task queue and
    the record table and must not be reused.
    """

    def __init__(
        self,
        client: PageSource,
        repo: str,
        state: str = "closed",
        max_pages: int = ALL_PAGES,
        workers: int = 2,
        on_page: PageCallback | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            client: Page source, usually a PullRequestClient.
            repo: Repository as ``owner/name``.
            state: PR state filter.
            max_pages: ALL_PAGES or the highest page number to fetch.
            workers: Number of concurrent page workers.
            on_page: Called with (page number, records merged) after every page.
        """
        if max_pages < ALL_PAGES:
            raise ValueError(f"max_pages must be -1 or non-negative, got {max_pages}")
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")

        self._client = client
        self._repo = repo
        self._state = state
        self._max_pages = max_pages
        self._workers = workers
        self._on_page = on_page

        self.table = RecordTable()
        self.queue: TaskQueue[int] = TaskQueue()
        self._pages_fetched = 0
        self._rejected = 0
        self._started = False

    async def fetch(self) -> FetchResult:
        """Run the fetch to completion.

        Returns:
            FetchResult with the filled table and elapsed wall-clock time.

        Raises:
            TransportError: If page 1, the last-page probe or any worker page
                fails. The table then holds only pages merged before the
                failure.
        """
        if self._started:
            raise RuntimeError("PaginatedFetcher instances are single-use")
        self._started = True

        start = time.perf_counter()
        logger.info(
            "Fetching %s pull requests for %s (max_pages=%d, workers=%d)",
            self._state,
            self._repo,
            self._max_pages,
            self._workers,
        )

        first = await self._client.fetch_page(self._repo, self._state, 1)
        self._merge(first)

        last_page, total_estimate = await self._probe_last_page(first)
        bound = pages_to_fetch(self._max_pages, last_page)
        for page in range(2, bound + 1):
            self.queue.push(page)
        self.queue.close(self._workers)
        logger.info("Queued %d pages for %d workers", self.queue.pushed, self._workers)

        await self._run_workers()

        elapsed = time.perf_counter() - start
        logger.info(
            "Fetched %d pull requests from %d pages in %.2fs",
            len(self.table),
            self._pages_fetched,
            elapsed,
        )
        return FetchResult(
            table=self.table,
            elapsed_seconds=elapsed,
            pages_fetched=self._pages_fetched,
            last_page=last_page,
            total_estimate=total_estimate,
            rejected=self._rejected,
        )

    async def _probe_last_page(self, first: Page) -> tuple[int | None, int]:
        """Resolve the last page index and estimate the collection size.

        The probe only feeds the estimate; pagination depends on the index
        alone. Missing or malformed links mean no further pages.
        """
        try:
            last_page = first.last_page
        except PaginationMetadataError as e:
            logger.warning("Ignoring unusable pagination metadata: %s", e)
            return None, len(first)

        if last_page is None or last_page <= 1:
            logger.info("Single page collection (%d records)", len(first))
            return last_page, len(first)

        last = await self._client.fetch_url(first.links["last"])
        total_estimate = self._client.per_page * (last_page - 1) + len(last)
        logger.info("Last page is %d, about %d pull requests in total", last_page, total_estimate)
        return last_page, total_estimate

    async def _run_workers(self) -> None:
        tasks = [
            asyncio.create_task(self._worker(worker_id), name=f"page-worker-{worker_id}")
            for worker_id in range(self._workers)
        ]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _worker(self, worker_id: int) -> None:
        logger.debug("Worker %d started", worker_id)
        while True:
            page = await self.queue.pop()
            if page is END_OF_QUEUE:
                logger.debug("Worker %d finished", worker_id)
                return
            try:
                result = await self._client.fetch_page(self._repo, self._state, page)
            except Exception as e:
                logger.error("Worker %d failed on page %d: %s", worker_id, page, e)
                raise
            self._merge(result)

    def _merge(self, page: Page) -> None:
        merged = self.table.merge(page.records)
        self._pages_fetched += 1
        self._rejected += page.rejected
        logger.debug("Merged page %d (%d records)", page.number, merged)
        if self._on_page is not None:
            self._on_page(page.number, merged)
