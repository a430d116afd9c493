"""Run one fetch session end to end.

Resolves credentials, builds the HTTP and page clients, runs the
PaginatedFetcher and reduces the resulting table to a Summary.
"""

import logging
from dataclasses import dataclass

from gh_pr_stats.collect.fetcher import FetchResult, PageCallback, PaginatedFetcher
from gh_pr_stats.config import Config
from gh_pr_stats.github.auth import GitHubAuth
from gh_pr_stats.github.http import GitHubClient
from gh_pr_stats.github.pulls import PullRequestClient
from gh_pr_stats.metrics.summary import Summary, SummaryReducer

logger = logging.getLogger(__name__)


@dataclass
class StatsReport:
    """Fetch outcome together with its summary."""

    fetch: FetchResult
    summary: Summary


async def fetch_and_summarize(
    config: Config,
    token: str | None = None,
    on_page: PageCallback | None = None,
) -> StatsReport:
    """Fetch all configured pull request pages and summarize them.

    Args:
        config: Validated configuration.
        token: Explicit GitHub token; when None it is read from the
            environment variable named in ``config.auth.token_env``.
        on_page: Optional per-page progress callback.

    Returns:
        StatsReport with the fetch result and its summary.

    Raises:
        AuthenticationError: If no valid token is available. Raised before
            any request is made.
        TransportError: If any page request fails.
    """
    auth = GitHubAuth(token=token, token_env=config.auth.token_env)

    async with GitHubClient(
        auth=auth,
        timeout=config.fetch.timeout_seconds,
        base_url=config.fetch.api_url,
    ) as http_client:
        fetcher = PaginatedFetcher(
            client=PullRequestClient(http_client, per_page=config.fetch.per_page),
            repo=config.target.repo,
            state=config.target.state,
            max_pages=config.fetch.max_pages,
            workers=config.fetch.workers,
            on_page=on_page,
        )
        result = await fetcher.fetch()
        logger.debug("%d requests made", http_client.requests_made)

    if result.table.duplicates:
        logger.warning(
            "%d pull requests appeared on more than one page", result.table.duplicates
        )
    if result.rejected:
        logger.warning("%d malformed pull requests were skipped", result.rejected)

    reducer = SummaryReducer(result.table.snapshot())
    return StatsReport(fetch=result, summary=reducer.summarize(config.report.top_authors))
