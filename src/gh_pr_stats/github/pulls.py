"""Pull request listing client.

Fetches single pages of ``GET /repos/{owner}/{repo}/pulls`` and converts
them to PullRequest records plus the pagination links of the response.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from gh_pr_stats.github.http import GitHubClient, GitHubResponse, TransportError
from gh_pr_stats.github.pagination import last_page_number, page_number
from gh_pr_stats.models import PullRequest, RecordValidationError

logger = logging.getLogger(__name__)


@dataclass
class Page:
    """One page of pull requests and its pagination metadata."""

    number: int
    records: list[PullRequest] = field(default_factory=list)
    links: dict[str, str] = field(default_factory=dict)
    rejected: int = 0

    @property
    def last_page(self) -> int | None:
        """Index of the last page, or None if the response had no ``last`` link.

        Raises:
            PaginationMetadataError: If the ``last`` link is malformed.
        """
        return last_page_number(self.links)

    def __len__(self) -> int:
        return len(self.records)


class PullRequestClient:
    """Page-at-a-time pull request client.

    Unlike a following paginator, every call fetches exactly one page so
    that pages can be distributed across concurrent workers.
    """

    MAX_PER_PAGE = 100

    def __init__(self, http_client: GitHubClient, per_page: int = MAX_PER_PAGE) -> None:
        """Initialize the client.

        Args:
            http_client: GitHubClient for HTTP requests.
            per_page: Page size requested from GitHub (GitHub caps it at 100).
        """
        if not 1 <= per_page <= self.MAX_PER_PAGE:
            raise ValueError(f"per_page must be between 1 and {self.MAX_PER_PAGE}")
        self._http = http_client
        self.per_page = per_page

    async def fetch_page(self, repo: str, state: str, page: int) -> Page:
        """Fetch one page of pull requests.

        Args:
            repo: Repository as ``owner/name``.
            state: PR state filter: "open", "closed" or "all".
            page: 1-based page number.

        Returns:
            The parsed page.

        Raises:
            TransportError: If the request fails.
        """
        response = await self._http.get(
            f"/repos/{repo}/pulls",
            params={"state": state, "per_page": self.per_page, "page": page},
        )
        return self._to_page(response, page)

    async def fetch_url(self, url: str) -> Page:
        """Fetch the page a pagination link points at.

        Raises:
            TransportError: If the request fails.
            PaginationMetadataError: If the URL has no usable page number.
        """
        number = page_number(url)
        response = await self._http.get(url)
        return self._to_page(response, number)

    def _to_page(self, response: GitHubResponse, number: int) -> Page:
        items = response.data
        if items is None:
            items = []
        if not isinstance(items, list):
            raise TransportError(
                f"Expected a list of pull requests from {response.url}, "
                f"got {type(items).__name__}",
                url=response.url,
                status_code=response.status_code,
            )

        page = Page(number=number, links=response.links)
        for item in items:
            record = _parse_record(item, number)
            if record is None:
                page.rejected += 1
            else:
                page.records.append(record)

        logger.debug(
            "Parsed page %d: %d pull requests, %d rejected",
            number,
            len(page.records),
            page.rejected,
        )
        return page


def _parse_record(item: Any, page: int) -> PullRequest | None:
    try:
        return PullRequest.from_api(item)
    except RecordValidationError as e:
        logger.warning("Skipping record on page %d: %s", page, e)
        return None
