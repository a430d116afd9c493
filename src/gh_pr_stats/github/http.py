"""GitHub HTTP client.

Thin async wrapper around httpx for the GitHub REST API. Every failure,
network or HTTP status, is surfaced as TransportError; there is no retry
and no rate-limit waiting.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from gh_pr_stats import __version__
from gh_pr_stats.github.auth import GitHubAuth
from gh_pr_stats.github.pagination import parse_link_header

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Raised when a request to GitHub fails."""

    def __init__(self, message: str, url: str = "", status_code: int | None = None) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(message)


@dataclass
class GitHubResponse:
    """Successful GitHub API response with parsed body and pagination links."""

    status_code: int
    data: Any
    url: str = ""
    links: dict[str, str] = field(default_factory=dict)


class GitHubClient:
    """Async HTTP client for the GitHub REST API.

    One instance owns one ``httpx.AsyncClient`` connection pool, which is
    shared by every worker of a fetch. Use as an async context manager.
    """

    BASE_URL = "https://api.github.com"
    DEFAULT_TIMEOUT = 30.0
    API_VERSION = "2022-11-28"

    def __init__(
        self,
        auth: GitHubAuth,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str = BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize GitHub HTTP client.

        Args:
            auth: Resolved GitHub credentials.
            timeout: Request timeout in seconds.
            base_url: Base URL for the GitHub API.
            transport: Optional httpx transport, mainly for tests.
        """
        self._auth = auth
        self._timeout = timeout
        self._base_url = base_url.rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self.requests_made = 0

    def _get_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": self.API_VERSION,
            "User-Agent": f"gh-pr-stats/{__version__}",
        }
        headers.update(self._auth.get_authorization_header())
        return headers

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers=self._get_headers(),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def get(self, path: str, params: dict[str, Any] | None = None) -> GitHubResponse:
        """Make a GET request.

        Args:
            path: API path ("/repos/o/r/pulls") or absolute URL from a Link header.
            params: Query parameters.

        Returns:
            GitHubResponse with parsed JSON body and Link header relations.

        Raises:
            TransportError: On network failure, timeout, non-2xx status or an
                unparseable body.
        """
        client = self._ensure_client()
        logger.debug("GET %s %s", path, params or "")

        try:
            response = await client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timeout for GET {path}: {e}", url=path) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Network error for GET {path}: {e}", url=path) from e
        finally:
            self.requests_made += 1

        url = str(response.url)
        if not response.is_success:
            logger.error("GitHub returned %d for GET %s", response.status_code, url)
            raise TransportError(
                f"GET {url} failed with status {response.status_code}: {_error_message(response)}",
                url=url,
                status_code=response.status_code,
            )

        try:
            data = response.json() if response.content else None
        except ValueError as e:
            raise TransportError(f"Invalid JSON from GET {url}: {e}", url=url) from e

        return GitHubResponse(
            status_code=response.status_code,
            data=data,
            url=url,
            links=parse_link_header(response.headers.get("link")),
        )

    async def close(self) -> None:
        """Close the HTTP client and release its connections."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GitHubClient":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict) and "message" in body:
        return str(body["message"])
    return response.reason_phrase
