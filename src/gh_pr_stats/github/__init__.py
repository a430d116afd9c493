"""GitHub API access: credentials, HTTP transport and pull request pages."""

from gh_pr_stats.github.auth import AuthenticationError, GitHubAuth
from gh_pr_stats.github.http import GitHubClient, GitHubResponse, TransportError
from gh_pr_stats.github.pagination import (
    PaginationMetadataError,
    last_page_number,
    page_number,
    parse_link_header,
)
from gh_pr_stats.github.pulls import Page, PullRequestClient

__all__ = [
    # Auth
    "AuthenticationError",
    "GitHubAuth",
    # HTTP Client
    "GitHubClient",
    "GitHubResponse",
    "TransportError",
    # Pagination
    "PaginationMetadataError",
    "last_page_number",
    "page_number",
    "parse_link_header",
    # Pull requests
    "Page",
    "PullRequestClient",
]
