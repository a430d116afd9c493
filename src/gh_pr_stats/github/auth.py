"""GitHub token resolution.

The token is resolved once at startup and handed to the HTTP client; nothing
else in the package reads the environment for credentials.
"""

import logging
import os
import re
import subprocess

from gh_pr_stats.config import ConfigurationError

logger = logging.getLogger(__name__)


class AuthenticationError(ConfigurationError):
    """Raised when no usable GitHub token can be found."""


def _token_from_gh_cli() -> str | None:
    """Ask the GitHub CLI for its stored token.

    Returns:
        Token printed by ``gh auth token``, or None if unavailable.
    """
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
            check=False,
        )
    except FileNotFoundError:
        logger.debug("gh CLI not installed, no fallback token available")
        return None
    except subprocess.TimeoutExpired:
        logger.debug("gh CLI timed out while reading token")
        return None

    if result.returncode != 0:
        logger.debug("gh auth token exited with %d", result.returncode)
        return None
    return result.stdout.strip() or None


class GitHubAuth:
    """Validated GitHub access token.

    Sources, first match wins:
    1. ``token`` argument
    2. the environment variable named by ``token_env``
    3. ``gh auth token``

    Accepted formats are prefixed tokens (``ghp_``, ``gho_``, ``ghu_``,
    ``ghs_``, ``ghr_``), fine-grained ``github_pat_`` tokens and classic
    40-character hex tokens.
    """

    PREFIXES = ("ghp_", "gho_", "ghu_", "ghs_", "ghr_", "github_pat_")
    CLASSIC_TOKEN = re.compile(r"^[a-f0-9]{40}$")
    MIN_PREFIXED_LENGTH = 20

    def __init__(self, token: str | None = None, token_env: str = "GITHUB_TOKEN") -> None:
        """Resolve and validate the token.

        Args:
            token: Explicit token, takes precedence over every other source.
            token_env: Name of the environment variable holding the token.

        Raises:
            AuthenticationError: If no token is found or its format is invalid.
        """
        source = "explicit parameter"
        resolved = token
        if not resolved:
            resolved = os.environ.get(token_env)
            source = f"{token_env} environment variable"
        if not resolved:
            resolved = _token_from_gh_cli()
            source = "gh CLI"
        if not resolved:
            raise AuthenticationError(
                f"GitHub token not found. Set {token_env} or authenticate with `gh auth login`."
            )

        self._token = resolved.strip()
        self._validate()
        logger.info("Using GitHub token from %s", source)

    def _validate(self) -> None:
        token = self._token
        if not token:
            raise AuthenticationError("GitHub token is empty")

        prefixed = token.startswith(self.PREFIXES)
        if not prefixed and not self.CLASSIC_TOKEN.match(token):
            raise AuthenticationError(
                "Invalid token format. Expected one of "
                f"{', '.join(self.PREFIXES)} or a 40-character hex classic token"
            )
        if prefixed and len(token) < self.MIN_PREFIXED_LENGTH:
            raise AuthenticationError("GitHub token is too short to be valid")

    @property
    def token(self) -> str:
        return self._token

    def get_authorization_header(self) -> dict[str, str]:
        """Return the Authorization header for API requests."""
        return {"Authorization": f"Bearer {self._token}"}
