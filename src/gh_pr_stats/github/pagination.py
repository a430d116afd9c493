"""Link header pagination helpers.

GitHub advertises pagination through the ``Link`` response header::

    <https://api.github.com/repos/o/r/pulls?state=closed&page=2>; rel="next",
    <https://api.github.com/repos/o/r/pulls?state=closed&page=34>; rel="last"

The ``last`` relation carries the true upper bound of the page range.
"""

import re
from urllib.parse import parse_qs, urlparse

LINK_PART = re.compile(r'<([^>]+)>;\s*rel="([^"]+)"')


class PaginationMetadataError(Exception):
    """Raised when a pagination link is present but unusable."""


def parse_link_header(link_header: str | None) -> dict[str, str]:
    """Parse a Link header into a relation -> URL mapping.

    Args:
        link_header: Link header value, may be None.

    Returns:
        Dict mapping rel type to URL (e.g. {"next": url, "last": url}).
    """
    if not link_header:
        return {}

    links = {}
    for part in link_header.split(","):
        match = LINK_PART.match(part.strip())
        if match:
            url, rel = match.groups()
            links[rel] = url
    return links


def page_number(url: str) -> int:
    """Extract the ``page`` query parameter from a pagination URL.

    Raises:
        PaginationMetadataError: If the parameter is missing, not an
            integer, or smaller than 1.
    """
    values = parse_qs(urlparse(url).query).get("page")
    if not values:
        raise PaginationMetadataError(f"No page parameter in link {url!r}")
    try:
        number = int(values[-1])
    except ValueError as e:
        raise PaginationMetadataError(f"Non-numeric page parameter in link {url!r}") from e
    if number < 1:
        raise PaginationMetadataError(f"Page parameter out of range in link {url!r}")
    return number


def last_page_number(links: dict[str, str]) -> int | None:
    """Return the last page index advertised by ``links``.

    Returns:
        The last page number, or None when the response has no ``last``
        relation (single page or empty collection).

    Raises:
        PaginationMetadataError: If the ``last`` link is malformed.
    """
    url = links.get("last")
    if url is None:
        return None
    return page_number(url)
