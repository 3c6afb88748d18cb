"""Origin matching for URLs and installed applications.

An origin is ``scheme://host[:port]``. Two URLs share an origin when their
scheme, host and effective port agree; a scheme's standard port is treated
the same as an absent one. Paths, queries and fragments never take part.
"""

from __future__ import annotations

from typing import NamedTuple
from urllib.parse import urlsplit

DEFAULT_PORTS = {
    "http": 80,
    "https": 443,
    "ftp": 21,
    "ws": 80,
    "wss": 443,
}

# Documents loaded from file:// or sandboxed frames report their origin as
# the literal string "null".
NULL_ORIGIN = "null"


class Origin(NamedTuple):
    scheme: str
    host: str
    port: int | None


def parse_origin(url: str) -> Origin:
    """Reduce *url* to its normalized origin.

    Raises ``ValueError`` when *url* has no scheme or host, or carries an
    invalid port.
    """
    if not isinstance(url, str):
        raise ValueError(f"expected a URL string, got {type(url).__name__}")

    parts = urlsplit(url.strip())
    if not parts.scheme or not parts.hostname:
        raise ValueError(f"not an absolute URL: {url!r}")

    scheme = parts.scheme.lower()
    port = parts.port  # raises ValueError when out of range or non-numeric
    if port is None:
        port = DEFAULT_PORTS.get(scheme)
    return Origin(scheme=scheme, host=parts.hostname.lower(), port=port)


def url_matches_domain(url: str, domain: str) -> bool:
    """Return whether *url* belongs to *domain* (``scheme://host[:port]``).

    Never raises: anything that cannot be parsed simply does not match.
    """
    if url == NULL_ORIGIN and domain == NULL_ORIGIN:
        return True
    try:
        return parse_origin(domain) == parse_origin(url)
    except ValueError:
        return False


def application_matches_domain(app: dict, domain: str) -> bool:
    """Return whether the application *app* runs in *domain*."""
    return url_matches_domain(app.get("base_url"), domain)
