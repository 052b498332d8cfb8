"""URL Rules — what counts as a usable redirect or store URL.

Invariants:
    - A valid URL is one httpx itself can request: parsed by httpx.URL,
      http/https scheme, non-empty host
"""

import httpx


def is_valid_url(url: str | None) -> bool:
    """Absolute http(s) URL with a host that httpx accepts."""
    if not url:
        return False
    try:
        parsed = httpx.URL(url.strip())
    except httpx.InvalidURL:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.host)
