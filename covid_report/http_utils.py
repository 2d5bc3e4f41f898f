"""Shared HTTP helper for the statistics client.

Requests are single-shot: no retries and no caching, since every report
must reflect the statistics at the moment it is built.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import requests

logger = logging.getLogger(__name__)


class HTTPError(Exception):
    """Raised when an HTTP request fails or returns a non-JSON body."""

    def __init__(self, url: str, status_code: int, detail: str = "") -> None:
        self.url = url
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"HTTP {status_code} for {url}: {detail}")


def join_url(base_url: str, path: str) -> str:
    """Join *base_url* and *path* with exactly one slash between them."""
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def http_get(
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout_s: float = 30.0,
) -> Any:
    """HTTP GET returning the parsed JSON body.

    Raises
    ------
    HTTPError
        On transport errors, non-200 responses, or an unparseable body.
    """
    t0 = time.time()
    try:
        resp = requests.get(url, params=params, headers=headers, timeout=timeout_s)
    except requests.RequestException as exc:
        raise HTTPError(url, 0, str(exc)) from exc

    logger.debug(
        "GET %s -> %d (%.3fs)", url, resp.status_code, time.time() - t0,
    )

    if resp.status_code != 200:
        raise HTTPError(url, resp.status_code, resp.text[:200])

    try:
        return resp.json()
    except ValueError as exc:
        raise HTTPError(url, resp.status_code, f"invalid JSON body: {exc}") from exc
