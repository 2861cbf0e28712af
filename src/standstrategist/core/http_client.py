"""HTTP client utilities with simple retry logic.

Used by the remote profile collaborator; kept separate so it can be swapped
(e.g., requests, httpx) later without touching profile code.
"""

from __future__ import annotations

import json
import logging
import time
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Mapping, Optional

from standstrategist.config import settings

log = logging.getLogger(__name__)


class HttpError(RuntimeError):
    pass


def build_url(base: str, params: Mapping[str, str] | None = None) -> str:
    if not params:
        return base
    return f"{base}?{urllib.parse.urlencode(params)}"


def request_json(
    method: str,
    url: str,
    *,
    params: Mapping[str, str] | None = None,
    headers: Mapping[str, str] | None = None,
    payload: Any = None,
    timeout: Optional[int] = None,
    retries: int | None = None,
    backoff_factor: float | None = None,
) -> Any:
    """Send a JSON request and decode the JSON response (``None`` for an empty body)."""
    timeout = timeout or settings.DEFAULT_TIMEOUT
    retries = retries if retries is not None else settings.DEFAULT_RETRIES
    backoff_factor = (
        backoff_factor if backoff_factor is not None else settings.DEFAULT_BACKOFF_FACTOR
    )
    full_url = build_url(url, params)
    all_headers = {"User-Agent": settings.DEFAULT_USER_AGENT, "Accept": "application/json"}
    all_headers.update(headers or {})
    data: bytes | None = None
    if payload is not None:
        data = json.dumps(payload).encode("utf-8")
        all_headers["Content-Type"] = "application/json"

    attempt = 0
    while True:
        attempt += 1
        try:
            req = urllib.request.Request(full_url, data=data, headers=all_headers, method=method)
            with urllib.request.urlopen(req, timeout=timeout) as resp:
                body = resp.read()
            if not body:
                return None
            return json.loads(body.decode("utf-8"))
        except urllib.error.HTTPError as e:
            # 4xx responses will not improve on retry
            if 400 <= e.code < 500 or attempt > retries:
                raise HttpError(f"{method} {url} failed with HTTP {e.code}: {e.reason}") from e
            _backoff(method, url, attempt, retries, backoff_factor, e)
        except urllib.error.URLError as e:
            if attempt > retries:
                raise HttpError(f"{method} {url} failed after {retries} retries: {e}") from e
            _backoff(method, url, attempt, retries, backoff_factor, e)
        except ValueError as e:
            raise HttpError(f"Invalid JSON response from {url}: {e}") from e


def _backoff(
    method: str, url: str, attempt: int, retries: int, backoff_factor: float, error: Exception
) -> None:
    sleep_for = backoff_factor * (2 ** (attempt - 1))
    log.warning(
        "[http] %s attempt %d/%d failed for %s: %s. Retrying in %.1fs...",
        method,
        attempt,
        retries,
        url,
        error,
        sleep_for,
    )
    time.sleep(sleep_for)
