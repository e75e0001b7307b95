from __future__ import annotations

import random
import time
from typing import Mapping, Optional, Sequence

import requests

TRANSIENT_EXCEPTIONS = (
    requests.exceptions.Timeout,
    requests.exceptions.ConnectionError,
    requests.exceptions.ChunkedEncodingError,
)


def _compute_sleep_seconds(
    attempt: int,
    *,
    backoff_base: float,
    backoff_max: float,
) -> float:
    # Exponential backoff with jitter
    base = backoff_base * (2 ** max(0, attempt - 1))
    jitter = random.uniform(0, backoff_base)
    return min(backoff_max, base + jitter)


def _retry_after_seconds(resp: requests.Response) -> Optional[float]:
    retry_after = resp.headers.get("Retry-After")
    if retry_after is None:
        return None
    try:
        return float(retry_after)
    except ValueError:
        return None


def http_get_with_retries(
    url: str,
    *,
    params: Optional[Mapping[str, str | int]] = None,
    headers: Optional[Mapping[str, str]] = None,
    timeout: int = 30,
    max_attempts: int = 3,
    backoff_base: float = 0.5,
    backoff_max: float = 8.0,
    status_forcelist: Sequence[int] = (429, 500, 502, 503, 504),
    session: Optional[requests.Session] = None,
) -> requests.Response:
    """
    GET `url`, retrying transient failures.

    Retries on timeouts/connection errors and on HTTP status codes in
    `status_forcelist`, sleeping with exponential backoff plus jitter (or the
    server's `Retry-After`). The last response is returned as-is once attempts
    are exhausted, so callers should still call `raise_for_status()`.
    Non-transient request errors are raised immediately.
    """
    getter = session.get if session is not None else requests.get
    last_exc: Exception | None = None

    for attempt in range(1, max_attempts + 1):
        try:
            resp = getter(url, params=params, headers=headers, timeout=timeout)
        except TRANSIENT_EXCEPTIONS as exc:
            last_exc = exc
            if attempt >= max_attempts:
                break
            time.sleep(
                _compute_sleep_seconds(attempt, backoff_base=backoff_base, backoff_max=backoff_max)
            )
            continue

        if resp.status_code in status_forcelist and attempt < max_attempts:
            sleep_sec = _retry_after_seconds(resp)
            if sleep_sec is None:
                sleep_sec = _compute_sleep_seconds(
                    attempt, backoff_base=backoff_base, backoff_max=backoff_max
                )
            time.sleep(sleep_sec)
            continue
        return resp

    assert last_exc is not None
    raise last_exc


__all__ = ["http_get_with_retries", "TRANSIENT_EXCEPTIONS"]
