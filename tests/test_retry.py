from __future__ import annotations

import pytest
import requests

from common import retry


class FakeResponse:
    def __init__(self, status_code, headers=None):
        self.status_code = status_code
        self.headers = headers or {}


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    sleeps = []
    monkeypatch.setattr(retry.time, "sleep", sleeps.append)
    return sleeps


def test_retries_transient_status_then_returns(monkeypatch, no_sleep):
    responses = iter([FakeResponse(503), FakeResponse(429, {"Retry-After": "2"}), FakeResponse(200)])
    monkeypatch.setattr(retry.requests, "get", lambda *a, **k: next(responses))
    resp = retry.http_get_with_retries("https://example.test", max_attempts=3)
    assert resp.status_code == 200
    assert len(no_sleep) == 2
    assert no_sleep[1] == 2.0


def test_last_response_returned_when_attempts_exhausted(monkeypatch):
    monkeypatch.setattr(retry.requests, "get", lambda *a, **k: FakeResponse(500))
    resp = retry.http_get_with_retries("https://example.test", max_attempts=2)
    assert resp.status_code == 500


def test_transient_exception_reraised_after_last_attempt(monkeypatch, no_sleep):
    calls = []

    def fail(*args, **kwargs):
        calls.append(1)
        raise requests.exceptions.ConnectionError("down")

    monkeypatch.setattr(retry.requests, "get", fail)
    with pytest.raises(requests.exceptions.ConnectionError):
        retry.http_get_with_retries("https://example.test", max_attempts=3)
    assert len(calls) == 3
    assert len(no_sleep) == 2


def test_non_transient_errors_are_not_retried(monkeypatch):
    calls = []

    def bad(*args, **kwargs):
        calls.append(1)
        raise requests.exceptions.InvalidURL("nope")

    monkeypatch.setattr(retry.requests, "get", bad)
    with pytest.raises(requests.exceptions.InvalidURL):
        retry.http_get_with_retries("nope")
    assert len(calls) == 1


def test_backoff_is_capped():
    assert retry._compute_sleep_seconds(10, backoff_base=1.0, backoff_max=3.0) == 3.0
