"""Shared fixtures for the Zerto RPO check tests."""

import json
from typing import Any, List, Optional

import pytest
import requests
from requests import Response

from zerto_rpo.config import Credentials, Settings


def make_response(
    status_code: int = 200,
    body: Any = None,
    headers: Optional[dict] = None,
    text: Optional[str] = None,
) -> Response:
    """Build a requests.Response without touching the network."""
    resp = Response()
    if text is None:
        text = "" if body is None else json.dumps(body)
    resp._content = text.encode("utf-8")
    resp.encoding = "utf-8"
    resp.status_code = status_code
    if headers:
        resp.headers.update(headers)
    return resp


class FakeSession(requests.Session):
    """requests.Session that replays queued responses and records calls.

    Each queued item is either a Response to return or an exception to raise.
    """

    def __init__(self, *responses):
        super().__init__()
        self.queue: List[Any] = list(responses)
        self.calls: List[dict] = []
        self.closed = False

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.queue:
            raise AssertionError(f"Unexpected request: {method} {url}")
        item = self.queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def close(self):
        self.closed = True
        super().close()


def login_ok(token: str = "tok-123") -> Response:
    return make_response(200, headers={"x-zerto-session": token})


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from ZERTO_* variables and stray .env files."""
    for name in ("ZERTO_SERVER", "ZERTO_PORT", "ZERTO_TIMEOUT", "ZERTO_INSECURE"):
        # setenv first so values loaded from a .env file are removed on teardown
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings() -> Settings:
    return Settings(server="zvm.example.com", port=9669, timeout=5.0, verify_tls=True)


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(username="admin", password="s3cret")


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "zerto.json"
    path.write_text(json.dumps({"username": "admin", "password": "s3cret"}), encoding="utf-8")
    return path
