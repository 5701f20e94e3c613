"""
tests/conftest.py: shared fixtures
====================================
No test touches the network: the feed fetcher and summarizer are handed
a FakeSession that replays canned responses and records every call.
"""

import json
import os
import sys

import pytest
import requests

os.environ.setdefault("TESTING", "1")

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from news_feed import NewsFetcher
from summarizer import Summarizer


class FakeResponse:
    def __init__(self, status_code=200, body=b"", json_data=None):
        self.status_code = status_code
        if json_data is not None:
            body = json.dumps(json_data).encode("utf-8")
        self.content = body if isinstance(body, bytes) else body.encode("utf-8")

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    @property
    def text(self):
        return self.content.decode("utf-8", errors="replace")

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Replays one response (or raises one exception) for every call."""

    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse()
        self.error = error
        self.calls = []

    def _answer(self, method, url, kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response

    def get(self, url, **kwargs):
        return self._answer("GET", url, kwargs)

    def post(self, url, **kwargs):
        return self._answer("POST", url, kwargs)


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def transport_error():
    return requests.ConnectionError("connection refused")


@pytest.fixture
def app():
    app = create_app({"ANTHROPIC_API_KEY": "", "SUMMARY_PROVIDER": "", "ENVIRONMENT": "testing"})
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def use_feed(app):
    """Point /api/news at a canned feed response (or transport error)."""
    def _use(response=None, error=None):
        session = FakeSession(response, error)
        app.extensions["news_fetcher"] = NewsFetcher(session=session)
        return session
    return _use


@pytest.fixture
def use_summarizer(app):
    """Swap in a summarizer with the given provider and a fake session."""
    def _use(provider="local", api_key="", response=None, error=None):
        session = FakeSession(response, error)
        app.extensions["summarizer"] = Summarizer(provider=provider, api_key=api_key, session=session)
        return session
    return _use
