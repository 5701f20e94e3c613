"""
tests/test_config.py: Startup configuration
"""

import pytest

from app import create_app
from config import DEFAULT_RSS_URL, load_config, resolve_summary_provider


def test_provider_follows_credential():
    assert resolve_summary_provider("sk-test") == "remote"
    assert resolve_summary_provider("") == "local"


def test_forced_local_ignores_credential():
    assert resolve_summary_provider("sk-test", "local") == "local"
    assert resolve_summary_provider("sk-test", " LOCAL ") == "local"


def test_remote_without_credential_degrades():
    assert resolve_summary_provider("", "remote") == "local"


def test_unknown_provider_rejected():
    with pytest.raises(ValueError):
        resolve_summary_provider("sk-test", "openai")


def test_defaults(monkeypatch):
    for name in ("NEWS_RSS_URL", "NEWS_CACHE_SECONDS", "NEWS_MAX_ITEMS", "ANTHROPIC_API_KEY",
                 "SUMMARY_PROVIDER", "SUMMARY_MAX_TOKENS"):
        monkeypatch.delenv(name, raising=False)

    cfg = load_config()
    assert cfg["NEWS_RSS_URL"] == DEFAULT_RSS_URL
    assert cfg["NEWS_CACHE_SECONDS"] == 300
    assert cfg["NEWS_MAX_ITEMS"] == 10
    assert cfg["SUMMARY_MAX_TOKENS"] == 256
    assert cfg["SUMMARY_PROVIDER"] == "local"


def test_environment_read_once(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", " sk-env ")
    monkeypatch.setenv("NEWS_MAX_ITEMS", "5")
    monkeypatch.delenv("SUMMARY_PROVIDER", raising=False)

    cfg = load_config()
    assert cfg["ANTHROPIC_API_KEY"] == "sk-env"
    assert cfg["NEWS_MAX_ITEMS"] == 5
    assert cfg["SUMMARY_PROVIDER"] == "remote"


def test_app_wires_resolved_config(monkeypatch):
    monkeypatch.delenv("SUMMARY_PROVIDER", raising=False)
    app = create_app({"ANTHROPIC_API_KEY": "sk-test", "NEWS_CACHE_SECONDS": 60, "ENVIRONMENT": "testing"})

    summarizer = app.extensions["summarizer"]
    assert summarizer.provider == "remote"
    assert summarizer.api_key == "sk-test"
    assert app.extensions["news_fetcher"].cache_seconds == 60

    # later environment changes do not reach an existing app
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    assert app.extensions["summarizer"].uses_remote


def test_sentry_sample_rate_read_with_config(monkeypatch):
    monkeypatch.setenv("SENTRY_TRACES_RATE", "0.5")
    assert load_config()["SENTRY_TRACES_RATE"] == 0.5

    monkeypatch.delenv("SENTRY_TRACES_RATE")
    assert load_config()["SENTRY_TRACES_RATE"] == 0.1
