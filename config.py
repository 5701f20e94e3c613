"""
config.py: Environment configuration for the news digest gateway.
Read once at startup by create_app(); handlers never touch os.environ.
"""

import os
from typing import Any, Dict, Optional

DEFAULT_RSS_URL = "https://news.google.com/rss?hl=ja&gl=JP&ceid=JP:ja"
DEFAULT_ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-20250514"
ANTHROPIC_VERSION = "2023-06-01"

SUMMARY_PROVIDERS = ("remote", "local")


def _env_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val.strip())


def _env_float(name: str, default: float) -> float:
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return float(val.strip())


def resolve_summary_provider(api_key: str, requested: Optional[str] = None) -> str:
    """
    Pick the summarizer backend. A remote provider without a credential
    degrades to local; an unknown name is a configuration error.
    """
    if requested:
        requested = requested.strip().lower()
        if requested not in SUMMARY_PROVIDERS:
            raise ValueError(f"Unknown SUMMARY_PROVIDER: {requested}. Use remote or local.")
        if requested == "local":
            return "local"
    return "remote" if api_key else "local"


def load_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    cfg: Dict[str, Any] = {
        "NEWS_RSS_URL": os.getenv("NEWS_RSS_URL", DEFAULT_RSS_URL),
        "NEWS_CACHE_SECONDS": _env_int("NEWS_CACHE_SECONDS", 300),
        "NEWS_MAX_ITEMS": _env_int("NEWS_MAX_ITEMS", 10),
        "NEWS_FETCH_TIMEOUT": _env_float("NEWS_FETCH_TIMEOUT", 15.0),
        "ANTHROPIC_API_KEY": os.getenv("ANTHROPIC_API_KEY", "").strip(),
        "ANTHROPIC_API_URL": os.getenv("ANTHROPIC_API_URL", DEFAULT_ANTHROPIC_URL),
        "ANTHROPIC_MODEL": os.getenv("ANTHROPIC_MODEL", DEFAULT_ANTHROPIC_MODEL),
        "SUMMARY_MAX_TOKENS": _env_int("SUMMARY_MAX_TOKENS", 256),
        "SUMMARY_TIMEOUT": _env_float("SUMMARY_TIMEOUT", 30.0),
        "SUMMARY_PROVIDER": os.getenv("SUMMARY_PROVIDER", ""),
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO"),
        "SENTRY_DSN": os.getenv("SENTRY_DSN", ""),
        "SENTRY_TRACES_RATE": _env_float("SENTRY_TRACES_RATE", 0.1),
        "OTLP_ENDPOINT": os.getenv("OTLP_ENDPOINT", ""),
        "CORS_ORIGINS": os.getenv("CORS_ORIGINS", "*"),
        "ENVIRONMENT": os.getenv("ENVIRONMENT", "development"),
    }
    if overrides:
        cfg.update(overrides)

    cfg["SUMMARY_PROVIDER"] = resolve_summary_provider(
        cfg["ANTHROPIC_API_KEY"], cfg.get("SUMMARY_PROVIDER") or None
    )
    return cfg
