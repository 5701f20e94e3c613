"""
News Feed: RSS fetcher and /api/news endpoint
Fetches the configured RSS feed and returns parsed article records.
Registered as a Flask blueprint on the main app.

The feed is scanned with regular expressions rather than an XML parser so
that malformed or namespaced documents still yield whatever items can be
recognised. A bad item is dropped; a bad document never raises.
"""

import html
import logging
import re
from typing import Any, Callable, Dict, List, Optional

import requests
from flask import Blueprint, current_app, jsonify

from config import DEFAULT_RSS_URL
from observability import log_json_line, traced
from sample_news import build_fallback_articles

log = logging.getLogger("news")

news_bp = Blueprint('news_feed', __name__)

DEFAULT_SOURCE = "Google News"
MAX_ITEMS = 10
DESCRIPTION_LIMIT = 500

USER_AGENT = 'NewsDigest/1.0 (RSS reader)'

ITEM_RE = re.compile(r'<item(?:\s[^>]*)?>(.*?)</item>', re.S)
TITLE_RE = re.compile(r'<title><!\[CDATA\[(.*?)\]\]></title>|<title>(.*?)</title>', re.S)
LINK_RE = re.compile(r'<link>(.*?)</link>', re.S)
PUB_DATE_RE = re.compile(r'<pubDate>(.*?)</pubDate>', re.S)
DESCRIPTION_RE = re.compile(
    r'<description><!\[CDATA\[(.*?)\]\]></description>|<description>(.*?)</description>', re.S)
SOURCE_RE = re.compile(r'<source[^>]*>(.*?)</source>', re.S)
TAG_RE = re.compile(r'<[^>]*>')
DECODED_TAG_RE = re.compile(r'</?[A-Za-z][^>]*>')


class FeedFetchError(Exception):
    """The feed endpoint answered with a non-success status."""


def strip_html(text: str) -> str:
    """
    Remove literal tags, decode entities, then remove tags that were
    escaped. The second pass needs a tag name, so decoded comparison
    text such as "1 < 2" survives.
    """
    if not text:
        return ""
    decoded = html.unescape(TAG_RE.sub('', text))
    return DECODED_TAG_RE.sub('', decoded).strip()


def _first_group(pattern: re.Pattern, block: str) -> str:
    """Text of the first non-empty group of the first match, or ''."""
    m = pattern.search(block)
    if not m:
        return ""
    for group in m.groups():
        if group:
            return group.strip()
    return ""


def parse_item(block: str) -> Dict[str, str]:
    """Extract the raw field values of one <item> block."""
    return {
        "title": _first_group(TITLE_RE, block),
        "link": _first_group(LINK_RE, block),
        "pubDate": _first_group(PUB_DATE_RE, block),
        "description": _first_group(DESCRIPTION_RE, block),
        "source": _first_group(SOURCE_RE, block),
    }


def parse_rss_items(raw_xml: str, max_items: int = MAX_ITEMS,
                    description_limit: int = DESCRIPTION_LIMIT) -> List[Dict[str, str]]:
    """Turn an RSS document into at most max_items article records, in document order."""
    articles: List[Dict[str, str]] = []

    for match in ITEM_RE.finditer(raw_xml):
        if len(articles) >= max_items:
            break

        fields = parse_item(match.group(1))
        title = strip_html(fields["title"])
        link = html.unescape(fields["link"]).strip()

        if not title or not link:
            continue

        articles.append({
            "id": f"news-{len(articles)}",
            "title": title,
            "description": strip_html(fields["description"])[:description_limit],
            "url": link,
            "source": strip_html(fields["source"]) or DEFAULT_SOURCE,
            "publishedAt": fields["pubDate"],
        })

    return articles


class NewsFetcher:
    """Fetches one RSS feed; falls back to sample articles on any failure."""

    def __init__(
        self,
        feed_url: str = DEFAULT_RSS_URL,
        cache_seconds: int = 300,
        max_items: int = MAX_ITEMS,
        description_limit: int = DESCRIPTION_LIMIT,
        timeout: float = 15.0,
        session: Optional[Any] = None,
        fallback_factory: Callable[[], List[Dict[str, str]]] = build_fallback_articles,
    ) -> None:
        self.feed_url = feed_url
        self.cache_seconds = cache_seconds
        self.max_items = max_items
        self.description_limit = description_limit
        self.timeout = timeout
        self.session = session or requests  # module-level calls; no shared cookie jar
        self.fallback_factory = fallback_factory

    def _download(self) -> str:
        resp = self.session.get(self.feed_url, headers={
            'User-Agent': USER_AGENT,
            'Accept': 'application/rss+xml, application/xml, text/xml, */*',
            'Cache-Control': f'max-age={self.cache_seconds}',
        }, timeout=self.timeout)
        if not resp.ok:
            raise FeedFetchError(f"RSS fetch failed: HTTP {resp.status_code}")
        return resp.content.decode('utf-8', errors='replace')

    @traced("news.fetch_articles")
    def fetch_articles(self) -> List[Dict[str, str]]:
        try:
            raw = self._download()
            articles = parse_rss_items(raw, self.max_items, self.description_limit)
        except Exception as e:
            log.warning(f"RSS fetch error: {e}")
            articles = self.fallback_factory()
            log_json_line("news_fetch", {"url": self.feed_url, "fallback": True,
                                         "count": len(articles), "error": str(e)})
            return articles

        log_json_line("news_fetch", {"url": self.feed_url, "fallback": False, "count": len(articles)})
        return articles


def fetcher_from_config(cfg: Dict[str, Any], session: Optional[Any] = None) -> NewsFetcher:
    return NewsFetcher(
        feed_url=cfg["NEWS_RSS_URL"],
        cache_seconds=cfg["NEWS_CACHE_SECONDS"],
        max_items=cfg["NEWS_MAX_ITEMS"],
        timeout=cfg["NEWS_FETCH_TIMEOUT"],
        session=session,
    )


# ── FLASK ROUTES ──

@news_bp.route('/api/news', methods=['GET'])
def get_news():
    """Latest articles from the feed, or the sample set if it is unreachable."""
    fetcher: NewsFetcher = current_app.extensions["news_fetcher"]
    try:
        articles = fetcher.fetch_articles()
    except Exception:
        log.exception("News API error")
        return jsonify({"success": False, "error": "ニュースの取得に失敗しました"}), 500

    resp = jsonify({"success": True, "data": articles})
    resp.headers['Cache-Control'] = f'public, max-age={fetcher.cache_seconds}'
    return resp


if __name__ == "__main__":
    import argparse
    import json

    from config import load_config

    p = argparse.ArgumentParser(description="Fetch and print the news feed as JSON")
    p.add_argument("--url", type=str, default=None, help="RSS endpoint (defaults to NEWS_RSS_URL)")
    p.add_argument("--limit", type=int, default=None, help="Maximum number of articles")
    a = p.parse_args()

    overrides: Dict[str, Any] = {}
    if a.url:
        overrides["NEWS_RSS_URL"] = a.url
    if a.limit is not None:
        overrides["NEWS_MAX_ITEMS"] = a.limit
    cfg = load_config(overrides)
    print(json.dumps(fetcher_from_config(cfg).fetch_articles(), ensure_ascii=False, indent=2))
