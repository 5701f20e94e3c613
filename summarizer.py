# summarizer.py
# Three-line article digests. Flask Blueprint. Plugs into app.py.
# Remote model when a key is configured; extractive fallback otherwise.

import logging
import re
import time
from typing import Any, Dict, List, Optional

import requests
from flask import Blueprint, current_app, jsonify, request

from config import ANTHROPIC_VERSION, DEFAULT_ANTHROPIC_MODEL, DEFAULT_ANTHROPIC_URL
from observability import log_json_line, traced

log = logging.getLogger("summarizer")

summarize_bp = Blueprint('summarizer', __name__)

# ============================================================
# CONFIG
# ============================================================
BULLET = "・"
ELLIPSIS = "..."
MAX_LINE_CHARS = 50
PLACEHOLDER_LINE = f"{BULLET}詳細は記事をご確認ください。"
SENTENCE_END_RE = re.compile(r'([。！？])')
BATCH_LIMIT = 10

MISSING_FIELDS_ERROR = "タイトルと説明文が必要です"
SUMMARIZE_FAILED_ERROR = "要約の生成に失敗しました"
BATCH_INVALID_ERROR = f"articlesは1〜{BATCH_LIMIT}件の配列で指定してください"

PROMPT_TEMPLATE = """以下のニュース記事を日本語で3行で要約してください。各行は簡潔に、重要なポイントを含めてください。

タイトル: {title}

内容: {description}

3行の要約:"""


# ============================================================
# EXTRACTIVE FALLBACK
# ============================================================
def split_sentences(text: str) -> List[str]:
    """Break after every full-width 。！？ and drop blank fragments."""
    marked = SENTENCE_END_RE.sub(r'\1\n', text)
    return [s.strip() for s in marked.split("\n") if s.strip()]


def _bullet(sentence: str) -> str:
    if len(sentence) > MAX_LINE_CHARS:
        return f"{BULLET}{sentence[:MAX_LINE_CHARS]}{ELLIPSIS}"
    return f"{BULLET}{sentence}"


def generate_fallback_summary(title: str, description: str) -> str:
    """
    Title, first sentence, last sentence. The closing line deliberately
    takes the final sentence rather than the second one.
    """
    sentences = split_sentences(description)

    lines = [f"{BULLET}{title}"]
    lines.append(_bullet(sentences[0]) if sentences else PLACEHOLDER_LINE)
    lines.append(_bullet(sentences[-1]) if len(sentences) >= 2 else PLACEHOLDER_LINE)
    return "\n".join(lines)


# ============================================================
# REMOTE MODEL
# ============================================================
def call_anthropic(session: Any, api_key: str, prompt: str, *,
                   model: str = DEFAULT_ANTHROPIC_MODEL,
                   max_tokens: int = 256,
                   url: str = DEFAULT_ANTHROPIC_URL,
                   timeout: float = 30.0) -> dict:
    """Call Anthropic API."""
    t0 = time.time()
    headers = {
        'x-api-key': api_key,
        'anthropic-version': ANTHROPIC_VERSION,
        'Content-Type': 'application/json'
    }
    body = {
        'model': model,
        'max_tokens': max_tokens,
        'messages': [{'role': 'user', 'content': prompt}]
    }
    try:
        resp = session.post(url, headers=headers, json=body, timeout=timeout)
        latency = int((time.time() - t0) * 1000)
        if not resp.ok:
            return {'content': '', 'latency_ms': latency,
                    'error': f"HTTP {resp.status_code}: {resp.text[:500]}"}

        data = resp.json()
        blocks = data.get('content') if isinstance(data, dict) else None
        if isinstance(blocks, list):
            text = ''.join(b['text'] for b in blocks
                           if isinstance(b, dict) and b.get('type') == 'text'
                           and isinstance(b.get('text'), str))
            if text.strip():
                usage = data.get('usage') if isinstance(data.get('usage'), dict) else {}
                return {
                    'content': text.strip(),
                    'tokens_in': usage.get('input_tokens', 0),
                    'tokens_out': usage.get('output_tokens', 0),
                    'latency_ms': latency,
                    'error': None
                }
        return {'content': '', 'latency_ms': latency, 'error': 'Response has no text content'}
    except (requests.RequestException, ValueError) as e:
        return {'content': '', 'latency_ms': int((time.time() - t0) * 1000), 'error': str(e)}


class Summarizer:
    """Produces a three-line digest; never lets a remote failure escape."""

    def __init__(
        self,
        provider: str = "local",
        api_key: str = "",
        model: str = DEFAULT_ANTHROPIC_MODEL,
        max_tokens: int = 256,
        api_url: str = DEFAULT_ANTHROPIC_URL,
        timeout: float = 30.0,
        session: Optional[Any] = None,
    ) -> None:
        self.provider = provider
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests  # module-level calls; no shared cookie jar

    @property
    def uses_remote(self) -> bool:
        return self.provider == "remote" and bool(self.api_key)

    @traced("summarizer.summarize")
    def summarize(self, title: str, description: str) -> str:
        if not self.uses_remote:
            log_json_line("summarize", {"provider": "local", "fallback": False})
            return generate_fallback_summary(title, description)

        result = call_anthropic(
            self.session, self.api_key,
            PROMPT_TEMPLATE.format(title=title, description=description),
            model=self.model, max_tokens=self.max_tokens,
            url=self.api_url, timeout=self.timeout,
        )
        if result['error']:
            log.error(f"Anthropic API error: {result['error']}")
            log_json_line("summarize", {"provider": "remote", "fallback": True,
                                        "latency_ms": result['latency_ms']})
            return generate_fallback_summary(title, description)

        log_json_line("summarize", {
            "provider": "remote",
            "fallback": False,
            "latency_ms": result['latency_ms'],
            "tokens_out": result.get('tokens_out', 0),
        })
        return result['content']


def summarizer_from_config(cfg: Dict[str, Any], session: Optional[Any] = None) -> Summarizer:
    return Summarizer(
        provider=cfg["SUMMARY_PROVIDER"],
        api_key=cfg["ANTHROPIC_API_KEY"],
        model=cfg["ANTHROPIC_MODEL"],
        max_tokens=cfg["SUMMARY_MAX_TOKENS"],
        api_url=cfg["ANTHROPIC_API_URL"],
        timeout=cfg["SUMMARY_TIMEOUT"],
        session=session,
    )


# ============================================================
# ROUTES
# ============================================================
def _required_text(payload: Dict[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if isinstance(value, str) and value.strip():
        return value
    return None


@summarize_bp.route('/api/summarize', methods=['POST'])
def summarize_article():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}

    title = _required_text(payload, 'title')
    description = _required_text(payload, 'description')
    if not title or not description:
        return jsonify({'success': False, 'error': MISSING_FIELDS_ERROR}), 400

    summarizer: Summarizer = current_app.extensions["summarizer"]
    try:
        summary = summarizer.summarize(title, description)
    except Exception:
        log.exception("Summarize API error")
        return jsonify({'success': False, 'error': SUMMARIZE_FAILED_ERROR}), 500

    return jsonify({'success': True, 'summary': summary})


@summarize_bp.route('/api/summarize/batch', methods=['POST'])
def summarize_batch():
    """Summarize several articles in order; a bad entry fails only itself."""
    payload = request.get_json(silent=True)
    articles = payload.get('articles') if isinstance(payload, dict) else None
    if not isinstance(articles, list) or not articles or len(articles) > BATCH_LIMIT:
        return jsonify({'success': False, 'error': BATCH_INVALID_ERROR}), 400

    summarizer: Summarizer = current_app.extensions["summarizer"]
    results = []
    try:
        for entry in articles:
            entry = entry if isinstance(entry, dict) else {}
            title = _required_text(entry, 'title')
            description = _required_text(entry, 'description')
            if not title or not description:
                results.append({'id': entry.get('id'), 'success': False, 'error': MISSING_FIELDS_ERROR})
                continue
            results.append({
                'id': entry.get('id'),
                'success': True,
                'summary': summarizer.summarize(title, description),
            })
    except Exception:
        log.exception("Summarize batch API error")
        return jsonify({'success': False, 'error': SUMMARIZE_FAILED_ERROR}), 500

    return jsonify({'success': True, 'results': results})


if __name__ == "__main__":
    import argparse

    from config import load_config

    p = argparse.ArgumentParser(description="Print a three-line summary of one article")
    p.add_argument("--title", required=True)
    p.add_argument("--description", required=True)
    p.add_argument("--local", action="store_true", help="Skip the remote model")
    a = p.parse_args()

    cfg = load_config({"SUMMARY_PROVIDER": "local"} if a.local else None)
    print(summarizer_from_config(cfg).summarize(a.title, a.description))
