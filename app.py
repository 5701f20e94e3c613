import logging
import os
from typing import Any, Dict, Optional

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import load_config
from news_feed import fetcher_from_config, news_bp
from observability import SERVICE_VERSION, init_observability
from platform_infra import init_platform
from summarizer import summarize_bp, summarizer_from_config

log = logging.getLogger("app")

INTERNAL_ERROR_MESSAGE = "サーバー内部でエラーが発生しました"


def create_app(overrides: Optional[Dict[str, Any]] = None) -> Flask:
    """
    Build the gateway. Configuration is resolved here, once; the feed
    fetcher and summarizer are constructed from it and shared read-only
    by every request through app.extensions.
    """
    app = Flask(__name__)
    app.config.update(load_config(overrides))
    app.json.ensure_ascii = False

    init_observability(app)
    init_platform(app)

    app.extensions["news_fetcher"] = fetcher_from_config(app.config)
    app.extensions["summarizer"] = summarizer_from_config(app.config)

    app.register_blueprint(news_bp)
    app.register_blueprint(summarize_bp)

    # ==========================
    # ROUTES
    # ==========================
    @app.route("/")
    def home():
        return jsonify({
            "service": "news-digest-gateway",
            "endpoints": {
                "news": "GET /api/news",
                "summarize": "POST /api/summarize",
                "summarize_batch": "POST /api/summarize/batch",
                "health": "GET /health",
            },
        })

    @app.route("/health")
    def health():
        return jsonify({
            "status": "ok",
            "version": SERVICE_VERSION,
            "summary_provider": app.config["SUMMARY_PROVIDER"],
        })

    # ==========================
    # ERRORS
    # ==========================
    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({"success": False, "error": e.name}), e.code

    @app.errorhandler(Exception)
    def unhandled_error(e):
        log.exception("Unhandled error")
        return jsonify({"success": False, "error": INTERNAL_ERROR_MESSAGE}), 500

    log.info(f"[APP] summary provider: {app.config['SUMMARY_PROVIDER']}")
    return app


app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "10000")), debug=True)
