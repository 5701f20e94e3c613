"""
platform_infra.py: Platform Infrastructure Layer
===================================================
Security headers (HSTS/CSP) and CORS for the JSON API.
"""

from flask_cors import CORS
from flask_talisman import Talisman


def init_platform(app):
    """Initialize security headers and CORS."""
    # ── HSTS + CSP + Security Headers ──
    csp = {
        "default-src": "'self'",
        "script-src": "'self' 'unsafe-inline'",
        "style-src": "'self' 'unsafe-inline'",
        "img-src": "'self' data: https:",
        "connect-src": "'self' https://api.anthropic.com",
    }
    Talisman(app, force_https=app.config.get("ENVIRONMENT") == "production",
        strict_transport_security=True, strict_transport_security_max_age=31536000,
        content_security_policy=csp, session_cookie_secure=True, session_cookie_http_only=True)

    origins = [o.strip() for o in str(app.config.get("CORS_ORIGINS", "*")).split(",") if o.strip()]
    CORS(app, resources={r"/api/*": {"origins": origins or "*"}})
