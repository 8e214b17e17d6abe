"""CORS configuration helper for API resources."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS


def init_app(app: Flask) -> None:
    """Configure CORS for API endpoints based on application config.

    Parameters
    ----------
    app: flask.Flask
        Application whose ``CORS_ORIGINS`` and ``CORS_MAX_AGE`` settings are
        consulted. When ``CORS_ORIGINS`` is blank or ``"*"`` the policy allows
        any origin but disables credential support.

    Notes
    -----
    Token headers are custom response headers, so they are listed in
    ``expose_headers``; browsers hide them from scripts otherwise.
    """
    raw_origins = app.config.get("CORS_ORIGINS", "")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    wildcard = len(origins) == 0 or origins == ["*"]
    token_headers = [
        app.config.get("JWT_ACCESS_HEADER", "Authorization"),
        app.config.get("JWT_REFRESH_HEADER", "Authorization-refresh"),
    ]

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if wildcard else origins}},
        supports_credentials=not wildcard,
        expose_headers=[*token_headers, "X-Request-ID"],
        allow_headers=["Content-Type", "X-Request-ID", *token_headers],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
