from __future__ import annotations

import os

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

DEV_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",  # Vite default
    "http://localhost:8080",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:8080",
]


def allowed_origins() -> list[str]:
    # CORS_ORIGINS is a comma separated list; SITE_URL is always allowed
    configured = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]
    site = os.getenv("SITE_URL")
    if site:
        configured.append(site.rstrip("/"))
    if os.getenv("ENV", "development") in ("development", "staging", "test"):
        configured.extend(DEV_ORIGINS)
    return list(dict.fromkeys(configured))


def add_default_middlewares(app: FastAPI) -> None:
    # session cookies travel cross-origin, so no wildcard origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
