"""
FastAPI application entry point for the anonymous feed backend.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from anonfeed.config import get_settings
from anonfeed.rpc import router


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Anonymous Feed", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
