"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from anonfeed.config import get_settings
from anonfeed.db import DbClient, InMemoryDbClient, SqlDbClient

logger = logging.getLogger(__name__)

_db_client: DbClient | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so posts and comments persist across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        logger.info("Using in-memory database")
        _db_client = InMemoryDbClient()
    else:
        _db_client = SqlDbClient(settings.database_url)
    return _db_client


def set_db_client(client: DbClient | None) -> None:
    """Replace the singleton (tests and scripts)."""
    global _db_client
    _db_client = client
