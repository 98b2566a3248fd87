from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from datastore.base import ReadingStore
from datastore.cosmos import CosmosReadingStore
from datastore.memory import InMemoryReadingStore
from settings import get_settings


@lru_cache
def build_default_store(backend: Optional[str] = None) -> ReadingStore:
    """Build the reading store selected by ``READING_STORE_BACKEND``."""
    settings = get_settings()
    selected = settings.store_backend if backend is None else backend
    if selected == "memory":
        fixture = Path(settings.fixture_path) if settings.fixture_path else None
        return InMemoryReadingStore(fixture_path=fixture)
    return CosmosReadingStore(
        endpoint=settings.cosmos_endpoint,
        key=settings.cosmos_key,
        database=settings.cosmos_database,
        container=settings.cosmos_container,
    )
