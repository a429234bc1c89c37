"""Storage backends for the academy API."""

from functools import lru_cache
from typing import Optional

import structlog

from academy import config
from academy.storage.base import Storage
from academy.storage.memory import MemoryStorage
from academy.storage.sql import SqlStorage

logger = structlog.get_logger(__name__)

__all__ = [
    "Storage",
    "MemoryStorage",
    "SqlStorage",
    "build_storage",
    "get_storage",
]


def build_storage(
    backend: Optional[str] = None,
    database_url: Optional[str] = None,
    seed: Optional[bool] = None,
) -> Storage:
    """Create the configured backend, seeding sample data into an empty store."""
    backend = backend or config.STORAGE_BACKEND
    if backend == "memory":
        storage: Storage = MemoryStorage()
    elif backend == "sql":
        storage = SqlStorage(database_url or config.DATABASE_URL, echo=config.SQL_ECHO)
    else:
        raise ValueError(f"Unknown STORAGE_BACKEND: {backend}")

    if config.SEED_SAMPLE_DATA if seed is None else seed:
        from academy.seed import seed_sample_data

        seed_sample_data(storage)

    logger.info("storage_configured", backend=backend)
    return storage


@lru_cache()
def get_storage() -> Storage:
    return build_storage()
