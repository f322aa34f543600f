"""Persistence layer for clawflow workflows and runs."""

from __future__ import annotations

import os
from typing import Optional

from ..config import ClawflowConfig, load_config
from .inmemory import InMemoryWorkflowStore
from .models import RunStats, WorkflowRun
from .repository import WorkflowStore


def normalize_database_url(database_url: str) -> str:
    """Map plain ``sqlite://`` / ``postgres://`` URLs onto their async drivers."""

    if database_url.startswith(("sqlite+", "postgresql+")):
        return database_url
    if database_url.startswith("sqlite://"):
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    for prefix in ("postgres://", "postgresql://"):
        if database_url.startswith(prefix):
            return database_url.replace(prefix, "postgresql+asyncpg://", 1)
    raise ValueError(f"Unsupported database backend: {database_url}")


def get_store(
    database_url: Optional[str] = None, config: Optional[ClawflowConfig] = None
) -> WorkflowStore:
    """Factory function to build a workflow store.

    The backend is selected based on ``database_url`` which can be provided
    explicitly, via environment variable ``CLAWFLOW_DATABASE_URL`` or
    ``DATABASE_URL``, or from loaded configuration. When no database is
    configured, an in-memory store is returned. Call once at process start
    and pass the store to the executor.
    """

    config = config or load_config()
    database_url = (
        database_url
        or os.getenv("CLAWFLOW_DATABASE_URL")
        or os.getenv("DATABASE_URL")
        or config.database_url
    )

    if not database_url:
        return InMemoryWorkflowStore()

    from .sql import SQLWorkflowStore

    return SQLWorkflowStore(normalize_database_url(database_url))


__all__ = [
    "RunStats",
    "WorkflowRun",
    "WorkflowStore",
    "InMemoryWorkflowStore",
    "get_store",
    "normalize_database_url",
]
