# storage/manager.py
from __future__ import annotations

from typing import Any

from storage.base import EntityStore
from storage.memory_backend import MemoryStore
from storage.sqlite_backend import SQLiteStore


def get_store(backend: str, **opts: Any) -> EntityStore:
    """
    Factory for entity stores. Accepts flexible option names.
      - memory: no options
      - sqlite: db_path | sqlite_path | path
      - postgres: dsn
    """
    b = (backend or "").lower()
    if b == "memory":
        return MemoryStore()
    if b == "sqlite":
        db_path = opts.get("db_path") or opts.get("sqlite_path") or opts.get("path") or "data/sales.db"
        store = SQLiteStore(db_path)
        store.setup()
        return store
    if b in ("postgres", "postgresql", "pg"):
        # psycopg2 is only needed when postgres is actually requested
        from storage.postgres_backend import PostgresStore

        dsn = opts.get("dsn") or opts.get("pg_dsn")
        if not dsn:
            raise ValueError("postgres backend requires a dsn")
        store = PostgresStore(dsn)
        store.setup()
        return store
    raise ValueError(f"Unknown storage backend: {backend!r}")
