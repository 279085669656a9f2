from __future__ import annotations

import asyncio
import json
import sqlite3
from typing import Any, List, Optional

from etl.entities import entity_from_dict, entity_to_dict
from storage.base import EntityStore, StoreError
from storage.schema import CREATE_ALL_TABLES, table_for


class SQLiteStore(EntityStore):
    """
    Durable entity store on SQLite.

    One table per entity type keyed by id, rows hold the entity as json.
    Blocking sqlite calls run in a worker thread so the event loop stays free.
    """

    def __init__(self, path: str):
        self.path = path
        self.conn: Optional[sqlite3.Connection] = None

    def _ensure(self) -> None:
        if self.conn is not None:
            return
        self.setup()

    def setup(self) -> None:
        try:
            con = sqlite3.connect(self.path, check_same_thread=False)
            con.row_factory = sqlite3.Row
            for ddl in CREATE_ALL_TABLES:
                con.execute(ddl)
            con.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to open sqlite store at {self.path}: {e}") from e
        self.conn = con

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    # --------------- sync helpers run in a thread ---------------

    def _get_sync(self, entity_type: str, entity_id: str) -> Optional[Any]:
        self._ensure()
        table = table_for(entity_type)
        try:
            row = self.conn.execute(f"SELECT body FROM {table} WHERE id = ?", (entity_id,)).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"get {entity_type}/{entity_id} failed: {e}") from e
        return entity_from_dict(entity_type, json.loads(row["body"])) if row else None

    def _set_sync(self, entity_type: str, entity: Any) -> None:
        self._ensure()
        table = table_for(entity_type)
        try:
            self.conn.execute(
                f"INSERT OR REPLACE INTO {table}(id, body) VALUES(?, ?)",
                (entity.id, json.dumps(entity_to_dict(entity))),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"set {entity_type}/{entity.id} failed: {e}") from e

    def _get_all_sync(self, entity_type: str) -> List[Any]:
        self._ensure()
        table = table_for(entity_type)
        try:
            rows = self.conn.execute(f"SELECT body FROM {table} ORDER BY id").fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"get_all {entity_type} failed: {e}") from e
        return [entity_from_dict(entity_type, json.loads(r["body"])) for r in rows]

    # --------------- async interface ---------------

    async def get(self, entity_type: str, entity_id: str) -> Optional[Any]:
        return await asyncio.to_thread(self._get_sync, entity_type, entity_id)

    async def set(self, entity_type: str, entity: Any) -> None:
        await asyncio.to_thread(self._set_sync, entity_type, entity)

    async def get_all(self, entity_type: str) -> List[Any]:
        return await asyncio.to_thread(self._get_all_sync, entity_type)
