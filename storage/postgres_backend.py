from __future__ import annotations

import asyncio
import json
from typing import Any, List, Optional

import psycopg2

from etl.entities import entity_from_dict, entity_to_dict
from storage.base import EntityStore, StoreError
from storage.schema import CREATE_ALL_TABLES, table_for


class PostgresStore(EntityStore):
    def __init__(self, dsn: str):
        self.dsn = dsn
        self.conn = None

    def setup(self) -> None:
        try:
            self.conn = psycopg2.connect(self.dsn)
            cur = self.conn.cursor()
            for ddl in CREATE_ALL_TABLES:
                cur.execute(ddl)
            self.conn.commit()
        except psycopg2.Error as e:
            raise StoreError(f"Failed to open postgres store: {e}") from e

    def _ensure(self) -> None:
        if self.conn is None:
            self.setup()

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def _get_sync(self, entity_type: str, entity_id: str) -> Optional[Any]:
        self._ensure()
        sql = f"SELECT body FROM {table_for(entity_type)} WHERE id = %s"
        try:
            cur = self.conn.cursor()
            cur.execute(sql, (entity_id,))
            r = cur.fetchone()
        except psycopg2.Error as e:
            self.conn.rollback()
            raise StoreError(f"get {entity_type}/{entity_id} failed: {e}") from e
        return entity_from_dict(entity_type, json.loads(r[0])) if r else None

    def _set_sync(self, entity_type: str, entity: Any) -> None:
        self._ensure()
        sql = f"""
        INSERT INTO {table_for(entity_type)} (id, body)
        VALUES (%s, %s)
        ON CONFLICT (id) DO UPDATE SET body = EXCLUDED.body
        """
        try:
            cur = self.conn.cursor()
            cur.execute(sql, (entity.id, json.dumps(entity_to_dict(entity))))
            self.conn.commit()
        except psycopg2.Error as e:
            self.conn.rollback()
            raise StoreError(f"set {entity_type}/{entity.id} failed: {e}") from e

    def _get_all_sync(self, entity_type: str) -> List[Any]:
        self._ensure()
        sql = f"SELECT body FROM {table_for(entity_type)} ORDER BY id"
        try:
            cur = self.conn.cursor()
            cur.execute(sql)
            rows = cur.fetchall()
        except psycopg2.Error as e:
            self.conn.rollback()
            raise StoreError(f"get_all {entity_type} failed: {e}") from e
        return [entity_from_dict(entity_type, json.loads(r[0])) for r in rows]

    async def get(self, entity_type: str, entity_id: str) -> Optional[Any]:
        return await asyncio.to_thread(self._get_sync, entity_type, entity_id)

    async def set(self, entity_type: str, entity: Any) -> None:
        await asyncio.to_thread(self._set_sync, entity_type, entity)

    async def get_all(self, entity_type: str) -> List[Any]:
        return await asyncio.to_thread(self._get_all_sync, entity_type)
