# storage/memory_backend.py
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from etl.entities import entity_from_dict, entity_to_dict
from storage.base import EntityStore


class MemoryStore(EntityStore):
    """
    In memory store, one dict per entity type.

    Rows are kept as json safe copies so callers never share list instances
    with the store.
    """

    def __init__(self) -> None:
        self._tables: Dict[str, Dict[str, str]] = {}

    async def get(self, entity_type: str, entity_id: str) -> Optional[Any]:
        raw = self._tables.get(entity_type, {}).get(entity_id)
        if raw is None:
            return None
        return entity_from_dict(entity_type, json.loads(raw))

    async def set(self, entity_type: str, entity: Any) -> None:
        self._tables.setdefault(entity_type, {})[entity.id] = json.dumps(entity_to_dict(entity))

    async def get_all(self, entity_type: str) -> List[Any]:
        rows = self._tables.get(entity_type, {})
        return [entity_from_dict(entity_type, json.loads(raw)) for raw in rows.values()]

    def count(self, entity_type: str) -> int:
        return len(self._tables.get(entity_type, {}))
