# streaming/bus.py

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List


def chain_topic(chain_id: int) -> str:
    return f"chain-{int(chain_id)}.events"


def event_key(record: Dict[str, Any]) -> str:
    """tx hash and log index identify one decoded log."""
    tx = (record.get("transaction") or {}).get("hash", "")
    return f"{tx}:{int(record.get('logIndex', 0))}"


@dataclass(frozen=True)
class Message:
    topic: str
    offset: int
    key: str
    value: Dict[str, Any]
    produced_at: float


@dataclass
class _ChainLog:
    messages: List[Message] = field(default_factory=list)
    committed: Dict[str, int] = field(default_factory=dict)  # group -> offset
    changed: asyncio.Condition = field(default_factory=asyncio.Condition)


class MemoryEventBus:
    """
    Append only log per chain topic, in memory, delivered at least once.

    Duplicates are kept: a redelivered log is a second message with the same
    key. Subscribers wait on the topic's condition and never yield while
    holding it. Committed offsets per consumer group only move forward.
    """

    def __init__(self) -> None:
        self._logs: Dict[str, _ChainLog] = {}

    def _log(self, topic: str) -> _ChainLog:
        if topic not in self._logs:
            self._logs[topic] = _ChainLog()
        return self._logs[topic]

    async def publish(self, topic: str, key: str, value: Dict[str, Any]) -> int:
        chain_log = self._log(topic)
        async with chain_log.changed:
            offset = len(chain_log.messages)
            chain_log.messages.append(
                Message(topic, offset, str(key), json.loads(json.dumps(value)), time.time())
            )
            chain_log.changed.notify_all()
            return offset

    async def publish_event(self, record: Dict[str, Any]) -> int:
        if "chainId" not in record:
            raise ValueError("event record has no chainId")
        return await self.publish(chain_topic(record["chainId"]), event_key(record), record)

    async def subscribe(self, topic: str, group_id: str) -> AsyncIterator[Message]:
        chain_log = self._log(topic)
        position = await self.get_offset(topic, group_id) + 1
        while True:
            async with chain_log.changed:
                await chain_log.changed.wait_for(lambda: position < len(chain_log.messages))
                batch = chain_log.messages[position:]
            for msg in batch:
                position = msg.offset + 1
                yield msg

    async def commit(self, topic: str, group_id: str, offset: int) -> None:
        chain_log = self._log(topic)
        async with chain_log.changed:
            if offset > chain_log.committed.get(group_id, -1):
                chain_log.committed[group_id] = offset

    async def get_offset(self, topic: str, group_id: str) -> int:
        chain_log = self._log(topic)
        async with chain_log.changed:
            return chain_log.committed.get(group_id, -1)

    async def lag(self, topic: str, group_id: str) -> int:
        """Messages published but not yet committed by the group."""
        return self.size(topic) - 1 - await self.get_offset(topic, group_id)

    def size(self, topic: str) -> int:
        return len(self._log(topic).messages)
