# streaming/consumers.py
from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from etl.dispatch import NormalizerOptions, process_event
from ingestion.parser import parse_event
from storage.base import StoreContext
from streaming.bus import MemoryEventBus, Message, chain_topic

log = logging.getLogger(__name__)


async def consume_topic(
    bus: MemoryEventBus,
    topic: str,
    group_id: str,
    on_message: Callable[[Message], Awaitable[None]],
) -> None:
    """
    Generic loop for a single topic.
    Consumes from the committed offset plus one, calls the handler, then commits.
    """
    async for msg in bus.subscribe(topic, group_id):
        await on_message(msg)
        await bus.commit(topic, group_id, msg.offset)


async def consume_chain_events(
    bus: MemoryEventBus,
    chain_id: int,
    group_id: str,
    ctx: StoreContext,
    options: Optional[NormalizerOptions] = None,
) -> None:
    """
    Normalize one chain's decoded events into the store.

    Offsets are committed only after the store writes, so a crash redelivers
    the event; the deterministic ids make that replay harmless. Parse and
    store errors propagate and stop the consumer.
    """
    topic = chain_topic(chain_id)

    async def _handler(msg: Message) -> None:
        event = parse_event(msg.value)
        await process_event(ctx, event, options)
        log.debug("processed %s offset=%d key=%s", topic, msg.offset, msg.key)

    await consume_topic(bus, topic, group_id, _handler)
