from __future__ import annotations

import functools
import json
import logging
from typing import Any, Dict, Iterable, Iterator, Optional, Union

from common.settings import PLACEHOLDER_RPC_URL, Settings
from etl.dispatch import NormalizerOptions, process_event
from etl.entities import Sale
from etl.events import MarketEvent
from etl.seadrop import CounterAlias
from ingestion.parser import EventParseError, parse_event
from ingestion.receipts import get_minted_token_ids_from_receipt
from storage.base import StoreContext

log = logging.getLogger(__name__)


def options_from_settings(settings: Settings) -> NormalizerOptions:
    aliases = {
        shim: CounterAlias(canonical=a.canonical, start=a.start)
        for shim, a in settings.seadrop.aliases.items()
    }
    resolver = None
    if settings.seadrop.token_id_source == "receipt":
        # placeholder url means no endpoint configured, use the receipts default
        url = None if settings.rpc.url == PLACEHOLDER_RPC_URL else settings.rpc.url
        resolver = functools.partial(
            get_minted_token_ids_from_receipt,
            rpc_url=url,
            timeout=settings.rpc.timeout,
        )
    return NormalizerOptions(
        drop_empty_items=settings.normalizer.drop_empty_items,
        seadrop_aliases=aliases,
        token_id_resolver=resolver,
    )


def load_events_jsonl(path: str) -> Iterator[Dict[str, Any]]:
    """Yield decoded event records from a JSON lines file, skipping blank lines."""
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                raise EventParseError(f"{path}:{lineno}: invalid JSON: {e.msg}") from e


def _count_sales(result: Any) -> int:
    if isinstance(result, Sale):
        return 1
    if isinstance(result, list):
        return sum(1 for r in result if isinstance(r, Sale))
    return 0


async def run_pipeline(
    events: Iterable[Union[MarketEvent, Dict[str, Any]]],
    ctx: StoreContext,
    options: Optional[NormalizerOptions] = None,
) -> Dict[str, int]:
    """
    Normalize events in order. Raw records are parsed first. Returns counts of
    events processed, sales written and events that wrote no sale.
    """
    stats = {"events": 0, "sales": 0, "no_sale": 0}
    for item in events:
        event = parse_event(item) if isinstance(item, dict) else item
        result = await process_event(ctx, event, options)
        n = _count_sales(result)
        stats["events"] += 1
        stats["sales"] += n
        if n == 0:
            stats["no_sale"] += 1

    log.info(
        "pipeline done. events=%d sales=%d no_sale=%d",
        stats["events"],
        stats["sales"],
        stats["no_sale"],
    )
    return stats
