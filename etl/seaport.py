# etl/seaport.py
"""
Seaport OrderFulfilled: arbitrary offer and consideration arrays copied onto
the sale, roles decided by which side carries NFTs.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence, Tuple

from eth_abi import decode as abi_decode
from eth_utils import keccak, to_checksum_address

from etl.entities import Sale
from etl.entity_helpers import (
    classify_settlement_roles,
    create_sale_nft_junctions,
    extract_nft_items,
    get_or_create_account,
)
from etl.events import EventMeta, OrderFulfilled, ReceivedItem, SpentItem
from etl.identifiers import PAYMENT_ITEM_TYPES, Market, as_decstr, norm, sale_id
from storage.base import StoreContext

log = logging.getLogger(__name__)

ORDER_FULFILLED_SIGNATURE = (
    "OrderFulfilled(bytes32,address,address,address,"
    "(uint8,address,uint256,uint256)[],"
    "(uint8,address,uint256,uint256,address)[])"
)
ORDER_FULFILLED_TOPIC0 = "0x" + keccak(text=ORDER_FULFILLED_SIGNATURE).hex().removeprefix("0x")

# non indexed part of the event, offerer and zone are topics 1 and 2
_DATA_TYPES = [
    "bytes32",
    "address",
    "(uint8,address,uint256,uint256)[]",
    "(uint8,address,uint256,uint256,address)[]",
]


def _is_empty_payment(item_type: int, amount: int) -> bool:
    return item_type in PAYMENT_ITEM_TYPES and int(amount) == 0


def _offer_arrays(offer: Sequence[SpentItem], drop_empty: bool):
    items = [i for i in offer if not (drop_empty and _is_empty_payment(i.item_type, i.amount))]
    return (
        [int(i.item_type) for i in items],
        [i.token for i in items],
        [as_decstr(i.identifier) for i in items],
        [as_decstr(i.amount) for i in items],
    )


def _consideration_arrays(consideration: Sequence[ReceivedItem], drop_empty: bool):
    items = [i for i in consideration if not (drop_empty and _is_empty_payment(i.item_type, i.amount))]
    return (
        [int(i.item_type) for i in items],
        [i.token for i in items],
        [as_decstr(i.identifier) for i in items],
        [as_decstr(i.amount) for i in items],
        [i.recipient for i in items],
    )


async def handle_order_fulfilled(
    ctx: StoreContext,
    event: OrderFulfilled,
    *,
    drop_empty_items: bool = False,
) -> Sale:
    """
    Copy the order onto a Sale. With drop_empty_items, zero amount ETH/ERC-20
    lines (padding some order types carry) are left out of both sides.
    """
    meta = event.meta
    sid = sale_id(meta.chain_id, meta.tx_hash)

    await get_or_create_account(ctx, event.offerer)
    await get_or_create_account(ctx, event.recipient)

    o_types, o_tokens, o_ids, o_amounts = _offer_arrays(event.offer, drop_empty_items)
    c_types, c_tokens, c_ids, c_amounts, c_recipients = _consideration_arrays(
        event.consideration, drop_empty_items
    )

    sale = Sale(
        id=sid,
        timestamp=int(meta.timestamp),
        transaction_hash=meta.tx_hash,
        market=Market.SEAPORT.value,
        offerer_id=norm(event.offerer),
        recipient_id=norm(event.recipient),
        offer_item_types=o_types,
        offer_tokens=o_tokens,
        offer_identifiers=o_ids,
        offer_amounts=o_amounts,
        consideration_item_types=c_types,
        consideration_tokens=c_tokens,
        consideration_identifiers=c_ids,
        consideration_amounts=c_amounts,
        consideration_recipients=c_recipients,
    )

    offer_nfts, consideration_nfts = extract_nft_items(o_types, o_tokens, o_ids, c_types, c_tokens, c_ids)
    await create_sale_nft_junctions(ctx, sid, offer_nfts, is_offer=True)
    await create_sale_nft_junctions(ctx, sid, consideration_nfts, is_offer=False)

    await ctx.sale.set(sale)

    await classify_settlement_roles(
        ctx,
        sale=sid,
        offerer_id=sale.offerer_id,
        recipient_id=sale.recipient_id,
        has_offer_nfts=bool(offer_nfts),
        has_consideration_nfts=bool(consideration_nfts),
    )
    log.debug(
        "seaport sale %s offer_nfts=%d consideration_nfts=%d",
        sid,
        len(offer_nfts),
        len(consideration_nfts),
    )
    return sale


# ---------------------------------------------------------------------------
# raw log decoding
# ---------------------------------------------------------------------------

def _to_int(v: Any) -> int:
    if isinstance(v, int):
        return v
    s = str(v).lower()
    return int(s, 16) if s.startswith("0x") else int(s)


def _to_bytes(v: Any) -> bytes:
    if isinstance(v, (bytes, bytearray, memoryview)):
        return bytes(v)
    s = str(v)
    return bytes.fromhex(s[2:] if s.startswith("0x") else s)


def _topic_as_address(topic: Any) -> str:
    t = _to_bytes(topic)
    if len(t) != 32:
        raise ValueError(f"Expected 32 byte topic, got len={len(t)}")
    return to_checksum_address("0x" + t[-20:].hex())


def is_order_fulfilled(log_record: Dict[str, Any]) -> bool:
    topics = log_record.get("topics") or []
    if not topics:
        return False
    return "0x" + _to_bytes(topics[0]).hex() == ORDER_FULFILLED_TOPIC0


def decode_order_fulfilled_log(log_record: Dict[str, Any]) -> Optional[OrderFulfilled]:
    """
    Decode a raw OrderFulfilled log into the typed event.

    Expected keys: topics, data, transactionHash, blockNumber, logIndex,
    chainId, and optionally timestamp and address. Returns None when the log
    is not an OrderFulfilled log.
    """
    if not is_order_fulfilled(log_record):
        return None
    topics = log_record["topics"]
    if len(topics) < 3:
        return None

    offerer = _topic_as_address(topics[1])
    zone = _topic_as_address(topics[2])
    order_hash, recipient, offer, consideration = abi_decode(_DATA_TYPES, _to_bytes(log_record.get("data", "0x")))

    meta = EventMeta(
        chain_id=_to_int(log_record.get("chainId", 1)),
        block_number=_to_int(log_record.get("blockNumber", 0)),
        timestamp=_to_int(log_record.get("timestamp", 0)),
        tx_hash=log_record["transactionHash"],
        log_index=_to_int(log_record.get("logIndex", 0)),
        src_address=log_record.get("address", ""),
    )
    return OrderFulfilled(
        meta=meta,
        order_hash="0x" + bytes(order_hash).hex(),
        offerer=offerer,
        zone=zone,
        recipient=to_checksum_address(recipient),
        offer=_spent_items(offer),
        consideration=_received_items(consideration),
    )


def _spent_items(raw: Sequence[Tuple]) -> Tuple[SpentItem, ...]:
    return tuple(
        SpentItem(item_type=int(t), token=to_checksum_address(tok), identifier=int(ident), amount=int(amt))
        for t, tok, ident, amt in raw
    )


def _received_items(raw: Sequence[Tuple]) -> Tuple[ReceivedItem, ...]:
    return tuple(
        ReceivedItem(
            item_type=int(t),
            token=to_checksum_address(tok),
            identifier=int(ident),
            amount=int(amt),
            recipient=to_checksum_address(rcpt),
        )
        for t, tok, ident, amt, rcpt in raw
    )
