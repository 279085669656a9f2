# ingestion/parser.py
"""
ingestion.parser
Module to parse decoded marketplace event records into typed events.

A record is a JSON object as produced by the upstream log decoder:

    {
      "contract": "CryptoPunks",
      "event": "PunkBought",
      "chainId": 1,
      "block": {"number": 1, "timestamp": 1700000000},
      "transaction": {"hash": "0x..."},
      "logIndex": 0,
      "srcAddress": "0x...",
      "params": {"tokenId": "123", "value": "1000000000000000000", ...}
    }

Numbers may be ints, decimal strings or 0x hex strings. Floats are rejected.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Tuple

from etl.events import (
    AuctionHouseSettled,
    BazaarAcceptOffer,
    BazaarAuctionSettled,
    BazaarSold,
    BuyNowPurchased,
    BuyPriceAccepted,
    EventMeta,
    MarketEvent,
    OfferAccepted,
    OrderFulfilled,
    PrivateSaleFinalized,
    PunkBought,
    ReceivedItem,
    ReserveAuctionCreated,
    ReserveAuctionFinalized,
    SeaDropMint,
    SpentItem,
    SuperRareV1Sold,
)


class EventParseError(ValueError):
    pass


def parse_uint(value: Any, name: str = "value") -> int:
    if isinstance(value, bool) or isinstance(value, float):
        raise EventParseError(f"{name}: expected integer, got {type(value).__name__} {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise EventParseError(f"{name}: negative value {value}")
        return value
    if isinstance(value, str):
        s = value.strip()
        try:
            n = int(s, 16) if s.lower().startswith("0x") else int(s, 10)
        except ValueError as e:
            raise EventParseError(f"{name}: not an integer string {value!r}") from e
        if n < 0:
            raise EventParseError(f"{name}: negative value {value!r}")
        return n
    raise EventParseError(f"{name}: expected integer, got {type(value).__name__}")


def parse_address(value: Any, name: str = "address") -> str:
    if not isinstance(value, str) or not value.startswith("0x"):
        raise EventParseError(f"{name}: expected 0x prefixed address, got {value!r}")
    return value


def _item_fields(raw: Any, names: Tuple[str, ...], where: str) -> List[Any]:
    if isinstance(raw, dict):
        missing = [n for n in names if n not in raw]
        if missing:
            raise EventParseError(f"{where}: missing {', '.join(missing)}")
        return [raw[n] for n in names]
    if isinstance(raw, (list, tuple)) and len(raw) == len(names):
        return list(raw)
    raise EventParseError(f"{where}: expected object or {len(names)} element array, got {raw!r}")


def parse_spent_items(raw: Any) -> Tuple[SpentItem, ...]:
    if not isinstance(raw, list):
        raise EventParseError("offer: expected an array")
    items = []
    for i, entry in enumerate(raw):
        t, token, ident, amount = _item_fields(entry, ("itemType", "token", "identifier", "amount"), f"offer[{i}]")
        items.append(
            SpentItem(
                item_type=parse_uint(t, f"offer[{i}].itemType"),
                token=parse_address(token, f"offer[{i}].token"),
                identifier=parse_uint(ident, f"offer[{i}].identifier"),
                amount=parse_uint(amount, f"offer[{i}].amount"),
            )
        )
    return tuple(items)


def parse_received_items(raw: Any) -> Tuple[ReceivedItem, ...]:
    if not isinstance(raw, list):
        raise EventParseError("consideration: expected an array")
    items = []
    for i, entry in enumerate(raw):
        t, token, ident, amount, rcpt = _item_fields(
            entry, ("itemType", "token", "identifier", "amount", "recipient"), f"consideration[{i}]"
        )
        items.append(
            ReceivedItem(
                item_type=parse_uint(t, f"consideration[{i}].itemType"),
                token=parse_address(token, f"consideration[{i}].token"),
                identifier=parse_uint(ident, f"consideration[{i}].identifier"),
                amount=parse_uint(amount, f"consideration[{i}].amount"),
                recipient=parse_address(rcpt, f"consideration[{i}].recipient"),
            )
        )
    return tuple(items)


_ADDR = parse_address
_UINT = parse_uint

# (contract, event) -> (event class, [(field, param, parser, required)])
FieldSpec = Tuple[str, str, Callable[..., Any], bool]

_FOUNDATION_FEES: List[FieldSpec] = [
    ("protocol_fee", "protocolFee", _UINT, True),
    ("creator_fee", "creatorFee", _UINT, True),
    ("seller_rev", "sellerRev", _UINT, True),
]

EVENT_TYPES: Dict[Tuple[str, str], Tuple[type, List[FieldSpec]]] = {
    ("Seaport", "OrderFulfilled"): (OrderFulfilled, [
        ("order_hash", "orderHash", lambda v, n: str(v), True),
        ("offerer", "offerer", _ADDR, True),
        ("zone", "zone", _ADDR, True),
        ("recipient", "recipient", _ADDR, True),
        ("offer", "offer", lambda v, n: parse_spent_items(v), True),
        ("consideration", "consideration", lambda v, n: parse_received_items(v), True),
    ]),
    ("CryptoPunks", "PunkBought"): (PunkBought, [
        ("token_id", "tokenId", _UINT, True),
        ("value", "value", _UINT, True),
        ("from_address", "fromAddress", _ADDR, True),
        ("to_address", "toAddress", _ADDR, True),
    ]),
    ("Foundation", "BuyPriceAccepted"): (BuyPriceAccepted, [
        ("nft_contract", "nftContract", _ADDR, True),
        ("token_id", "tokenId", _UINT, True),
        ("seller", "seller", _ADDR, True),
        ("buyer", "buyer", _ADDR, True),
        *_FOUNDATION_FEES,
    ]),
    ("Foundation", "OfferAccepted"): (OfferAccepted, [
        ("nft_contract", "nftContract", _ADDR, True),
        ("token_id", "tokenId", _UINT, True),
        ("buyer", "buyer", _ADDR, True),
        ("seller", "seller", _ADDR, True),
        *_FOUNDATION_FEES,
    ]),
    ("Foundation", "PrivateSaleFinalized"): (PrivateSaleFinalized, [
        ("nft_contract", "nftContract", _ADDR, True),
        ("token_id", "tokenId", _UINT, True),
        ("seller", "seller", _ADDR, True),
        ("buyer", "buyer", _ADDR, True),
        *_FOUNDATION_FEES,
        ("deadline", "deadline", _UINT, False),
    ]),
    ("Foundation", "ReserveAuctionCreated"): (ReserveAuctionCreated, [
        ("seller", "seller", _ADDR, True),
        ("nft_contract", "nftContract", _ADDR, True),
        ("token_id", "tokenId", _UINT, True),
        ("auction_id", "auctionId", _UINT, True),
        ("duration", "duration", _UINT, False),
        ("extension_duration", "extensionDuration", _UINT, False),
        ("reserve_price", "reservePrice", _UINT, False),
    ]),
    ("Foundation", "ReserveAuctionFinalized"): (ReserveAuctionFinalized, [
        ("auction_id", "auctionId", _UINT, True),
        ("seller", "seller", _ADDR, True),
        ("bidder", "bidder", _ADDR, True),
        *_FOUNDATION_FEES,
    ]),
    ("SuperRareBazaar", "AcceptOffer"): (BazaarAcceptOffer, [
        ("origin_contract", "originContract", _ADDR, True),
        ("bidder", "bidder", _ADDR, True),
        ("seller", "seller", _ADDR, True),
        ("currency_address", "currencyAddress", _ADDR, True),
        ("amount", "amount", _UINT, True),
        ("token_id", "tokenId", _UINT, True),
    ]),
    ("SuperRareBazaar", "Sold"): (BazaarSold, [
        ("origin_contract", "originContract", _ADDR, True),
        ("buyer", "buyer", _ADDR, True),
        ("seller", "seller", _ADDR, True),
        ("currency_address", "currencyAddress", _ADDR, True),
        ("amount", "amount", _UINT, True),
        ("token_id", "tokenId", _UINT, True),
    ]),
    ("SuperRareBazaar", "AuctionSettled"): (BazaarAuctionSettled, [
        ("contract_address", "contractAddress", _ADDR, True),
        ("bidder", "bidder", _ADDR, True),
        ("seller", "seller", _ADDR, True),
        ("token_id", "tokenId", _UINT, True),
        ("currency_address", "currencyAddress", _ADDR, True),
        ("amount", "amount", _UINT, True),
    ]),
    ("SuperRareAuctionHouse", "AuctionSettled"): (AuctionHouseSettled, [
        ("contract_address", "contractAddress", _ADDR, True),
        ("bidder", "bidder", _ADDR, True),
        ("seller", "seller", _ADDR, True),
        ("token_id", "tokenId", _UINT, True),
        ("amount", "amount", _UINT, True),
    ]),
    ("SuperRareV1", "Sold"): (SuperRareV1Sold, [
        ("buyer", "buyer", _ADDR, True),
        ("seller", "seller", _ADDR, True),
        ("amount", "amount", _UINT, True),
        ("token_id", "tokenId", _UINT, True),
    ]),
    ("KnownOrigin", "BuyNowPurchased"): (BuyNowPurchased, [
        ("token_id", "tokenId", _UINT, True),
        ("buyer", "buyer", _ADDR, True),
        ("current_owner", "currentOwner", _ADDR, True),
        ("price", "price", _UINT, True),
    ]),
    ("Seadrop", "SeaDropMint"): (SeaDropMint, [
        ("nft_contract", "nftContract", _ADDR, True),
        ("minter", "minter", _ADDR, True),
        ("fee_recipient", "feeRecipient", _ADDR, True),
        ("payer", "payer", _ADDR, True),
        ("quantity_minted", "quantityMinted", _UINT, True),
        ("unit_mint_price", "unitMintPrice", _UINT, True),
        ("fee_bps", "feeBps", _UINT, False),
        ("drop_stage_index", "dropStageIndex", _UINT, False),
    ]),
}


def parse_meta(record: dict) -> EventMeta:
    block = record.get("block")
    tx = record.get("transaction")
    if not isinstance(block, dict) or "timestamp" not in block:
        raise EventParseError("Invalid event record: missing block.timestamp")
    if not isinstance(tx, dict) or not tx.get("hash"):
        raise EventParseError("Invalid event record: missing transaction.hash")
    if "chainId" not in record:
        raise EventParseError("Invalid event record: missing chainId")
    return EventMeta(
        chain_id=parse_uint(record["chainId"], "chainId"),
        block_number=parse_uint(block.get("number", 0), "block.number"),
        timestamp=parse_uint(block["timestamp"], "block.timestamp"),
        tx_hash=tx["hash"],
        log_index=parse_uint(record.get("logIndex", 0), "logIndex"),
        src_address=record.get("srcAddress") or "",
    )


def parse_event(record: dict) -> MarketEvent:
    if not record or not isinstance(record, dict):
        raise EventParseError("Invalid event record")
    key = (record.get("contract"), record.get("event"))
    if key not in EVENT_TYPES:
        raise EventParseError(f"Unknown event {key[0]}.{key[1]}")
    cls, fields = EVENT_TYPES[key]

    params = record.get("params")
    if not isinstance(params, dict):
        raise EventParseError(f"{key[0]}.{key[1]}: missing params")

    kwargs: Dict[str, Any] = {"meta": parse_meta(record)}
    for attr, param, parse, required in fields:
        if param not in params or params[param] is None:
            if required:
                raise EventParseError(f"{key[0]}.{key[1]}: missing param {param}")
            continue
        kwargs[attr] = parse(params[param], param)
    return cls(**kwargs)
