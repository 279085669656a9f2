"""
etl.events

Typed shapes of the decoded marketplace events. Every protocol event is one
frozen dataclass carrying the shared block/transaction metadata plus its own
parameters; `MarketEvent` is the closed union the dispatcher matches on.

uint256 parameters are Python ints (arbitrary precision); addresses keep the
case the decoder produced.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple, Union


@dataclass(frozen=True)
class EventMeta:
    chain_id: int
    block_number: int
    timestamp: int
    tx_hash: str
    log_index: int
    src_address: str = ""


@dataclass(frozen=True)
class SpentItem:
    item_type: int
    token: str
    identifier: int
    amount: int


@dataclass(frozen=True)
class ReceivedItem:
    item_type: int
    token: str
    identifier: int
    amount: int
    recipient: str


# --- Seaport ---------------------------------------------------------------

@dataclass(frozen=True)
class OrderFulfilled:
    meta: EventMeta
    order_hash: str
    offerer: str
    zone: str
    recipient: str
    offer: Tuple[SpentItem, ...] = field(default_factory=tuple)
    consideration: Tuple[ReceivedItem, ...] = field(default_factory=tuple)


# --- CryptoPunks -----------------------------------------------------------

@dataclass(frozen=True)
class PunkBought:
    meta: EventMeta
    token_id: int
    value: int
    from_address: str
    to_address: str


# --- Foundation ------------------------------------------------------------

@dataclass(frozen=True)
class BuyPriceAccepted:
    meta: EventMeta
    nft_contract: str
    token_id: int
    seller: str
    buyer: str
    protocol_fee: int
    creator_fee: int
    seller_rev: int


@dataclass(frozen=True)
class OfferAccepted:
    meta: EventMeta
    nft_contract: str
    token_id: int
    buyer: str
    seller: str
    protocol_fee: int
    creator_fee: int
    seller_rev: int


@dataclass(frozen=True)
class PrivateSaleFinalized:
    meta: EventMeta
    nft_contract: str
    token_id: int
    seller: str
    buyer: str
    protocol_fee: int
    creator_fee: int
    seller_rev: int
    deadline: int = 0


@dataclass(frozen=True)
class ReserveAuctionCreated:
    meta: EventMeta
    seller: str
    nft_contract: str
    token_id: int
    auction_id: int
    duration: int = 0
    extension_duration: int = 0
    reserve_price: int = 0


@dataclass(frozen=True)
class ReserveAuctionFinalized:
    meta: EventMeta
    auction_id: int
    seller: str
    bidder: str
    protocol_fee: int
    creator_fee: int
    seller_rev: int


# --- SuperRare -------------------------------------------------------------

@dataclass(frozen=True)
class BazaarAcceptOffer:
    meta: EventMeta
    origin_contract: str
    bidder: str
    seller: str
    currency_address: str
    amount: int
    token_id: int


@dataclass(frozen=True)
class BazaarSold:
    meta: EventMeta
    origin_contract: str
    buyer: str
    seller: str
    currency_address: str
    amount: int
    token_id: int


@dataclass(frozen=True)
class BazaarAuctionSettled:
    meta: EventMeta
    contract_address: str
    bidder: str
    seller: str
    token_id: int
    currency_address: str
    amount: int


@dataclass(frozen=True)
class AuctionHouseSettled:
    meta: EventMeta
    contract_address: str
    bidder: str
    seller: str
    token_id: int
    amount: int


@dataclass(frozen=True)
class SuperRareV1Sold:
    meta: EventMeta
    buyer: str
    seller: str
    amount: int
    token_id: int


# --- KnownOrigin -----------------------------------------------------------

@dataclass(frozen=True)
class BuyNowPurchased:
    meta: EventMeta
    token_id: int
    buyer: str
    current_owner: str
    price: int


# --- Seadrop ---------------------------------------------------------------

@dataclass(frozen=True)
class SeaDropMint:
    meta: EventMeta
    nft_contract: str
    minter: str
    fee_recipient: str
    payer: str
    quantity_minted: int
    unit_mint_price: int
    fee_bps: int = 0
    drop_stage_index: int = 0


MarketEvent = Union[
    OrderFulfilled,
    PunkBought,
    BuyPriceAccepted,
    OfferAccepted,
    PrivateSaleFinalized,
    ReserveAuctionCreated,
    ReserveAuctionFinalized,
    BazaarAcceptOffer,
    BazaarSold,
    BazaarAuctionSettled,
    AuctionHouseSettled,
    SuperRareV1Sold,
    BuyNowPurchased,
    SeaDropMint,
]
