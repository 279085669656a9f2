"""
etl.foundation

Foundation sales split the price into up to three ETH legs, always listed in
the order seller revenue, creator fee, protocol fee. Zero legs are left out,
so a sale can carry zero to three consideration entries.

Reserve auctions arrive as two events. ReserveAuctionCreated names the NFT and
is cached by auction id; ReserveAuctionFinalized only carries the auction id
and the money. The handshake is

    (none) --created--> CREATED --finalized--> sale written
    (none) --finalized--> no op, nothing written

The cache row is kept after finalization.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional, Union

from etl.entities import FoundationAuction, Sale
from etl.entity_helpers import Payment, native_payment, record_direct_sale
from etl.events import (
    BuyPriceAccepted,
    EventMeta,
    OfferAccepted,
    PrivateSaleFinalized,
    ReserveAuctionCreated,
    ReserveAuctionFinalized,
)
from etl.identifiers import Market, as_decstr
from storage.base import StoreContext

log = logging.getLogger(__name__)

FOUNDATION_TREASURY = "0x67Df244584b67E8C51B10aD610aAfFa9a402FdB6"

# (nft_contract, token_id) -> creator address, or None when unknown.
# Blocking lookups are fine, the call runs in a worker thread. Library callers
# pass one through NormalizerOptions, settings never build one.
CreatorResolver = Callable[[str, str], Optional[str]]

FixedPriceEvent = Union[BuyPriceAccepted, OfferAccepted, PrivateSaleFinalized]


def fee_split_payments(
    *,
    seller: str,
    creator: str,
    seller_rev: int,
    creator_fee: int,
    protocol_fee: int,
) -> List[Payment]:
    legs = [
        (seller_rev, seller),
        (creator_fee, creator),
        (protocol_fee, FOUNDATION_TREASURY),
    ]
    return [native_payment(as_decstr(amount), to) for amount, to in legs if int(amount) != 0]


async def _record_fee_split_sale(
    ctx: StoreContext,
    *,
    meta: EventMeta,
    nft_contract: str,
    token_id: int,
    seller: str,
    buyer: str,
    seller_rev: int,
    creator_fee: int,
    protocol_fee: int,
    creator_of: Optional[CreatorResolver],
) -> Sale:
    tid = as_decstr(token_id)
    creator = await asyncio.to_thread(creator_of, nft_contract, tid) if creator_of else None

    # with no seller revenue the creator is the party actually selling
    display_seller = creator if int(seller_rev) == 0 and creator else seller

    payments = fee_split_payments(
        seller=seller,
        # the contract address stands in for the creator when it is unknown
        creator=creator or nft_contract,
        seller_rev=seller_rev,
        creator_fee=creator_fee,
        protocol_fee=protocol_fee,
    )
    return await record_direct_sale(
        ctx,
        meta=meta,
        market=Market.FOUNDATION,
        seller=display_seller,
        buyer=buyer,
        nft_contract=nft_contract,
        token_id=tid,
        payments=payments,
    )


async def handle_fixed_price_sale(
    ctx: StoreContext,
    event: FixedPriceEvent,
    *,
    creator_of: Optional[CreatorResolver] = None,
) -> Sale:
    """BuyPriceAccepted, OfferAccepted and PrivateSaleFinalized share one shape."""
    return await _record_fee_split_sale(
        ctx,
        meta=event.meta,
        nft_contract=event.nft_contract,
        token_id=event.token_id,
        seller=event.seller,
        buyer=event.buyer,
        seller_rev=event.seller_rev,
        creator_fee=event.creator_fee,
        protocol_fee=event.protocol_fee,
        creator_of=creator_of,
    )


async def handle_reserve_auction_created(ctx: StoreContext, event: ReserveAuctionCreated) -> FoundationAuction:
    auction = FoundationAuction(
        id=as_decstr(event.auction_id),
        nft_contract=event.nft_contract,
        token_id=as_decstr(event.token_id),
        seller=event.seller,
    )
    await ctx.foundation_auction.set(auction)
    return auction


async def handle_reserve_auction_finalized(
    ctx: StoreContext,
    event: ReserveAuctionFinalized,
    *,
    creator_of: Optional[CreatorResolver] = None,
) -> Optional[Sale]:
    """
    Returns the sale, or None when the auction was never seen being created.
    """
    auction_id = as_decstr(event.auction_id)
    auction = await ctx.foundation_auction.get(auction_id)
    if auction is None:
        log.info(
            "skipping ReserveAuctionFinalized tx=%s: auction %s has no creation record",
            event.meta.tx_hash,
            auction_id,
        )
        return None

    return await _record_fee_split_sale(
        ctx,
        meta=event.meta,
        nft_contract=auction.nft_contract,
        token_id=int(auction.token_id),
        seller=event.seller,
        buyer=event.bidder,
        seller_rev=event.seller_rev,
        creator_fee=event.creator_fee,
        protocol_fee=event.protocol_fee,
        creator_of=creator_of,
    )
