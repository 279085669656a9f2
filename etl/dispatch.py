# etl/dispatch.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from etl.cryptopunks import handle_punk_bought
from etl.events import (
    AuctionHouseSettled,
    BazaarAcceptOffer,
    BazaarAuctionSettled,
    BazaarSold,
    BuyNowPurchased,
    BuyPriceAccepted,
    MarketEvent,
    OfferAccepted,
    OrderFulfilled,
    PrivateSaleFinalized,
    PunkBought,
    ReserveAuctionCreated,
    ReserveAuctionFinalized,
    SeaDropMint,
    SuperRareV1Sold,
)
from etl.foundation import (
    CreatorResolver,
    handle_fixed_price_sale,
    handle_reserve_auction_created,
    handle_reserve_auction_finalized,
)
from etl.knownorigin import handle_buy_now_purchased
from etl.seadrop import CounterAlias, TokenIdResolver, handle_seadrop_mint
from etl.seaport import handle_order_fulfilled
from etl.superrare import handle_auction_house_settled, handle_bazaar_sale, handle_v1_sold
from storage.base import StoreContext


@dataclass
class NormalizerOptions:
    drop_empty_items: bool = False
    seadrop_aliases: Mapping[str, CounterAlias] = field(default_factory=dict)
    token_id_resolver: Optional[TokenIdResolver] = None
    creator_of: Optional[CreatorResolver] = None


async def process_event(ctx: StoreContext, event: MarketEvent, options: Optional[NormalizerOptions] = None):
    """
    Normalize one event into the store. Returns whatever the handler wrote
    (a Sale, a list of Sales, an auction cache row, or None).
    """
    opts = options or NormalizerOptions()
    match event:
        case OrderFulfilled():
            return await handle_order_fulfilled(ctx, event, drop_empty_items=opts.drop_empty_items)
        case PunkBought():
            return await handle_punk_bought(ctx, event)
        case BuyPriceAccepted() | OfferAccepted() | PrivateSaleFinalized():
            return await handle_fixed_price_sale(ctx, event, creator_of=opts.creator_of)
        case ReserveAuctionCreated():
            return await handle_reserve_auction_created(ctx, event)
        case ReserveAuctionFinalized():
            return await handle_reserve_auction_finalized(ctx, event, creator_of=opts.creator_of)
        case BazaarAcceptOffer() | BazaarSold() | BazaarAuctionSettled():
            return await handle_bazaar_sale(ctx, event)
        case AuctionHouseSettled():
            return await handle_auction_house_settled(ctx, event)
        case SuperRareV1Sold():
            return await handle_v1_sold(ctx, event)
        case BuyNowPurchased():
            return await handle_buy_now_purchased(ctx, event)
        case SeaDropMint():
            return await handle_seadrop_mint(
                ctx,
                event,
                aliases=opts.seadrop_aliases,
                token_id_resolver=opts.token_id_resolver,
            )
        case _:
            raise TypeError(f"unsupported event type: {type(event).__name__}")
