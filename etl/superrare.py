"""
etl.superrare

SuperRare has three generations of contracts:

  V1            Sold on the token contract itself, ETH only
  AuctionHouse  AuctionSettled naming the token contract, ETH only
  Bazaar        AcceptOffer, Sold and AuctionSettled with a currency address,
                the zero address meaning ETH and anything else an ERC-20
"""
from __future__ import annotations

from typing import Union

from etl.entities import Sale
from etl.entity_helpers import Payment, native_payment, record_direct_sale
from etl.events import (
    AuctionHouseSettled,
    BazaarAcceptOffer,
    BazaarAuctionSettled,
    BazaarSold,
    SuperRareV1Sold,
)
from etl.identifiers import ZERO_ADDRESS, ItemType, Market, as_decstr, norm
from storage.base import StoreContext

BazaarEvent = Union[BazaarAcceptOffer, BazaarSold, BazaarAuctionSettled]


def currency_payment(currency_address: str, amount: int, recipient: str) -> Payment:
    item_type = ItemType.NATIVE if norm(currency_address) == ZERO_ADDRESS else ItemType.FUNGIBLE
    return Payment(item_type, currency_address, "0", as_decstr(amount), recipient)


async def handle_bazaar_sale(ctx: StoreContext, event: BazaarEvent) -> Sale:
    if isinstance(event, BazaarAcceptOffer):
        buyer, nft_contract = event.bidder, event.origin_contract
    elif isinstance(event, BazaarSold):
        buyer, nft_contract = event.buyer, event.origin_contract
    else:
        buyer, nft_contract = event.bidder, event.contract_address

    return await record_direct_sale(
        ctx,
        meta=event.meta,
        market=Market.SUPERRARE,
        seller=event.seller,
        buyer=buyer,
        nft_contract=nft_contract,
        token_id=as_decstr(event.token_id),
        payments=[currency_payment(event.currency_address, event.amount, event.seller)],
    )


async def handle_auction_house_settled(ctx: StoreContext, event: AuctionHouseSettled) -> Sale:
    return await record_direct_sale(
        ctx,
        meta=event.meta,
        market=Market.SUPERRARE,
        seller=event.seller,
        buyer=event.bidder,
        nft_contract=event.contract_address,
        token_id=as_decstr(event.token_id),
        payments=[native_payment(as_decstr(event.amount), event.seller)],
    )


async def handle_v1_sold(ctx: StoreContext, event: SuperRareV1Sold) -> Sale:
    return await record_direct_sale(
        ctx,
        meta=event.meta,
        market=Market.SUPERRARE,
        seller=event.seller,
        buyer=event.buyer,
        nft_contract=event.meta.src_address,
        token_id=as_decstr(event.token_id),
        payments=[native_payment(as_decstr(event.amount), event.seller)],
    )
