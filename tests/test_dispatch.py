import pytest

from etl.dispatch import NormalizerOptions, process_event
from etl.events import (
    AuctionHouseSettled,
    BazaarAcceptOffer,
    BazaarAuctionSettled,
    BazaarSold,
    BuyNowPurchased,
    BuyPriceAccepted,
    OfferAccepted,
    OrderFulfilled,
    PrivateSaleFinalized,
    PunkBought,
    ReserveAuctionCreated,
    ReserveAuctionFinalized,
    SeaDropMint,
    SpentItem,
    SuperRareV1Sold,
)
from etl.entities import FoundationAuction, Sale
from etl.seadrop import CounterAlias

A = "0xA000000000000000000000000000000000000001"
B = "0xB000000000000000000000000000000000000002"
C = "0xC000000000000000000000000000000000000003"
Z = "0x" + "0" * 40


def _events(meta):
    m = meta
    return [
        OrderFulfilled(m(tx_hash="0x01"), "0x" + "00" * 32, A, Z, B, (SpentItem(2, C, 1, 1),), ()),
        PunkBought(m(tx_hash="0x02", src_address=C), 2, 10, A, B),
        BuyPriceAccepted(m(tx_hash="0x03"), C, 3, A, B, 1, 1, 8),
        OfferAccepted(m(tx_hash="0x04"), C, 4, B, A, 1, 1, 8),
        PrivateSaleFinalized(m(tx_hash="0x05"), C, 5, A, B, 1, 1, 8),
        BazaarAcceptOffer(m(tx_hash="0x06"), C, B, A, Z, 10, 6),
        BazaarSold(m(tx_hash="0x07"), C, B, A, Z, 10, 7),
        BazaarAuctionSettled(m(tx_hash="0x08"), C, B, A, 8, Z, 10),
        AuctionHouseSettled(m(tx_hash="0x09"), C, B, A, 9, 10),
        SuperRareV1Sold(m(tx_hash="0x0a", src_address=C), B, A, 10, 10),
        BuyNowPurchased(m(tx_hash="0x0b", src_address=C), 11, B, A, 10),
    ]


@pytest.mark.asyncio
async def test_every_sale_event_routes_to_a_sale(ctx, store, meta):
    for ev in _events(meta):
        result = await process_event(ctx, ev)
        assert isinstance(result, Sale), type(ev).__name__
    assert store.count("Sale") == 11


@pytest.mark.asyncio
async def test_auction_events_and_mints(ctx, meta):
    created = await process_event(ctx, ReserveAuctionCreated(meta(tx_hash="0x0c"), A, C, 12, 1))
    assert isinstance(created, FoundationAuction)

    sale = await process_event(ctx, ReserveAuctionFinalized(meta(tx_hash="0x0d"), 1, A, B, 1, 1, 8))
    assert sale.offer_identifiers == ["12"]

    mint = SeaDropMint(meta(tx_hash="0x0e"), C, B, A, A, 2, 100)
    opts = NormalizerOptions(seadrop_aliases={C: CounterAlias(canonical=A, start=1)})
    sales = await process_event(ctx, mint, opts)
    assert [s.offer_identifiers[0] for s in sales] == ["1", "2"]


@pytest.mark.asyncio
async def test_drop_empty_items_option_reaches_seaport(ctx, meta):
    ev = OrderFulfilled(
        meta(tx_hash="0x0f"), "0x" + "00" * 32, A, Z, B,
        (SpentItem(2, C, 1, 1), SpentItem(0, Z, 0, 0)), (),
    )
    sale = await process_event(ctx, ev, NormalizerOptions(drop_empty_items=True))
    assert sale.offer_item_types == [2]


@pytest.mark.asyncio
async def test_unknown_event_type_raises(ctx):
    with pytest.raises(TypeError):
        await process_event(ctx, {"event": "PunkBought"})
