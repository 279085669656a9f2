import pytest

from etl.events import (
    AuctionHouseSettled,
    BazaarAcceptOffer,
    BazaarAuctionSettled,
    BazaarSold,
    SuperRareV1Sold,
)
from etl.identifiers import ZERO_ADDRESS
from etl.superrare import (
    handle_auction_house_settled,
    handle_bazaar_sale,
    handle_v1_sold,
)

SUPR = "0xb932a70A57673d89f4acfFBE830E8ed7f75Fb9e0"
RARE = "0xba5BDe662c17e2aDFF1075610382B9B691296350"
SELLER = "0x5e11e40000000000000000000000000000000001"
BUYER = "0xb0ae400000000000000000000000000000000002"


@pytest.mark.asyncio
async def test_bazaar_sold_in_erc20_is_fungible(ctx, meta):
    ev = BazaarSold(
        meta=meta(tx_hash="0xsold"),
        origin_contract=SUPR,
        buyer=BUYER,
        seller=SELLER,
        currency_address=RARE,
        amount=500 * 10 ** 18,
        token_id=7,
    )
    sale = await handle_bazaar_sale(ctx, ev)
    assert sale.market == "SuperRare"
    assert sale.consideration_item_types == [1]
    assert sale.consideration_tokens == [RARE]
    assert sale.consideration_amounts == [str(500 * 10 ** 18)]
    assert sale.consideration_recipients == [SELLER]
    assert sale.offer_tokens == [SUPR]


@pytest.mark.asyncio
async def test_bazaar_accept_offer_in_eth_is_native(ctx, meta):
    ev = BazaarAcceptOffer(
        meta=meta(tx_hash="0xoffer"),
        origin_contract=SUPR,
        bidder=BUYER,
        seller=SELLER,
        currency_address=ZERO_ADDRESS,
        amount=3 * 10 ** 18,
        token_id=8,
    )
    sale = await handle_bazaar_sale(ctx, ev)
    assert sale.consideration_item_types == [0]
    assert sale.consideration_tokens == [ZERO_ADDRESS]
    assert sale.recipient_id == BUYER.lower()
    assert [r.account_id for r in await ctx.account_buy.get_all()] == [BUYER.lower()]


@pytest.mark.asyncio
async def test_bazaar_auction_settled_uses_contract_address(ctx, meta):
    ev = BazaarAuctionSettled(
        meta=meta(tx_hash="0xauc"),
        contract_address=SUPR,
        bidder=BUYER,
        seller=SELLER,
        token_id=9,
        currency_address=ZERO_ADDRESS,
        amount=10 ** 18,
    )
    sale = await handle_bazaar_sale(ctx, ev)
    assert sale.offer_tokens == [SUPR]
    assert sale.offer_identifiers == ["9"]
    assert [r.account_id for r in await ctx.account_sell.get_all()] == [SELLER.lower()]


@pytest.mark.asyncio
async def test_auction_house_settled_pays_seller_in_eth(ctx, meta):
    ev = AuctionHouseSettled(
        meta=meta(tx_hash="0xah"),
        contract_address=SUPR,
        bidder=BUYER,
        seller=SELLER,
        token_id=10,
        amount=2 * 10 ** 18,
    )
    sale = await handle_auction_house_settled(ctx, ev)
    assert sale.consideration_item_types == [0]
    assert sale.consideration_amounts == ["2000000000000000000"]
    assert sale.consideration_recipients == [SELLER]


@pytest.mark.asyncio
async def test_v1_sold_uses_emitting_contract(ctx, meta):
    v1 = "0x41A322b28D0fF354040e2CbC676F0320d8c8850d"
    ev = SuperRareV1Sold(
        meta=meta(tx_hash="0xv1", src_address=v1),
        buyer=BUYER,
        seller=SELLER,
        amount=10 ** 17,
        token_id=11,
    )
    sale = await handle_v1_sold(ctx, ev)
    assert sale.offer_tokens == [v1]
    assert await ctx.nft_contract.get(v1.lower()) is not None
