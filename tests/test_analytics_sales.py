import pytest
import pytest_asyncio

from analytics.sales import nfts_for_sale, sales_for_account, sales_for_contract, sales_in_range
from etl.events import OrderFulfilled, PunkBought, ReceivedItem, SpentItem
from etl.cryptopunks import handle_punk_bought
from etl.seaport import handle_order_fulfilled

PUNKS = "0xb47e3cd837dDF8e4c57F05d70Ab865de6e193BBB"
BAYC = "0xBC4CA0EdA7647A8aB7C2061c2E118A18a936f13D"
ALICE = "0xA11CE00000000000000000000000000000000001"
BOB = "0xB0B0000000000000000000000000000000000002"


@pytest_asyncio.fixture
async def loaded(ctx, meta):
    await handle_punk_bought(ctx, PunkBought(meta(tx_hash="0x1", timestamp=100, src_address=PUNKS), 1, 10, ALICE, BOB))
    await handle_punk_bought(ctx, PunkBought(meta(tx_hash="0x2", timestamp=200, src_address=PUNKS), 2, 10, BOB, ALICE))
    await handle_order_fulfilled(ctx, OrderFulfilled(
        meta(tx_hash="0x3", timestamp=300), "0x" + "00" * 32, ALICE, ALICE, BOB,
        (SpentItem(2, BAYC, 9, 1),), (ReceivedItem(2, PUNKS, 3, 1, ALICE),),
    ))
    return ctx


@pytest.mark.asyncio
async def test_sales_for_account_by_role(loaded):
    got = await sales_for_account(loaded, ALICE.lower())
    assert [s.id for s in got["sells"]] == ["1_0x1"]
    assert [s.id for s in got["buys"]] == ["1_0x2"]
    assert [s.id for s in got["swaps"]] == ["1_0x3"]


@pytest.mark.asyncio
async def test_sales_for_contract_either_side(loaded):
    assert [s.id for s in await sales_for_contract(loaded, PUNKS)] == ["1_0x1", "1_0x2", "1_0x3"]
    assert [s.id for s in await sales_for_contract(loaded, BAYC)] == ["1_0x3"]


@pytest.mark.asyncio
async def test_sales_in_range_and_market(loaded):
    assert [s.id for s in await sales_in_range(loaded, 150, 300)] == ["1_0x2", "1_0x3"]
    assert [s.id for s in await sales_in_range(loaded, 0, 1000, market="Seaport")] == ["1_0x3"]
    with pytest.raises(ValueError):
        await sales_in_range(loaded, 10, 5)


@pytest.mark.asyncio
async def test_nfts_for_sale_sides(loaded):
    all_rows = await nfts_for_sale(loaded, "1_0x3")
    assert len(all_rows) == 2
    offer = await nfts_for_sale(loaded, "1_0x3", is_offer=True)
    assert [r.nft_token_id for r in offer] == [BAYC.lower() + ":9"]
