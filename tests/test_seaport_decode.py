import pytest

from etl.dispatch import process_event
from etl.seaport import ORDER_FULFILLED_TOPIC0, decode_order_fulfilled_log, is_order_fulfilled

# bid acceptance on mainnet: offerer pays WETH, receives one NFT
DATA = (
    "0x51c10c15de65d4aa4ac1a0d100c0297d9b8c9324477b85f176b68255539471f2"
    "00000000000000000000000019f6c1d5c8308f7103524a339b0c7f0ad0f5b2d3"
    "0000000000000000000000000000000000000000000000000000000000000080"
    "0000000000000000000000000000000000000000000000000000000000000120"
    "0000000000000000000000000000000000000000000000000000000000000001"
    "0000000000000000000000000000000000000000000000000000000000000001"
    "000000000000000000000000c02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"
    "0000000000000000000000000000000000000000000000000000000000000000"
    "00000000000000000000000000000000000000000000000000b1a2bc2ec50000"
    "0000000000000000000000000000000000000000000000000000000000000002"
    "0000000000000000000000000000000000000000000000000000000000000002"
    "000000000000000000000000fd9fdfac71bbc7dd5c7176644de7fbfd1a6825ee"
    "2370610ea917f65ec1d8f1773b8be54d518a43758190646fbe985479416d68e1"
    "0000000000000000000000000000000000000000000000000000000000000001"
    "000000000000000000000000d2be832911a252302bac09e30fc124a405e142df"
    "0000000000000000000000000000000000000000000000000000000000000001"
    "000000000000000000000000c02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"
    "0000000000000000000000000000000000000000000000000000000000000000"
    "0000000000000000000000000000000000000000000000000000e35fa931a000"
    "0000000000000000000000000000a26b00c1f0df003000390027140000faa719"
)

RAW_LOG = {
    "address": "0x00000000000000ADc04C56Bf30aC9d3c0aAF14dC",
    "topics": [
        "0x9d9af8e38d66c62e2c12f0225249fd9d721c54b83f48d9352c97c6cacdcb6f31",
        "0x000000000000000000000000d2be832911a252302bac09e30fc124a405e142df",
        "0x000000000000000000000000000056f7000000ece9003ca63978907a00ffd100",
    ],
    "data": DATA,
    "blockNumber": "0xbc614e",
    "timestamp": 1640995200,
    "transactionHash": "0x5a1e000000000000000000000000000000000000000000000000000000000001",
    "logIndex": 0,
    "chainId": 1,
}

OFFERER = "0xd2be832911a252302bac09e30fc124a405e142df"
RECIPIENT = "0x19f6c1d5c8308f7103524a339b0c7f0ad0f5b2d3"
NFT = "0xfd9fdfac71bbc7dd5c7176644de7fbfd1a6825ee"
WETH = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"


def test_topic_matches_seaport_event_signature():
    assert ORDER_FULFILLED_TOPIC0 == RAW_LOG["topics"][0]
    assert is_order_fulfilled(RAW_LOG)
    assert not is_order_fulfilled({"topics": ["0x" + "00" * 32]})
    assert decode_order_fulfilled_log({"topics": []}) is None


def test_decode_order_fulfilled_log():
    ev = decode_order_fulfilled_log(RAW_LOG)

    assert ev.meta.block_number == 12345678
    assert ev.meta.timestamp == 1640995200
    assert ev.meta.chain_id == 1
    assert ev.offerer.lower() == OFFERER
    assert ev.zone.lower() == "0x000056f7000000ece9003ca63978907a00ffd100"
    assert ev.recipient.lower() == RECIPIENT
    assert ev.order_hash.startswith("0x51c10c15")

    assert len(ev.offer) == 1
    assert ev.offer[0].item_type == 1
    assert ev.offer[0].token.lower() == WETH
    assert ev.offer[0].amount == 50000000000000000

    assert len(ev.consideration) == 2
    nft = ev.consideration[0]
    assert nft.item_type == 2
    assert nft.token.lower() == NFT
    assert nft.identifier == int("2370610ea917f65ec1d8f1773b8be54d518a43758190646fbe985479416d68e1", 16)
    assert nft.amount == 1
    assert nft.recipient.lower() == OFFERER
    fee = ev.consideration[1]
    assert fee.amount == 250000000000000
    assert fee.recipient.lower() == "0x0000a26b00c1f0df003000390027140000faa719"


@pytest.mark.asyncio
async def test_decoded_bid_classifies_offerer_as_buyer(ctx):
    ev = decode_order_fulfilled_log(RAW_LOG)
    sale = await process_event(ctx, ev)

    assert sale.offer_item_types == [1]
    assert sale.consideration_item_types == [2, 1]
    assert [r.account_id for r in await ctx.account_buy.get_all()] == [OFFERER]
    assert [r.account_id for r in await ctx.account_sell.get_all()] == [RECIPIENT]
    junctions = await ctx.sale_nft.get_all()
    assert len(junctions) == 1 and junctions[0].is_offer is False
