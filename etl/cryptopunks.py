# etl/cryptopunks.py
from __future__ import annotations

from etl.entities import Sale
from etl.entity_helpers import native_payment, record_direct_sale
from etl.events import PunkBought
from etl.identifiers import Market, as_decstr
from storage.base import StoreContext


async def handle_punk_bought(ctx: StoreContext, event: PunkBought) -> Sale:
    """
    PunkBought: the punk comes from the emitting contract, the full value is
    paid in ETH to the seller (fromAddress).
    """
    return await record_direct_sale(
        ctx,
        meta=event.meta,
        market=Market.CRYPTOPUNKS,
        seller=event.from_address,
        buyer=event.to_address,
        nft_contract=event.meta.src_address,
        token_id=as_decstr(event.token_id),
        payments=[native_payment(as_decstr(event.value), event.from_address)],
    )
