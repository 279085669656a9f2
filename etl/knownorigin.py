# etl/knownorigin.py
from __future__ import annotations

from etl.entities import Sale
from etl.entity_helpers import native_payment, record_direct_sale
from etl.events import BuyNowPurchased
from etl.identifiers import Market, as_decstr
from storage.base import StoreContext


async def handle_buy_now_purchased(ctx: StoreContext, event: BuyNowPurchased) -> Sale:
    # tokens live on the marketplace contract itself
    return await record_direct_sale(
        ctx,
        meta=event.meta,
        market=Market.KNOWNORIGIN,
        seller=event.current_owner,
        buyer=event.buyer,
        nft_contract=event.meta.src_address,
        token_id=as_decstr(event.token_id),
        payments=[native_payment(as_decstr(event.price), event.current_owner)],
    )
