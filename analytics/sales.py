from typing import Dict, List, Optional

from etl.entities import Sale, SaleNFT
from etl.identifiers import norm
from storage.base import StoreContext


async def sales_for_account(ctx: StoreContext, address: str) -> Dict[str, List[Sale]]:
    """Sales an account took part in, grouped by role: buys, sells, swaps."""
    account_id = norm(address)
    out: Dict[str, List[Sale]] = {}
    for role, table in (("buys", ctx.account_buy), ("sells", ctx.account_sell), ("swaps", ctx.account_swap)):
        rows = [r for r in await table.get_all() if r.account_id == account_id]
        sales = [await ctx.sale.get(r.sale_id) for r in rows]
        out[role] = sorted((s for s in sales if s is not None), key=lambda s: (s.timestamp, s.id))
    return out


async def nfts_for_sale(ctx: StoreContext, sale_id: str, is_offer: Optional[bool] = None) -> List[SaleNFT]:
    rows = [r for r in await ctx.sale_nft.get_all() if r.sale_id == sale_id]
    if is_offer is not None:
        rows = [r for r in rows if r.is_offer == is_offer]
    return sorted(rows, key=lambda r: r.id)


async def sales_for_contract(ctx: StoreContext, contract: str) -> List[Sale]:
    """Sales moving at least one token of the contract, on either side."""
    prefix = norm(contract) + ":"
    sale_ids = {r.sale_id for r in await ctx.sale_nft.get_all() if r.nft_token_id.startswith(prefix)}
    sales = [await ctx.sale.get(sid) for sid in sale_ids]
    return sorted((s for s in sales if s is not None), key=lambda s: (s.timestamp, s.id))


async def sales_in_range(
    ctx: StoreContext,
    start_ts: int,
    end_ts: int,
    market: Optional[str] = None,
) -> List[Sale]:
    # inclusive on both ends
    if end_ts < start_ts:
        raise ValueError("end_ts must be greater than or equal to start_ts")
    rows = [
        s for s in await ctx.sale.get_all()
        if start_ts <= s.timestamp <= end_ts and (market is None or s.market == market)
    ]
    return sorted(rows, key=lambda s: (s.timestamp, s.id))
