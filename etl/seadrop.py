"""
etl.seadrop

SeaDropMint carries a quantity but no token ids. Ids are assigned from a per
contract counter kept in the store (SeadropCounter, keyed by the contract
address exactly as emitted): read c, hand out c .. c+q-1, persist c+q.

Some shim contracts emit mints on behalf of a canonical contract. Their events
are counted against the canonical address, starting from a configured value.

With a token id resolver (receipt lookups), ids come from the transaction's
Transfer logs instead and the counter is left alone; an empty lookup falls
back to the counter, and so does a receipt whose id count differs from the
event's quantity (several mints of one contract in the same transaction).

Each mint log also records where its ids started (a SeadropAllocation row), so a
redelivered event maps onto the same sales.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Tuple

from etl.entities import Sale, SeadropAllocation, SeadropCounter
from etl.entity_helpers import (
    NftItem,
    create_account_buy,
    create_sale_nft_junctions,
    get_or_create_account,
    native_payment,
    single_nft_sale,
)
from etl.events import EventMeta, SeaDropMint
from etl.identifiers import ZERO_ADDRESS, ItemType, Market, as_decstr, norm, unit_sale_id
from storage.base import StoreContext

log = logging.getLogger(__name__)

# (tx_hash, nft_contract) -> minted token ids as decimal strings
TokenIdResolver = Callable[[str, str], List[str]]


@dataclass(frozen=True)
class CounterAlias:
    canonical: str
    start: int = 0


def resolve_counter_contract(
    nft_contract: str,
    aliases: Optional[Mapping[str, CounterAlias]] = None,
) -> Tuple[str, int]:
    """Return (counter contract, initial counter value) for an emitting contract."""
    for shim, alias in (aliases or {}).items():
        if norm(shim) == norm(nft_contract):
            return alias.canonical, int(alias.start)
    return nft_contract, 0


def allocation_id(contract: str, meta: EventMeta) -> str:
    return f"{contract}#{meta.chain_id}_{meta.tx_hash}_{meta.log_index}"


async def next_token_ids(
    ctx: StoreContext,
    contract: str,
    quantity: int,
    *,
    start: int = 0,
    allocation: Optional[str] = None,
) -> List[str]:
    """
    Reserve `quantity` sequential ids on the contract's counter. With an
    allocation id a redelivered mint gets back the ids it was first given.
    """
    if quantity < 1:
        raise ValueError(f"quantity must be >= 1, got {quantity}")
    if allocation is not None:
        prior = await ctx.seadrop_allocation.get(allocation)
        if prior is not None:
            return [str(prior.first_token_id + i) for i in range(quantity)]

    row = await ctx.seadrop_counter.get(contract)
    current = row.counter if row is not None else start
    if allocation is not None:
        await ctx.seadrop_allocation.set(
            SeadropAllocation(id=allocation, contract=contract, first_token_id=current)
        )
    await ctx.seadrop_counter.set(SeadropCounter(id=contract, counter=current + quantity))
    return [str(current + i) for i in range(quantity)]


async def handle_seadrop_mint(
    ctx: StoreContext,
    event: SeaDropMint,
    *,
    aliases: Optional[Mapping[str, CounterAlias]] = None,
    token_id_resolver: Optional[TokenIdResolver] = None,
) -> List[Sale]:
    meta = event.meta
    contract, start = resolve_counter_contract(event.nft_contract, aliases)

    quantity = int(event.quantity_minted)
    token_ids: List[str] = []
    if token_id_resolver is not None:
        token_ids = await asyncio.to_thread(token_id_resolver, meta.tx_hash, contract)
        if len(token_ids) != quantity:
            log.info(
                "receipt has %d minted ids for tx=%s, event minted %d, using counter",
                len(token_ids), meta.tx_hash, quantity,
            )
            token_ids = []
    if not token_ids:
        token_ids = await next_token_ids(
            ctx,
            contract,
            quantity,
            start=start,
            allocation=allocation_id(contract, meta),
        )

    await get_or_create_account(ctx, event.payer)
    minter = await get_or_create_account(ctx, event.minter)
    await get_or_create_account(ctx, ZERO_ADDRESS)

    price = as_decstr(event.unit_mint_price)
    sales = []
    for tid in token_ids:
        sid = unit_sale_id(meta.chain_id, meta.tx_hash, tid)
        # primary mint: nothing is sold by a real account, the price goes to the zero address
        sale = single_nft_sale(
            sid=sid,
            meta=meta,
            market=Market.SEADROP,
            seller=ZERO_ADDRESS,
            buyer=event.minter,
            nft_contract=contract,
            token_id=tid,
            payments=[native_payment(price, ZERO_ADDRESS)],
        )
        await create_sale_nft_junctions(
            ctx, sid, [NftItem(contract, tid, ItemType.NONFUNGIBLE_UNIQUE)], is_offer=True
        )
        await ctx.sale.set(sale)
        await create_account_buy(ctx, minter.id, sid)
        sales.append(sale)

    log.debug("seadrop mint tx=%s contract=%s ids=%s", meta.tx_hash, contract, token_ids)
    return sales
