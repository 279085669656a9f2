"""
etl.entity_helpers

Get or create accessors, NFT extraction, junction and role rows shared by the
protocol normalizers.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from etl.entities import (
    Account,
    AccountBuy,
    AccountSell,
    AccountSwap,
    NFTContract,
    NFTToken,
    Sale,
    SaleNFT,
)
from etl.events import EventMeta
from etl.identifiers import (
    ZERO_ADDRESS,
    ItemType,
    Market,
    is_nft,
    norm,
    role_id,
    sale_id,
    sale_nft_id,
    token_key,
)
from storage.base import StoreContext

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class NftItem:
    contract_address: str
    token_id: str
    item_type: int


@dataclass(frozen=True)
class Payment:
    """One consideration line of a sale."""
    item_type: int
    token: str
    identifier: str
    amount: str
    recipient: str


def native_payment(amount: str, recipient: str) -> Payment:
    return Payment(ItemType.NATIVE, ZERO_ADDRESS, "0", amount, recipient)


# ---------------------------------------------------------------------------
# get or create
# ---------------------------------------------------------------------------

async def get_or_create_account(ctx: StoreContext, address: str) -> Account:
    account_id = norm(address)
    account = await ctx.account.get(account_id)
    if account is None:
        account = Account(id=account_id, address=address)
        await ctx.account.set(account)
    return account


async def get_or_create_nft_contract(ctx: StoreContext, contract_address: str) -> NFTContract:
    contract_id = norm(contract_address)
    contract = await ctx.nft_contract.get(contract_id)
    if contract is None:
        contract = NFTContract(id=contract_id, address=contract_address)
        await ctx.nft_contract.set(contract)
    return contract


async def get_or_create_nft_token(ctx: StoreContext, contract_address: str, token_id: str) -> NFTToken:
    key = token_key(contract_address, token_id)
    token = await ctx.nft_token.get(key)
    if token is None:
        token = NFTToken(id=key, contract_id=norm(contract_address), token_id=token_id)
        await ctx.nft_token.set(token)
    return token


# ---------------------------------------------------------------------------
# NFT extraction and junctions
# ---------------------------------------------------------------------------

def _nft_items(types: Sequence[int], tokens: Sequence[str], identifiers: Sequence[str]) -> List[NftItem]:
    return [
        NftItem(contract_address=tok, token_id=ident, item_type=int(t))
        for t, tok, ident in zip(types, tokens, identifiers)
        if is_nft(t)
    ]


def extract_nft_items(
    offer_item_types: Sequence[int],
    offer_tokens: Sequence[str],
    offer_identifiers: Sequence[str],
    consideration_item_types: Sequence[int],
    consideration_tokens: Sequence[str],
    consideration_identifiers: Sequence[str],
) -> Tuple[List[NftItem], List[NftItem]]:
    """
    Return (offer_nfts, consideration_nfts), keeping input order.
    Only NONFUNGIBLE_UNIQUE and NONFUNGIBLE_FRACTIONAL items are returned.
    """
    return (
        _nft_items(offer_item_types, offer_tokens, offer_identifiers),
        _nft_items(consideration_item_types, consideration_tokens, consideration_identifiers),
    )


async def create_sale_nft_junctions(
    ctx: StoreContext,
    sale: str,
    items: Iterable[NftItem],
    is_offer: bool,
) -> List[SaleNFT]:
    rows = []
    for item in items:
        await get_or_create_nft_contract(ctx, item.contract_address)
        token = await get_or_create_nft_token(ctx, item.contract_address, item.token_id)
        row = SaleNFT(
            id=sale_nft_id(sale, token.id),
            sale_id=sale,
            nft_token_id=token.id,
            is_offer=is_offer,
        )
        await ctx.sale_nft.set(row)
        rows.append(row)
    return rows


# ---------------------------------------------------------------------------
# role rows
# ---------------------------------------------------------------------------

async def create_account_buy(ctx: StoreContext, account_id: str, sale: str) -> None:
    await ctx.account_buy.set(AccountBuy(id=role_id(account_id, sale), account_id=account_id, sale_id=sale))


async def create_account_sell(ctx: StoreContext, account_id: str, sale: str) -> None:
    await ctx.account_sell.set(AccountSell(id=role_id(account_id, sale), account_id=account_id, sale_id=sale))


async def create_account_swap(ctx: StoreContext, account_id: str, sale: str) -> None:
    await ctx.account_swap.set(AccountSwap(id=role_id(account_id, sale), account_id=account_id, sale_id=sale))


async def classify_settlement_roles(
    ctx: StoreContext,
    *,
    sale: str,
    offerer_id: str,
    recipient_id: str,
    has_offer_nfts: bool,
    has_consideration_nfts: bool,
) -> None:
    """
    Role rows for an order settlement, decided by which side carries NFTs.

    nfts on both sides       swap for offerer and recipient
    nfts only in the offer   offerer sells, recipient buys
    nfts only in the consideration
                             offerer buys, recipient sells; per item senders
                             are not in the event so this is best effort
    no nfts                  no role rows
    """
    if has_offer_nfts and has_consideration_nfts:
        await create_account_swap(ctx, offerer_id, sale)
        await create_account_swap(ctx, recipient_id, sale)
    elif has_offer_nfts:
        await create_account_sell(ctx, offerer_id, sale)
        await create_account_buy(ctx, recipient_id, sale)
    elif has_consideration_nfts:
        await create_account_buy(ctx, offerer_id, sale)
        await create_account_sell(ctx, recipient_id, sale)


# ---------------------------------------------------------------------------
# single NFT sales
# ---------------------------------------------------------------------------

def single_nft_sale(
    *,
    sid: str,
    meta: EventMeta,
    market: Market,
    seller: str,
    buyer: str,
    nft_contract: str,
    token_id: str,
    payments: Sequence[Payment],
) -> Sale:
    return Sale(
        id=sid,
        timestamp=int(meta.timestamp),
        transaction_hash=meta.tx_hash,
        market=market.value,
        offerer_id=norm(seller),
        recipient_id=norm(buyer),
        offer_item_types=[int(ItemType.NONFUNGIBLE_UNIQUE)],
        offer_tokens=[nft_contract],
        offer_identifiers=[token_id],
        offer_amounts=["1"],
        consideration_item_types=[int(p.item_type) for p in payments],
        consideration_tokens=[p.token for p in payments],
        consideration_identifiers=[p.identifier for p in payments],
        consideration_amounts=[p.amount for p in payments],
        consideration_recipients=[p.recipient for p in payments],
    )


async def record_direct_sale(
    ctx: StoreContext,
    *,
    meta: EventMeta,
    market: Market,
    seller: str,
    buyer: str,
    nft_contract: str,
    token_id: str,
    payments: Sequence[Payment],
) -> Sale:
    """
    Write a one NFT sale: accounts, sale, junction, seller sell row and buyer
    buy row. Used by every marketplace with an explicit seller and buyer.
    """
    await get_or_create_account(ctx, seller)
    await get_or_create_account(ctx, buyer)

    sale = single_nft_sale(
        sid=sale_id(meta.chain_id, meta.tx_hash),
        meta=meta,
        market=market,
        seller=seller,
        buyer=buyer,
        nft_contract=nft_contract,
        token_id=token_id,
        payments=payments,
    )
    await create_sale_nft_junctions(
        ctx, sale.id, [NftItem(nft_contract, token_id, ItemType.NONFUNGIBLE_UNIQUE)], is_offer=True
    )
    await ctx.sale.set(sale)
    await create_account_sell(ctx, sale.offerer_id, sale.id)
    await create_account_buy(ctx, sale.recipient_id, sale.id)
    log.debug("sale %s market=%s token=%s:%s", sale.id, sale.market, nft_contract, token_id)
    return sale
