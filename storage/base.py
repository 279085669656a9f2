# storage/base.py
from __future__ import annotations

from typing import Any, Generic, List, Optional, Type, TypeVar

from etl.entities import (
    Account,
    AccountBuy,
    AccountSell,
    AccountSwap,
    FoundationAuction,
    NFTContract,
    NFTToken,
    Sale,
    SaleNFT,
    SeadropAllocation,
    SeadropCounter,
)

E = TypeVar("E")


class StoreError(RuntimeError):
    pass


class EntityStore:
    """
    Key value store keyed by (entity_type, id).

    contract
    get returns the entity or None
    set upserts the whole entity by id, no partial update
    get_all returns every entity of a type, for readers and tests only
    a get issued after a set on the same store observes the write
    """

    async def get(self, entity_type: str, entity_id: str) -> Optional[Any]:
        raise NotImplementedError

    async def set(self, entity_type: str, entity: Any) -> None:
        raise NotImplementedError

    async def get_all(self, entity_type: str) -> List[Any]:
        raise NotImplementedError

    def close(self) -> None:
        return None


class EntityTable(Generic[E]):
    def __init__(self, store: EntityStore, cls: Type[E]):
        self.store = store
        self.cls = cls
        self.entity_type = cls.__name__

    async def get(self, entity_id: str) -> Optional[E]:
        return await self.store.get(self.entity_type, entity_id)

    async def set(self, entity: E) -> None:
        if not isinstance(entity, self.cls):
            raise TypeError(f"expected {self.entity_type}, got {type(entity).__name__}")
        await self.store.set(self.entity_type, entity)

    async def get_all(self) -> List[E]:
        return await self.store.get_all(self.entity_type)


class StoreContext:
    """Per entity accessors over one store, handed to every normalizer."""

    def __init__(self, store: EntityStore):
        self.store = store
        self.account: EntityTable[Account] = EntityTable(store, Account)
        self.nft_contract: EntityTable[NFTContract] = EntityTable(store, NFTContract)
        self.nft_token: EntityTable[NFTToken] = EntityTable(store, NFTToken)
        self.sale: EntityTable[Sale] = EntityTable(store, Sale)
        self.sale_nft: EntityTable[SaleNFT] = EntityTable(store, SaleNFT)
        self.account_buy: EntityTable[AccountBuy] = EntityTable(store, AccountBuy)
        self.account_sell: EntityTable[AccountSell] = EntityTable(store, AccountSell)
        self.account_swap: EntityTable[AccountSwap] = EntityTable(store, AccountSwap)
        self.seadrop_counter: EntityTable[SeadropCounter] = EntityTable(store, SeadropCounter)
        self.seadrop_allocation: EntityTable[SeadropAllocation] = EntityTable(store, SeadropAllocation)
        self.foundation_auction: EntityTable[FoundationAuction] = EntityTable(store, FoundationAuction)
