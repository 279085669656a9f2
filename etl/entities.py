# etl/entities.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Type


@dataclass(frozen=True)
class Account:
    id: str
    address: str


@dataclass(frozen=True)
class NFTContract:
    id: str
    address: str


@dataclass(frozen=True)
class NFTToken:
    id: str
    contract_id: str
    token_id: str


@dataclass(frozen=True)
class Sale:
    """
    Canonical trade record.

    offer and consideration are parallel arrays, index i of every array in a
    group describes the same line item.
    """
    id: str
    timestamp: int
    transaction_hash: str
    market: str
    offerer_id: str
    recipient_id: str
    offer_item_types: List[int] = field(default_factory=list)
    offer_tokens: List[str] = field(default_factory=list)
    offer_identifiers: List[str] = field(default_factory=list)
    offer_amounts: List[str] = field(default_factory=list)
    consideration_item_types: List[int] = field(default_factory=list)
    consideration_tokens: List[str] = field(default_factory=list)
    consideration_identifiers: List[str] = field(default_factory=list)
    consideration_amounts: List[str] = field(default_factory=list)
    consideration_recipients: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        offer = {
            len(self.offer_item_types),
            len(self.offer_tokens),
            len(self.offer_identifiers),
            len(self.offer_amounts),
        }
        if len(offer) != 1:
            raise ValueError(f"sale {self.id}: offer arrays differ in length")
        consideration = {
            len(self.consideration_item_types),
            len(self.consideration_tokens),
            len(self.consideration_identifiers),
            len(self.consideration_amounts),
            len(self.consideration_recipients),
        }
        if len(consideration) != 1:
            raise ValueError(f"sale {self.id}: consideration arrays differ in length")


@dataclass(frozen=True)
class SaleNFT:
    id: str
    sale_id: str
    nft_token_id: str
    is_offer: bool


@dataclass(frozen=True)
class AccountBuy:
    id: str
    account_id: str
    sale_id: str


@dataclass(frozen=True)
class AccountSell:
    id: str
    account_id: str
    sale_id: str


@dataclass(frozen=True)
class AccountSwap:
    id: str
    account_id: str
    sale_id: str


@dataclass(frozen=True)
class SeadropCounter:
    # id keeps the contract address in its original case
    id: str
    counter: int


@dataclass(frozen=True)
class SeadropAllocation:
    # one per mint log, id is {contract}#{chain}_{tx}_{logIndex}
    id: str
    contract: str
    first_token_id: int


@dataclass(frozen=True)
class FoundationAuction:
    id: str
    nft_contract: str
    token_id: str
    seller: str


ENTITY_TYPES: Dict[str, Type[Any]] = {
    cls.__name__: cls
    for cls in (
        Account,
        NFTContract,
        NFTToken,
        Sale,
        SaleNFT,
        AccountBuy,
        AccountSell,
        AccountSwap,
        SeadropCounter,
        SeadropAllocation,
        FoundationAuction,
    )
}


def entity_to_dict(entity: Any) -> Dict[str, Any]:
    return asdict(entity)


def entity_from_dict(entity_type: str, data: Dict[str, Any]) -> Any:
    try:
        cls = ENTITY_TYPES[entity_type]
    except KeyError:
        raise ValueError(f"Unknown entity type: {entity_type!r}") from None
    return cls(**data)
