"""
etl.identifiers

Deterministic ids, item type classification and decimal string helpers.
Every amount, token id and identifier is carried as a base 10 string; ints are
used only for counter arithmetic.
"""
from __future__ import annotations

from enum import Enum, IntEnum

ZERO_ADDRESS = "0x" + "0" * 40


class ItemType(IntEnum):
    NATIVE = 0
    FUNGIBLE = 1
    NONFUNGIBLE_UNIQUE = 2
    NONFUNGIBLE_FRACTIONAL = 3


NFT_ITEM_TYPES = frozenset({ItemType.NONFUNGIBLE_UNIQUE, ItemType.NONFUNGIBLE_FRACTIONAL})
PAYMENT_ITEM_TYPES = frozenset({ItemType.NATIVE, ItemType.FUNGIBLE})


class Market(str, Enum):
    SEAPORT = "Seaport"
    CRYPTOPUNKS = "CryptoPunks"
    FOUNDATION = "Foundation"
    SUPERRARE = "SuperRare"
    KNOWNORIGIN = "KnownOrigin"
    SEADROP = "Seadrop"


def is_nft(item_type: int) -> bool:
    return item_type in NFT_ITEM_TYPES


def norm(address: str) -> str:
    return address.lower()


def as_decstr(v) -> str:
    """Return a base 10 string for any int like or hex string value."""
    if v is None:
        return "0"
    if isinstance(v, bool) or isinstance(v, float):
        raise TypeError(f"refusing to coerce {type(v).__name__} to a decimal string: {v!r}")
    if isinstance(v, str):
        s = v.strip()
        if s.lower().startswith("0x"):
            return str(int(s, 16))
        return str(int(s, 10))
    return str(int(v))


def sale_id(chain_id: int, tx_hash: str) -> str:
    return f"{chain_id}_{tx_hash}"


def unit_sale_id(chain_id: int, tx_hash: str, token_id: str) -> str:
    # one sale per minted unit
    return f"{chain_id}_{tx_hash}_{token_id}"


def token_key(contract: str, token_id: str) -> str:
    return f"{norm(contract)}:{token_id}"


def sale_nft_id(sale: str, nft_token_id: str) -> str:
    return f"{sale}:{nft_token_id}"


def role_id(account_id: str, sale: str) -> str:
    return f"{account_id}:{sale}"
