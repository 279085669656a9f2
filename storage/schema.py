# storage/schema.py
from etl.entities import ENTITY_TYPES

# entity type -> table name
TABLES = {
    "Account": "accounts",
    "NFTContract": "nft_contracts",
    "NFTToken": "nft_tokens",
    "Sale": "sales",
    "SaleNFT": "sale_nfts",
    "AccountBuy": "account_buys",
    "AccountSell": "account_sells",
    "AccountSwap": "account_swaps",
    "SeadropCounter": "seadrop_counters",
    "SeadropAllocation": "seadrop_allocations",
    "FoundationAuction": "foundation_auctions",
}

_missing = set(ENTITY_TYPES) - set(TABLES)
if _missing:
    raise RuntimeError(f"no table for entity types: {sorted(_missing)}")


def table_for(entity_type: str) -> str:
    try:
        return TABLES[entity_type]
    except KeyError:
        raise ValueError(f"Unknown entity type: {entity_type!r}") from None


def create_table_sql(table: str) -> str:
    # bodies are json text so 256 bit integers survive untouched
    return f"""
CREATE TABLE IF NOT EXISTS {table} (
    id   TEXT PRIMARY KEY,
    body TEXT NOT NULL
);
"""


CREATE_ALL_TABLES = [create_table_sql(t) for t in TABLES.values()]
