import os
from typing import Dict, Literal
from pydantic import BaseModel, field_validator, ValidationError

PLACEHOLDER_RPC_URL = "https://example.invalid"

class RPC(BaseModel):
    url: str = PLACEHOLDER_RPC_URL
    timeout: int = 12

    @field_validator("url")
    @classmethod
    def must_be_https(cls, v: str) -> str:
        # allow placeholder during tests by swapping in a safe default
        if "${" in v:
            return PLACEHOLDER_RPC_URL
        if not v.startswith("https://"):
            raise ValueError("RPC URL must be HTTPS")
        return v

class DB(BaseModel):
    driver: Literal["memory", "sqlite", "postgres"] = "sqlite"
    sqlite_path: str = "data/sales.db"
    dsn: str | None = None

    @field_validator("dsn")
    @classmethod
    def drop_placeholder(cls, v: str | None) -> str | None:
        # unresolved ${PG_DSN} means no postgres configured
        if v is None or "${" in v:
            return None
        return v

class Normalizer(BaseModel):
    # drop zero amount ETH/ERC-20 lines from Seaport orders
    drop_empty_items: bool = False

class SeadropAlias(BaseModel):
    canonical: str
    start: int = 0

    @field_validator("start")
    @classmethod
    def non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("start must be >= 0")
        return v

class Seadrop(BaseModel):
    token_id_source: Literal["counter", "receipt"] = "counter"
    aliases: Dict[str, SeadropAlias] = {}

class Settings(BaseModel):
    network: str = "ethereum"
    chain_id: int = 1
    rpc: RPC = RPC()
    db: DB = DB()
    normalizer: Normalizer = Normalizer()
    seadrop: Seadrop = Seadrop()

def load_settings(path: str = "config.yaml") -> Settings:
    import yaml
    with open(path, "r") as f:
        cfg = yaml.safe_load(f) or {}

    # allow secure override via env at runtime
    env_rpc = os.environ.get("ETH_RPC_URL")
    if env_rpc:
        cfg.setdefault("rpc", {})
        cfg["rpc"]["url"] = env_rpc

    try:
        return Settings.model_validate(cfg)
    except ValidationError as e:
        raise RuntimeError(f"Configuration error in {path}: {e}") from e
