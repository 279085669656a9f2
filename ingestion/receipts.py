# ingestion/receipts.py
from __future__ import annotations

import logging
import os
import time
from typing import Any, List, Optional

import requests

log = logging.getLogger(__name__)

DEFAULT_RPC_URL = "https://cloudflare-eth.com"

# keccak("Transfer(address,address,uint256)")
TRANSFER_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"


class RpcError(RuntimeError):
    pass


def rpc_url() -> str:
    # read at call time so container env is honored
    return os.environ.get("ETH_RPC_URL") or DEFAULT_RPC_URL


def _rpc_post(
    method: str,
    params: List[Any],
    url: Optional[str] = None,
    timeout: float = 12.0,
    max_retries: int = 3,
    backoff_base: float = 0.5,
):
    """
    Return the JSON RPC result field, retrying throttling and transport errors.
    """
    u = url or rpc_url()
    payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
    last_err: Optional[Exception] = None
    for attempt in range(max_retries):
        try:
            r = requests.post(u, json=payload, timeout=timeout)
            if r.status_code in (429, 500, 502, 503, 504):
                raise requests.HTTPError(f"{r.status_code} {r.reason}", response=r)
            r.raise_for_status()
            j = r.json()
            if "error" in j:
                raise RpcError(f"RPC error for {method} url={u} err={j['error']}")
            return j.get("result")
        except (requests.Timeout, requests.ConnectionError, requests.HTTPError) as e:
            last_err = e
            if attempt + 1 < max_retries:
                time.sleep(min(8.0, backoff_base * (2 ** attempt)))
    raise RpcError(f"RPC transport failed for {method} url={u} after {max_retries} attempts") from last_err


def fetch_receipt(tx_hash: str, rpc_url: Optional[str] = None, **kwargs) -> Optional[dict]:
    if not isinstance(tx_hash, str) or not tx_hash.startswith("0x"):
        raise ValueError("tx_hash must be a 0x prefixed hex string")
    return _rpc_post("eth_getTransactionReceipt", [tx_hash], url=rpc_url, **kwargs)


def minted_token_ids(receipt: Optional[dict], nft_contract: str) -> List[str]:
    """ERC-721 Transfer token ids emitted by nft_contract, in log order."""
    if not isinstance(receipt, dict) or not isinstance(receipt.get("logs"), list):
        return []
    target = nft_contract.lower()
    out: List[str] = []
    for entry in receipt["logs"]:
        if str(entry.get("address", "")).lower() != target:
            continue
        topics = entry.get("topics") or []
        # ERC-20 Transfer has the value in data and only 3 topics
        if len(topics) < 4 or str(topics[0]).lower() != TRANSFER_TOPIC:
            continue
        try:
            out.append(str(int(topics[3], 16)))
        except (TypeError, ValueError):
            log.warning("unparseable token id topic %r in receipt log", topics[3])
    return out


def get_minted_token_ids_from_receipt(
    tx_hash: str,
    nft_contract: str,
    rpc_url: Optional[str] = None,
    **kwargs,
) -> List[str]:
    """
    Token ids minted by nft_contract in the transaction. Any RPC failure gives
    an empty list; callers fall back to their own numbering.
    """
    try:
        receipt = fetch_receipt(tx_hash, rpc_url=rpc_url, **kwargs)
    except RpcError as e:
        log.warning("receipt lookup failed tx=%s: %s", tx_hash, e)
        return []
    except ValueError as e:
        # non JSON body
        log.warning("malformed receipt response tx=%s: %s", tx_hash, e)
        return []
    return minted_token_ids(receipt, nft_contract)
