import pytest

from etl.events import EventMeta
from storage.base import StoreContext
from storage.memory_backend import MemoryStore


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def ctx(store):
    return StoreContext(store)


@pytest.fixture
def meta():
    """Factory for event metadata with sensible mainnet defaults."""
    def _meta(tx_hash="0xaaa1", chain_id=1, timestamp=1700000000, block_number=18000000, log_index=0, src_address=""):
        return EventMeta(
            chain_id=chain_id,
            block_number=block_number,
            timestamp=timestamp,
            tx_hash=tx_hash,
            log_index=log_index,
            src_address=src_address,
        )
    return _meta
