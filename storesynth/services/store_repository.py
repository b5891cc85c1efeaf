"""
Store persistence collaborator.

The pipeline only needs ``upsert`` and ``get``; the real datastore lives
behind this interface. ``InMemoryStoreRepository`` backs local runs and tests.
"""

import asyncio
from typing import Optional

from storesynth.models.schemas import StoreRecord
from storesynth.utils.errors import PersistenceError
from storesynth.utils.logger import get_logger

logger = get_logger(__name__)


class StoreRepository:
    """Abstract interface for store persistence."""

    async def upsert(self, record: StoreRecord) -> StoreRecord:
        """Insert or replace a store record and return what was stored."""
        raise NotImplementedError

    async def get(self, store_id: str) -> Optional[StoreRecord]:
        """Load a store record by id."""
        raise NotImplementedError


class InMemoryStoreRepository(StoreRepository):
    """In-memory store persistence for local runs and testing."""

    def __init__(self):
        self._stores: dict[str, StoreRecord] = {}
        self._lock = asyncio.Lock()

    async def upsert(self, record: StoreRecord) -> StoreRecord:
        async with self._lock:
            for existing in self._stores.values():
                if existing.subdomain == record.subdomain and existing.id != record.id:
                    raise PersistenceError(
                        f"Subdomain '{record.subdomain}' is already taken",
                        details={"subdomain": record.subdomain},
                    )
            self._stores[record.id] = record.model_copy(deep=True)

        logger.info("Store saved", store_id=record.id, subdomain=record.subdomain)
        return record

    async def get(self, store_id: str) -> Optional[StoreRecord]:
        return self._stores.get(store_id)

    def __len__(self) -> int:
        return len(self._stores)
