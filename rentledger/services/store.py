"""Key-value persistence for whole-value blobs.

The ledger never talks to storage directly; ``StateRepository`` reads and
writes logical keys through a ``KeyValueStore``.
"""

import logging
from abc import ABC, abstractmethod

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rentledger.models.stored_value import StoredValue

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Async string-to-string store."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key was never written."""

    @abstractmethod
    async def set_many(self, values: dict[str, str]) -> None:
        """Write several keys in one unit of work."""

    async def set(self, key: str, value: str) -> None:
        await self.set_many({key: value})


class InMemoryStore(KeyValueStore):
    """Dict-backed store for tests and ephemeral runs."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.values: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self.values.get(key)

    async def set_many(self, values: dict[str, str]) -> None:
        self.values.update(values)


class SqlKeyValueStore(KeyValueStore):
    """Store backed by the ``stored_values`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get(self, key: str) -> str | None:
        async with self.session_factory() as session:
            result = await session.execute(select(StoredValue.value).where(StoredValue.key == key))
            return result.scalar_one_or_none()

    async def set_many(self, values: dict[str, str]) -> None:
        if not values:
            return
        async with self.session_factory() as session:
            try:
                for key, value in values.items():
                    row = await session.get(StoredValue, key)
                    if row is None:
                        session.add(StoredValue(key=key, value=value))
                    else:
                        row.value = value
                await session.commit()
            except Exception:
                await session.rollback()
                logger.error("Failed to write keys: %s", ", ".join(values), exc_info=True)
                raise
        logger.debug("Stored keys: %s", ", ".join(values))


__all__ = ["KeyValueStore", "InMemoryStore", "SqlKeyValueStore"]
