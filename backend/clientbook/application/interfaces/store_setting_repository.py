"""Abstract repository interface (port) for durable store settings."""

from abc import ABC, abstractmethod


class StoreSettingRepository(ABC):
    """Key/value settings kept in the database itself, surviving restarts."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        ...
