"""Concrete store-settings repository backed by SQLAlchemy."""

from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clientbook.application.interfaces import StoreSettingRepository
from clientbook.domain.exceptions import PersistenceError
from clientbook.infrastructure.database.models import StoreSettingModel


class SQLAlchemyStoreSettingRepository(StoreSettingRepository):
    """Implements the StoreSettingRepository port using SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, key: str) -> str | None:
        try:
            model = await self._session.get(StoreSettingModel, key)
        except SQLAlchemyError as exc:
            raise PersistenceError("read", "StoreSetting", str(exc)) from exc
        return model.value if model else None

    async def set(self, key: str, value: str) -> None:
        try:
            model = await self._session.get(StoreSettingModel, key)
            if model is None:
                self._session.add(StoreSettingModel(key=key, value=value))
            else:
                model.value = value
                model.updated_at = datetime.now(timezone.utc)
            await self._session.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError("save", "StoreSetting", str(exc)) from exc
