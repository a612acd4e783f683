from .record_repository import SQLAlchemyRecordRepository
from .client_tag_repository import SQLAlchemyClientTagRepository
from .client_repository import SQLAlchemyClientRepository
from .tag_repository import SQLAlchemyTagRepository
from .store_setting_repository import SQLAlchemyStoreSettingRepository

__all__ = [
    "SQLAlchemyRecordRepository",
    "SQLAlchemyClientTagRepository",
    "SQLAlchemyClientRepository",
    "SQLAlchemyTagRepository",
    "SQLAlchemyStoreSettingRepository",
]
