from .record_repository import Criteria, OrderBy, RecordRepository, RecordT
from .client_repository import ClientRepository
from .tag_repository import TagRepository
from .client_tag_repository import ClientTagRepository
from .store_setting_repository import StoreSettingRepository

__all__ = [
    "Criteria",
    "OrderBy",
    "RecordRepository",
    "RecordT",
    "ClientRepository",
    "TagRepository",
    "ClientTagRepository",
    "StoreSettingRepository",
]
