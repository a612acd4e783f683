from .store_setting import StoreSettingModel

__all__ = [
    "StoreSettingModel",
]
