from .lifecycle import LifecycleEvents
from .validation import ValidationResult, ValidationRule
from .client_service import ClientService
from .tag_service import TagService

__all__ = [
    "LifecycleEvents",
    "ValidationResult",
    "ValidationRule",
    "ClientService",
    "TagService",
]
