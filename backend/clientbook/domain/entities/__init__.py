from .record import Document, DocumentValue, Record, SluggedRecord
from .client import ADDRESS_FIELDS, Client, ClientStatus
from .tag import Tag

__all__ = [
    "Document",
    "DocumentValue",
    "Record",
    "SluggedRecord",
    "ADDRESS_FIELDS",
    "Client",
    "ClientStatus",
    "Tag",
]
