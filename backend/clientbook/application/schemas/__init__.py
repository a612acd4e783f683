from .tag import TagCreate, TagMerge, TagResponse, TagUpdate
from .client import ClientCounts, ClientCreate, ClientResponse, ClientTagsUpdate, ClientUpdate

__all__ = [
    "TagCreate",
    "TagMerge",
    "TagResponse",
    "TagUpdate",
    "ClientCounts",
    "ClientCreate",
    "ClientResponse",
    "ClientTagsUpdate",
    "ClientUpdate",
]
