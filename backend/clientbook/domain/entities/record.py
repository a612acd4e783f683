"""Domain entity base — the hybrid record shared by clients and tags.

A record keeps a fixed set of indexed attributes (promoted to their own
columns) plus an open ``document`` mapping for everything else. Concrete
types declare which attributes are indexed and how caller input maps onto
them through an explicit field → setter table.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, TypeAlias, Union

from clientbook.domain.slug import slugify

DocumentValue: TypeAlias = Union[
    str,
    int,
    float,
    bool,
    None,
    list["DocumentValue"],
    dict[str, "DocumentValue"],
]
Document: TypeAlias = dict[str, DocumentValue]

FieldSetter: TypeAlias = Callable[[Any, Any], None]


@dataclass(kw_only=True)
class Record:
    """Identity, timestamps and the free-form document of a stored entity."""

    ENTITY_TYPE: ClassVar[str] = "Record"
    INDEXED_FIELDS: ClassVar[tuple[str, ...]] = ("id", "created_at", "updated_at")
    FIELD_SETTERS: ClassVar[Mapping[str, FieldSetter]] = {}

    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    document: Document = field(default_factory=dict)

    @property
    def is_new(self) -> bool:
        """True until the repository has assigned an id."""
        return not self.id

    def get_value(self, key: str, default: DocumentValue = None) -> DocumentValue:
        return self.document.get(key, default)

    def set_value(self, key: str, value: DocumentValue) -> None:
        self.document[key] = value

    def remove_value(self, key: str) -> None:
        self.document.pop(key, None)

    def fill(self, attributes: Mapping[str, Any]) -> "Record":
        """Apply caller-supplied attributes through the type's setter table.

        Keys without a setter are ignored.
        """
        for key, value in attributes.items():
            setter = self.FIELD_SETTERS.get(key)
            if setter is not None:
                setter(self, value)
        return self


@dataclass(kw_only=True)
class SluggedRecord(Record):
    """A record with a display name and a unique, URL-safe slug."""

    name: str = ""
    slug: str = ""

    def set_name(self, value: Any) -> None:
        self.name = str(value).strip() if value is not None else ""

    def set_slug(self, value: Any) -> None:
        self.slug = slugify(str(value)) if value is not None else ""

    def generate_slug(self) -> str:
        """Derive the slug from the name when none was supplied.

        A name made only of punctuation falls back to the entity type
        (``"client"``, ``"tag"``) so a stored slug is never empty.
        """
        if not self.slug:
            self.slug = slugify(self.name) or slugify(self.ENTITY_TYPE)
        return self.slug
