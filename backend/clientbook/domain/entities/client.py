"""Domain entity — a client organisation with an open document of details."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

from clientbook.domain.entities.record import Document, SluggedRecord

if TYPE_CHECKING:
    from clientbook.domain.entities.tag import Tag


class ClientStatus(str, Enum):
    """Lifecycle states of a client."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    PROSPECT = "prospect"
    ARCHIVED = "archived"

    @property
    def label(self) -> str:
        return self.value.capitalize()


ADDRESS_FIELDS = ("street", "city", "state", "zip", "country")


def _text_value(client: "Client", key: str, value: Any) -> None:
    """Store a trimmed string in the document; blank values remove the key."""
    text = str(value).strip() if value is not None else ""
    if text:
        client.set_value(key, text)
    else:
        client.remove_value(key)


def _text_setter(key: str):
    return lambda client, value: _text_value(client, key, value)


@dataclass(kw_only=True)
class Client(SluggedRecord):
    """Core domain entity for a client.

    ``name``, ``slug`` and ``status`` are indexed columns; contact details,
    address, notes and any unknown keys live in ``document``.
    """

    ENTITY_TYPE: ClassVar[str] = "Client"
    INDEXED_FIELDS: ClassVar[tuple[str, ...]] = (
        "id", "name", "slug", "status", "created_at", "updated_at",
    )
    DOCUMENT_FIELDS: ClassVar[tuple[str, ...]] = (
        "email", "phone", "website", "industry", "address",
        "notes", "logo", "description", "contacts",
    )

    status: ClientStatus = ClientStatus.ACTIVE
    # Populated by list/search queries that load tags; never persisted.
    tags: list["Tag"] = field(default_factory=list, compare=False, repr=False)

    # ── Status ───────────────────────────────────────────────────────

    def set_status(self, value: Any) -> None:
        """Accept a ClientStatus or its string value; unknown values are ignored."""
        try:
            self.status = ClientStatus(value)
        except ValueError:
            pass

    @property
    def status_label(self) -> str:
        return self.status.label

    @property
    def is_active(self) -> bool:
        return self.status is ClientStatus.ACTIVE

    # ── Document accessors ───────────────────────────────────────────

    @property
    def email(self) -> str | None:
        return self.get_value("email")

    @property
    def phone(self) -> str | None:
        return self.get_value("phone")

    @property
    def website(self) -> str | None:
        return self.get_value("website")

    @property
    def industry(self) -> str | None:
        return self.get_value("industry")

    @property
    def notes(self) -> str | None:
        return self.get_value("notes")

    @property
    def logo(self) -> str | None:
        return self.get_value("logo")

    @property
    def description(self) -> str | None:
        return self.get_value("description")

    @property
    def address(self) -> dict[str, Any] | None:
        return self.get_value("address")

    def set_address(self, value: Any) -> None:
        if value is None:
            self.remove_value("address")
            return
        if isinstance(value, dict):
            self.set_value(
                "address",
                {str(k): ("" if v is None else str(v).strip()) for k, v in value.items()},
            )

    @property
    def contacts(self) -> list[Any]:
        return self.get_value("contacts", [])

    def set_contacts(self, value: Any) -> None:
        self.set_value("contacts", list(value) if value else [])

    def add_contact(self, contact: dict[str, Any]) -> None:
        self.set_contacts([*self.contacts, contact])

    def merge_document(self, value: Any) -> None:
        """Merge arbitrary extra keys into the document."""
        if isinstance(value, dict):
            self.document.update(value)

    # ── Export ───────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """Plain representation used by exports."""
        data: Document = dict(self.document)
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "status": self.status.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "data": data,
        }

    FIELD_SETTERS: ClassVar[dict[str, Any]] = {
        "name": SluggedRecord.set_name,
        "slug": SluggedRecord.set_slug,
        "status": set_status,
        "email": _text_setter("email"),
        "phone": _text_setter("phone"),
        "website": _text_setter("website"),
        "industry": _text_setter("industry"),
        "notes": _text_setter("notes"),
        "logo": _text_setter("logo"),
        "description": _text_setter("description"),
        "address": set_address,
        "contacts": set_contacts,
        "document": merge_document,
    }
