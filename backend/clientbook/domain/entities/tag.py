"""Domain entity — a coloured label attached to clients."""

import random
import re
from dataclasses import dataclass, field
from typing import Any, ClassVar

from clientbook.domain.entities.record import SluggedRecord

HEX_COLOR = re.compile(r"^#[0-9a-f]{6}$")


@dataclass(kw_only=True)
class Tag(SluggedRecord):
    """Core domain entity for a tag.

    Tags are stored as plain columns only; the inherited ``document`` is kept
    in memory and never written.
    """

    ENTITY_TYPE: ClassVar[str] = "Tag"
    INDEXED_FIELDS: ClassVar[tuple[str, ...]] = (
        "id", "name", "slug", "color", "description", "created_at",
    )
    DEFAULT_COLORS: ClassVar[tuple[str, ...]] = (
        "#3b82f6",  # blue
        "#10b981",  # green
        "#f59e0b",  # amber
        "#ef4444",  # red
        "#8b5cf6",  # violet
        "#ec4899",  # pink
        "#06b6d4",  # cyan
        "#f97316",  # orange
    )

    color: str | None = None
    description: str | None = None
    # Populated by count queries; never persisted.
    client_count: int | None = field(default=None, compare=False)

    def set_color(self, value: Any) -> None:
        """Store the colour lowercased; validity is checked by the tag service."""
        text = str(value).strip().lower() if value is not None else ""
        self.color = text or None

    def set_description(self, value: Any) -> None:
        text = str(value).strip() if value is not None else ""
        self.description = text or None

    @property
    def has_valid_color(self) -> bool:
        return self.color is None or bool(HEX_COLOR.match(self.color))

    @classmethod
    def random_color(cls) -> str:
        return random.choice(cls.DEFAULT_COLORS)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "color": self.color,
            "description": self.description,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    FIELD_SETTERS: ClassVar[dict[str, Any]] = {
        "name": SluggedRecord.set_name,
        "slug": SluggedRecord.set_slug,
        "color": set_color,
        "description": set_description,
    }
