"""Encoding of the record document for its physical column.

With native document support the mapping is handed to SQLAlchemy's JSON
type as-is; otherwise it is stored as compact JSON text. Either way the
repositories only ever see a ``dict``.
"""

import copy
import json
import logging
from collections.abc import Mapping
from typing import Any

from clientbook.domain.entities import Document

logger = logging.getLogger(__name__)


def dumps_document(value: Any) -> str:
    """Deterministic compact JSON — insertion order kept, non-ASCII unescaped."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


class DocumentCodec:
    """Converts a document between its in-memory and stored forms."""

    def __init__(self, native: bool):
        self.native = native

    def encode(self, document: Mapping[str, Any] | None) -> Document | str:
        payload = dict(document or {})
        if self.native:
            return copy.deepcopy(payload)
        return dumps_document(payload)

    def decode(self, value: Any) -> Document:
        """Accept either stored form so rows written before a mode change still load."""
        if value is None:
            return {}
        if isinstance(value, (bytes, bytearray)):
            value = value.decode("utf-8")
        if isinstance(value, str):
            if not value.strip():
                return {}
            try:
                value = json.loads(value)
            except json.JSONDecodeError:
                logger.warning("Discarding undecodable document payload (%d chars)", len(value))
                return {}
        if not isinstance(value, dict):
            logger.warning("Discarding non-object document payload of type %s", type(value).__name__)
            return {}
        return value
