"""Slug normalisation shared by every record type."""

import re
import unicodedata

_INVALID_CHARS = re.compile(r"[^\w\-]+")
_DASH_RUNS = re.compile(r"-{2,}")


def _fold(char: str) -> str:
    """Accented Latin letters lose their accent; other scripts are kept."""
    ascii_form = unicodedata.normalize("NFKD", char).encode("ascii", "ignore").decode("ascii")
    return ascii_form or char


def slugify(value: str | None) -> str:
    """Turn a display name into a lowercase, URL-safe slug.

    Accents on Latin letters are folded to ASCII, letters of other scripts
    are kept as they are, any run of other characters becomes a single dash,
    and leading/trailing dashes are dropped:

        >>> slugify("  Café Olé & Co. ")
        'cafe-ole-co'
        >>> slugify("Москва Сити")
        'москва-сити'
    """
    if not value:
        return ""
    lowered = unicodedata.normalize("NFC", value.strip().lower())
    folded = "".join(_fold(char) for char in lowered)
    slug = _INVALID_CHARS.sub("-", folded)
    slug = _DASH_RUNS.sub("-", slug)
    return slug.strip("-")
