"""Text normalization shared by parsing, search and ranking."""

import re
import unicodedata

_HEX_COLOR_RE = re.compile(r"^[0-9a-fA-F]{6}$")
_DIGITS_RE = re.compile(r"(\d+)")


def normalize_for_search(value: str) -> str:
    """Strip diacritics and case-fold ("Hôtel de Ville" -> "hotel de ville")."""
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).lower()


def normalize_hex_color(value: str | None) -> str | None:
    """Return "#RRGGBB" for a 6-digit hex color, None for anything else."""
    normalized = (value or "").strip().removeprefix("#")
    if not _HEX_COLOR_RE.match(normalized):
        return None
    return f"#{normalized.upper()}"


def natural_sort_key(value: str) -> tuple[tuple[int, int | str], ...]:
    """Accent/case-insensitive key that orders embedded numbers numerically.

    "T2" < "T10", "F1" == "f1", and digits sort before letters.
    """
    parts = _DIGITS_RE.split(normalize_for_search(value))
    key: list[tuple[int, int | str]] = []
    for part in parts:
        if not part:
            continue
        if part.isdigit():
            key.append((0, int(part)))
        else:
            key.append((1, part))
    return tuple(key)
