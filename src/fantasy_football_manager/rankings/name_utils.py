"""Player name normalization utilities for cross-source matching."""

from __future__ import annotations

import re
import unicodedata

_SUFFIX_RE = re.compile(r"\s+(jr|sr|ii|iii|iv|v)$")


def normalize_name(name: str) -> str:
    """Normalize a player name for cross-source matching.

    - Removes accents/diacritics via NFD decomposition
    - Converts to lowercase
    - Removes periods, apostrophes and hyphens (for A.J., Ja'Marr, Smith-Njigba)
    - Drops generational suffixes (Jr, Sr, II-V)
    - Collapses runs of whitespace

    Args:
        name: Raw player name from any data source.

    Returns:
        Normalized lowercase name suitable for dictionary-key matching.
    """
    normalized = unicodedata.normalize("NFD", name or "")
    normalized = "".join(c for c in normalized if unicodedata.category(c) != "Mn")
    normalized = normalized.lower()
    normalized = re.sub(r"[.'\-]", "", normalized)
    normalized = re.sub(r"\s+", " ", normalized).strip()
    normalized = _SUFFIX_RE.sub("", normalized)
    return normalized
