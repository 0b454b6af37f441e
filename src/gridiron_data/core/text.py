"""Text helpers shared by name sorting."""

import unicodedata


def normalize_text(text: str) -> str:
    """Lowercase + strip accents, so "Émile" and "emile" collate together."""
    nfkd = unicodedata.normalize("NFKD", text)
    return "".join(c for c in nfkd if not unicodedata.combining(c)).casefold()


def name_sort_key(last_name: str | None, display_name: str | None) -> str:
    """Sort key for people: last name, falling back to display name."""
    return normalize_text(last_name or display_name or "")
