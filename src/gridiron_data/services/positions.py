"""Position normalization onto the fantasy-relevant position set."""

from typing import Optional

from ..core.types import ALLOWED_POSITIONS, DST_POSITION

POSITION_SYNONYMS = {
    "PK": "K",
    "DST": DST_POSITION,
}

DST_DISPLAY_MARKER = "DEFENSE/SPECIAL TEAMS"


def normalize_position(
    abbreviation: Optional[str],
    display_name: Optional[str] = None,
) -> Optional[str]:
    """
    Map an upstream position onto one of ALLOWED_POSITIONS.

    The provider is inconsistent about which field it fills, so the
    abbreviation is tried first and the display name second.

    Args:
        abbreviation: Upstream abbreviation, e.g. "pk" or "WR"
        display_name: Upstream display name, e.g. "Wide Receiver"

    Returns:
        The normalized code, or None when the player should be excluded
    """
    if abbreviation:
        upper = abbreviation.strip().upper()
        normalized = POSITION_SYNONYMS.get(upper, upper)
        if normalized in ALLOWED_POSITIONS:
            return normalized

    if display_name:
        upper = display_name.upper()
        if DST_DISPLAY_MARKER in upper and DST_POSITION in ALLOWED_POSITIONS:
            return DST_POSITION
        for position in ALLOWED_POSITIONS:
            if upper.startswith(position):
                return position

    return None
