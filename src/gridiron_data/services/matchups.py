"""Upcoming-matchup resolution from a team's schedule."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Matchup:
    """Next game for a team: "vs BUF" / "@ MIA" plus a kickoff label."""

    label: str
    kickoff: Optional[str] = None


def parse_event_date(value: Any) -> Optional[datetime]:
    """Parse an upstream ISO-8601 timestamp; naive values are taken as UTC."""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_kickoff(value: Any, tz: Optional[tzinfo] = None) -> Optional[str]:
    """Short weekday + 24h time ("Sun 13:00") in `tz`, default the local zone."""
    parsed = parse_event_date(value)
    if parsed is None:
        return None
    return parsed.astimezone(tz).strftime("%a %H:%M")


def _competitors(event: dict[str, Any]) -> list[dict[str, Any]]:
    competitions = event.get("competitions") or []
    if not competitions:
        return []
    return competitions[0].get("competitors") or []


def _competitor_team_id(competitor: dict[str, Any]) -> Optional[str]:
    team = competitor.get("team") or {}
    team_id = team.get("id")
    return str(team_id) if team_id is not None else None


def resolve_upcoming_matchup(
    schedule: dict[str, Any],
    team_id: str,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> Optional[Matchup]:
    """
    Find the team's next unplayed game.

    Events are ordered by date; the first one at or after `now` that lists
    the team as a competitor wins. Returns None when there is no such game
    or the opponent cannot be labelled.
    """
    now = now or datetime.now(tz=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    team_id = str(team_id)

    dated = []
    for event in schedule.get("events") or []:
        date = parse_event_date(event.get("date"))
        if date is not None:
            dated.append((date, event))
    dated.sort(key=lambda item: item[0])

    upcoming = None
    for date, event in dated:
        if date < now:
            continue
        if any(_competitor_team_id(comp) == team_id for comp in _competitors(event)):
            upcoming = event
            break

    if upcoming is None:
        return None

    competitors = _competitors(upcoming)
    team_entry = next((c for c in competitors if _competitor_team_id(c) == team_id), None)
    opponent_entry = next((c for c in competitors if _competitor_team_id(c) != team_id), None)
    if team_entry is None or opponent_entry is None:
        return None

    opponent = opponent_entry.get("team") or {}
    opponent_label = opponent.get("abbreviation") or opponent.get("displayName")
    if not opponent_label:
        return None

    prefix = "vs" if team_entry.get("homeAway") == "home" else "@"
    return Matchup(
        label=f"{prefix} {opponent_label}",
        kickoff=format_kickoff(upcoming.get("date"), tz),
    )
