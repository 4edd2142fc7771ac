from __future__ import annotations

import datetime as dt
from typing import Dict, Iterable, List, Optional, Sequence

from .alerts import AlertRecord


HEAT_SAFETY = (
    "Monitor for heat stress during outdoor activities. "
    "Stay hydrated and seek air conditioning during peak heating hours. "
)
SEASONAL_MONITORING = "Typical seasonal weather patterns expected. Monitor for changing conditions. "

HEAT_ADVISORY_FALLBACK = (
    "Hot and humid conditions with ADVISORIES for heat index values near or above 100°F. "
)

# Hot-season fallback: thunderstorm/lightning outlook per state
_HOT_FALLBACK: Dict[str, str] = {
    "Florida": (
        "WATCHES for heavy rainfall and potential flash flooding. "
        "Scattered to numerous thunderstorms with frequent lightning and locally heavy rainfall. "
    ),
    "Mississippi": (
        "Isolated to scattered thunderstorms possible with frequent lightning and brief heavy downpours. "
        "Monitor for heat-related illnesses. "
    ),
    "Alabama": (
        "Isolated to scattered thunderstorms possible with frequent lightning and brief heavy downpours. "
        "Monitor for heat-related illnesses. "
    ),
    "Georgia": "Scattered afternoon thunderstorms with dangerous lightning and locally heavy rainfall. ",
    "South Carolina": "Scattered afternoon thunderstorms with dangerous lightning and locally heavy rainfall. ",
    "Tennessee": "ADVISORIES for scattered thunderstorms with lightning and brief heavy rainfall. ",
    "North Carolina": "ADVISORIES for scattered thunderstorms with lightning and brief heavy rainfall. ",
    "U.S. Virgin Islands": "ADVISORIES for isolated showers and thunderstorms with dangerous lightning. ",
}

_MILD_STATES = frozenset({"Florida", "U.S. Virgin Islands"})
_MILD_FALLBACK = "Mild temperatures with occasional shower activity. "
_WINTER_FALLBACK = "Monitor for potential winter weather impacts and changing conditions. "


def no_hazards_text(state: str) -> str:
    return f"No significant weather hazards reported for {state} at this time."


def _is_warning(a: AlertRecord) -> bool:
    return a.severity in ("Severe", "Extreme") or "Warning" in a.event


def _is_watch(a: AlertRecord) -> bool:
    return "Watch" in a.event


def _is_advisory(a: AlertRecord) -> bool:
    return a.severity == "Moderate" or "Advisory" in a.event


def _event_list(alerts: Iterable[AlertRecord]) -> str:
    seen: set[str] = set()
    out: List[str] = []
    for a in alerts:
        ev = a.event or f"{a.severity} Alert"
        if ev in seen:
            continue
        seen.add(ev)
        out.append(ev)
    return ", ".join(out)


def alert_sentences(alerts: Sequence[AlertRecord], now: dt.datetime) -> str:
    active = [a for a in alerts if a.is_active(now)]
    if not active:
        return ""

    text = ""
    warnings = _event_list(a for a in active if _is_warning(a))
    watches = _event_list(a for a in active if _is_watch(a))
    advisories = _event_list(a for a in active if _is_advisory(a))

    if warnings:
        text += f"Active {warnings} WARNINGS in effect. "
    if watches:
        text += f"{watches} WATCHES in effect. "
    if advisories:
        text += f"{advisories} ADVISORIES in effect. "
    return text


def fallback_conditions(state: str, hot_season: bool) -> str:
    """Canned text used when the alerts endpoint could not be reached."""
    if hot_season:
        return HEAT_ADVISORY_FALLBACK + _HOT_FALLBACK.get(state, "")

    text = f"Seasonal temperatures expected for {state}. "
    if state in _MILD_STATES:
        return text + _MILD_FALLBACK
    return text + _WINTER_FALLBACK


def compose(
    state: str,
    alerts: Optional[Sequence[AlertRecord]],
    hot_season: bool,
    now: dt.datetime,
) -> str:
    """
    Build the condition line for one state.

    ``alerts=None`` means the fetch failed and canned seasonal text is used.
    Outside hot season the generic reminder only follows real alert sentences,
    so a quiet state reads as "no significant hazards".
    """
    if alerts is None:
        return fallback_conditions(state, hot_season)

    text = alert_sentences(alerts, now)
    if hot_season:
        text += HEAT_SAFETY
    elif text:
        text += SEASONAL_MONITORING

    return text or no_hazards_text(state)
