from __future__ import annotations

import datetime as dt

import pytest

from secarweather.conditions import (
    HEAT_ADVISORY_FALLBACK,
    HEAT_SAFETY,
    SEASONAL_MONITORING,
    compose,
    fallback_conditions,
    no_hazards_text,
)

from .conftest import NOW, alert


STATES = [
    "Tennessee",
    "Mississippi",
    "Alabama",
    "Georgia",
    "Florida",
    "North Carolina",
    "South Carolina",
    "U.S. Virgin Islands",
]


@pytest.mark.parametrize("state", STATES)
def test_quiet_state_outside_hot_season_reads_no_hazards(state):
    assert compose(state, [], False, NOW) == (
        f"No significant weather hazards reported for {state} at this time."
    )


def test_only_expired_alerts_count_as_quiet():
    alerts = [
        alert("Tornado Warning", "Extreme", expires=NOW),
        alert("Flood Watch", "Moderate", expires=NOW - dt.timedelta(minutes=1)),
    ]
    assert compose("Georgia", alerts, False, NOW) == no_hazards_text("Georgia")


def test_alert_without_expiry_is_never_active():
    rec = alert("Flood Advisory", "Minor")
    rec = type(rec)(event=rec.event, severity=rec.severity, area_desc=rec.area_desc, expires=None)
    assert compose("Alabama", [rec], False, NOW) == no_hazards_text("Alabama")


def test_expiry_boundary_is_strict():
    alerts = [
        alert("Heat Advisory", "Moderate", expires=NOW),
        alert("Flood Warning", "Severe", expires=NOW + dt.timedelta(seconds=1)),
    ]
    text = compose("Tennessee", alerts, False, NOW)
    assert "Heat Advisory" not in text
    assert "ADVISORIES" not in text
    assert text.startswith("Active Flood Warning WARNINGS in effect. ")


def test_extreme_hurricane_warning_lands_only_in_warnings():
    text = compose("Florida", [alert("Hurricane Warning", "Extreme")], False, NOW)
    assert text.count("WARNINGS") == 1
    assert "Active Hurricane Warning WARNINGS in effect. " in text
    assert "WATCHES" not in text
    assert "ADVISORIES" not in text
    assert text == "Active Hurricane Warning WARNINGS in effect. " + SEASONAL_MONITORING


def test_groups_overlap_when_rules_overlap():
    # Moderate severity puts a watch in the advisory group too
    text = compose("Mississippi", [alert("Flood Watch", "Moderate")], False, NOW)
    assert "Flood Watch WATCHES in effect. " in text
    assert "Flood Watch ADVISORIES in effect. " in text
    assert "WARNINGS" not in text


def test_sentence_order_and_distinct_events():
    alerts = [
        alert("Heat Advisory", "Moderate"),
        alert("Severe Thunderstorm Watch", "Minor"),
        alert("Flash Flood Warning", "Severe"),
        alert("Flash Flood Warning", "Severe"),
        alert("Tornado Warning", "Extreme"),
    ]
    text = compose("Alabama", alerts, False, NOW)
    assert text == (
        "Active Flash Flood Warning, Tornado Warning WARNINGS in effect. "
        "Severe Thunderstorm Watch WATCHES in effect. "
        "Heat Advisory ADVISORIES in effect. "
        + SEASONAL_MONITORING
    )


def test_hot_season_adds_heat_safety_even_when_quiet():
    assert compose("Georgia", [], True, NOW) == HEAT_SAFETY


def test_hot_season_heat_safety_follows_alerts():
    text = compose("Georgia", [alert("Heat Advisory", "Moderate")], True, NOW)
    assert text == "Heat Advisory ADVISORIES in effect. " + HEAT_SAFETY


def test_fetch_failure_hot_season_uses_state_table():
    text = compose("Florida", None, True, NOW)
    assert text.startswith(HEAT_ADVISORY_FALLBACK)
    assert "frequent lightning" in text
    assert "WATCHES for heavy rainfall" in text

    assert "dangerous lightning" in compose("South Carolina", None, True, NOW)
    assert "ADVISORIES for isolated showers" in compose("U.S. Virgin Islands", None, True, NOW)


def test_fetch_failure_unknown_state_hot_season_gets_heat_sentence_only():
    assert fallback_conditions("Puerto Rico", True) == HEAT_ADVISORY_FALLBACK


@pytest.mark.parametrize("state", ["Florida", "U.S. Virgin Islands"])
def test_fetch_failure_cold_season_southern_states_are_mild(state):
    assert compose(state, None, False, NOW) == (
        f"Seasonal temperatures expected for {state}. Mild temperatures with occasional shower activity. "
    )


def test_fetch_failure_cold_season_other_states_watch_winter():
    assert compose("North Carolina", None, False, NOW) == (
        "Seasonal temperatures expected for North Carolina. "
        "Monitor for potential winter weather impacts and changing conditions. "
    )


def test_compose_is_deterministic():
    alerts = [alert("Tornado Watch", "Severe"), alert("Heat Advisory", "Moderate")]
    assert compose("Tennessee", alerts, True, NOW) == compose("Tennessee", list(alerts), True, NOW)


def test_blank_event_name_falls_back_to_severity_label():
    text = compose("Georgia", [alert("", "Extreme")], False, NOW)
    assert text == "Active Extreme Alert WARNINGS in effect. " + SEASONAL_MONITORING
