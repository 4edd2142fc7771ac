from __future__ import annotations

# =========================================================================================
#      MP"""""`MM                                                       dP              MM'"""'YMM
#      M  mmmmm..M                                                       88              M' .mmm. `M
#      M.      `YM .d8888b. .d8888b. .d8888b. .d8888b. 88d888b. .d8888b. 88              M  MMMMMooM dP    dP 88d888b. 88d888b. .d8888b. 88d888b. .d8888b. dP    dP
#      MMMMMMM.  M 88ooood8 88'  `88 Y8ooooo. 88'  `88 88'  `88 88'  `88 88              M  MMMMMMMM 88    88 88'  `88 88'  `88 88ooood8 88'  `88 88'  `"" 88    88
#      M. .MMM'  M 88.  ... 88.  .88       88 88.  .88 88    88 88.  .88 88              M. `MMM' .M 88.  .88 88       88       88.  ... 88    88 88.  ... 88.  .88
#      Mb.     .dM `88888P' `88888P8 `88888P' `88888P' dP    dP `88888P8 dP              MM.     .dM `88888P' dP       dP       `88888P' dP    dP `88888P' `8888P88
#      MMMMMMMMMMM                                                Seasonal_Currency      MMMMMMMMMMM                                                            .88
#                                                                                                                                                           d8888P.
# =========================================================================================

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Any, Literal, Optional

import httpx

from .nws_api import WeatherApi

log = logging.getLogger("secarweather.alerts")


Severity = Literal["Severe", "Extreme", "Moderate", "Minor", "Unknown"]

_SEVERITIES: frozenset[str] = frozenset({"Severe", "Extreme", "Moderate", "Minor", "Unknown"})


class AlertFetchError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class AlertRecord:
    event: str
    severity: Severity
    area_desc: str
    expires: dt.datetime | None

    def is_active(self, now: dt.datetime) -> bool:
        # strict: an alert expiring exactly "now" is gone
        return self.expires is not None and self.expires > now


def _parse_iso(s: Any) -> Optional[dt.datetime]:
    if not isinstance(s, str) or not s.strip():
        return None
    try:
        t = dt.datetime.fromisoformat(s.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if t.tzinfo is None:
        t = t.replace(tzinfo=dt.timezone.utc)
    return t


def _norm_severity(raw: Any) -> Severity:
    s = str(raw).strip().capitalize() if raw is not None else ""
    return s if s in _SEVERITIES else "Unknown"  # type: ignore[return-value]


def alert_from_feature(feat: Any) -> AlertRecord | None:
    if not isinstance(feat, dict):
        return None
    props = feat.get("properties")
    if not isinstance(props, dict):
        return None

    event = props.get("event")
    return AlertRecord(
        event=str(event).strip() if event is not None else "",
        severity=_norm_severity(props.get("severity")),
        area_desc=str(props.get("areaDesc") or "").strip(),
        expires=_parse_iso(props.get("expires")),
    )


async def fetch_state_alerts(api: WeatherApi, url: str, code: str) -> list[AlertRecord]:
    """
    Fetch alerts for one state/territory code.

    Raises AlertFetchError on transport errors, non-2xx responses and payloads
    that are not a GeoJSON object. Individual junk features are skipped.
    """
    try:
        feats = await api.active_alerts(url, code)
    except (httpx.HTTPError, ValueError) as e:
        raise AlertFetchError(f"alerts request failed for area={code}: {e}") from e

    out: list[AlertRecord] = []
    for feat in feats:
        rec = alert_from_feature(feat)
        if rec is not None:
            out.append(rec)

    log.info("Alerts: area=%s features=%d parsed=%d", code, len(feats), len(out))
    return out
