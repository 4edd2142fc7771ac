from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from .tropical import TropicalOutlook


_HIGHLIGHTS = {
    "WARNINGS": '<span class="warning">WARNINGS</span>',
    "WATCHES": '<span class="watch">WATCHES</span>',
    "ADVISORIES": '<span class="advisory">ADVISORIES</span>',
    "frequent lightning": "<strong>frequent lightning</strong>",
    "dangerous lightning": "<strong>dangerous lightning</strong>",
    "cloud-to-ground lightning": "<strong>cloud-to-ground lightning</strong>",
}
# One pass over the text, so a replacement is never scanned again.
_HIGHLIGHT_RE = re.compile("|".join(re.escape(k) for k in sorted(_HIGHLIGHTS, key=len, reverse=True)))

_RECOMMENDATIONS = """\
<div class="recommendations">
<div class="section-title">Recommendations</div>
<h4>Immediate Actions</h4>
<ul>
<li>Follow all local <span class="warning">WARNINGS</span>, <span class="watch">WATCHES</span>, and <span class="advisory">ADVISORIES</span> for heat, thunderstorms, and flooding.</li>
<li>Monitor local conditions for rapidly developing thunderstorms, especially during peak heating hours.</li>
<li>Practice lightning safety: move indoors immediately when thunder is heard; avoid open fields, water, and tall objects.</li>
<li>Never drive through flooded roadways. Turn Around, Don't Drown.</li>
<li>Stay hydrated and limit outdoor activity during periods of excessive heat.</li>
</ul>
<h4>5-Day Monitoring</h4>
<ul>
<li>Monitor NWS local offices for updated <span class="warning">WARNINGS</span>, <span class="watch">WATCHES</span>, and <span class="advisory">ADVISORIES</span>.</li>
<li>Track NHC Tropical Weather Outlook updates for any changes in tropical development probability.</li>
<li>Monitor river and stream levels in flood-prone areas, especially after heavy rainfall.</li>
<li>Remain alert for rapidly changing weather conditions, especially during holiday events and outdoor gatherings.</li>
</ul>
</div>"""

_SOURCES = '<div class="sources">Sources: NWS local offices, National Hurricane Center, NOAA.</div>'


@dataclass(frozen=True)
class Report:
    check_time_label: str
    date_range_label: str
    tropical: Optional[TropicalOutlook]
    summaries: List[Tuple[str, str]]  # (state name, condition), catalog order


def highlight(text: str) -> str:
    return _HIGHLIGHT_RE.sub(lambda m: _HIGHLIGHTS[m.group(0)], text)


def format_long_date(d: dt.date) -> str:
    return f"{d:%A, %B} {d.day}, {d.year}"


def format_check_time(now: dt.datetime) -> str:
    hour = now.hour % 12 or 12
    return f"{hour}:{now:%M %p} {now.tzname() or 'local'}"


def build_report(
    now: dt.datetime,
    tropical: Optional[TropicalOutlook],
    summaries: Sequence[Tuple[str, str]],
    tz_name: str = "America/New_York",
) -> Report:
    local = now.astimezone(ZoneInfo(tz_name))
    end = local + dt.timedelta(days=4)
    return Report(
        check_time_label=format_check_time(local),
        date_range_label=f"{format_long_date(local)} – {format_long_date(end)}",
        tropical=tropical,
        summaries=list(summaries),
    )


def render(report: Report) -> str:
    outlook = report.tropical.outlook if report.tropical and report.tropical.outlook else "Tropical outlook not available."
    chance = (
        report.tropical.formation_chance
        if report.tropical and report.tropical.formation_chance
        else "N/A"
    )

    parts: List[str] = [
        (
            f'<div class="weather-check-time">Weather.gov map checked at {report.check_time_label}. '
            "NWS office verification completed for all SECAR state offices.</div>"
        ),
        f'<div class="date-range">{report.date_range_label}</div>',
        '<div class="tropical-outlook">',
        "<h3>Tropical Weather Outlook</h3>",
        f"<p>{outlook}</p>",
        '<div class="formation-chance">',
        '<div class="formation-badge">',
        f'Formation Chance: <span class="formation-percentage">{chance}</span>',
        "</div>",
        "</div>",
        "</div>",
        '<div class="section-title">Severe Weather Threats (5-Day Outlook)</div>',
    ]

    for state, condition in report.summaries:
        if not condition:
            continue
        parts.append(
            '<div class="state-report">'
            f'<span class="state-name">{state}:</span> '
            f'<span class="state-conditions">{highlight(condition)}</span>'
            "</div>"
        )

    parts.append(_RECOMMENDATIONS)
    parts.append(_SOURCES)
    return "\n" + "\n".join(parts) + "\n"
