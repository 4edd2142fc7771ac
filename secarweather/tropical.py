from __future__ import annotations

import datetime as dt
import html
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Literal, Optional, Sequence, Tuple

from .config import SeasonWindow
from .nws_api import WeatherApi

log = logging.getLogger("secarweather.tropical")


@dataclass(frozen=True)
class TropicalOutlook:
    outlook: str
    formation_chance: str


ACTIVE_SYSTEMS = "Active Systems"

HURRICANE_SEASON_FALLBACK = TropicalOutlook(
    outlook=(
        "NHC data temporarily unavailable via automated systems. During hurricane season, "
        "formation chances can change rapidly. Visit nhc.noaa.gov for the most current "
        "tropical weather outlook and formation probabilities."
    ),
    formation_chance="Visit NHC",
)
OFF_SEASON_FALLBACK = TropicalOutlook(
    outlook=(
        "Outside of peak hurricane season. No significant tropical activity expected "
        "in the Atlantic basin at this time."
    ),
    formation_chance="0%",
)
UNAVAILABLE_FALLBACK = TropicalOutlook(
    outlook=(
        "Tropical weather outlook temporarily unavailable. Visit nhc.noaa.gov for "
        "official National Hurricane Center information."
    ),
    formation_chance="Check NHC",
)


# --- text helpers -------------------------------------------------------------------

_LEADING_INT_RE = re.compile(r"^\s*(\d+)")
_TAG_RE = re.compile(r"<[^>]*>")
_SPACE_RE = re.compile(r"\s+")
_CDATA_RE = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)
_PERCENT_RE = re.compile(r"(\d+)\s*percent", re.IGNORECASE)


def parse_percent(token: Any) -> int:
    """'70%' -> 70, 70 -> 70, anything unparseable -> 0."""
    if token is None or isinstance(token, bool):
        return 0
    m = _LEADING_INT_RE.match(str(token))
    return int(m.group(1)) if m else 0


def strip_markup(s: str) -> str:
    t = _TAG_RE.sub("", s or "")
    t = html.unescape(t)
    return _SPACE_RE.sub(" ", t).strip()


@dataclass(frozen=True)
class TextMatcher:
    name: str
    pattern: re.Pattern[str]


# Most specific first. Group 1 is always the percentage.
OUTLOOK_MATCHERS: Tuple[TextMatcher, ...] = (
    TextMatcher("formation", re.compile(r"formation.*?(\d+)\s*percent", re.IGNORECASE)),
    TextMatcher("disturbance", re.compile(r"disturbance\s*\d+.*?(\d+)\s*percent", re.IGNORECASE)),
    TextMatcher("percent", _PERCENT_RE),
)


def extract_formation_chance(
    text: str,
    matchers: Sequence[TextMatcher] = OUTLOOK_MATCHERS,
    window: int = 200,
) -> Optional[Tuple[int, str]]:
    """
    Scan raw bulletin text with each matcher in order and keep the highest
    percentage seen, with the surrounding text as an excerpt.

    Returns (percent, excerpt) or None when nothing above 0% was found.
    """
    raw = text or ""
    best = 0
    excerpt = ""
    for matcher in matchers:
        for m in matcher.pattern.finditer(raw):
            pct = parse_percent(m.group(1))
            if pct > best:
                best = pct
                start = max(0, m.start() - window)
                end = min(len(raw), m.start() + window)
                excerpt = strip_markup(raw[start:end])
    if best <= 0:
        return None
    return best, excerpt


# --- per-source parsers -------------------------------------------------------------

def parse_gtwo_json(data: Any) -> Optional[TropicalOutlook]:
    """Structured NHC outlook: {"areas": [{"chance2day": "..", "chance7day": "..", "text": ".."}]}"""
    if not isinstance(data, dict):
        return None
    areas = data.get("areas")
    if not isinstance(areas, list) or not areas:
        return None

    max_chance = 0
    text = ""
    for idx, area in enumerate(areas, start=1):
        if not isinstance(area, dict):
            continue
        for key in ("chance7day", "chance2day"):
            if area.get(key):
                max_chance = max(max_chance, parse_percent(area[key]))
        area_text = area.get("text")
        if isinstance(area_text, str) and area_text.strip():
            text += f"Disturbance {idx}: {area_text.strip()} "

    text = text.strip()
    if max_chance <= 0 and not text:
        return None
    return TropicalOutlook(
        outlook=text or (
            f"The National Hurricane Center is monitoring {len(areas)} disturbance(s) "
            "in the Atlantic basin for potential tropical development."
        ),
        formation_chance=f"{max_chance}%",
    )


def parse_gtwo_text(text: Any) -> Optional[TropicalOutlook]:
    if not isinstance(text, str):
        return None
    found = extract_formation_chance(text)
    if found is None:
        return None
    pct, excerpt = found
    return TropicalOutlook(
        outlook=excerpt or "The National Hurricane Center reports tropical development chances in the Atlantic basin.",
        formation_chance=f"{pct}%",
    )


_ITEM_RE = re.compile(r"<item>.*?</item>", re.IGNORECASE | re.DOTALL)
_DESC_RE = re.compile(r"<description[^>]*>(.*?)</description>", re.IGNORECASE | re.DOTALL)


def _feed_description(item: str) -> str:
    m = _DESC_RE.search(item)
    if not m:
        return ""
    body = _CDATA_RE.sub(lambda c: c.group(1), m.group(1))
    # escaped HTML inside the description: decode first, then drop the tags
    return strip_markup(html.unescape(body))


def parse_outlook_feed(xml_text: Any, max_chars: int = 400) -> Optional[TropicalOutlook]:
    if not isinstance(xml_text, str):
        return None

    best = 0
    outlook = ""
    for m in _ITEM_RE.finditer(xml_text):
        item = m.group(0)
        low = item.lower()
        if "tropical" not in low and "outlook" not in low:
            continue
        desc = _feed_description(item)
        if not desc:
            continue
        for pm in _PERCENT_RE.finditer(desc):
            pct = parse_percent(pm.group(1))
            if pct > best:
                best = pct
                outlook = desc[:max_chars]

    if best <= 0:
        return None
    return TropicalOutlook(
        outlook=outlook or "The National Hurricane Center is monitoring tropical development in the Atlantic basin.",
        formation_chance=f"{best}%",
    )


def parse_current_storms(data: Any) -> Optional[TropicalOutlook]:
    if not isinstance(data, dict):
        return None
    storms = data.get("activeStorms")
    if not isinstance(storms, list) or not storms:
        return None

    names: List[str] = []
    for storm in storms:
        name = storm.get("name") if isinstance(storm, dict) else None
        names.append(str(name).strip() if name else "Unnamed")

    return TropicalOutlook(
        outlook=(
            f"The National Hurricane Center is currently tracking {len(storms)} active system(s): "
            f"{', '.join(names)}. Monitor official forecasts for the latest information."
        ),
        formation_chance=ACTIVE_SYSTEMS,
    )


# --- sources & resolver -------------------------------------------------------------

FetchKind = Literal["json", "text"]
Parser = Callable[[Any], Optional[TropicalOutlook]]

_NHC_UA = "Mozilla/5.0 (compatible; SECAR-Weather-Report)"


@dataclass(frozen=True)
class OutlookSource:
    name: str
    url: str
    kind: FetchKind
    parse: Parser
    headers: Dict[str, str] = field(default_factory=dict)


# name -> (fetch kind, parser, request headers)
SOURCE_PARSERS: Dict[str, Tuple[FetchKind, Parser, Dict[str, str]]] = {
    "gtwo_json": (
        "json",
        parse_gtwo_json,
        {
            "User-Agent": _NHC_UA,
            "Accept": "application/json, text/plain, */*",
            "Cache-Control": "no-cache",
        },
    ),
    "gtwo_text": (
        "text",
        parse_gtwo_text,
        {"User-Agent": _NHC_UA, "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"},
    ),
    "rss_feed": (
        "text",
        parse_outlook_feed,
        {"User-Agent": _NHC_UA, "Accept": "application/rss+xml, application/xml, text/xml"},
    ),
    "current_storms": ("json", parse_current_storms, {"User-Agent": _NHC_UA}),
}


def build_sources(pairs: Iterable[Tuple[str, str]]) -> List[OutlookSource]:
    out: List[OutlookSource] = []
    for name, url in pairs:
        entry = SOURCE_PARSERS.get(name)
        if entry is None:
            raise ValueError(f"Unknown tropical outlook source: {name!r}")
        kind, parser, headers = entry
        out.append(OutlookSource(name=name, url=url, kind=kind, parse=parser, headers=dict(headers)))
    return out


def season_fallback(now: dt.datetime, hurricane_season: SeasonWindow) -> TropicalOutlook:
    if hurricane_season.contains(now):
        return HURRICANE_SEASON_FALLBACK
    return OFF_SEASON_FALLBACK


class TropicalOutlookResolver:
    """
    Walks the configured sources in order and returns the first usable outlook.

    No merging across sources: once one answers, the rest are never fetched.
    """

    def __init__(
        self,
        api: WeatherApi,
        sources: Sequence[OutlookSource],
        hurricane_season: SeasonWindow,
    ) -> None:
        self.api = api
        self.sources = list(sources)
        self.hurricane_season = hurricane_season

    async def _try_source(self, source: OutlookSource) -> Optional[TropicalOutlook]:
        if source.kind == "json":
            payload = await self.api.get_json(source.url, headers=source.headers)
        else:
            payload = await self.api.get_text(source.url, headers=source.headers)
        return source.parse(payload)

    async def resolve(self, now: dt.datetime) -> TropicalOutlook:
        try:
            for source in self.sources:
                try:
                    result = await self._try_source(source)
                except Exception as e:
                    log.warning("Tropical source %s failed: %s", source.name, e)
                    continue
                if result is not None:
                    log.info("Tropical outlook from %s (chance=%s)", source.name, result.formation_chance)
                    return result
                log.info("Tropical source %s had no usable outlook", source.name)

            fb = season_fallback(now, self.hurricane_season)
            log.info("All tropical sources exhausted; using season fallback (chance=%s)", fb.formation_chance)
            return fb
        except Exception:
            log.exception("Tropical outlook resolution failed")
            return UNAVAILABLE_FALLBACK
