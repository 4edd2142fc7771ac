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

import asyncio
import datetime as dt
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from .alerts import AlertFetchError, fetch_state_alerts
from .conditions import compose
from .config import AppConfig, load_config
from .nws_api import WeatherApi
from .publish import publish, read_template
from .report import build_report, render
from .tropical import TropicalOutlookResolver, build_sources


log = logging.getLogger("secarweather")


def _setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )


async def collect_conditions(
    cfg: AppConfig,
    api: WeatherApi,
    now: dt.datetime,
) -> List[Tuple[str, str]]:
    hot_season = cfg.seasons.hot.contains(now)
    out: List[Tuple[str, str]] = []

    for st in cfg.states:
        try:
            alerts = await fetch_state_alerts(api, cfg.alerts.url, cfg.states.code_for(st.name))
        except AlertFetchError as e:
            log.warning("Using fallback for %s: %s", st.name, e)
            alerts = None
        out.append((st.name, compose(st.name, alerts, hot_season, now)))

    return out


async def run_update(
    cfg: AppConfig,
    api: WeatherApi,
    now: Optional[dt.datetime] = None,
    template_path: str | Path | None = None,
) -> str:
    """
    One full update: alerts per state, tropical outlook, render, publish.

    Returns the rendered fragment.
    """
    path = Path(template_path or cfg.report.template_path)
    # fail before touching the network if the template is unusable
    read_template(path)

    # season windows are judged on the report's local calendar
    now = (now or dt.datetime.now(dt.timezone.utc)).astimezone(ZoneInfo(cfg.report.timezone))

    log.info("Fetching weather data for %d states...", len(cfg.states))
    summaries = await collect_conditions(cfg, api, now)

    resolver = TropicalOutlookResolver(
        api=api,
        sources=build_sources(cfg.tropical.sources),
        hurricane_season=cfg.seasons.hurricane,
    )
    tropical = await resolver.resolve(now)

    log.info("Generating report...")
    fragment = render(build_report(now, tropical, summaries, cfg.report.timezone))

    changed = publish(path, fragment, cfg.report.placeholder_id, cfg.report.placeholder_class)
    log.info("Weather report %s", "updated successfully" if changed else "already current")
    return fragment


async def _run(cfg: AppConfig) -> None:
    api = WeatherApi(timeout=cfg.http.timeout_seconds, user_agent=cfg.http.user_agent)
    try:
        await run_update(cfg, api)
    finally:
        await api.aclose()


def main() -> int:
    _setup_logging()
    try:
        cfg = load_config()
        asyncio.run(_run(cfg))
    except Exception:
        log.exception("Error updating weather report")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
