from __future__ import annotations

import datetime as dt
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

from .states import Jurisdiction, StateCatalog


DEFAULT_CONFIG_PATH = Path(__file__).with_name("default_config.yaml")


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class ReportConfig:
    template_path: str
    placeholder_id: str
    placeholder_class: str
    timezone: str


@dataclass(frozen=True)
class HttpConfig:
    user_agent: str
    timeout_seconds: float


@dataclass(frozen=True)
class AlertsConfig:
    url: str


@dataclass(frozen=True)
class SeasonWindow:
    start_month: int
    end_month: int

    def contains(self, when: dt.date | dt.datetime) -> bool:
        return self.start_month <= when.month <= self.end_month


@dataclass(frozen=True)
class SeasonsConfig:
    hot: SeasonWindow
    hurricane: SeasonWindow


@dataclass(frozen=True)
class TropicalConfig:
    sources: List[Tuple[str, str]]  # (name, url), in priority order


@dataclass(frozen=True)
class AppConfig:
    report: ReportConfig
    http: HttpConfig
    alerts: AlertsConfig
    seasons: SeasonsConfig
    tropical: TropicalConfig
    states: StateCatalog


def _env(key: str, default: str | None = None) -> str | None:
    v = os.environ.get(key)
    return v if v not in (None, "") else default


def _window(raw: Any, key: str) -> SeasonWindow:
    try:
        start, end = (int(x) for x in raw)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"seasons.{key} must be a [start_month, end_month] pair") from e
    if not (1 <= start <= 12 and 1 <= end <= 12 and start <= end):
        raise ConfigError(f"seasons.{key} out of range: {start}-{end}")
    return SeasonWindow(start_month=start, end_month=end)


def load_config(path: str | Path | None = None) -> AppConfig:
    cfg_path = Path(path) if path else DEFAULT_CONFIG_PATH
    raw: Dict[str, Any] = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}

    try:
        report = ReportConfig(**raw["report"])
        http_raw = raw["http"]
        http = HttpConfig(
            user_agent=_env("SECARWEATHER_USER_AGENT", str(http_raw["user_agent"])) or "",
            timeout_seconds=float(http_raw.get("timeout_seconds", 15.0)),
        )
        alerts = AlertsConfig(url=str(raw["alerts"]["url"]))
        seasons = SeasonsConfig(
            hot=_window(raw["seasons"]["hot"], "hot"),
            hurricane=_window(raw["seasons"]["hurricane"], "hurricane"),
        )
        tropical = TropicalConfig(
            sources=[(str(s["name"]), str(s["url"])) for s in raw["tropical"]["sources"]],
        )
        states = StateCatalog(
            Jurisdiction(name=str(s["name"]), office=str(s["office"]), code=str(s["code"]).upper())
            for s in raw["states"]
        )
    except (KeyError, TypeError) as e:
        raise ConfigError(f"Invalid config file {cfg_path}: {e!r}") from e

    if not len(states):
        raise ConfigError(f"Invalid config file {cfg_path}: no states configured")

    return AppConfig(
        report=report,
        http=http,
        alerts=alerts,
        seasons=seasons,
        tropical=tropical,
        states=states,
    )
