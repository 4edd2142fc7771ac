from __future__ import annotations

import asyncio
import datetime as dt
from typing import Any, Awaitable, Callable, Dict

import httpx
import pytest

from secarweather.alerts import AlertRecord
from secarweather.config import AppConfig, load_config
from secarweather.nws_api import WeatherApi


NOW = dt.datetime(2026, 7, 4, 16, 5, tzinfo=dt.timezone.utc)


def alert(event: str, severity: str = "Unknown", expires: dt.datetime | None = None) -> AlertRecord:
    return AlertRecord(
        event=event,
        severity=severity,  # type: ignore[arg-type]
        area_desc="Test County",
        expires=expires if expires is not None else NOW + dt.timedelta(hours=6),
    )


def feature(event: str, severity: str = "Moderate", expires: str = "2026-07-04T22:00:00-04:00") -> Dict[str, Any]:
    return {
        "type": "Feature",
        "properties": {
            "event": event,
            "severity": severity,
            "areaDesc": "Test County",
            "expires": expires,
        },
    }


def with_api(handler: Callable[[httpx.Request], httpx.Response], fn: Callable[[WeatherApi], Awaitable[Any]]) -> Any:
    """Run ``fn(api)`` against a mocked transport and close the client afterwards."""

    async def _go() -> Any:
        api = WeatherApi(transport=httpx.MockTransport(handler))
        try:
            return await fn(api)
        finally:
            await api.aclose()

    return asyncio.run(_go())


@pytest.fixture
def cfg() -> AppConfig:
    return load_config()
