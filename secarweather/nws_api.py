from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx


DEFAULT_UA = "SECAR-Weather-Report (github.com/franzenjb/SECAR-claude)"


class WeatherApi:
    """
    Thin async wrapper over the public NWS/NHC endpoints.

    Single attempt per request; callers decide what a failure means.
    """

    def __init__(
        self,
        timeout: float = 15.0,
        user_agent: str = DEFAULT_UA,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={
                "User-Agent": user_agent,
                "Accept": "application/geo+json, application/json;q=0.9, */*;q=0.1",
            },
            follow_redirects=True,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        r = await self._client.get(url, params=params, headers=headers)
        r.raise_for_status()
        return r.json()

    async def get_text(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        r = await self._client.get(url, headers=headers)
        r.raise_for_status()
        return r.text

    async def active_alerts(self, url: str, area: str) -> List[Dict[str, Any]]:
        # area = state/territory abbreviation (e.g. "FL")
        data = await self.get_json(url, params={"area": area})
        if not isinstance(data, dict):
            raise ValueError("alerts response JSON was not an object")
        feats = data.get("features")
        return list(feats) if isinstance(feats, list) else []
