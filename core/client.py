"""Async client for the /api/public-data proxy endpoint."""
import logging
from typing import Any, Optional

import httpx

from core.public_data import (
    BuildingData,
    PublicDataError,
    StreetTree,
    UVIndexData,
    WeatherData,
)

_log = logging.getLogger(__name__)

_ENDPOINT = "/api/public-data"


class PublicDataClient:
    """
    Thin wrapper over the proxy endpoint; unwraps ``{"success", "data"}``.

    Args:
        base_url:  Root URL of the API (e.g. ``http://localhost:8000``).
        transport: Optional httpx transport, e.g. ``ASGITransport(app=app)``.
    """

    def __init__(
        self,
        base_url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10,
    ):
        self.base_url = base_url
        self._transport = transport
        self._timeout = timeout

    async def _fetch(self, params: dict, failure_message: str) -> Any:
        async with httpx.AsyncClient(
            base_url=self.base_url, transport=self._transport, timeout=self._timeout
        ) as client:
            response = await client.get(_ENDPOINT, params=params)

        try:
            result = response.json()
        except ValueError:
            # Proxies in front of the API answer errors with HTML or plain text.
            _log.warning(
                "Public data request %s failed with HTTP %d: non-JSON body",
                params, response.status_code,
            )
            raise PublicDataError(failure_message) from None
        if not isinstance(result, dict):
            result = {}

        if not response.is_success or not result.get("success"):
            _log.warning(
                "Public data request %s failed with HTTP %d: %s",
                params, response.status_code, result.get("error"),
            )
            raise PublicDataError(result.get("error") or failure_message)
        return result["data"]

    async def get_uv_index(self, location: str) -> UVIndexData:
        data = await self._fetch(
            {"type": "uv", "location": location}, "UV 데이터를 가져오는데 실패했습니다"
        )
        return UVIndexData(**data)

    async def get_building_data(self, address: str) -> list[BuildingData]:
        data = await self._fetch(
            {"type": "buildings", "location": address}, "건물 데이터를 가져오는데 실패했습니다"
        )
        return [BuildingData(**item) for item in data]

    async def get_street_tree_data(self, district: str) -> list[StreetTree]:
        data = await self._fetch(
            {"type": "trees", "location": district}, "가로수 데이터를 가져오는데 실패했습니다"
        )
        return [StreetTree(**item) for item in data]

    async def get_weather_forecast(self, lat: float, lon: float) -> list[WeatherData]:
        data = await self._fetch(
            {"type": "weather", "lat": lat, "lon": lon}, "날씨 예보 데이터를 가져오는데 실패했습니다"
        )
        return [WeatherData(**item) for item in data]
