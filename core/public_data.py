"""Korean public data portal services (KMA, building registry, Seoul trees).

Every service here is mocked: the production endpoints are recorded below but
never called (each mocked call logs the endpoint it stands in for at debug
level), and the responses are generated locally.
"""
import logging
import os
import random
from datetime import datetime, timedelta
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from core.geo import PILOT_DISTRICT
from core.shade import estimate_shade_score
from core.uv import estimate_uv_from_hour, uv_grade

load_dotenv()

_log = logging.getLogger(__name__)

KMA_UV_URL = "https://apis.data.go.kr/1360000/LivingWthrIdxServiceV4/getUVIdxV4"
KMA_FORECAST_URL = "https://apis.data.go.kr/1360000/VilageFcstInfoService_2.0/getVilageFcst"
BUILDING_REGISTRY_URL = "https://apis.data.go.kr/1613000/BldRgstService_v2/getBrRecapTitleInfo"

_DEMO_KEY = "demo-key"

FORECAST_HOURS = 8


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

class UVIndexData(BaseModel):
    location: str
    uv_index: int
    grade: str
    date: str
    time: str
    source: Literal["KMA"] = "KMA"


class WeatherData(BaseModel):
    location: str
    temperature: float
    humidity: float
    wind_speed: float
    cloud_cover: float
    uv_index: float
    timestamp: datetime


class BuildingData(BaseModel):
    building_name: str
    address: str
    floors: int
    height: float
    coordinates: tuple[float, float]  # (lon, lat)
    building_type: str


class StreetTree(BaseModel):
    species: str
    location: str
    coordinates: tuple[float, float]  # (lon, lat)
    canopy_radius: float
    height: float
    shade_effectiveness: float


class PublicDataError(ValueError):
    """Raised when a public data service cannot produce a result."""


_MOCK_BUILDINGS = [
    BuildingData(
        building_name="광진구청",
        address="서울특별시 광진구 자양동",
        floors=8,
        height=32,
        coordinates=(127.0845, 37.5384),
        building_type="공공시설",
    ),
    BuildingData(
        building_name="건국대학교 새천년관",
        address="서울특별시 광진구 화양동",
        floors=15,
        height=60,
        coordinates=(127.0736, 37.5419),
        building_type="교육시설",
    ),
    BuildingData(
        building_name="롯데캐슬 자이언트",
        address="서울특별시 광진구 자양동",
        floors=35,
        height=140,
        coordinates=(127.0892, 37.5341),
        building_type="공동주택",
    ),
]

_MOCK_TREES = [
    StreetTree(
        species="플라타너스",
        location="광진구 아차산로",
        coordinates=(127.0845, 37.5384),
        canopy_radius=8,
        height=15,
        shade_effectiveness=0.8,
    ),
    StreetTree(
        species="은행나무",
        location="광진구 능동로",
        coordinates=(127.0736, 37.5419),
        canopy_radius=6,
        height=12,
        shade_effectiveness=0.7,
    ),
]


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class PublicDataService:
    """
    Server-side access to the public data portal.

    Args:
        rng:     Random source for the mocked readings; pass a seeded
                 ``random.Random`` for reproducible output.
        now:     Clock used for timestamps (defaults to ``datetime.now``).
    """

    def __init__(self, rng: Optional[random.Random] = None, now=None):
        self.kma_api_key = os.getenv("KMA_API_KEY", _DEMO_KEY)
        self.building_api_key = os.getenv("BUILDING_API_KEY", _DEMO_KEY)
        self._rng = rng or random.Random()
        self._now = now or datetime.now

    def _stand_in(self, url: str, api_key: str) -> None:
        _log.debug(
            "Mocked response standing in for %s (%s key)",
            url, "demo" if api_key == _DEMO_KEY else "configured",
        )

    async def get_uv_index(self, location: str) -> UVIndexData:
        """KMA life weather index: current UV index for a location."""
        self._stand_in(KMA_UV_URL, self.kma_api_key)
        try:
            uv = self._rng.randint(1, 11)
            now = self._now()
            return UVIndexData(
                location=location,
                uv_index=uv,
                grade=uv_grade(uv),
                date=now.date().isoformat(),
                time=now.strftime("%H:%M:%S"),
            )
        except Exception as exc:
            _log.error("Error fetching UV data for %s: %s", location, exc)
            raise PublicDataError("UV 데이터를 가져오는데 실패했습니다") from exc

    async def get_weather_forecast(self, lat: float, lon: float) -> list[WeatherData]:
        """
        KMA short-term forecast: FORECAST_HOURS hourly readings from now.

        The mocked UV index follows the clear-sky curve around 13:00 with up
        to +2 of noise; the other readings are uniform within plausible summer
        ranges.
        """
        self._stand_in(KMA_FORECAST_URL, self.kma_api_key)
        try:
            now = self._now()
            forecast = []
            for i in range(FORECAST_HOURS):
                hour = now.hour + i
                forecast.append(WeatherData(
                    location=PILOT_DISTRICT,
                    temperature=25 + self._rng.random() * 10,
                    humidity=40 + self._rng.random() * 40,
                    wind_speed=self._rng.random() * 5,
                    cloud_cover=self._rng.random() * 100,
                    uv_index=max(0.0, estimate_uv_from_hour(hour) + self._rng.random() * 2),
                    timestamp=now + timedelta(hours=i),
                ))
            return forecast
        except Exception as exc:
            _log.error("Error fetching weather forecast at (%.4f, %.4f): %s", lat, lon, exc)
            raise PublicDataError("날씨 예보 데이터를 가져오는데 실패했습니다") from exc

    async def get_building_data(self, address: str) -> list[BuildingData]:
        """Ministry of Land building registry: buildings near an address."""
        self._stand_in(BUILDING_REGISTRY_URL, self.building_api_key)
        return [b.model_copy() for b in _MOCK_BUILDINGS]

    async def get_street_tree_data(self, district: str) -> list[StreetTree]:
        """Seoul street tree inventory: shade-providing trees in a district."""
        return [t.model_copy() for t in _MOCK_TREES]

    async def calculate_shade_score(
        self, location: str, sun_angle: float, time_of_day: int
    ) -> float:
        """Shade score for a location from its registered buildings and trees."""
        buildings = await self.get_building_data(location)
        trees = await self.get_street_tree_data(location)
        return estimate_shade_score(buildings, trees, sun_angle, time_of_day)
