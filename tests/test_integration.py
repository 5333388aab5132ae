"""Integration tests for the HTTP API and the public-data client.

Each test drives the FastAPI app in-process through httpx's ASGITransport.
The public data service is swapped for a seeded one (or a failing one) via
FastAPI dependency overrides so the mocked readings are reproducible.
"""
import math
import random
from datetime import datetime
from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient, MockTransport, Response

from api.main import app
from api.routes import get_public_data_service
from core.client import PublicDataClient
from core.public_data import PublicDataError, PublicDataService


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_NOW = datetime(2024, 6, 21, 9, 0, 0)


class _BrokenService(PublicDataService):
    """Service whose every upstream call fails."""

    async def get_uv_index(self, location):
        raise PublicDataError("UV 데이터를 가져오는데 실패했습니다")

    async def get_building_data(self, address):
        raise PublicDataError("건물 데이터를 가져오는데 실패했습니다")

    async def get_weather_forecast(self, lat, lon):
        raise PublicDataError("날씨 예보 데이터를 가져오는데 실패했습니다")


@pytest.fixture
def seeded_service():
    service = PublicDataService(rng=random.Random(42), now=lambda: _NOW)
    app.dependency_overrides[get_public_data_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


@pytest.fixture
def broken_service():
    app.dependency_overrides[get_public_data_service] = lambda: _BrokenService()
    yield
    app.dependency_overrides.clear()


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


# ---------------------------------------------------------------------------
# /health
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_health():
    async with _client() as client:
        resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


# ---------------------------------------------------------------------------
# /api/public-data
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_public_data_defaults_to_uv_for_pilot_district(seeded_service):
    async with _client() as client:
        resp = await client.get("/api/public-data")

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["location"] == "광진구"
    assert body["data"]["source"] == "KMA"
    assert 1 <= body["data"]["uv_index"] <= 11


@pytest.mark.asyncio
async def test_public_data_normalises_location_whitespace(seeded_service):
    async with _client() as client:
        resp = await client.get("/api/public-data", params={"type": "uv", "location": "  광진구   자양동 "})

    assert resp.json()["data"]["location"] == "광진구 자양동"


@pytest.mark.asyncio
async def test_public_data_buildings(seeded_service):
    async with _client() as client:
        resp = await client.get("/api/public-data", params={"type": "buildings", "location": "광진구"})

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert len(data) == 3
    assert data[2]["building_name"] == "롯데캐슬 자이언트"
    assert data[2]["height"] == 140
    assert data[0]["coordinates"] == [127.0845, 37.5384]


@pytest.mark.asyncio
async def test_public_data_trees(seeded_service):
    async with _client() as client:
        resp = await client.get("/api/public-data", params={"type": "trees"})

    data = resp.json()["data"]
    assert [t["species"] for t in data] == ["플라타너스", "은행나무"]


@pytest.mark.asyncio
async def test_public_data_weather(seeded_service):
    async with _client() as client:
        resp = await client.get(
            "/api/public-data", params={"type": "weather", "lat": 37.54, "lon": 127.07}
        )

    data = resp.json()["data"]
    assert len(data) == 8
    assert data[0]["timestamp"].startswith("2024-06-21T09:00:00")
    assert {"temperature", "humidity", "wind_speed", "cloud_cover", "uv_index"} <= data[0].keys()


@pytest.mark.asyncio
async def test_public_data_invalid_type_returns_400(seeded_service):
    async with _client() as client:
        resp = await client.get("/api/public-data", params={"type": "parking"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid data type"}


@pytest.mark.asyncio
async def test_public_data_upstream_failure_returns_500(broken_service):
    async with _client() as client:
        resp = await client.get("/api/public-data", params={"type": "buildings"})

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Failed to fetch public data"}


# ---------------------------------------------------------------------------
# /shade-score
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_shade_score_with_explicit_angle_and_hour():
    async with _client() as client:
        resp = await client.post(
            "/shade-score",
            json={
                "buildings": [{"height": 32}],
                "trees": [{"canopy_radius": 8, "shade_effectiveness": 0.8}],
                "sun_angle": math.pi / 4,
                "time_of_day": 13,
            },
        )

    assert resp.status_code == 200
    data = resp.json()
    assert data["score"] == pytest.approx(2.566, abs=0.01)
    assert data["peak_hour"] is True
    assert data["multiplier"] == 1.5
    assert data["time_of_day"] == 13


@pytest.mark.asyncio
async def test_shade_score_empty_inputs_off_peak():
    async with _client() as client:
        resp = await client.post("/shade-score", json={"sun_angle": 1.0, "time_of_day": 9})

    data = resp.json()
    assert data["score"] == 0.0
    assert data["peak_hour"] is False
    assert data["multiplier"] == 1.0


@pytest.mark.asyncio
async def test_shade_score_derives_angle_and_hour_from_time():
    """04:00 UTC is 13:00 in Seoul; the sun angle comes from pvlib (patched)."""
    with patch("api.routes.get_sun_elevation", return_value=math.pi / 4) as sun:
        async with _client() as client:
            resp = await client.post(
                "/shade-score",
                json={
                    "buildings": [{"height": 32}],
                    "trees": [{"canopy_radius": 8, "shade_effectiveness": 0.8}],
                    "dt": "2024-06-21T04:00:00Z",
                },
            )

    assert resp.status_code == 200
    data = resp.json()
    assert data["time_of_day"] == 13
    assert data["sun_angle"] == pytest.approx(math.pi / 4)
    assert data["score"] == pytest.approx(2.566, abs=0.01)
    lat, lon, _ = sun.call_args.args
    assert (lat, lon) == (37.5384, 127.0845)


@pytest.mark.asyncio
async def test_shade_score_horizon_angle_returns_422():
    async with _client() as client:
        resp = await client.post(
            "/shade-score",
            json={"buildings": [{"height": 20}], "sun_angle": 0.0, "time_of_day": 12},
        )

    assert resp.status_code == 422
    assert "horizon" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_shade_score_overflowing_canopy_returns_422():
    async with _client() as client:
        resp = await client.post(
            "/shade-score",
            json={
                "trees": [{"canopy_radius": 1e200, "shade_effectiveness": 0.5}],
                "sun_angle": 0.8,
                "time_of_day": 12,
            },
        )

    assert resp.status_code == 422
    assert "not finite" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_shade_score_rejects_invalid_records():
    async with _client() as client:
        negative = await client.post(
            "/shade-score", json={"buildings": [{"height": -5}], "sun_angle": 1.0, "time_of_day": 9}
        )
        too_effective = await client.post(
            "/shade-score",
            json={"trees": [{"canopy_radius": 3, "shade_effectiveness": 1.2}], "sun_angle": 1.0, "time_of_day": 9},
        )
        bad_hour = await client.post("/shade-score", json={"sun_angle": 1.0, "time_of_day": 24})

    assert negative.status_code == 422
    assert too_effective.status_code == 422
    assert bad_hour.status_code == 422


# ---------------------------------------------------------------------------
# /uv-warning and /uv-forecast
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_uv_warning_below_threshold_is_null():
    async with _client() as client:
        resp = await client.get("/uv-warning", params={"uv_index": 5})

    assert resp.status_code == 200
    assert resp.json() is None


@pytest.mark.asyncio
async def test_uv_warning_very_high():
    async with _client() as client:
        resp = await client.get("/uv-warning", params={"uv_index": 8, "location": "광진구"})

    data = resp.json()
    assert data["level"] == "very-high"
    assert data["priority"] == 3
    assert data["message"].startswith("광진구에서")
    assert len(data["recommendations"]) == 4


@pytest.mark.asyncio
async def test_uv_forecast(seeded_service):
    async with _client() as client:
        resp = await client.get("/uv-forecast")

    assert resp.status_code == 200
    data = resp.json()
    hours = data["hours"]
    assert data["location"] == "광진구"
    assert len(hours) == 8
    assert hours[0]["trend"] == "same"
    assert data["peak"]["uv_index"] == max(h["uv_index"] for h in hours)
    for h in hours:
        assert h["recommendation"] in ("safe", "caution", "danger")
        assert h["grade"] in ("낮음", "보통", "높음", "매우높음", "위험")


@pytest.mark.asyncio
async def test_uv_forecast_upstream_failure_returns_502(broken_service):
    async with _client() as client:
        resp = await client.get("/uv-forecast")

    assert resp.status_code == 502


# ---------------------------------------------------------------------------
# /routes/compare
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_routes_compare():
    async with _client() as client:
        resp = await client.get("/routes/compare")

    data = resp.json()
    assert [r["id"] for r in data["routes"]] == ["shade-route", "fast-route"]
    assert data["routes"][0]["uv_grade"] == "높음"
    assert data["comparison"]["extra_minutes"] == 3
    assert data["comparison"]["exposure_saved_minutes"] == 7
    assert data["comparison"]["exposure_reduction_pct"] == 54
    assert data["comparison"]["temp_difference"] == 5.0


# ---------------------------------------------------------------------------
# PublicDataClient against the in-process app
# ---------------------------------------------------------------------------

def _public_client() -> PublicDataClient:
    return PublicDataClient("http://test", transport=ASGITransport(app=app))


@pytest.mark.asyncio
async def test_client_round_trips_buildings_and_trees(seeded_service):
    client = _public_client()

    buildings = await client.get_building_data("광진구")
    trees = await client.get_street_tree_data("광진구")

    assert [b.height for b in buildings] == [32, 60, 140]
    assert trees[0].canopy_radius == 8


@pytest.mark.asyncio
async def test_client_uv_and_weather(seeded_service):
    client = _public_client()

    uv = await client.get_uv_index("광진구")
    forecast = await client.get_weather_forecast(37.5384, 127.0845)

    assert uv.source == "KMA"
    assert len(forecast) == 8


@pytest.mark.asyncio
async def test_client_raises_on_unsuccessful_response(broken_service):
    client = _public_client()

    with pytest.raises(PublicDataError, match="Failed to fetch public data"):
        await client.get_uv_index("광진구")


def _canned_client(status: int, body: str) -> PublicDataClient:
    transport = MockTransport(lambda request: Response(status, text=body))
    return PublicDataClient("http://test", transport=transport)


@pytest.mark.asyncio
async def test_client_non_json_error_body_raises_public_data_error():
    client = _canned_client(502, "<html><body>Bad Gateway</body></html>")

    with pytest.raises(PublicDataError, match="UV 데이터를 가져오는데 실패했습니다"):
        await client.get_uv_index("광진구")


@pytest.mark.asyncio
async def test_client_non_json_success_body_raises_public_data_error():
    client = _canned_client(200, "maintenance")

    with pytest.raises(PublicDataError, match="건물 데이터를 가져오는데 실패했습니다"):
        await client.get_building_data("광진구")


@pytest.mark.asyncio
async def test_client_json_error_without_message_uses_fallback():
    client = _canned_client(503, "[]")

    with pytest.raises(PublicDataError, match="날씨 예보 데이터를 가져오는데 실패했습니다"):
        await client.get_weather_forecast(37.5384, 127.0845)
