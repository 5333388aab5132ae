"""API route definitions."""
import logging
from datetime import datetime, timezone
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from core.comparison import RouteComparison, compare_routes, describe_route, mock_routes
from core.geo import PILOT_DISTRICT, format_korean_address
from core.public_data import PublicDataService
from core.shade import (
    PEAK_MULTIPLIER,
    ShadeScoreError,
    estimate_shade_score,
    is_peak_hour,
)
from core.solar import get_solar_position, get_sun_elevation, local_hour
from core.uv import UVWarning, forecast_recommendation, generate_warning, peak_uv, uv_grade, uv_trend

router = APIRouter()

_log = logging.getLogger(__name__)

# 광진구청; default point for the pilot district.
DEFAULT_LAT = 37.5384
DEFAULT_LON = 127.0845


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------

class BuildingIn(BaseModel):
    height: float = Field(..., gt=0, description="Building height in meters")


class TreeIn(BaseModel):
    canopy_radius: float = Field(..., gt=0, description="Canopy radius in meters")
    shade_effectiveness: float = Field(
        ..., ge=0, le=1, description="Fraction of the canopy that blocks direct sun"
    )


class ShadeScoreRequest(BaseModel):
    buildings: list[BuildingIn] = Field(default_factory=list)
    trees: list[TreeIn] = Field(default_factory=list)
    sun_angle: Optional[float] = Field(
        None, description="Solar elevation in radians; derived from lat/lon/dt when omitted"
    )
    time_of_day: Optional[int] = Field(
        None, ge=0, le=23, description="Local hour; derived from dt when omitted"
    )
    lat: float = Field(DEFAULT_LAT, description="Latitude used to derive the sun angle")
    lon: float = Field(DEFAULT_LON, description="Longitude used to derive the sun angle")
    dt: Optional[datetime] = Field(
        None, description="ISO datetime; naive timestamps assumed UTC, defaults to now"
    )


class ShadeScoreResponse(BaseModel):
    score: float
    sun_angle: float
    time_of_day: int
    peak_hour: bool
    multiplier: float


class ForecastEntry(BaseModel):
    timestamp: datetime
    uv_index: float
    grade: str
    trend: Literal["up", "down", "same"]
    recommendation: Literal["safe", "caution", "danger"]
    temperature: float


class ForecastResponse(BaseModel):
    location: str
    hours: list[ForecastEntry]
    peak: ForecastEntry


class RouteCompareResponse(BaseModel):
    routes: list[dict]
    comparison: Optional[RouteComparison]


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

_service = PublicDataService()


def get_public_data_service() -> PublicDataService:
    return _service


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/api/public-data")
async def public_data(
    data_type: str = Query("uv", alias="type", description="uv | buildings | trees | weather"),
    location: str = Query(PILOT_DISTRICT, description="District or address"),
    lat: float = Query(DEFAULT_LAT),
    lon: float = Query(DEFAULT_LON),
    service: PublicDataService = Depends(get_public_data_service),
):
    """
    Proxy to the public data portal. Responds with ``{"success": true,
    "data": ...}``; unknown types get a 400 and service failures a 500.
    """
    location = format_korean_address(location)
    try:
        if data_type == "uv":
            data = await service.get_uv_index(location)
        elif data_type == "buildings":
            data = await service.get_building_data(location)
        elif data_type == "trees":
            data = await service.get_street_tree_data(location)
        elif data_type == "weather":
            data = await service.get_weather_forecast(lat, lon)
        else:
            return JSONResponse({"error": "Invalid data type"}, status_code=400)
    except Exception:
        _log.exception("Public data API error (type=%s, location=%s)", data_type, location)
        return JSONResponse(
            {"success": False, "error": "Failed to fetch public data"}, status_code=500
        )

    return JSONResponse({"success": True, "data": jsonable_encoder(data)})


@router.get("/sun-position")
def sun_position(
    lat: float = Query(DEFAULT_LAT, description="Latitude"),
    lon: float = Query(DEFAULT_LON, description="Longitude"),
    dt: datetime = Query(default=None, description="ISO datetime (UTC); defaults to now"),
):
    if dt is None:
        dt = datetime.now(timezone.utc)
    return get_solar_position(lat, lon, dt)


@router.post("/shade-score", response_model=ShadeScoreResponse)
def shade_score(body: ShadeScoreRequest) -> ShadeScoreResponse:
    """
    Score how much shade the given buildings and trees provide.

    Missing ``sun_angle`` / ``time_of_day`` are derived from the location and
    time (pvlib solar elevation, local hour in the pilot district's zone).
    """
    dt = body.dt or datetime.now(timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    sun_angle = body.sun_angle
    if sun_angle is None:
        sun_angle = get_sun_elevation(body.lat, body.lon, dt)
    time_of_day = body.time_of_day
    if time_of_day is None:
        time_of_day = local_hour(dt)

    try:
        score = estimate_shade_score(body.buildings, body.trees, sun_angle, time_of_day)
    except ShadeScoreError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    peak = is_peak_hour(time_of_day)
    return ShadeScoreResponse(
        score=round(score, 4),
        sun_angle=sun_angle,
        time_of_day=time_of_day,
        peak_hour=peak,
        multiplier=PEAK_MULTIPLIER if peak else 1.0,
    )


@router.get("/uv-warning", response_model=Optional[UVWarning])
def uv_warning(
    uv_index: float = Query(..., ge=0, description="Current UV index"),
    location: str = Query(PILOT_DISTRICT),
) -> Optional[UVWarning]:
    return generate_warning(uv_index, format_korean_address(location))


@router.get("/uv-forecast", response_model=ForecastResponse)
async def uv_forecast(
    location: str = Query(PILOT_DISTRICT),
    lat: float = Query(DEFAULT_LAT),
    lon: float = Query(DEFAULT_LON),
    service: PublicDataService = Depends(get_public_data_service),
) -> ForecastResponse:
    """Hourly UV outlook with grade, trend and a go/no-go recommendation."""
    try:
        weather = await service.get_weather_forecast(lat, lon)
    except ValueError as exc:
        raise HTTPException(status_code=502, detail=str(exc))

    raw = [{"uv_index": round(w.uv_index, 1), "timestamp": w.timestamp,
            "temperature": round(w.temperature, 1)} for w in weather]
    trends = uv_trend(raw)
    hours = [
        ForecastEntry(
            timestamp=item["timestamp"],
            uv_index=item["uv_index"],
            grade=uv_grade(item["uv_index"]),
            trend=trend,
            recommendation=forecast_recommendation(item["uv_index"]),
            temperature=item["temperature"],
        )
        for item, trend in zip(raw, trends)
    ]
    peak_index = raw.index(peak_uv(raw))
    return ForecastResponse(location=location, hours=hours, peak=hours[peak_index])


@router.get("/routes/compare", response_model=RouteCompareResponse)
def routes_compare() -> RouteCompareResponse:
    routes = mock_routes()
    return RouteCompareResponse(
        routes=[describe_route(r) for r in routes],
        comparison=compare_routes(routes),
    )
