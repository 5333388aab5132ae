"""Shade-route vs fast-route comparison."""
from typing import Literal, Optional

from pydantic import BaseModel

from core.uv import uv_grade, uv_level


class RouteSummary(BaseModel):
    id: str
    type: Literal["shade", "fast"]
    name: str
    total_time: int          # minutes
    total_distance: float    # km
    exposure_time: int       # minutes in direct sun
    shade_percentage: float
    avg_uv: float
    estimated_temp: float    # °C


class RouteComparison(BaseModel):
    extra_minutes: int
    exposure_saved_minutes: int
    shade_gain_pct: float
    uv_reduction: float
    exposure_reduction_pct: int
    temp_difference: float  # °C cooler on the shade route
    summary: str


def format_minutes(minutes: int) -> str:
    """Render a duration the way the route cards do: ``18분`` or ``1시간 5분``."""
    if minutes < 60:
        return f"{minutes}분"
    hours, mins = divmod(minutes, 60)
    return f"{hours}시간 {mins}분"


def mock_routes() -> list[RouteSummary]:
    """The pilot's canned shade/fast pair between two 광진구 points."""
    return [
        RouteSummary(
            id="shade-route",
            type="shade",
            name="그늘길",
            total_time=18,
            total_distance=1.2,
            exposure_time=6,
            shade_percentage=72,
            avg_uv=5.2,
            estimated_temp=28,
        ),
        RouteSummary(
            id="fast-route",
            type="fast",
            name="빠른길",
            total_time=15,
            total_distance=1.0,
            exposure_time=13,
            shade_percentage=25,
            avg_uv=8.1,
            estimated_temp=33,
        ),
    ]


def describe_route(route: RouteSummary) -> dict:
    return {
        **route.model_dump(),
        "uv_level": uv_level(route.avg_uv),
        "uv_grade": uv_grade(route.avg_uv),
        "total_time_text": format_minutes(route.total_time),
    }


def compare_routes(routes: list[RouteSummary]) -> Optional[RouteComparison]:
    """
    Compare the shade route against the fast route.

    Returns None unless both a "shade" and a "fast" route are present. When
    several routes share a type the first one is used.
    """
    shade = next((r for r in routes if r.type == "shade"), None)
    fast = next((r for r in routes if r.type == "fast"), None)
    if shade is None or fast is None:
        return None

    extra = shade.total_time - fast.total_time
    saved = fast.exposure_time - shade.exposure_time
    # No sun on the fast route means nothing to reduce.
    reduction_pct = round(saved / fast.exposure_time * 100) if fast.exposure_time > 0 else 0
    if extra > 0:
        summary = f"{format_minutes(extra)} 더 걸리지만 햇빛 노출이 {saved}분 줄어듭니다"
    else:
        summary = f"시간 손해 없이 햇빛 노출이 {saved}분 줄어듭니다"

    return RouteComparison(
        extra_minutes=extra,
        exposure_saved_minutes=saved,
        shade_gain_pct=round(shade.shade_percentage - fast.shade_percentage, 1),
        uv_reduction=round(fast.avg_uv - shade.avg_uv, 1),
        exposure_reduction_pct=reduction_pct,
        temp_difference=round(fast.estimated_temp - shade.estimated_temp, 1),
        summary=summary,
    )
