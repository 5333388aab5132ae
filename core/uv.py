"""UV index grading, warnings and forecast helpers."""
from typing import Literal, Optional

from pydantic import BaseModel

UVLevel = Literal["low", "moderate", "high", "very-high", "extreme"]
Recommendation = Literal["safe", "caution", "danger"]

# Upper bound (inclusive) of each band; anything above the last is extreme.
_UV_BANDS: list[tuple[float, str, str]] = [
    (2, "low", "낮음"),
    (5, "moderate", "보통"),
    (7, "high", "높음"),
    (10, "very-high", "매우높음"),
]
_EXTREME = ("extreme", "위험")

# Warnings are only raised from this UV index upwards.
WARNING_THRESHOLD = 6

_WARNING_PRIORITY = {"high": 2, "very-high": 3, "extreme": 4}

_WARNING_TEXT: dict[str, tuple[str, list[str]]] = {
    "high": (
        "{location}에서 자외선 지수가 높습니다 ({uv})",
        ["그늘길 이용을 권장합니다", "선크림을 발라주세요", "모자나 양산을 착용하세요"],
    ),
    "very-high": (
        "{location}에서 자외선 지수가 매우 높습니다 ({uv})",
        [
            "그늘길을 반드시 이용하세요",
            "장시간 야외활동을 피하세요",
            "자외선 차단용품을 착용하세요",
            "수분을 충분히 섭취하세요",
        ],
    ),
    "extreme": (
        "{location}에서 자외선 지수가 위험 수준입니다 ({uv})",
        [
            "야외활동을 자제하세요",
            "불가피한 경우 그늘길만 이용하세요",
            "완전한 자외선 차단복을 착용하세요",
            "10-15분마다 그늘에서 휴식하세요",
        ],
    ),
}


class UVWarning(BaseModel):
    level: UVLevel
    uv_index: float
    location: str
    message: str
    recommendations: list[str]
    priority: int


def _band(uv: float) -> tuple[str, str]:
    for upper, level, label in _UV_BANDS:
        if uv <= upper:
            return level, label
    return _EXTREME


def uv_level(uv: float) -> UVLevel:
    """Band key for a UV index (low / moderate / high / very-high / extreme)."""
    return _band(uv)[0]


def uv_grade(uv: float) -> str:
    """Korean display label for a UV index, as published by KMA."""
    return _band(uv)[1]


def generate_warning(uv_index: float, location: str) -> Optional[UVWarning]:
    """
    Build a UV exposure warning for a location.

    Returns None below WARNING_THRESHOLD. Above it the level decides the
    message and how many recommendations are attached.
    """
    if uv_index < WARNING_THRESHOLD:
        return None

    level = uv_level(uv_index)
    template, recommendations = _WARNING_TEXT[level]
    return UVWarning(
        level=level,
        uv_index=uv_index,
        location=location,
        message=template.format(location=location, uv=uv_index),
        recommendations=list(recommendations),
        priority=_WARNING_PRIORITY[level],
    )


def forecast_recommendation(uv: float) -> Recommendation:
    if uv >= 8:
        return "danger"
    if uv >= WARNING_THRESHOLD:
        return "caution"
    return "safe"


def estimate_uv_from_hour(hour: float) -> float:
    """Clear-sky UV estimate peaking at 11 around 13:00 local time."""
    return max(0.0, 11 - abs(hour - 13) * 1.5)


def peak_uv(forecast: list[dict]) -> dict:
    """Forecast entry with the highest ``uv_index``; the earliest wins ties."""
    if not forecast:
        raise ValueError("Cannot find the UV peak of an empty forecast.")
    peak = forecast[0]
    for entry in forecast[1:]:
        if entry["uv_index"] > peak["uv_index"]:
            peak = entry
    return peak


def uv_trend(forecast: list[dict]) -> list[Literal["up", "down", "same"]]:
    """Direction of each entry's UV index relative to the entry before it."""
    trends: list[Literal["up", "down", "same"]] = []
    prev = None
    for entry in forecast:
        uv = entry["uv_index"]
        if prev is None or uv == prev:
            trends.append("same")
        elif uv > prev:
            trends.append("up")
        else:
            trends.append("down")
        prev = uv
    return trends
