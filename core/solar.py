"""Solar position calculations using pvlib."""
import math
from datetime import datetime, timezone

import pandas as pd
import pvlib


def _solar_position(lat: float, lon: float, dt: datetime) -> pd.DataFrame:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    times = pd.DatetimeIndex([dt])
    location = pvlib.location.Location(latitude=lat, longitude=lon)
    return location.get_solarposition(times)


def get_solar_position(lat: float, lon: float, dt: datetime) -> dict:
    """
    Return solar azimuth and elevation for a given location and time.

    Naive datetimes are assumed to be UTC.

    Returns:
        dict with keys:
            azimuth   – degrees clockwise from north (0–360)
            elevation – apparent degrees above horizon (negative when below)
    """
    solar_pos = _solar_position(lat, lon, dt)
    return {
        "azimuth": round(float(solar_pos["azimuth"].iloc[0]), 4),
        "elevation": round(float(solar_pos["apparent_elevation"].iloc[0]), 4),
    }


def get_sun_elevation(lat: float, lon: float, dt: datetime) -> float:
    """Apparent solar elevation in radians, as consumed by the shade estimator."""
    solar_pos = _solar_position(lat, lon, dt)
    return math.radians(float(solar_pos["apparent_elevation"].iloc[0]))


def local_hour(dt: datetime, tz: str = "Asia/Seoul") -> int:
    """Hour of day of ``dt`` in the given time zone; naive datetimes are UTC."""
    ts = pd.Timestamp(dt)
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    return ts.tz_convert(tz).hour
