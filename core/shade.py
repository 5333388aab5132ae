"""Heuristic shade-coverage score from building shadows and tree canopies."""
import math
from dataclasses import dataclass
from typing import Sequence

# Hours (inclusive) during which the accumulated shade is weighted up.
PEAK_HOURS = (11, 15)
PEAK_MULTIPLIER = 1.5

SCORE_MIN = 0.0
SCORE_MAX = 100.0

# |sin(sun_angle)| below this is treated as the cotangent's singular point.
_MIN_SIN = 1e-9


class ShadeScoreError(ValueError):
    """Raised when the inputs cannot produce a meaningful shade score."""


class DegenerateSunAngleError(ShadeScoreError):
    """Raised when the sun angle makes the shadow term undefined."""


class NonFiniteShadeError(ShadeScoreError):
    """Raised when building or tree attributes drive the score to inf or NaN."""


@dataclass(frozen=True)
class Building:
    height: float  # meters


@dataclass(frozen=True)
class Tree:
    canopy_radius: float        # meters
    shade_effectiveness: float  # 0–1, fraction of canopy blocking direct sun


def _check_sun_angle(sun_angle: float) -> None:
    if not math.isfinite(sun_angle):
        raise DegenerateSunAngleError(f"Sun angle must be finite, got {sun_angle!r}")
    if abs(math.sin(sun_angle)) < _MIN_SIN:
        raise DegenerateSunAngleError(
            f"Sun angle {sun_angle!r} rad lies on the horizon; shadow length is unbounded"
        )


def building_shadow_term(height: float, sun_angle: float) -> float:
    """Shade contribution of one building: shadow length × height, scaled down."""
    shadow_length = height * math.tan(math.pi / 2 - sun_angle)
    shadow_area = shadow_length * height * 0.1
    return shadow_area * 0.001


def tree_canopy_term(canopy_radius: float, shade_effectiveness: float) -> float:
    """Shade contribution of one tree: effective canopy disc area, scaled down."""
    # Plain product: overflows to inf instead of raising like float.__pow__.
    canopy_area = math.pi * canopy_radius * canopy_radius
    return canopy_area * shade_effectiveness * 0.01


def is_peak_hour(time_of_day: int) -> bool:
    return PEAK_HOURS[0] <= time_of_day <= PEAK_HOURS[1]


def estimate_shade_score(
    buildings: Sequence,
    trees: Sequence,
    sun_angle: float,
    time_of_day: int,
) -> float:
    """
    Estimate a relative shade-coverage score in [0, 100].

    Args:
        buildings:   Records exposing ``height`` (meters). May be empty.
        trees:       Records exposing ``canopy_radius`` (meters) and
                     ``shade_effectiveness`` (0–1). May be empty.
        sun_angle:   Solar elevation in radians (0 = horizon, π/2 = zenith).
        time_of_day: Hour of day; 11–15 inclusive applies a 1.5× multiplier.

    Returns:
        The accumulated score clamped to [0, 100]. This is a heuristic for
        comparing locations, not a calibrated coverage percentage.

    Raises:
        DegenerateSunAngleError: If ``sun_angle`` is non-finite or sits on a
            cotangent singularity (0, ±π, ...).
        NonFiniteShadeError: If building or tree attributes drive the
            accumulated score to inf or NaN.
    """
    _check_sun_angle(sun_angle)

    score = 0.0
    for building in buildings:
        score += building_shadow_term(building.height, sun_angle)
    for tree in trees:
        score += tree_canopy_term(tree.canopy_radius, tree.shade_effectiveness)

    if is_peak_hour(time_of_day):
        score *= PEAK_MULTIPLIER

    if not math.isfinite(score):
        raise NonFiniteShadeError(
            f"Shade score is not finite ({score!r}); check building heights and tree attributes"
        )

    return min(SCORE_MAX, max(SCORE_MIN, score))
