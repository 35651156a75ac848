"""Calorie estimation from activity type, duration, body weight and climbing.

Used where Strava does not report calories (e.g. the leaderboard), so every
athlete is scored with the same model.
"""

from typing import Optional

DEFAULT_WEIGHT_KG = 70.0
DEFAULT_FACTOR = 6.0

# MET-like intensity per activity type
ACTIVITY_FACTORS: dict[str, float] = {
    "Walk": 3.5,
    "Run": 9.8,
    "Ride": 6.8,
    "Swim": 8.3,
    "Hike": 7.5,
    "WeightTraining": 5.0,
    "Workout": 8.0,
    "Yoga": 2.5,
}

# Types where climbing adds effort on top of the base rate
ELEVATION_TYPES = frozenset({"Walk", "Run", "Ride", "Hike"})
ELEVATION_KCAL_PER_KG_METER = 0.01


def activity_factor(activity_type: str) -> float:
    return ACTIVITY_FACTORS.get(activity_type, DEFAULT_FACTOR)


def estimate_calories(
    activity_type: str,
    duration_minutes: float,
    weight_kg: Optional[float] = DEFAULT_WEIGHT_KG,
    elevation_gain_meters: Optional[float] = 0.0,
) -> float:
    """Estimate energy expenditure for one activity.

    Parameters
    ----------
    activity_type : str
        Strava activity type; unknown types use a factor of 6.0
    duration_minutes : float
        Moving time in minutes
    weight_kg : float | None
        Athlete weight; None falls back to 70 kg
    elevation_gain_meters : float | None
        Total climbing; only counts for Walk, Run, Ride and Hike

    Returns
    -------
    float
        ``factor * weight * hours + 0.01 * weight * elevation`` in kcal

    Examples
    --------
    >>> estimate_calories("Run", 30, 70, 50)
    378.0
    """
    weight = weight_kg if weight_kg is not None else DEFAULT_WEIGHT_KG
    base_calories = activity_factor(activity_type) * weight * (duration_minutes / 60)

    elevation_calories = 0.0
    if activity_type in ELEVATION_TYPES:
        elevation_calories = ELEVATION_KCAL_PER_KG_METER * weight * (elevation_gain_meters or 0)

    return base_calories + elevation_calories
