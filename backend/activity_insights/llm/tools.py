from __future__ import annotations
from typing import Optional, Dict, Any, Iterable, List
from collections import Counter

from ..strava.schemas import Activity, ActivityType


# Display formatting: fixed decimals as strings so answers are stable across runs
def fmt2(val: float) -> str:
    return f"{val:.2f}"


def fmt1(val: float) -> str:
    return f"{val:.1f}"


def meters_to_km(meters: float) -> float:
    return meters / 1000.0


def mps_to_kmh(speed: float) -> float:
    return speed * 3.6


def seconds_to_minutes(seconds: float) -> float:
    return seconds / 60.0


def pace_min_per_km(activity: Activity) -> Optional[str]:
    if activity.distance <= 0:
        return None
    return fmt2(seconds_to_minutes(activity.moving_time) / meters_to_km(activity.distance))


def pace_min_per_100m(activity: Activity) -> Optional[str]:
    if activity.distance <= 0:
        return None
    return fmt2(seconds_to_minutes(activity.moving_time) / (activity.distance / 100.0))


def format_activity(activity: Activity) -> Dict[str, Any]:
    """Full projection used by the longest/fastest tools."""
    out: Dict[str, Any] = {
        "id": activity.id,
        "name": activity.name,
        "type": activity.type,
        "date": activity.start_date_local,
        "distance_km": fmt2(meters_to_km(activity.distance)),
        "avg_speed_kmh": fmt2(mps_to_kmh(activity.average_speed)),
        "max_speed_kmh": fmt2(mps_to_kmh(activity.max_speed)),
        "moving_time_min": fmt1(seconds_to_minutes(activity.moving_time)),
        "elevation_gain_m": activity.total_elevation_gain,
    }
    if activity.type == ActivityType.RUN:
        out["pace_min_per_km"] = pace_min_per_km(activity)
    elif activity.type == ActivityType.SWIM:
        out["pace_min_per_100m"] = pace_min_per_100m(activity)
    return out


def format_compact(activity: Activity) -> Dict[str, Any]:
    """Short projection for activity lists."""
    return {
        "name": activity.name,
        "type": activity.type,
        "date": activity.start_date_local,
        "distance_km": fmt2(meters_to_km(activity.distance)),
        "moving_time_min": fmt1(seconds_to_minutes(activity.moving_time)),
        "elevation_gain_m": activity.total_elevation_gain,
    }


def filter_by_type(activities: Iterable[Activity], activity_type: str) -> List[Activity]:
    return [a for a in activities if a.type == activity_type]


def max_by(activities: List[Activity], field: str) -> Optional[Activity]:
    # Strict '>' keeps the first activity among equal maxima
    best: Optional[Activity] = None
    for a in activities:
        if best is None or getattr(a, field) > getattr(best, field):
            best = a
    return best


def summarize(activities: List[Activity]) -> Dict[str, Any]:
    by_type = Counter(a.type for a in activities)
    total_distance = sum(a.distance for a in activities)
    total_moving = sum(a.moving_time for a in activities)
    dates = [a.start_date_local for a in activities if a.start_date_local]
    date_range = {"earliest": min(dates), "latest": max(dates)} if dates else None
    return {
        "total_activities": len(activities),
        "by_type": dict(by_type),
        "total_distance_km": fmt2(meters_to_km(total_distance)),
        "total_moving_time_hours": fmt1(total_moving / 3600.0),
        "date_range": date_range,
    }
