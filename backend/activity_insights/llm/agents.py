from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..strava.cache import ActivityCache
from ..strava.schemas import ActivityType
from .tools import (
    filter_by_type,
    format_activity,
    format_compact,
    max_by,
    summarize,
)

DEFAULT_RECENT_COUNT = 5
MAX_RECENT_COUNT = 10


class ToolName(str, Enum):
    LONGEST_RIDE = "get_longest_ride"
    FASTEST_RIDE = "get_fastest_ride"
    LONGEST_RUN = "get_longest_run"
    FASTEST_RUN = "get_fastest_run"
    LONGEST_SWIM = "get_longest_swim"
    FASTEST_SWIM = "get_fastest_swim"
    ACTIVITY_SUMMARY = "get_activity_summary"
    RECENT_ACTIVITIES = "get_recent_activities"

    @classmethod
    def lookup(cls, name: str) -> Optional["ToolName"]:
        try:
            return cls(name)
        except ValueError:
            return None


@dataclass(frozen=True)
class ToolSchema:
    name: ToolName
    description: str
    properties: Dict[str, Any] = field(default_factory=dict)
    required: tuple = ()

    def to_wire(self) -> Dict[str, Any]:
        return {
            "name": self.name.value,
            "description": self.description,
            "parameters": {
                "type": "object",
                "properties": dict(self.properties),
                "required": list(self.required),
            },
        }

    def to_openai(self) -> Dict[str, Any]:
        return {"type": "function", "function": self.to_wire()}


TOOL_SCHEMAS: List[ToolSchema] = [
    ToolSchema(ToolName.LONGEST_RIDE, "Get the longest bike ride by distance."),
    ToolSchema(ToolName.FASTEST_RIDE, "Get the fastest bike ride by average speed."),
    ToolSchema(ToolName.LONGEST_RUN, "Get the longest run by distance."),
    ToolSchema(ToolName.FASTEST_RUN, "Get the fastest run by average speed."),
    ToolSchema(ToolName.LONGEST_SWIM, "Get the longest swim by distance."),
    ToolSchema(ToolName.FASTEST_SWIM, "Get the fastest swim by average speed."),
    ToolSchema(
        ToolName.ACTIVITY_SUMMARY,
        "Get a summary of all activities: counts by type, total distance, total moving time and date range.",
    ),
    ToolSchema(
        ToolName.RECENT_ACTIVITIES,
        "Get the most recent activities, newest first.",
        properties={
            "count": {
                "type": "integer",
                "description": f"Number of activities to return (default {DEFAULT_RECENT_COUNT}, max {MAX_RECENT_COUNT})",
            }
        },
    ),
]


def recent_count(raw: Any) -> int:
    """Default 5, clamp to 10. Lower values pass through unvalidated."""
    if raw is None:
        return DEFAULT_RECENT_COUNT
    try:
        count = int(raw)
    except (TypeError, ValueError):
        return 0
    return min(count, MAX_RECENT_COUNT)


class ToolRegistry:
    """Fixed catalogue of analytic tools over the cached activity history."""

    def __init__(self, cache: ActivityCache):
        self.cache = cache
        self._handlers: Dict[ToolName, Callable[[Dict[str, Any]], Any]] = {
            ToolName.LONGEST_RIDE: lambda args: self._best(ActivityType.RIDE, "distance", "rides"),
            ToolName.FASTEST_RIDE: lambda args: self._best(ActivityType.RIDE, "average_speed", "rides"),
            ToolName.LONGEST_RUN: lambda args: self._best(ActivityType.RUN, "distance", "runs"),
            ToolName.FASTEST_RUN: lambda args: self._best(ActivityType.RUN, "average_speed", "runs"),
            ToolName.LONGEST_SWIM: lambda args: self._best(ActivityType.SWIM, "distance", "swims"),
            ToolName.FASTEST_SWIM: lambda args: self._best(ActivityType.SWIM, "average_speed", "swims"),
            ToolName.ACTIVITY_SUMMARY: self._summary,
            ToolName.RECENT_ACTIVITIES: self._recent,
        }
        missing = set(ToolName) - set(self._handlers)
        if missing:
            raise RuntimeError(f"Tools without handlers: {sorted(t.value for t in missing)}")

    def tools(self) -> List[Dict[str, Any]]:
        return [s.to_openai() for s in TOOL_SCHEMAS]

    def execute(self, tool_name: str, args: Optional[Dict[str, Any]] = None) -> Any:
        tool = ToolName.lookup(tool_name)
        if tool is None:
            return {"error": f"Unknown tool: {tool_name}"}
        return self._handlers[tool](args or {})

    def _best(self, activity_type: str, field_name: str, label: str) -> Dict[str, Any]:
        matching = filter_by_type(self.cache.get_activities(), activity_type)
        best = max_by(matching, field_name)
        if best is None:
            return {"message": f"No {label} found"}
        return format_activity(best)

    def _summary(self, args: Dict[str, Any]) -> Dict[str, Any]:
        return summarize(list(self.cache.get_activities()))

    def _recent(self, args: Dict[str, Any]) -> List[Dict[str, Any]]:
        count = recent_count(args.get("count"))
        ordered = sorted(self.cache.get_activities(), key=lambda a: a.start_date_local or "", reverse=True)
        return [format_compact(a) for a in ordered[:count]]
