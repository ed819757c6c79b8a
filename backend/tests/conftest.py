"""
Pytest fixtures for Activity Insights tests.

No network: the OpenAI client, the Strava HTTP session and the database are
all replaced by in-process fakes.
"""
import json
import os
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import httpx
import pytest
from openai import BadRequestError

# Settings are read at import time; keep tests off any real database or key
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.pop("OPENAI_API_KEY", None)

from activity_insights.strava.schemas import Activity  # noqa: E402


# ==================== Activity data ====================


def make_activity(
    id: int,
    type: str = "Ride",
    distance: float = 10000.0,
    average_speed: float = 5.0,
    start_date_local: Optional[str] = "2024-01-01T08:00:00Z",
    moving_time: int = 2000,
    max_speed: float = 10.0,
    total_elevation_gain: float = 100.0,
    name: Optional[str] = None,
) -> Activity:
    return Activity(
        id=id,
        name=name or f"{type} {id}",
        type=type,
        distance=distance,
        moving_time=moving_time,
        average_speed=average_speed,
        max_speed=max_speed,
        total_elevation_gain=total_elevation_gain,
        start_date_local=start_date_local,
    )


class FakeCache:
    """Stands in for ActivityCache; counts reads."""

    def __init__(self, activities=()):
        self.activities = tuple(activities)
        self.calls = 0

    def get_activities(self):
        self.calls += 1
        return self.activities


@pytest.fixture
def sample_activities() -> List[Activity]:
    return [
        make_activity(1, "Ride", distance=5000, average_speed=3, start_date_local="2024-03-01T08:00:00Z"),
        make_activity(2, "Ride", distance=12000, average_speed=5, start_date_local="2024-03-05T08:00:00Z"),
        make_activity(3, "Run", distance=8000, average_speed=3.2, moving_time=2500, start_date_local="2024-03-03T07:00:00Z"),
        make_activity(4, "Run", distance=5000, average_speed=3.6, moving_time=1389, start_date_local="2024-02-20T07:00:00Z"),
        make_activity(5, "Swim", distance=1500, average_speed=0.9, moving_time=1800, start_date_local="2024-02-25T18:00:00Z"),
        make_activity(6, "Walk", distance=3000, average_speed=1.4, start_date_local="2024-03-07T12:00:00Z"),
    ]


@pytest.fixture
def fake_cache(sample_activities) -> FakeCache:
    return FakeCache(sample_activities)


# ==================== OpenAI fakes ====================


def tool_call(name: str, args: Any = None, call_id: Optional[str] = None, raw_arguments: Optional[str] = None):
    arguments = raw_arguments if raw_arguments is not None else json.dumps(args or {})
    return SimpleNamespace(
        id=call_id or f"call_{name}",
        type="function",
        function=SimpleNamespace(name=name, arguments=arguments),
    )


def completion(content: Optional[str] = None, tool_calls: Optional[list] = None):
    message = SimpleNamespace(role="assistant", content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def tool_use_failed_error() -> BadRequestError:
    request = httpx.Request("POST", "https://api.example.com/v1/chat/completions")
    response = httpx.Response(400, request=request)
    return BadRequestError(
        "Failed to call a function. Please adjust your prompt.",
        response=response,
        body={"code": "tool_use_failed", "message": "Failed to call a function."},
    )


class FakeCompletions:
    """Replays scripted responses; exceptions in the script are raised."""

    def __init__(self, script: List[Any], repeat_last: bool = False):
        self.script = list(script)
        self.repeat_last = repeat_last
        self.calls: List[Dict[str, Any]] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.repeat_last and len(self.script) == 1:
            item = self.script[0]
        else:
            item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeOpenAI:
    def __init__(self, script: List[Any], repeat_last: bool = False):
        self.completions = FakeCompletions(script, repeat_last=repeat_last)
        self.chat = SimpleNamespace(completions=self.completions)
