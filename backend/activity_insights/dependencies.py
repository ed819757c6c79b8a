"""
Process-wide engine objects shared by the routes.

The activity cache (and the Strava credentials inside its client) is created
once per process and passed explicitly to every tool registry.
"""
import threading
from typing import Callable, Optional

from .llm.agents import ToolRegistry
from .llm.orchestrator import ConversationOrchestrator
from .strava.cache import ActivityCache
from .strava.client import TelemetryClient

_activity_cache: Optional[ActivityCache] = None
_init_lock = threading.Lock()


def get_activity_cache() -> ActivityCache:
    global _activity_cache
    with _init_lock:
        if _activity_cache is None:
            _activity_cache = ActivityCache(TelemetryClient.from_settings())
        return _activity_cache


def build_orchestrator() -> ConversationOrchestrator:
    return ConversationOrchestrator(ToolRegistry(get_activity_cache()))


def get_orchestrator_factory() -> Callable[[], ConversationOrchestrator]:
    """Dependency returning the factory; construction errors surface inside the route."""
    return build_orchestrator
