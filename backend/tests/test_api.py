"""
API tests for /analyze and /insights.

The orchestrator runs for real against a fake model client and a fake
activity cache; the database is an in-memory SQLite shared across threads.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from activity_insights.database import Base, get_db
from activity_insights.dependencies import get_orchestrator_factory
from activity_insights.config import settings
from activity_insights.errors import AuthError, UpstreamError
from activity_insights.llm.agents import ToolRegistry
from activity_insights.llm.orchestrator import ConversationOrchestrator
from activity_insights.main import app

from conftest import FakeOpenAI, completion, tool_call


pytestmark = pytest.mark.api


@pytest.fixture
def db_session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield TestingSession
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def client(db_session_factory):
    def override_get_db():
        db = db_session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def use_script(script, cache):
    """Route /analyze through an orchestrator driven by a scripted model."""
    fake = FakeOpenAI(script)

    def factory():
        return ConversationOrchestrator(ToolRegistry(cache), client=fake, model="test-model")

    app.dependency_overrides[get_orchestrator_factory] = lambda: factory
    return fake.completions


def test_root_and_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/").json()["status"] == "healthy"


def test_analyze_runs_tools_and_stores_insight(client, fake_cache):
    use_script([
        completion(tool_calls=[tool_call("get_longest_ride")]),
        completion(content="Your longest ride was 12.00 km."),
    ], fake_cache)

    response = client.post("/analyze", json={"query": "What was my longest ride?"})

    assert response.status_code == 200
    data = response.json()
    assert data["query"] == "What was my longest ride?"
    assert data["analysis"] == "Your longest ride was 12.00 km."
    assert data["toolsUsed"] == ["get_longest_ride"]
    assert data["stravaData"]["get_longest_ride"]["distance_km"] == "12.00"
    assert isinstance(data["id"], int)
    assert data["createdAt"]

    stored = client.get(f"/insights/{data['id']}")
    assert stored.status_code == 200
    assert stored.json()["stravaData"] == data["stravaData"]


def test_analyze_exhaustion_is_a_normal_response(client, fake_cache):
    use_script([completion(tool_calls=[tool_call("get_activity_summary")])] * 10, fake_cache)

    response = client.post("/analyze", json={"query": "loop"})

    assert response.status_code == 200
    assert response.json()["analysis"] == "Analysis could not be completed."
    assert len(response.json()["toolsUsed"]) == 10


@pytest.mark.parametrize("body", [{}, {"query": ""}, {"query": "   "}, None])
def test_analyze_requires_query(client, fake_cache, body):
    calls = use_script([], fake_cache)

    if body is None:
        response = client.post("/analyze")
    else:
        response = client.post("/analyze", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Query is required"}
    assert calls.calls == []


def test_analyze_fatal_error_returns_500_with_details(client):
    class ExpiredCache:
        def get_activities(self):
            raise AuthError("Strava rejected the refreshed access token")

    use_script([completion(tool_calls=[tool_call("get_longest_ride")])], ExpiredCache())

    response = client.post("/analyze", json={"query": "longest ride?"})

    assert response.status_code == 500
    assert response.json() == {
        "error": "Analysis failed",
        "details": "Strava rejected the refreshed access token",
    }
    assert client.get("/insights").json() == []


def test_analyze_misconfiguration_returns_500(client):
    def factory():
        raise RuntimeError("OPENAI_API_KEY not configured")

    app.dependency_overrides[get_orchestrator_factory] = lambda: factory

    response = client.post("/analyze", json={"query": "hi"})

    assert response.status_code == 500
    assert response.json()["details"] == "OPENAI_API_KEY not configured"


def test_insights_listed_newest_first(client, fake_cache):
    for i in range(3):
        use_script([completion(content=f"answer {i}")], fake_cache)
        assert client.post("/analyze", json={"query": f"question {i}"}).status_code == 200

    response = client.get("/insights")

    assert response.status_code == 200
    queries = [item["query"] for item in response.json()]
    assert queries == ["question 2", "question 1", "question 0"]


def test_insights_limit(client, fake_cache):
    for i in range(3):
        use_script([completion(content=f"answer {i}")], fake_cache)
        client.post("/analyze", json={"query": f"question {i}"})

    assert len(client.get("/insights", params={"limit": 2}).json()) == 2


def test_insight_not_found(client):
    response = client.get("/insights/999")

    assert response.status_code == 404
    assert response.json() == {"error": "Insight not found"}


def test_analyze_upstream_error_reports_status_code(client):
    class RateLimitedCache:
        def get_activities(self):
            raise UpstreamError("Strava API error: 429", status_code=429)

    use_script([completion(tool_calls=[tool_call("get_activity_summary")])], RateLimitedCache())

    response = client.post("/analyze", json={"query": "summary?"})

    assert response.status_code == 500
    assert response.json() == {
        "error": "Analysis failed",
        "details": "Strava API error: 429",
        "status_code": 429,
    }


@pytest.mark.parametrize("kwargs", [
    {"json": {"query": 5}},
    {"json": {"query": ["longest", "ride"]}},
    {"content": b"not json", "headers": {"Content-Type": "application/json"}},
])
def test_analyze_malformed_body_is_rejected_like_missing_query(client, fake_cache, kwargs):
    calls = use_script([], fake_cache)

    response = client.post("/analyze", **kwargs)

    assert response.status_code == 400
    assert response.json() == {"error": "Query is required"}
    assert calls.calls == []


def test_insights_invalid_limit_uses_error_body(client):
    response = client.get("/insights", params={"limit": 0})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid request"
    assert "limit" in body["details"]


def test_root_reports_short_git_commit(client, monkeypatch):
    monkeypatch.setattr(settings, "git_commit", "0123456789abcdef")

    assert client.get("/").json()["git_commit"] == "01234567"


def test_root_omits_git_commit_when_unset(client, monkeypatch):
    monkeypatch.setattr(settings, "git_commit", None)

    assert "git_commit" not in client.get("/").json()
