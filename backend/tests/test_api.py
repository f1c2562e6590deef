import httpx
import pytest
import pytest_asyncio

from feedback_engine.main import app
from feedback_engine.services.classifier import feedback_classifier
from feedback_engine.services.seed import SEED_FEEDBACK
from feedback_engine.services.suggestions import suggestion_engine


@pytest_asyncio.fixture
async def client(db):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def model(monkeypatch, stub_generator):
    """Route both pipelines through a stub model returning *response*."""
    def use(response: str = "", error: Exception = None):
        generator = stub_generator(response, error)
        monkeypatch.setattr(feedback_classifier, "generator", generator)
        monkeypatch.setattr(feedback_classifier, "enabled", True)
        monkeypatch.setattr(suggestion_engine, "generator", generator)
        monkeypatch.setattr(suggestion_engine, "enabled", True)
        return generator
    return use


@pytest.mark.asyncio
async def test_root_and_health(client):
    assert (await client.get("/")).json()["status"] == "running"
    assert (await client.get("/health")).json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_create_feedback_requires_content(client):
    response = await client.post("/api/feedback", json={"content": "   ", "source": "email"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Field `content` is required."


@pytest.mark.asyncio
async def test_create_feedback_analyzes_with_fallback(client):
    response = await client.post(
        "/api/feedback",
        json={"content": "the R2 upload is broken and urgent", "source": "github", "type": "bug"},
    )
    body = response.json()

    assert response.status_code == 200
    assert body["ok"] is True
    assert body["source"] == "github"
    assert body["analysis"] == {"theme": "r2", "sentiment": "negative", "urgency": 5}

    listing = (await client.get("/api/feedback")).json()
    assert listing["count"] == 1
    assert listing["items"][0]["theme"] == "r2"


@pytest.mark.asyncio
async def test_create_feedback_with_model(client, model):
    generator = model('```json\n{"theme": "KV", "sentiment": "neutral", "urgency": 2.6}\n```')

    body = (await client.post("/api/feedback", json={"content": "KV replication lag"})).json()

    assert body["source"] == "manual"
    assert body["analysis"] == {"theme": "kv", "sentiment": "neutral", "urgency": 3}
    assert len(generator.calls) == 1


@pytest.mark.asyncio
async def test_list_feedback_filters_by_theme(client, add_feedback):
    await add_feedback("a", theme="r2", sentiment="neutral", urgency=2)
    await add_feedback("b", theme="kv", sentiment="neutral", urgency=5)
    await add_feedback("c", theme="r2", sentiment="neutral", urgency=4)

    body = (await client.get("/api/feedback", params={"theme": "r2"})).json()

    assert [i["content"] for i in body["items"]] == ["c", "a"]


@pytest.mark.asyncio
async def test_analyze_endpoint(client, add_feedback, model):
    feedback = await add_feedback("Workers cron triggers skip runs")
    model('{"theme": "workers", "sentiment": "negative", "urgency": 4}')

    body = (await client.post("/api/analyze", json={"id": feedback.id})).json()

    assert body == {
        "ok": True,
        "id": feedback.id,
        "analysis": {"theme": "workers", "sentiment": "negative", "urgency": 4},
    }


@pytest.mark.asyncio
async def test_analyze_endpoint_not_found(client):
    response = await client.post("/api/analyze", json={"id": 404})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_analyze_all(client, add_feedback):
    await add_feedback("Workers are great")
    await add_feedback("Docs are confusing")
    await add_feedback("done", theme="kv", sentiment="neutral", urgency=1)

    body = (await client.post("/api/analyze-all")).json()

    assert body["total"] == 2
    assert body["analyzed"] == 2
    assert body["failed"] == 0
    assert body["message"] == "Analyzed 2 out of 2 unanalyzed feedback items."


@pytest.mark.asyncio
async def test_suggestions_endpoint_fallback(client, add_feedback, model):
    feedback = await add_feedback("Login broken", type="bug", theme="auth", sentiment="negative", urgency=5)
    model("model is overloaded")

    body = (await client.get(f"/api/feedback/{feedback.id}/suggestions")).json()

    actions = [s["action"] for s in body["suggestions"]]
    assert actions == ["Prioritize immediately", "Create bug ticket", "Reach out to user", "Review with team"]
    assert all(0.0 <= s["confidence"] <= 1.0 for s in body["suggestions"])


@pytest.mark.asyncio
async def test_suggestions_endpoint_not_found(client):
    response = await client.get("/api/feedback/999/suggestions")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_summary_endpoint(client, add_feedback):
    await add_feedback("x", theme="r2", sentiment="negative", urgency=5, type="bug")
    body = (await client.get("/api/summary")).json()
    assert body["ok"] is True
    assert body["total"] == 1
    assert body["urgent"] == 1


@pytest.mark.asyncio
async def test_bug_report_endpoint(client, add_feedback):
    await add_feedback("Pages deploys broken", theme="pages", sentiment="negative", urgency=5, type="bug")
    body = (await client.get("/api/bug-report", params={"min_urgency": 4, "limit": 5})).json()
    assert body["total"] == 1
    assert "**PAGES**" in body["formatted_message"]


@pytest.mark.asyncio
async def test_digest_endpoints(client, add_feedback):
    empty = (await client.get("/api/digest")).json()
    assert empty["ok"] is False

    await add_feedback("R2 down", theme="r2", sentiment="negative", urgency=5)
    generated = (await client.post("/api/digest/generate")).json()
    assert generated["digest"]["total_feedback"] == 1

    latest = (await client.get("/api/digest")).json()
    assert latest["ok"] is True
    assert latest["digest"]["urgent_items"][0]["theme"] == "r2"


@pytest.mark.asyncio
async def test_integrations_endpoints(client, add_feedback):
    await add_feedback("hello", source="discord")
    await add_feedback("hi", source="discord")

    body = (await client.get("/api/integrations")).json()
    assert {i["type"]: i["count"] for i in body["integrations"]}["discord"] == 2

    items = (await client.get("/api/integrations/discord/feedback")).json()
    assert items["source"] == "discord"
    assert items["count"] == 2


@pytest.mark.asyncio
async def test_seed_endpoint(client, add_feedback):
    await add_feedback("old item")

    body = (await client.post("/api/seed")).json()

    assert len(body["ids"]) == len(SEED_FEEDBACK)
    listing = (await client.get("/api/feedback", params={"limit": 200})).json()
    assert listing["count"] == len(SEED_FEEDBACK)
    assert all(item["theme"] is not None for item in listing["items"])
    assert "old item" not in {item["content"] for item in listing["items"]}
