"""Tests for the /api/ideas endpoints."""

import uuid

import pytest

from galuxium.agent.completion_fake import CompletionFake
from galuxium.api.deps import get_orchestrator
from galuxium.services.pipeline import PipelineOrchestrator

pytestmark = pytest.mark.integration

IDEA = "A subscription box for rare houseplants"


async def test_create_idea_returns_201_and_runs_agents(client):
    response = await client.post("/api/ideas", json={"idea_text": IDEA, "owner_id": "u1"})

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["reused"] is False
    assert body["idea"]["product_type"] == "Marketplace"
    idea_id = body["idea"]["id"]

    # Background task has finished by the time the ASGI call returns
    dna = await client.get(f"/api/ideas/{idea_id}/dna")
    assert dna.status_code == 200
    assert dna.json()["validation"]["validation_score"] == 78
    assert dna.json()["failed_agents"] == []


async def test_create_idea_twice_reuses(client):
    first = await client.post("/api/ideas", json={"idea_text": IDEA, "owner_id": "u1"})
    second = await client.post("/api/ideas", json={"idea_text": IDEA, "owner_id": "u1"})

    assert second.status_code == 201
    assert second.json()["reused"] is True
    assert second.json()["idea"]["id"] == first.json()["idea"]["id"]


async def test_create_idea_requires_text(client):
    response = await client.post("/api/ideas", json={"owner_id": "u1"})
    assert response.status_code == 422


async def test_create_idea_classifier_failure_is_502(app, client, store):
    fake = CompletionFake(fail_roles={"classifier"})
    app.dependency_overrides[get_orchestrator] = lambda: PipelineOrchestrator(store=store, client=fake)

    response = await client.post("/api/ideas", json={"idea_text": IDEA, "owner_id": "u1"})

    assert response.status_code == 502
    assert "debug_id" in response.json()
    assert await store.list_ideas("u1") == []


async def test_get_and_list_ideas(client):
    created = (await client.post("/api/ideas", json={"idea_text": IDEA, "owner_id": "u1"})).json()["idea"]

    fetched = await client.get(f"/api/ideas/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["idea_text"] == IDEA

    listed = await client.get("/api/ideas", params={"owner_id": "u1"})
    assert [i["id"] for i in listed.json()] == [created["id"]]

    other = await client.get("/api/ideas", params={"owner_id": "someone-else"})
    assert other.json() == []


@pytest.mark.parametrize("path", ["", "/timeline", "/dna"])
async def test_unknown_idea_is_404(client, path):
    response = await client.get(f"/api/ideas/{uuid.uuid4()}{path}")
    assert response.status_code == 404


async def test_malformed_idea_id_is_404(client):
    response = await client.get("/api/ideas/not-a-uuid")
    assert response.status_code == 404


async def test_timeline_lists_agent_progress(client):
    created = (await client.post("/api/ideas", json={"idea_text": IDEA, "owner_id": "u1"})).json()["idea"]

    response = await client.get(f"/api/ideas/{created['id']}/timeline")

    assert response.status_code == 200
    agents = [e["agent"] for e in response.json()["events"]]
    assert agents[0] == "setup"
    assert agents[-1] == "done"
    assert "BizMind" in agents
    assert "LaunchLens" in agents
