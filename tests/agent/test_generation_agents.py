"""Tests for the four generation agents and their shared step sequence."""

import uuid

import pytest

from galuxium.agent.completion_fake import CompletionFake
from galuxium.agent.generation import AgentDeps, GenerationAgent
from galuxium.agent.nodes import (
    BizMindAgent,
    BrandPulseAgent,
    CodeWeaverAgent,
    LaunchLensAgent,
    default_agents,
)
from galuxium.core.exceptions import AgentError, StoreError
from galuxium.schemas.agents import AgentKind
from galuxium.schemas.intent import IntentRecord, ProductType
from galuxium.services.idea_service import content_hash

pytestmark = pytest.mark.unit

IDEA_TEXT = "A subscription box for rare houseplants"


@pytest.fixture
async def idea(store):
    intent = IntentRecord(domain="Plants", problem_statement="Rare plants are hard to find", product_type=ProductType.MARKETPLACE)
    return await store.insert_idea("u1", IDEA_TEXT, content_hash(IDEA_TEXT), intent)


def _deps(store, fake) -> AgentDeps:
    return AgentDeps(store=store, client=fake, embedder=fake)


def test_default_agents_order(store, completion_fake):
    agents = default_agents(_deps(store, completion_fake))
    assert [a.name for a in agents] == ["BizMind", "BrandPulse", "CodeWeaver", "LaunchLens"]
    assert [a.kind for a in agents] == [AgentKind.VALIDATION, AgentKind.BRANDING, AgentKind.TECHNICAL, AgentKind.LAUNCH]
    assert all(isinstance(a, GenerationAgent) for a in agents)


async def test_bizmind_happy_path(store, completion_fake, idea, sink):
    payload = await BizMindAgent(_deps(store, completion_fake)).run(str(idea.id), sink)

    assert payload["validation_score"] == 78
    assert payload["competitors"] == [{"name": "Bloomscape", "url": "https://bloomscape.com"}]
    assert sink.sub_phases == ["fetch", "prep", "analysis", "parse", "store", "index", "complete"]
    assert [e.progress for e in sink.events] == [5, 10, 25, 55, 70, 90, 100]
    assert all(e.phase == "BizMind" for e in sink.events)

    rows = await store.list_agent_results(AgentKind.VALIDATION, idea.id)
    assert len(rows) == 1
    assert rows[0].validation_score == 78
    assert rows[0].raw_output.startswith("{")
    assert rows[0].raw_report["insights"] == payload["insights"]


async def test_prompt_embeds_idea_and_intent(store, completion_fake, idea, sink):
    await BizMindAgent(_deps(store, completion_fake)).run(str(idea.id), sink)

    call = completion_fake.calls[0]
    assert call.role == "BizMind"
    assert IDEA_TEXT in call.user
    assert "Rare plants are hard to find" in call.user
    assert "Plants" in call.user
    assert "validation_score" in call.system


@pytest.mark.parametrize(
    "agent_cls,kind",
    [
        (BrandPulseAgent, AgentKind.BRANDING),
        (CodeWeaverAgent, AgentKind.TECHNICAL),
        (LaunchLensAgent, AgentKind.LAUNCH),
    ],
)
async def test_each_agent_stores_one_row(store, completion_fake, idea, sink, agent_cls, kind):
    await agent_cls(_deps(store, completion_fake)).run(str(idea.id), sink)

    assert sink.events[-1].sub_phase == "complete"
    assert sink.events[-1].progress == 100
    assert len(await store.list_agent_results(kind, idea.id)) == 1


async def test_fenced_model_output_is_accepted(store, idea, sink):
    fake = CompletionFake(fenced_roles={"BrandPulse"})
    payload = await BrandPulseAgent(_deps(store, fake)).run(str(idea.id), sink)
    assert payload["brand_name"] == "Rare Leaf Club"


async def test_missing_idea_emits_error_then_raises_not_found(store, completion_fake, sink):
    with pytest.raises(AgentError) as exc_info:
        await BizMindAgent(_deps(store, completion_fake)).run(str(uuid.uuid4()), sink)

    assert exc_info.value.kind == "validation"
    assert exc_info.value.reason == "not_found"
    assert sink.sub_phases == ["error"]
    assert sink.events[0].phase == "BizMind"
    assert sink.events[0].progress == 5
    assert completion_fake.calls == []


async def test_malformed_idea_id_raises_not_found(store, completion_fake, sink):
    with pytest.raises(AgentError) as exc_info:
        await BizMindAgent(_deps(store, completion_fake)).run("not-a-uuid", sink)
    assert exc_info.value.reason == "not_found"
    assert sink.sub_phases == ["error"]


async def test_idea_fetch_store_failure_emits_error_then_raises(completion_fake, sink):
    class UnreachableStore:
        async def get_idea(self, idea_id):
            raise StoreError("get_idea failed: connection refused")

    deps = AgentDeps(store=UnreachableStore(), client=completion_fake)
    with pytest.raises(AgentError) as exc_info:
        await CodeWeaverAgent(deps).run(str(uuid.uuid4()), sink)

    assert exc_info.value.kind == "technical"
    assert exc_info.value.reason == "store"
    assert sink.sub_phases == ["error"]
    assert "connection refused" in sink.events[0].message
    assert completion_fake.calls == []


async def test_provider_failure_emits_error_then_raises(store, idea, sink):
    fake = CompletionFake(fail_roles={"BrandPulse"})

    with pytest.raises(AgentError) as exc_info:
        await BrandPulseAgent(_deps(store, fake)).run(str(idea.id), sink)

    assert exc_info.value.kind == "branding"
    assert exc_info.value.reason == "provider"
    assert sink.sub_phases == ["fetch", "prep", "analysis", "error"]
    assert sink.events[-1].progress == 30
    assert await store.list_agent_results(AgentKind.BRANDING, idea.id) == []


async def test_parse_failure_emits_parse_error_then_raises(store, idea, sink):
    fake = CompletionFake(garbage_roles={"CodeWeaver"})

    with pytest.raises(AgentError) as exc_info:
        await CodeWeaverAgent(_deps(store, fake)).run(str(idea.id), sink)

    assert exc_info.value.reason == "parse"
    assert sink.sub_phases[-1] == "parse_error"
    assert sink.events[-1].progress == 60
    assert await store.list_agent_results(AgentKind.TECHNICAL, idea.id) == []


async def test_wrong_field_types_are_rejected_not_partially_stored(store, idea, sink):
    class WrongTypes:
        async def complete(self, role, system, user):
            return '{"brand_name": "X", "color_palette": "not-a-list"}'

    with pytest.raises(AgentError) as exc_info:
        await BrandPulseAgent(AgentDeps(store=store, client=WrongTypes())).run(str(idea.id), sink)

    assert exc_info.value.reason == "parse"
    assert await store.list_agent_results(AgentKind.BRANDING, idea.id) == []


async def test_missing_fields_are_filled_with_defaults(store, idea, sink):
    class Sparse:
        async def complete(self, role, system, user):
            return '{"brand_name": "Leafy"}'

    payload = await BrandPulseAgent(AgentDeps(store=store, client=Sparse())).run(str(idea.id), sink)

    assert payload == {
        "brand_name": "Leafy",
        "tagline": "",
        "tone": "",
        "color_palette": [],
        "brand_story": "",
        "logo_concept": "",
    }


async def test_store_failure_emits_db_error_then_raises(store, completion_fake, idea, sink):
    class FailingInsertStore:
        def __init__(self, inner):
            self.inner = inner

        async def get_idea(self, idea_id):
            return await self.inner.get_idea(idea_id)

        async def insert_agent_result(self, *args, **kwargs):
            raise StoreError("insert_launch_result failed: disk full")

    deps = AgentDeps(store=FailingInsertStore(store), client=completion_fake)
    with pytest.raises(AgentError) as exc_info:
        await LaunchLensAgent(deps).run(str(idea.id), sink)

    assert exc_info.value.reason == "store"
    assert sink.sub_phases[-1] == "db_error"
    assert sink.events[-1].progress == 75


async def test_embedding_failure_is_swallowed(store, idea, sink):
    fake = CompletionFake(fail_embeddings=True)
    payload = await BizMindAgent(_deps(store, fake)).run(str(idea.id), sink)

    assert payload["validation_score"] == 78
    assert sink.sub_phases[-1] == "complete"
    assert len(fake.embed_calls) == 1


async def test_summary_is_indexed_with_embedding(store, session_factory, completion_fake, idea, sink):
    from sqlalchemy import select

    from galuxium.db.models import StartupDoc

    await LaunchLensAgent(_deps(store, completion_fake)).run(str(idea.id), sink)

    async with session_factory() as session:
        docs = (await session.execute(select(StartupDoc))).scalars().all()

    assert len(docs) == 1
    assert docs[0].source == "LaunchLens"
    assert docs[0].embedding == [0.1, 0.2, 0.3]
    assert docs[0].summary == "A recurring-revenue marketplace for the fast-growing rare plant hobby."


async def test_agent_without_summary_skips_index_step(store, completion_fake, idea, sink):
    await CodeWeaverAgent(_deps(store, completion_fake)).run(str(idea.id), sink)
    assert "index" not in sink.sub_phases
    assert completion_fake.embed_calls == []
