"""Tests for SqlArtifactStore over aiosqlite."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from galuxium.core.exceptions import IdeaConflict, IdeaNotFound, StoreError
from galuxium.db.store import ArtifactStore, SqlArtifactStore
from galuxium.schemas.agents import AgentKind
from galuxium.schemas.events import ProgressEvent
from galuxium.schemas.intent import IntentRecord, ProductType, Urgency

pytestmark = pytest.mark.unit


@pytest.fixture
async def idea(store):
    intent = IntentRecord(title="Rare Leaf Club", product_type=ProductType.SAAS, urgency=Urgency.HIGH)
    return await store.insert_idea("u1", "idea text", "hash-1", intent)


def test_satisfies_protocol(store):
    assert isinstance(store, ArtifactStore)


async def test_insert_and_get_idea(store, idea):
    fetched = await store.get_idea(idea.id)
    assert fetched.id == idea.id
    assert fetched.title == "Rare Leaf Club"
    assert fetched.product_type == "SaaS"
    assert fetched.urgency == "high"
    assert fetched.intent["title"] == "Rare Leaf Club"

    by_str = await store.get_idea(str(idea.id))
    assert by_str.id == idea.id


async def test_empty_intent_fields_stored_as_null(store):
    created = await store.insert_idea("u1", "t", "h", IntentRecord())
    assert created.title is None
    assert created.domain is None
    assert created.product_type == "Other"


async def test_long_intent_fields_are_clipped_to_column_length(store):
    wordy = "Consumer horticulture and specialty plant e-commerce " * 6
    intent = IntentRecord(title="T" * 300, domain=wordy, user_type="U" * 300, problem_statement="P" * 3000)
    assert len(intent.domain) > 255

    created = await store.insert_idea("u1", "t", "h-long", intent)

    assert created.domain == wordy[:255]
    assert len(created.title) == 255
    assert len(created.user_type) == 255
    assert len(created.problem_statement) == 3000  # Text column: no limit
    assert created.intent["domain"] == wordy


async def test_get_missing_idea_raises(store):
    with pytest.raises(IdeaNotFound):
        await store.get_idea(uuid.uuid4())


async def test_get_malformed_id_raises_not_found(store):
    with pytest.raises(IdeaNotFound):
        await store.get_idea("definitely-not-a-uuid")


async def test_duplicate_owner_hash_raises_conflict(store, idea):
    with pytest.raises(IdeaConflict):
        await store.insert_idea("u1", "idea text", "hash-1", IntentRecord())


async def test_find_idea_by_hash(store, idea):
    assert (await store.find_idea_by_hash("u1", "hash-1")).id == idea.id
    assert await store.find_idea_by_hash("u2", "hash-1") is None
    assert await store.find_idea_by_hash("u1", "hash-2") is None


async def test_list_ideas_newest_first(store):
    a = await store.insert_idea("u1", "a", "ha", IntentRecord())
    b = await store.insert_idea("u1", "b", "hb", IntentRecord())
    await store.insert_idea("u2", "c", "hc", IntentRecord())

    ideas = await store.list_ideas("u1")
    assert [i.id for i in ideas] == [b.id, a.id]


async def test_agent_results_are_append_only(store, idea):
    payload = {
        "brand_name": "Leafy",
        "tagline": "t",
        "tone": "warm",
        "color_palette": ["#000000"],
        "brand_story": "s",
        "logo_concept": "l",
    }
    first = await store.insert_agent_result(AgentKind.BRANDING, idea.id, payload, "raw-1")
    second = await store.insert_agent_result(AgentKind.BRANDING, idea.id, payload, "raw-2")

    rows = await store.list_agent_results(AgentKind.BRANDING, idea.id)
    assert first != second
    assert [r.raw_output for r in rows] == ["raw-1", "raw-2"]
    assert rows[0].color_palette == ["#000000"]
    assert rows[0].raw_report == payload
    assert await store.list_agent_results(AgentKind.LAUNCH, idea.id) == []


async def test_progress_log_is_timestamp_ordered(store, idea):
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    # Inserted out of order
    await store.append_progress(idea.id, "u1", ProgressEvent(phase="BizMind", message="second", timestamp=base + timedelta(seconds=2)))
    await store.append_progress(idea.id, "u1", ProgressEvent(phase="BizMind", message="first", timestamp=base + timedelta(seconds=1)))
    await store.append_progress(idea.id, "u1", ProgressEvent(phase="BrandPulse", error="boom", timestamp=base + timedelta(seconds=3)))

    rows = await store.list_progress(idea.id)
    assert [r.message for r in rows] == ["first", "second", "boom"]
    assert rows[-1].error == "boom"
    assert rows[0].user_id == "u1"


async def test_progress_log_keeps_insertion_order_within_one_tick(store, idea):
    tick = datetime(2026, 1, 1, tzinfo=timezone.utc)
    sub_phases = ["fetch", "prep", "analysis", "parse", "store", "complete"]
    for sub_phase in sub_phases:
        await store.append_progress(idea.id, "u1", ProgressEvent(phase="BizMind", sub_phase=sub_phase, timestamp=tick))

    rows = await store.list_progress(idea.id)
    assert [r.sub_phase for r in rows] == sub_phases


async def test_dna_latest_wins(store, idea):
    await store.insert_dna(idea.id, {"validation": {"v": 1}}, ["BrandPulse"])
    newest = await store.insert_dna(idea.id, {"validation": {"v": 2}, "branding": {"b": 1}}, [])

    latest = await store.latest_dna(idea.id)
    assert latest.id == newest.id
    assert latest.validation == {"v": 2}
    assert latest.tech is None
    assert latest.failed_agents == []


async def test_latest_dna_none_when_missing(store, idea):
    assert await store.latest_dna(idea.id) is None


async def test_startup_doc_insert(store, idea):
    await store.insert_startup_doc(idea.id, "BizMind", "title", "desc", "summary", [0.1, 0.2])


async def test_sqlalchemy_errors_become_store_errors(store):
    class BrokenSession:
        async def __aenter__(self):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        async def __aexit__(self, *exc):
            return False

    broken = SqlArtifactStore(lambda: BrokenSession())
    with pytest.raises(StoreError):
        await broken.list_ideas("u1")
