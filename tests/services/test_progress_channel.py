"""Tests for ProgressChannel and ProgressRecorder."""

import asyncio
import uuid

import pytest

from galuxium.core.exceptions import StoreError
from galuxium.schemas.events import ProgressEvent
from galuxium.services.progress import ProgressChannel, ProgressRecorder

pytestmark = pytest.mark.unit


def _event(n: int) -> ProgressEvent:
    return ProgressEvent(phase="BizMind", message=f"step {n}", progress=n)


async def test_events_come_out_in_order():
    channel = ProgressChannel()
    for n in range(5):
        await channel.send(_event(n))
    channel.close()

    received = [e.progress async for e in channel]
    assert received == [0, 1, 2, 3, 4]


async def test_receive_after_close_keeps_returning_none():
    channel = ProgressChannel()
    channel.close()
    assert await channel.receive() is None
    assert await channel.receive() is None


async def test_receive_timeout():
    channel = ProgressChannel()
    with pytest.raises(TimeoutError):
        await channel.receive(timeout=0.01)


async def test_send_after_close_raises():
    channel = ProgressChannel()
    channel.close()
    with pytest.raises(RuntimeError):
        await channel.send(_event(1))


async def test_concurrent_producer_consumer():
    channel = ProgressChannel()

    async def produce():
        for n in range(20):
            await channel.send(_event(n))
            await asyncio.sleep(0)
        channel.close()

    producer = asyncio.create_task(produce())
    received = [e.progress async for e in channel]
    await producer

    assert received == list(range(20))


def test_cancel_sets_token():
    channel = ProgressChannel()
    assert channel.cancelled is False
    channel.cancel()
    assert channel.cancelled is True


async def test_recorder_streams_and_logs_once_idea_known(store):
    from galuxium.schemas.intent import IntentRecord

    idea = await store.insert_idea("u1", "text", "hash", IntentRecord())
    channel = ProgressChannel()
    recorder = ProgressRecorder(store, "u1", channel)

    await recorder.emit(ProgressEvent(phase="classification", progress=50))
    recorder.idea_id = idea.id
    await recorder.emit(ProgressEvent(phase="BizMind", sub_phase="fetch", message="Fetched", progress=5))
    channel.close()

    streamed = [e.phase async for e in channel]
    logged = await store.list_progress(idea.id)

    assert streamed == ["classification", "BizMind"]
    assert [(r.agent, r.sub_phase, r.progress, r.user_id) for r in logged] == [("BizMind", "fetch", 5, "u1")]


async def test_recorder_swallows_log_failures():
    class FailingStore:
        async def append_progress(self, idea_id, owner_id, event):
            raise StoreError("append_progress failed")

    channel = ProgressChannel()
    recorder = ProgressRecorder(FailingStore(), "u1", channel)
    recorder.idea_id = uuid.uuid4()

    await recorder.emit(_event(5))
    channel.close()

    assert [e.progress async for e in channel] == [5]


async def test_recorder_without_channel_is_never_cancelled(store):
    recorder = ProgressRecorder(store, "u1")
    assert recorder.cancelled is False
    await recorder.emit(_event(5))
