"""Progress delivery: an ordered, cancellable channel plus the durable progress log.

One pipeline run has one producer (the orchestrator and the agents it calls)
and one consumer (the transport turning events into SSE frames). Events come
out of the channel in exactly the order they went in.
"""

import asyncio
import uuid

import structlog

from galuxium.db.store import ArtifactStore
from galuxium.schemas.events import ProgressEvent

logger = structlog.get_logger(__name__)

_CLOSED = object()


class ProgressChannel:
    """Single-producer/single-consumer event queue with a cancellation token.

    The consumer calls cancel() when the client goes away; the producer checks
    `cancelled` at its suspension points. close() ends iteration after every
    event already sent has been received.
    """

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        self._cancelled = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    async def send(self, event: ProgressEvent) -> None:
        if self._closed:
            raise RuntimeError("send() on a closed ProgressChannel")
        await self._queue.put(event)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_CLOSED)

    def cancel(self) -> None:
        self._cancelled.set()

    async def receive(self, timeout: float | None = None) -> ProgressEvent | None:
        """Next event, or None once the channel is closed and drained.

        Raises:
            TimeoutError: No event arrived within `timeout` seconds
        """
        if timeout is None:
            item = await self._queue.get()
        else:
            item = await asyncio.wait_for(self._queue.get(), timeout=timeout)
        if item is _CLOSED:
            # Keep the sentinel so repeated receives keep returning None
            self._queue.put_nowait(_CLOSED)
            return None
        return item

    def __aiter__(self):
        return self

    async def __anext__(self) -> ProgressEvent:
        event = await self.receive()
        if event is None:
            raise StopAsyncIteration
        return event


class ProgressRecorder:
    """Emit callback for one run: stream first, then durable log.

    Events are only written to the durable log once `idea_id` is known, since
    log rows are keyed by idea. A failed log write never interrupts the run.

    Attributes:
        owner_id: Owner recorded on every log row
        idea_id: Set by the orchestrator after idea resolution
        channel: Live stream, or None for background runs with no listener
    """

    def __init__(self, store: ArtifactStore, owner_id: str, channel: ProgressChannel | None = None):
        self.store = store
        self.owner_id = owner_id
        self.channel = channel
        self.idea_id: uuid.UUID | None = None

    @property
    def cancelled(self) -> bool:
        return self.channel is not None and self.channel.cancelled

    async def emit(self, event: ProgressEvent) -> None:
        if self.channel is not None and not self.channel.closed:
            await self.channel.send(event)
        await self.record(event)

    async def record(self, event: ProgressEvent) -> None:
        """Durable log only, no stream delivery."""
        if self.idea_id is None:
            return
        try:
            await self.store.append_progress(self.idea_id, self.owner_id, event)
        except Exception as e:
            logger.warning(
                "progress_log_write_failed",
                idea_id=str(self.idea_id),
                phase=event.phase,
                sub_phase=event.sub_phase,
                error=str(e),
                error_type=type(e).__name__,
            )
