"""Progress event schema shared by the stream, the agents, and the audit log."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class Phase:
    """Phase names that are not agent names."""

    REQUEST = "request"
    CLASSIFICATION = "classification"
    SETUP = "setup"
    AGGREGATION = "aggregation"
    DONE = "done"


class ProgressEvent(BaseModel):
    """One unit of pipeline progress.

    Wire form (`to_wire`) drops unset fields, so a plain progress update is
    `{"phase": ..., "message": ..., "progress": ...}` and the terminal event is
    `{"phase": "done", "done": true, ...}`.
    """

    phase: str
    sub_phase: str | None = None
    message: str | None = None
    progress: int | None = Field(None, ge=0, le=100)
    file_url: str | None = None
    error: str | None = None
    done: bool | None = None

    idea_id: str | None = None
    data: dict[str, Any] | None = None  # classification result on the classification-complete event

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)

    @property
    def is_error(self) -> bool:
        return self.error is not None
