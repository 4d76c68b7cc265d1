"""Request/response schemas for the pipeline and idea endpoints."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PipelineRequest(BaseModel):
    """Body for POST /api/orchestrator/stream and POST /api/ideas."""

    idea_text: str = Field(..., min_length=1)
    owner_id: str = Field(..., min_length=1)


class IdeaResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    idea_text: str
    dna_hash: str
    title: str | None = None
    domain: str | None = None
    problem_statement: str | None = None
    user_type: str | None = None
    product_type: str | None = None
    urgency: str | None = None
    intent: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class CreateIdeaResponse(BaseModel):
    success: bool = True
    message: str
    reused: bool
    idea: IdeaResponse


class ChatMessage(BaseModel):
    role: str = "user"
    content: str


class ChatIntakeRequest(BaseModel):
    """Body for POST /api/chat/intake. The last message is the one classified."""

    owner_id: str = Field(..., min_length=1)
    messages: list[ChatMessage] = Field(..., min_length=1)

    @property
    def latest_message(self) -> str:
        return self.messages[-1].content


class ChatIntakeResponse(BaseModel):
    route: Literal["idea", "chat"]
    reasoning: str | None = None
    idea: CreateIdeaResponse | None = None


class TimelineEntry(BaseModel):
    agent: str
    sub_phase: str | None = None
    message: str
    progress: int | None = None
    file_url: str | None = None
    error: str | None = None
    created_at: datetime


class TimelineResponse(BaseModel):
    idea_id: str
    events: list[TimelineEntry]


class DnaResponse(BaseModel):
    idea_id: str
    validation: dict[str, Any] | None = None
    branding: dict[str, Any] | None = None
    tech: dict[str, Any] | None = None
    launch: dict[str, Any] | None = None
    failed_agents: list[str] = Field(default_factory=list)
    created_at: datetime
