"""StartupDoc model: agent summaries with embeddings for semantic search."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text, Uuid

from galuxium.db.base import Base, JSONType


class StartupDoc(Base):
    __tablename__ = "startup_docs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    idea_id = Column(Uuid, nullable=False, index=True)
    source = Column(String(50), nullable=False)  # agent name

    title = Column(Text, nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    summary = Column(Text, nullable=False, default="")
    doc_metadata = Column("metadata", JSONType, nullable=False, default=dict)
    embedding = Column(JSONType, nullable=True)  # list[float]

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
