"""Idea model: one row per (owner, content hash)."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text, UniqueConstraint, Uuid

from galuxium.db.base import Base, JSONType


class Idea(Base):
    """A submitted startup idea and its classified intent.

    Never mutated after creation: agent outputs reference it by id.
    """

    __tablename__ = "ideas"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False, index=True)
    idea_text = Column(Text, nullable=False)
    dna_hash = Column(String(64), nullable=False)  # sha256 hex of idea_text

    # Classified intent (flattened for prompt building, full record kept in `intent`)
    title = Column(String(255), nullable=True)
    domain = Column(String(255), nullable=True)
    problem_statement = Column(Text, nullable=True)
    user_type = Column(String(255), nullable=True)
    product_type = Column(String(50), nullable=True)  # ProductType enum value
    urgency = Column(String(20), nullable=True)  # Urgency enum value
    intent = Column(JSONType, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (UniqueConstraint("user_id", "dna_hash", name="uq_idea_owner_hash"),)
