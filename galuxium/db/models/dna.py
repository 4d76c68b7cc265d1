"""DNA aggregate model: terminal record of one pipeline run."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Uuid

from galuxium.db.base import Base, JSONType


class DnaAggregate(Base):
    """Joins the four agent payloads for one idea. Failed agents are stored as NULL."""

    __tablename__ = "galuxium_dna"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    idea_id = Column(Uuid, ForeignKey("ideas.id"), nullable=False, index=True)

    validation = Column(JSONType, nullable=True)
    branding = Column(JSONType, nullable=True)
    tech = Column(JSONType, nullable=True)
    launch = Column(JSONType, nullable=True)
    failed_agents = Column(JSONType, nullable=False, default=list)  # ["BrandPulse", ...]

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True)
