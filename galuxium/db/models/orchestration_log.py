"""OrchestrationLog model: append-only progress/audit trail."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text, Uuid

from galuxium.db.base import Base


class OrchestrationLog(Base):
    __tablename__ = "orchestration_logs"

    # Insertion order; events within one clock tick share created_at
    id = Column(Integer, primary_key=True, autoincrement=True)
    idea_id = Column(Uuid, nullable=False, index=True)
    user_id = Column(String(255), nullable=False)

    agent = Column(String(50), nullable=False)  # phase name: setup, BizMind, BrandPulse, ...
    sub_phase = Column(String(50), nullable=True)
    message = Column(Text, nullable=False, default="")
    progress = Column(Integer, nullable=True)  # 0-100
    file_url = Column(Text, nullable=True)
    error = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True)
    # NO updated_at -- log entries are immutable (append-only)
