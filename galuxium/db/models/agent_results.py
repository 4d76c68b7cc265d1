"""Agent result models: one append-only table per agent kind.

Each successful agent invocation inserts exactly one row. `raw_output` keeps
the unparsed model text for audit.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, ForeignKey, Text, Uuid

from galuxium.db.base import Base, JSONType


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ValidationResult(Base):
    """BizMind market-validation output."""

    __tablename__ = "dna_validation"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    idea_id = Column(Uuid, ForeignKey("ideas.id"), nullable=False, index=True)

    target_customers = Column(JSONType, nullable=False, default=list)
    competitors = Column(JSONType, nullable=False, default=list)  # [{name, url}]
    tam_estimate = Column(Float, nullable=True)
    risks = Column(JSONType, nullable=False, default=list)
    insights = Column(Text, nullable=False, default="")
    recommendations = Column(JSONType, nullable=False, default=list)
    validation_score = Column(Float, nullable=False, default=0.0)

    raw_report = Column(JSONType, nullable=False, default=dict)
    raw_output = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now, index=True)


class BrandingResult(Base):
    """BrandPulse brand-identity output."""

    __tablename__ = "dna_branding"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    idea_id = Column(Uuid, ForeignKey("ideas.id"), nullable=False, index=True)

    brand_name = Column(Text, nullable=False, default="")
    tagline = Column(Text, nullable=False, default="")
    tone = Column(Text, nullable=False, default="")
    color_palette = Column(JSONType, nullable=False, default=list)  # ["#HEX"]
    brand_story = Column(Text, nullable=False, default="")
    logo_concept = Column(Text, nullable=False, default="")

    raw_report = Column(JSONType, nullable=False, default=dict)
    raw_output = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now, index=True)


class TechnicalResult(Base):
    """CodeWeaver technical-architecture output."""

    __tablename__ = "dna_technical"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    idea_id = Column(Uuid, ForeignKey("ideas.id"), nullable=False, index=True)

    recommended_stack = Column(JSONType, nullable=False, default=list)
    architecture = Column(Text, nullable=False, default="")
    api_endpoints = Column(JSONType, nullable=False, default=list)
    mvp_features = Column(JSONType, nullable=False, default=list)
    integration_notes = Column(Text, nullable=False, default="")

    raw_report = Column(JSONType, nullable=False, default=dict)
    raw_output = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now, index=True)


class LaunchResult(Base):
    """LaunchLens go-to-market output."""

    __tablename__ = "dna_launch"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    idea_id = Column(Uuid, ForeignKey("ideas.id"), nullable=False, index=True)

    pricing_model = Column(Text, nullable=False, default="")
    marketing_channels = Column(JSONType, nullable=False, default=list)
    gtm_strategy = Column(Text, nullable=False, default="")
    investor_pitch = Column(Text, nullable=False, default="")
    growth_forecast = Column(Text, nullable=False, default="")

    raw_report = Column(JSONType, nullable=False, default=dict)
    raw_output = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now, index=True)
