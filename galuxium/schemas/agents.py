"""Pydantic schemas for generation-agent payloads.

Every field has a default so a successful run always stores a complete row;
values of the wrong type are rejected rather than partially stored.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class AgentKind(StrEnum):
    """Four agent result kinds, one table each."""

    VALIDATION = "validation"
    BRANDING = "branding"
    TECHNICAL = "technical"
    LAUNCH = "launch"


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Competitor(_Payload):
    name: str = ""
    url: str = ""


class ValidationPayload(_Payload):
    """BizMind: market validation."""

    target_customers: list[str] = Field(default_factory=list)
    competitors: list[Competitor] = Field(default_factory=list)
    tam_estimate: float | None = None
    risks: list[str] = Field(default_factory=list)
    insights: str = ""
    recommendations: list[str] = Field(default_factory=list)
    validation_score: float = 0.0


class BrandingPayload(_Payload):
    """BrandPulse: brand identity."""

    brand_name: str = ""
    tagline: str = ""
    tone: str = ""
    color_palette: list[str] = Field(default_factory=list)
    brand_story: str = ""
    logo_concept: str = ""


class TechnicalPayload(_Payload):
    """CodeWeaver: technical architecture and MVP plan."""

    recommended_stack: list[str] = Field(default_factory=list)
    architecture: str = ""
    api_endpoints: list[str] = Field(default_factory=list)
    mvp_features: list[str] = Field(default_factory=list)
    integration_notes: str = ""


class LaunchPayload(_Payload):
    """LaunchLens: go-to-market and investor strategy."""

    pricing_model: str = ""
    marketing_channels: list[str] = Field(default_factory=list)
    gtm_strategy: str = ""
    investor_pitch: str = ""
    growth_forecast: str = ""


PAYLOAD_MODELS: dict[AgentKind, type[BaseModel]] = {
    AgentKind.VALIDATION: ValidationPayload,
    AgentKind.BRANDING: BrandingPayload,
    AgentKind.TECHNICAL: TechnicalPayload,
    AgentKind.LAUNCH: LaunchPayload,
}
