"""Pydantic schemas for the classified intent of an idea."""

from enum import StrEnum

from pydantic import BaseModel, Field, field_validator


class ProductType(StrEnum):
    SAAS = "SaaS"
    MARKETPLACE = "Marketplace"
    MOBILE_APP = "MobileApp"
    API = "API"
    HARDWARE = "Hardware"
    OTHER = "Other"


class Urgency(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


_PRODUCT_TYPES_BY_LOWER = {p.value.lower(): p for p in ProductType}


class IntentRecord(BaseModel):
    """Structured intent returned by the classifier.

    A degraded record (model output was not JSON) carries `raw_output` and
    `error`; check `is_degraded` before trusting the other fields.
    """

    title: str = ""
    domain: str = ""
    problem_statement: str = ""
    user_type: str = ""
    product_type: ProductType = ProductType.OTHER
    urgency: Urgency = Urgency.MEDIUM

    raw_output: str | None = Field(None, description="Unparsed model text (degraded records only)")
    error: str | None = Field(None, description="Degradation marker, e.g. 'Invalid JSON format'")

    @field_validator("title", "domain", "problem_statement", "user_type", mode="before")
    @classmethod
    def _coerce_text(cls, value):
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("product_type", mode="before")
    @classmethod
    def _coerce_product_type(cls, value):
        # Models drift on casing ("saas", "Mobile App"); anything unknown is Other
        if isinstance(value, str):
            key = value.replace(" ", "").replace("-", "").lower()
            return _PRODUCT_TYPES_BY_LOWER.get(key, ProductType.OTHER)
        return ProductType.OTHER

    @field_validator("urgency", mode="before")
    @classmethod
    def _coerce_urgency(cls, value):
        if isinstance(value, str) and value.strip().lower() in {u.value for u in Urgency}:
            return value.strip().lower()
        return Urgency.MEDIUM

    @property
    def is_degraded(self) -> bool:
        return self.error is not None

    @classmethod
    def degraded(cls, raw_output: str, error: str = "Invalid JSON format") -> "IntentRecord":
        return cls(raw_output=raw_output, error=error)


class IdeaDetection(BaseModel):
    """Chat intake verdict: is this message a startup idea, and which text to run."""

    is_startup_idea: bool = False
    idea: str = ""
    reasoning: str | None = None

    @field_validator("is_startup_idea", mode="before")
    @classmethod
    def _strict_true(cls, value):
        # Only a literal JSON true counts; "yes", 1 and friends do not
        return value is True

    @field_validator("idea", mode="before")
    @classmethod
    def _coerce_idea(cls, value):
        return value if isinstance(value, str) else ""
