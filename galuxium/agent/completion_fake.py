"""CompletionFake: Scenario-based test double for the CompletionClient protocol.

Provides deterministic, instant responses for each pipeline role:
- happy_path: realistic JSON for the classifier and all four agents
- provider_failure: every call raises ProviderError

Individual roles can be switched to fail (`fail_roles`) or to return text
with no JSON in it (`garbage_roles`), which is how tests drive single-agent
failures and the degraded classifier path. `overrides` replaces
individual fields of a canned response.
"""

import json
from dataclasses import dataclass

from galuxium.core.exceptions import ProviderError

CANNED_RESPONSES: dict[str, dict] = {
    "intake": {
        "is_startup_idea": True,
        "idea": "A subscription box for rare houseplants",
        "reasoning": "Describes a product, its customers and a business model.",
    },
    "classifier": {
        "title": "Rare Leaf Club",
        "domain": "E-commerce / Plants",
        "problem_statement": "Collectors struggle to find healthy rare houseplants from trusted growers.",
        "user_type": "Plant collectors",
        "product_type": "Marketplace",
        "urgency": "medium",
    },
    "BizMind": {
        "target_customers": ["Urban plant collectors", "Interior designers"],
        "competitors": [{"name": "Bloomscape", "url": "https://bloomscape.com"}],
        "tam_estimate": 1200000000,
        "risks": ["Live plant shipping losses", "Seasonal demand"],
        "insights": "Collectors pay premiums for verified rare cultivars.",
        "recommendations": ["Partner with boutique nurseries", "Offer a survival guarantee"],
        "validation_score": 78,
    },
    "BrandPulse": {
        "brand_name": "Rare Leaf Club",
        "tagline": "Grow something nobody else has.",
        "tone": "Curious, warm, expert",
        "color_palette": ["#2F5D50", "#F2E8CF", "#BC6C25"],
        "brand_story": "Started by two collectors tired of sickly mail-order cuttings.",
        "logo_concept": "A single variegated leaf inside a seal",
    },
    "CodeWeaver": {
        "recommended_stack": ["Next.js", "Postgres", "Stripe"],
        "architecture": "Next.js storefront over a subscription billing service and grower inventory API.",
        "api_endpoints": ["POST /subscriptions", "GET /boxes/current"],
        "mvp_features": ["subscriptions", "grower catalog", "shipping tracker"],
        "integration_notes": "Ship from regional growers to keep transit under 3 days.",
    },
    "LaunchLens": {
        "pricing_model": "Monthly subscription, $39/box",
        "marketing_channels": ["Instagram", "Reddit", "Plant swaps"],
        "gtm_strategy": "Seed with collector communities and influencer unboxings.",
        "investor_pitch": "A recurring-revenue marketplace for the fast-growing rare plant hobby.",
        "growth_forecast": "500 subscribers within six months of launch.",
    },
}

GARBAGE_RESPONSE = "I'm sorry, I can't produce that right now."


@dataclass
class CompletionCall:
    role: str
    system: str
    user: str


class CompletionFake:
    """Scenario-based test double for CompletionClient and Embedder.

    Attributes:
        calls: Every complete() invocation in order
        embed_calls: Every text passed to embed()
    """

    VALID_SCENARIOS = {"happy_path", "provider_failure"}

    def __init__(
        self,
        scenario: str = "happy_path",
        fail_roles: set[str] | None = None,
        garbage_roles: set[str] | None = None,
        fenced_roles: set[str] | None = None,
        overrides: dict[str, dict] | None = None,
        fail_embeddings: bool = False,
    ):
        """Initialize CompletionFake with a named scenario.

        Args:
            scenario: One of 'happy_path', 'provider_failure'
            fail_roles: Roles whose calls raise ProviderError
            garbage_roles: Roles whose calls return text with no JSON object
            fenced_roles: Roles whose JSON is wrapped in a ```json fence with prose
            overrides: Per-role fields merged over the canned response
            fail_embeddings: Make embed() raise ProviderError

        Raises:
            ValueError: If scenario is not recognized
        """
        if scenario not in self.VALID_SCENARIOS:
            raise ValueError(f"Unknown scenario: {scenario}. Valid scenarios: {self.VALID_SCENARIOS}")
        self.scenario = scenario
        self.fail_roles = set(fail_roles or ())
        self.garbage_roles = set(garbage_roles or ())
        self.fenced_roles = set(fenced_roles or ())
        self.overrides = overrides or {}
        self.fail_embeddings = fail_embeddings
        self.calls: list[CompletionCall] = []
        self.embed_calls: list[str] = []

    @property
    def roles_called(self) -> list[str]:
        return [c.role for c in self.calls]

    async def complete(self, role: str, system: str, user: str) -> str:
        self.calls.append(CompletionCall(role=role, system=system, user=user))

        if self.scenario == "provider_failure" or role in self.fail_roles:
            raise ProviderError(f"Provider returned 503: upstream unavailable for {role}", status_code=503)

        if role in self.garbage_roles:
            return GARBAGE_RESPONSE

        body = json.dumps({**CANNED_RESPONSES.get(role, {}), **self.overrides.get(role, {})})
        if role in self.fenced_roles:
            return f"Here is the result:\n```json\n{body}\n```\nLet me know if you need changes."
        return body

    async def embed(self, text: str) -> list[float]:
        self.embed_calls.append(text)
        if self.fail_embeddings:
            raise ProviderError("Embedding request failed")
        return [0.1, 0.2, 0.3]
