"""BrandPulse Node: brand identity synthesis."""

from typing import Any

from galuxium.agent.generation import AgentDeps, EmitFn, StepLabels, run_generation_steps
from galuxium.db.models import Idea
from galuxium.schemas.agents import AgentKind, BrandingPayload

BRANDPULSE_SYSTEM_PROMPT = """You are BrandPulse, an AI branding strategist for Galuxium OS.
Return ONLY valid JSON in this format:
{
  "brand_name": "string",
  "tagline": "string",
  "tone": "string",
  "color_palette": ["#HEX"],
  "brand_story": "string",
  "logo_concept": "string"
}
"""


class BrandPulseAgent:
    name = "BrandPulse"
    kind = AgentKind.BRANDING
    payload_model = BrandingPayload
    labels = StepLabels(
        analysis="Sending branding prompt to model...",
        parse="Model returned branding concept. Parsing JSON...",
        store="Storing branding...",
        complete="Branding synthesis complete",
    )

    def __init__(self, deps: AgentDeps):
        self.deps = deps

    def build_prompt(self, idea: Idea) -> tuple[str, str]:
        user = (
            f"Startup Idea: {idea.idea_text}\n"
            f"Domain: {idea.domain or 'General'}\n"
            f"Target user: {idea.user_type or 'General'}\n"
        )
        return BRANDPULSE_SYSTEM_PROMPT, user

    def summarize(self, idea: Idea, payload: dict[str, Any]) -> str | None:
        # Brand story is the only free-text field worth searching
        story = payload.get("brand_story") or ""
        if not story:
            return None
        return f"{payload.get('brand_name') or ''}: {payload.get('tagline') or ''} {story}".strip()

    async def run(self, idea_id: str, emit: EmitFn) -> dict[str, Any]:
        return await run_generation_steps(self, self.deps, idea_id, emit)
