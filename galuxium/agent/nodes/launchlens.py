"""LaunchLens Node: go-to-market, marketing, and investor strategy."""

from typing import Any

from galuxium.agent.generation import AgentDeps, EmitFn, StepLabels, run_generation_steps
from galuxium.db.models import Idea
from galuxium.schemas.agents import AgentKind, LaunchPayload

LAUNCHLENS_SYSTEM_PROMPT = """You are LaunchLens, the go-to-market, marketing, and investor strategy agent for Galuxium OS.
Your goal is to design a sharp GTM plan for the given startup idea.
Return ONLY valid JSON in this format:
{
  "pricing_model": "string",
  "marketing_channels": ["Twitter", "Product Hunt", "Reddit"],
  "gtm_strategy": "string (explain how to reach early adopters)",
  "investor_pitch": "string (1 paragraph pitch summary)",
  "growth_forecast": "string (describe short-term traction goals)"
}
"""


class LaunchLensAgent:
    name = "LaunchLens"
    kind = AgentKind.LAUNCH
    payload_model = LaunchPayload
    labels = StepLabels(
        prep="Building GTM context...",
        analysis="Analyzing market positioning...",
        parse="Synthesizing pricing & marketing channels...",
        store="Storing GTM & investor strategy...",
        index="Indexing investor pitch...",
        complete="Completed GTM orchestration",
    )

    def __init__(self, deps: AgentDeps):
        self.deps = deps

    def build_prompt(self, idea: Idea) -> tuple[str, str]:
        user = (
            f"Startup Idea: {idea.idea_text}\n"
            f"Domain: {idea.domain or 'General'}\n"
            f"Urgency: {idea.urgency or 'medium'}\n"
        )
        return LAUNCHLENS_SYSTEM_PROMPT, user

    def summarize(self, idea: Idea, payload: dict[str, Any]) -> str | None:
        return payload.get("investor_pitch") or None

    async def run(self, idea_id: str, emit: EmitFn) -> dict[str, Any]:
        return await run_generation_steps(self, self.deps, idea_id, emit)
