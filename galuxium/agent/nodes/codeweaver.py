"""CodeWeaver Node: technical architecture and MVP plan."""

from typing import Any

from galuxium.agent.generation import AgentDeps, EmitFn, StepLabels, run_generation_steps
from galuxium.db.models import Idea
from galuxium.schemas.agents import AgentKind, TechnicalPayload

CODEWEAVER_SYSTEM_PROMPT = """You are CodeWeaver, a full-stack AI architect for Galuxium OS.
Return ONLY valid JSON in this format:
{
  "recommended_stack": ["Next.js", "Supabase", "OpenAI"],
  "architecture": "string (brief system design)",
  "api_endpoints": ["POST /login", "GET /projects"],
  "mvp_features": ["auth", "dashboard", "AI assistant"],
  "integration_notes": "string (deployment & scaling hints)"
}
"""


class CodeWeaverAgent:
    name = "CodeWeaver"
    kind = AgentKind.TECHNICAL
    payload_model = TechnicalPayload
    labels = StepLabels(
        analysis="Generating MVP plan...",
        parse="Model response received, parsing JSON...",
        store="Saving MVP plan to database...",
        complete="Completed MVP architecture synthesis",
    )

    def __init__(self, deps: AgentDeps):
        self.deps = deps

    def build_prompt(self, idea: Idea) -> tuple[str, str]:
        user = f"Startup Idea: {idea.idea_text}\nProduct type: {idea.product_type or 'Other'}\n"
        return CODEWEAVER_SYSTEM_PROMPT, user

    def summarize(self, idea: Idea, payload: dict[str, Any]) -> str | None:
        return None

    async def run(self, idea_id: str, emit: EmitFn) -> dict[str, Any]:
        return await run_generation_steps(self, self.deps, idea_id, emit)
