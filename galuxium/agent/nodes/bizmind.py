"""BizMind Node: market validation for an idea.

Produces target customers, competitors, a TAM estimate, risks, insights,
recommendations, and a 0-100 validation score. The insights and
recommendations are indexed as a startup doc for later semantic search.
"""

from typing import Any

from galuxium.agent.generation import AgentDeps, EmitFn, StepLabels, idea_context, run_generation_steps
from galuxium.db.models import Idea
from galuxium.schemas.agents import AgentKind, ValidationPayload

BIZMIND_SYSTEM_PROMPT = """You are BizMind, the market validation agent for Galuxium OS.
Return ONLY valid JSON in the format:
{
  "target_customers": ["..."],
  "competitors": [{"name": "", "url": ""}],
  "tam_estimate": number,
  "risks": ["..."],
  "insights": "string",
  "recommendations": ["..."],
  "validation_score": number
}
"""


class BizMindAgent:
    name = "BizMind"
    kind = AgentKind.VALIDATION
    payload_model = ValidationPayload
    labels = StepLabels(
        fetch="Fetched idea from DB",
        analysis="Analyzing market & competitors...",
        store="Inserting validation results into DB...",
        index="Indexing validation summary...",
        complete="BizMind complete",
    )

    def __init__(self, deps: AgentDeps):
        self.deps = deps

    def build_prompt(self, idea: Idea) -> tuple[str, str]:
        return BIZMIND_SYSTEM_PROMPT, idea_context(idea)

    def summarize(self, idea: Idea, payload: dict[str, Any]) -> str | None:
        parts = [idea.idea_text or "", payload.get("insights") or "", ",".join(payload.get("recommendations") or [])]
        summary = " ".join(p for p in parts if p).strip()
        return summary or None

    async def run(self, idea_id: str, emit: EmitFn) -> dict[str, Any]:
        return await run_generation_steps(self, self.deps, idea_id, emit)
