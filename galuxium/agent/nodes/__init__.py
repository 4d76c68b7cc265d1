from galuxium.agent.generation import AgentDeps, GenerationAgent
from galuxium.agent.nodes.bizmind import BizMindAgent
from galuxium.agent.nodes.brandpulse import BrandPulseAgent
from galuxium.agent.nodes.codeweaver import CodeWeaverAgent
from galuxium.agent.nodes.launchlens import LaunchLensAgent

AGENT_ORDER = (BizMindAgent, BrandPulseAgent, CodeWeaverAgent, LaunchLensAgent)


def default_agents(deps: AgentDeps) -> list[GenerationAgent]:
    """The four generation agents in run order."""
    return [agent_cls(deps) for agent_cls in AGENT_ORDER]


__all__ = [
    "AGENT_ORDER",
    "BizMindAgent",
    "BrandPulseAgent",
    "CodeWeaverAgent",
    "LaunchLensAgent",
    "default_agents",
]
