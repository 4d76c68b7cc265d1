"""Re-export all models so Base.metadata sees them."""

from galuxium.db.models.agent_results import BrandingResult, LaunchResult, TechnicalResult, ValidationResult
from galuxium.db.models.dna import DnaAggregate
from galuxium.db.models.idea import Idea
from galuxium.db.models.orchestration_log import OrchestrationLog
from galuxium.db.models.startup_doc import StartupDoc

__all__ = [
    "BrandingResult",
    "DnaAggregate",
    "Idea",
    "LaunchResult",
    "OrchestrationLog",
    "StartupDoc",
    "TechnicalResult",
    "ValidationResult",
]
