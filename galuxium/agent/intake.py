"""Chat intake: decides whether a chat message describes a startup idea.

A detected idea is handed to the same classify/resolve/run path as
POST /api/ideas. Unparseable model output counts as "not an idea" so a chat
message never fails because the detector rambled.
"""

import structlog
from pydantic import ValidationError

from galuxium.agent.completion import CompletionClient
from galuxium.agent.llm_helpers import extract_json
from galuxium.core.exceptions import JsonExtractionError
from galuxium.schemas.intent import IdeaDetection

logger = structlog.get_logger(__name__)

INTAKE_ROLE = "intake"

INTAKE_SYSTEM_PROMPT = """You are Galuxium's Intent Classifier.
Detect if the message describes a startup or business idea.

Return ONLY JSON:
{
  "is_startup_idea": boolean,
  "idea": string,
  "reasoning": string | null
}
"""


class IdeaDetector:
    def __init__(self, client: CompletionClient):
        self.client = client

    async def detect(self, message: str) -> IdeaDetection:
        """Classify one chat message.

        Raises:
            ProviderError: Completion request failed
        """
        raw = await self.client.complete(role=INTAKE_ROLE, system=INTAKE_SYSTEM_PROMPT, user=message)

        try:
            detection = IdeaDetection.model_validate(extract_json(raw))
        except (JsonExtractionError, ValidationError) as e:
            logger.warning("intake_detection_unparseable", error=str(e), raw_length=len(raw))
            return IdeaDetection(is_startup_idea=False)

        # The model sometimes flags an idea but leaves the text empty
        if detection.is_startup_idea and not detection.idea.strip():
            detection = detection.model_copy(update={"idea": message})

        logger.info("intake_detected", is_startup_idea=detection.is_startup_idea)
        return detection
