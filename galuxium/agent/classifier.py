"""Intent Classifier: turns raw idea text into a structured IntentRecord.

Single non-streaming completion. Unlike the generation agents, unparseable
model output does not raise: it yields a degraded IntentRecord carrying the
raw text and an error marker. Provider failures still propagate.
"""

import structlog
from pydantic import ValidationError

from galuxium.agent.completion import CompletionClient
from galuxium.agent.llm_helpers import extract_json
from galuxium.core.exceptions import JsonExtractionError
from galuxium.schemas.intent import IntentRecord

logger = structlog.get_logger(__name__)

CLASSIFIER_ROLE = "classifier"

CLASSIFIER_SYSTEM_PROMPT = """You are Galuxium's Intent Classifier.
You must output ONLY valid JSON — no markdown, no explanations.

Schema:
{
  "title": string,
  "domain": string,
  "problem_statement": string,
  "user_type": string,
  "product_type": "SaaS" | "Marketplace" | "MobileApp" | "API" | "Hardware" | "Other",
  "urgency": "low" | "medium" | "high"
}

Return only a JSON object. No backticks, no text before or after.
"""


class IntentClassifier:
    def __init__(self, client: CompletionClient):
        self.client = client

    async def classify(self, idea_text: str) -> IntentRecord:
        """Classify an idea.

        Returns:
            IntentRecord; `is_degraded` is True when the model output held no usable JSON

        Raises:
            ProviderError: Completion request failed
        """
        raw = await self.client.complete(role=CLASSIFIER_ROLE, system=CLASSIFIER_SYSTEM_PROMPT, user=idea_text)

        try:
            parsed = extract_json(raw)
            intent = IntentRecord.model_validate(
                {k: v for k, v in parsed.items() if k not in ("raw_output", "error")}
            )
        except (JsonExtractionError, ValidationError) as e:
            logger.warning("intent_classification_degraded", error=str(e), raw_length=len(raw))
            return IntentRecord.degraded(raw_output=raw)

        logger.info(
            "intent_classified",
            product_type=intent.product_type.value,
            urgency=intent.urgency.value,
            domain=intent.domain,
        )
        return intent
