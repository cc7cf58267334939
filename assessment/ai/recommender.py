import os
import logging
from pydantic import ValidationError

from ..logic.contracts import RecommendationResult
from ..logic.errors import MalformedResponseError
from .llm_client import LLMClient, llm_client
from .prompt_builder import build_system_prompt

logger = logging.getLogger(__name__)

RECOMMENDATION_TEMPERATURE = float(os.getenv("RECOMMENDATION_TEMPERATURE", "0.5"))


class MajorRecommender:
    """Sends a major-match prompt to the generator and parses the structured answer."""

    def __init__(self, llm: LLMClient, temperature: float = RECOMMENDATION_TEMPERATURE):
        self.llm = llm
        self.temperature = temperature

    def recommend(self, prompt: str) -> RecommendationResult:
        """
        One JSON-mode call, no retry.

        Raises:
            ExternalServiceError: the service failed or is not configured
            MalformedResponseError: the payload does not match RecommendationResult
        """
        payload = self.llm.complete_json(
            user=prompt,
            system=build_system_prompt(),
            temperature=self.temperature,
        )

        try:
            result = RecommendationResult.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Recommendation payload rejected: {e.error_count()} schema errors")
            raise MalformedResponseError(f"Recommendation payload does not match schema: {e}") from e

        return result.ranked()


# Singleton instance
recommender = MajorRecommender(llm_client)
