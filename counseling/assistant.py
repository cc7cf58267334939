"""
Counseling assistant.

One turn: rate limit -> content filter -> stage classification -> context
composition -> one generation call -> history update. Interest extraction is
a separate call the HTTP layer schedules after responding.
"""

import os
import logging
from datetime import timedelta
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from assessment.ai.llm_client import LLMClient, llm_client
from assessment.ai.similar_cases import SimilarCaseRetriever, case_retriever
from assessment.logic.contracts import CategoryScores
from assessment.logic.errors import ExternalServiceError
from .content_filter import check_message
from .conversation_store import STAGES, ConversationStore, CounselingProfile, build_store
from .prompts import (
    build_counselor_system_prompt,
    build_counselor_user_prompt,
    build_interest_prompt,
    build_stage_prompt,
    build_summary_prompt,
)

load_dotenv()

logger = logging.getLogger(__name__)

CHAT_MAX_MESSAGES_PER_HOUR = int(os.getenv("CHAT_MAX_MESSAGES_PER_HOUR", "100"))
RATE_LIMIT_WINDOW = timedelta(hours=1)

HISTORY_PROMPT_ENTRIES = 8
HISTORY_LIMIT = 20

CHAT_TEMPERATURE = 0.7
CHAT_MAX_TOKENS = 500
CLASSIFY_TEMPERATURE = 0.3
SUMMARY_TEMPERATURE = 0.5
SUMMARY_MAX_TOKENS = 300

# =============================================================================
# CANNED REPLIES
# =============================================================================

RATE_LIMITED_MESSAGE = "Sorry, you have reached the hourly message limit. Please try again a little later."
APOLOGY_MESSAGE = "Sorry, something went wrong on my side. Please try again in a moment."
EMPTY_REPLY_MESSAGE = "Sorry, could you say that again?"
NO_HISTORY_SUMMARY = "There is no conversation to summarize yet."
SUMMARY_ERROR_MESSAGE = "A summary of this conversation could not be generated right now."


class AssistantReply(BaseModel):
    text: str
    # answer | rate_limited | filtered | error
    kind: str = "answer"


def _merge_tags(existing: List[str], extracted) -> List[str]:
    """Append new non-empty string tags, keeping order and dropping duplicates."""
    merged = list(existing)
    if not isinstance(extracted, list):
        return merged
    for tag in extracted:
        if isinstance(tag, str):
            tag = tag.strip()
            if tag and tag not in merged:
                merged.append(tag)
    return merged


class CounselingAssistant:
    """
    Args:
        llm: generation client
        store: where per-user state lives
        retriever: optional similar-case retriever for extra context
        max_messages_per_hour: per-user quota
    """

    def __init__(
        self,
        llm: LLMClient,
        store: ConversationStore,
        retriever: Optional[SimilarCaseRetriever] = None,
        max_messages_per_hour: int = CHAT_MAX_MESSAGES_PER_HOUR,
    ):
        self.llm = llm
        self.store = store
        self.retriever = retriever
        self.max_messages_per_hour = max_messages_per_hour

    def respond(
        self,
        user_id: str,
        message: str,
        scores: Optional[CategoryScores] = None,
        default_scores: Optional[CategoryScores] = None,
    ) -> AssistantReply:
        """
        Answer one chat message. Never raises.

        Args:
            user_id: student id
            message: the student's message
            scores: scores to remember for this student
            default_scores: used only when the profile has no scores yet
        """
        try:
            allowed = self.store.check_rate_limit(user_id, self.max_messages_per_hour, RATE_LIMIT_WINDOW)
        except Exception as e:
            logger.error(f"Rate limit check failed for user {user_id}: {e}")
            return AssistantReply(text=APOLOGY_MESSAGE, kind="error")
        if not allowed:
            logger.info(f"Chat rate limit reached for user {user_id}")
            return AssistantReply(text=RATE_LIMITED_MESSAGE, kind="rate_limited")

        rejection = check_message(message)
        if rejection:
            return AssistantReply(text=rejection, kind="filtered")

        try:
            profile = self.store.get_profile(user_id)
            if scores is not None:
                profile.scores = scores
            elif profile.scores is None and default_scores is not None:
                profile.scores = default_scores

            self._classify_stage(profile, message)

            recent = profile.history[-HISTORY_PROMPT_ENTRIES:]
            text = self.llm.complete_text(
                user=build_counselor_user_prompt(recent, message),
                system=build_counselor_system_prompt(profile, self._similar_cases_context(profile)),
                temperature=CHAT_TEMPERATURE,
                max_tokens=CHAT_MAX_TOKENS,
            ).strip()
        except Exception as e:
            logger.error(f"Chat response failed for user {user_id}: {e}")
            return AssistantReply(text=APOLOGY_MESSAGE, kind="error")

        if not text:
            return AssistantReply(text=EMPTY_REPLY_MESSAGE, kind="error")

        profile.history = (profile.history + [
            {"role": "user", "content": message},
            {"role": "assistant", "content": text},
        ])[-HISTORY_LIMIT:]
        try:
            self.store.save_profile(user_id, profile)
        except Exception as e:
            logger.error(f"Failed to save chat profile for user {user_id}: {e}")

        return AssistantReply(text=text, kind="answer")

    def _classify_stage(self, profile: CounselingProfile, message: str) -> None:
        """Update stage and focus in place; keeps the previous values on failure."""
        try:
            result = self.llm.complete_json(
                user=build_stage_prompt(profile, profile.history[-5:], message),
                temperature=CLASSIFY_TEMPERATURE,
            )
        except ExternalServiceError as e:
            logger.warning(f"Stage classification failed, keeping '{profile.stage}': {e}")
            return

        stage = result.get("stage")
        if stage in STAGES:
            profile.stage = stage
        focus = result.get("current_focus")
        if isinstance(focus, str) and focus.strip():
            profile.current_focus = focus.strip()

    def _similar_cases_context(self, profile: CounselingProfile) -> str:
        if not self.retriever or not self.retriever.is_available or profile.scores is None:
            return ""
        return self.retriever.narrate(profile.scores, [])

    def extract_interests(self, user_id: str, message: str) -> None:
        """Merge interest and concern tags from one message into the profile. Swallows every failure."""
        try:
            extracted = self.llm.complete_json(
                user=build_interest_prompt(message),
                temperature=CLASSIFY_TEMPERATURE,
            )
            profile = self.store.get_profile(user_id)
            interests = _merge_tags(profile.interests, extracted.get("interests"))
            concerns = _merge_tags(profile.concerns, extracted.get("concerns"))
            if interests == profile.interests and concerns == profile.concerns:
                return
            profile.interests = interests
            profile.concerns = concerns
            self.store.save_profile(user_id, profile)
        except Exception as e:
            logger.warning(f"Interest extraction failed for user {user_id}: {e}")

    def summarize(self, user_id: str) -> str:
        try:
            profile = self.store.get_profile(user_id)
        except Exception as e:
            logger.error(f"Failed to load chat profile for user {user_id}: {e}")
            return SUMMARY_ERROR_MESSAGE
        if not profile.history:
            return NO_HISTORY_SUMMARY

        try:
            text = self.llm.complete_text(
                user=build_summary_prompt(profile),
                temperature=SUMMARY_TEMPERATURE,
                max_tokens=SUMMARY_MAX_TOKENS,
            )
        except ExternalServiceError as e:
            logger.error(f"Conversation summary failed for user {user_id}: {e}")
            return SUMMARY_ERROR_MESSAGE
        return text.strip() or SUMMARY_ERROR_MESSAGE


# Singleton instance
assistant = CounselingAssistant(llm_client, build_store(), case_retriever)
