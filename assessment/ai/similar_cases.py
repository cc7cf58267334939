"""
Similar-case retrieval backed by a Chroma collection.

Each case study is embedded from a short descriptive text of its RIASEC
profile and stored with its outcome as metadata. Retrieval and narration are
enrichment only: nothing in this module raises to its callers.
"""

import os
import uuid
import logging
from typing import Any, Dict, List, Optional, Sequence

import chromadb
from dotenv import load_dotenv

from ..logic.contracts import CaseStudy, CategoryScores
from ..logic.errors import ExternalServiceError
from .case_corpus import REFERENCE_CASES
from .llm_client import LLMClient, llm_client
from .prompt_builder import build_narrative_prompt

load_dotenv()

logger = logging.getLogger(__name__)

SIMILAR_CASES_ENABLED = os.getenv("SIMILAR_CASES_ENABLED", "true").lower() in ("1", "true", "yes")
CHROMA_PATH = os.getenv("CHROMA_PATH")
CHROMA_COLLECTION = os.getenv("CHROMA_COLLECTION", "riasec-cases")

NARRATIVE_CASE_LIMIT = 3
NARRATIVE_TEMPERATURE = 0.7
NARRATIVE_MAX_TOKENS = 300

# =============================================================================
# FALLBACK MESSAGES
# =============================================================================

FALLBACK_NOT_CONFIGURED = (
    "Similar-case feedback is not available right now. "
    "Please use the recommendations above as your main reference."
)
FALLBACK_NO_CASES = (
    "No senior students with a similar profile were found yet. "
    "As more students share their experience, this feedback will become richer."
)
FALLBACK_ERROR = (
    "Feedback from similar students could not be generated at the moment. "
    "Your recommendations are still based on your full RIASEC profile."
)
FALLBACK_EMPTY = "Students with profiles like yours have found majors that fit them well."


def describe_scores(scores: CategoryScores) -> str:
    """Text form of a profile used as the embedding input."""
    parts = [
        f"{category.capitalize()} ({category[0].upper()}): {value}"
        for category, value in scores.as_dict().items()
    ]
    top = ", ".join(category.capitalize() for category, _ in scores.top_categories())
    return f"RIASEC profile. {'; '.join(parts)}. Strongest interests: {top}."


def _case_metadata(case: CaseStudy) -> Dict[str, Any]:
    # Chroma metadata values cannot be None
    metadata: Dict[str, Any] = dict(case.scores.as_dict())
    metadata.update({
        "selected_major": case.selected_major,
        "satisfaction_rating": case.satisfaction_rating,
        "narrative": case.narrative or "",
        "graduation_year": case.graduation_year or 0,
        "career_path": case.career_path or "",
    })
    return metadata


def _case_from_metadata(case_id: str, metadata: Dict[str, Any], distance: Optional[float]) -> CaseStudy:
    scores = CategoryScores(**{
        category: int(metadata.get(category, 0))
        for category in CategoryScores.model_fields
    })
    return CaseStudy(
        id=case_id,
        scores=scores,
        selected_major=str(metadata.get("selected_major", "")),
        satisfaction_rating=int(metadata.get("satisfaction_rating", 1)),
        narrative=str(metadata.get("narrative", "")),
        graduation_year=int(metadata["graduation_year"]) if metadata.get("graduation_year") else None,
        career_path=metadata.get("career_path") or None,
        similarity=(1.0 - float(distance)) if distance is not None else None,
    )


class SimilarCaseRetriever:
    """
    Nearest-neighbour search over prior student outcomes.

    Args:
        llm: client used for embeddings and the narrative completion
        collection: an already opened Chroma collection (tests pass a fake);
            when omitted, initialize() opens one
    """

    def __init__(self, llm: LLMClient, collection=None):
        self.llm = llm
        self.collection = collection

    @property
    def is_available(self) -> bool:
        return self.collection is not None and self.llm.is_configured

    def initialize(self) -> bool:
        """Open the collection and seed it. Returns whether retrieval is usable."""
        if not SIMILAR_CASES_ENABLED:
            logger.info("Similar-case retrieval disabled by configuration")
            return False
        if not self.llm.is_configured:
            logger.warning("Similar-case retrieval unavailable: embedding client not configured")
            return False

        try:
            if self.collection is None:
                if CHROMA_PATH:
                    client = chromadb.PersistentClient(path=CHROMA_PATH)
                else:
                    client = chromadb.EphemeralClient()
                self.collection = client.get_or_create_collection(
                    name=CHROMA_COLLECTION,
                    metadata={"hnsw:space": "cosine"},
                )
            inserted = self.seed_reference_cases()
            logger.info(f"Similar-case index ready ({inserted} reference cases inserted)")
            return True
        except Exception as e:
            logger.error(f"Failed to initialize similar-case index: {e}")
            self.collection = None
            return False

    def seed_reference_cases(self) -> int:
        """
        Insert the reference corpus if the collection is empty.

        Returns:
            number of cases inserted (0 when the collection already has data)
        """
        if self.collection is None:
            return 0
        if self.collection.count() > 0:
            logger.info("Similar-case index already populated, skipping seed")
            return 0

        ids, embeddings, metadatas, documents = [], [], [], []
        for case in REFERENCE_CASES:
            document = describe_scores(case.scores)
            ids.append(case.id)
            embeddings.append(self.llm.embed(document))
            metadatas.append(_case_metadata(case))
            documents.append(document)

        self.collection.upsert(ids=ids, embeddings=embeddings, metadatas=metadatas, documents=documents)
        return len(ids)

    def store_case(self, case: CaseStudy) -> bool:
        """Add one case to the index. Returns False instead of raising."""
        if not self.is_available:
            logger.warning("Case study not stored: similar-case index unavailable")
            return False
        try:
            document = describe_scores(case.scores)
            self.collection.upsert(
                ids=[case.id],
                embeddings=[self.llm.embed(document)],
                metadatas=[_case_metadata(case)],
                documents=[document],
            )
            logger.info(f"Stored case study {case.id} ({case.selected_major})")
            return True
        except Exception as e:
            logger.error(f"Failed to store case study: {e}")
            return False

    def find_similar(self, scores: CategoryScores, k: int = 5) -> List[CaseStudy]:
        """k nearest cases, closest first. Empty list on any failure."""
        if not self.is_available:
            return []
        try:
            result = self.collection.query(
                query_embeddings=[self.llm.embed(describe_scores(scores))],
                n_results=k,
                include=["metadatas", "distances"],
            )
            ids = (result.get("ids") or [[]])[0]
            metadatas = (result.get("metadatas") or [[]])[0]
            distances = (result.get("distances") or [[]])[0] or [None] * len(ids)
            return [
                _case_from_metadata(case_id, metadata or {}, distance)
                for case_id, metadata, distance in zip(ids, metadatas, distances)
            ]
        except Exception as e:
            logger.error(f"Similar-case search failed: {e}")
            return []

    def narrate(self, scores: CategoryScores, recommended_majors: Sequence[str]) -> str:
        """Short feedback text built from the closest cases. Never raises."""
        if not self.is_available:
            return FALLBACK_NOT_CONFIGURED

        cases = self.find_similar(scores, k=NARRATIVE_CASE_LIMIT)
        if not cases:
            return FALLBACK_NO_CASES

        try:
            text = self.llm.complete_text(
                user=build_narrative_prompt(scores, list(recommended_majors), cases),
                temperature=NARRATIVE_TEMPERATURE,
                max_tokens=NARRATIVE_MAX_TOKENS,
            )
        except ExternalServiceError as e:
            logger.error(f"Similar-case narrative failed: {e}")
            return FALLBACK_ERROR

        return text.strip() or FALLBACK_EMPTY


def new_case_id() -> str:
    return f"case-{uuid.uuid4()}"


# Singleton instance
case_retriever = SimilarCaseRetriever(llm_client)
