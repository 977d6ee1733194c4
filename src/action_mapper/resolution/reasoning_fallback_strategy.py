"""
Free-form reasoning fallback, the last stage before unmapped.
"""
import logging
from typing import Optional

from .strategy import Outcome, ResolutionStrategy
from ..models import Candidate, CandidateSource, clamp_confidence
from ..schemas import ResolutionSource
from ..tools.ranker_tool import ReasoningBackend

logger = logging.getLogger(__name__)


class ReasoningFallbackStrategy(ResolutionStrategy):
    """Accepts whatever the backend marks as found; the answer is written back."""

    name = "reasoning_fallback"

    def __init__(self, backend: Optional[ReasoningBackend]):
        self._backend = backend

    def applies_to(self, step, context) -> bool:
        return self._backend is not None

    def resolve(self, step, query, context):
        try:
            answer = self._backend.reason(step, context.to_dict())
        except Exception as e:
            logger.warning(f"Reasoning fallback unavailable for '{query}': {e}")
            return Outcome.proceed(reason="reasoning backend unavailable")

        if not answer.found or not answer.method_name or not answer.class_name:
            return Outcome.proceed(reason="reasoning backend found nothing")

        candidate = Candidate(
            method_name=answer.method_name,
            class_name=answer.class_name,
            confidence=clamp_confidence(answer.confidence),
            source=CandidateSource.HYBRID_SEARCH,
            parameters=list(answer.parameters),
        )
        return Outcome.accept(candidate, ResolutionSource.LLM_FALLBACK, learn=True, reasoning=answer.reasoning)
