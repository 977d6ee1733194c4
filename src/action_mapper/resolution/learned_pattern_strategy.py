"""
Learned-pattern lookup: cheap reuse of phrases resolved before.
"""
import logging
from typing import Optional

from .strategy import Outcome, ResolutionContext, ResolutionStrategy
from ..knowledge.base import KnowledgeStore
from ..models import Step
from ..schemas import ResolutionSource

logger = logging.getLogger(__name__)


class LearnedPatternStrategy(ResolutionStrategy):
    """
    Accepts a stored phrase pattern that already carries a method.

    With prerequisites_only set, main steps skip this stage so they get the
    full ranking pass instead.
    """

    name = "learned_pattern"

    def __init__(
        self,
        store: Optional[KnowledgeStore],
        threshold: float = 0.6,
        prerequisites_only: bool = False,
    ):
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"Threshold must be between 0.0 and 1.0, got {threshold}")
        self._store = store
        self.threshold = threshold
        self.prerequisites_only = prerequisites_only

    def applies_to(self, step: Step, context: ResolutionContext) -> bool:
        if self._store is None:
            return False
        return step.is_prerequisite or not self.prerequisites_only

    def resolve(self, step, query, context):
        try:
            result = self._store.find_learned_pattern(
                query,
                {"platform": context.platform, "brand": context.brand},
            )
        except Exception as e:
            logger.warning(f"Learned pattern lookup unavailable: {e}")
            return Outcome.proceed(reason="learned patterns unavailable")

        best = result.best if result.found else None
        if best is not None and best.confidence >= self.threshold:
            return Outcome.accept(best, ResolutionSource.LEARNED_PATTERN)
        return Outcome.proceed(best_partial=best)
