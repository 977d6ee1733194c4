"""
Direct knowledge-store lookups used when no ranker is available.
"""
import logging
from typing import Optional

from .strategy import Outcome, ResolutionStrategy
from ..knowledge.base import AtomicFilters, KnowledgeStore
from ..schemas import ResolutionSource

logger = logging.getLogger(__name__)


class _ThresholdStrategy(ResolutionStrategy):
    def __init__(self, store: Optional[KnowledgeStore], threshold: float):
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"Threshold must be between 0.0 and 1.0, got {threshold}")
        self._store = store
        self.threshold = threshold

    def applies_to(self, step, context) -> bool:
        return self._store is not None


class CompositeActionStrategy(_ThresholdStrategy):
    """Accepts a stored macro at >= threshold (default 0.6)."""

    name = "composite_action"

    def __init__(self, store: Optional[KnowledgeStore], threshold: float = 0.6):
        super().__init__(store, threshold)

    def resolve(self, step, query, context):
        try:
            result = self._store.find_composite_action(query, 3)
        except Exception as e:
            logger.warning(f"Composite search unavailable: {e}")
            return Outcome.proceed(reason="composite search unavailable")

        best = result.best if result.found else None
        if best is not None and best.confidence >= self.threshold:
            return Outcome.accept(best, ResolutionSource.COMPOSITE_ACTION)
        return Outcome.proceed(best_partial=best)


class AtomicActionStrategy(_ThresholdStrategy):
    """
    Accepts a stored single method at >= threshold (default 0.2).

    The bar is low because keyword overlap with an indexed method name is
    already a strong signal.
    """

    name = "atomic_action"

    def __init__(self, store: Optional[KnowledgeStore], threshold: float = 0.2):
        super().__init__(store, threshold)

    def resolve(self, step, query, context):
        filters = AtomicFilters(platform=context.platform, brand=context.brand)
        try:
            result = self._store.find_atomic_action(query, filters, 5)
        except Exception as e:
            logger.warning(f"Atomic search unavailable: {e}")
            return Outcome.proceed(reason="atomic search unavailable")

        best = result.best if result.found else None
        if best is not None and best.confidence >= self.threshold:
            return Outcome.accept(best, ResolutionSource.ATOMIC_ACTION)
        return Outcome.proceed(best_partial=best)
