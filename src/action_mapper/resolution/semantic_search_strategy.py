"""
Semantic search over expanded query variants.
"""
import logging
from typing import Optional

from .candidate_gatherer import match_to_candidate
from .query_expander import QueryExpander
from .strategy import Outcome, ResolutionContext, ResolutionStrategy
from ..models import Candidate, Step
from ..schemas import ResolutionSource
from ..tools.retriever_tool import SemanticRetriever

logger = logging.getLogger(__name__)


class SemanticSearchStrategy(ResolutionStrategy):
    """
    Tries variants in priority order against the semantic retriever.

    Stops at the first hit >= good_enough; otherwise accepts the best hit
    seen if it clears the global threshold. Accepted hits are new knowledge
    and are written back.
    """

    name = "semantic_search"

    def __init__(
        self,
        retriever: Optional[SemanticRetriever],
        expander: Optional[QueryExpander] = None,
        good_enough: float = 0.4,
        threshold: float = 0.3,
        max_variants: int = 5,
        top_k: int = 5,
    ):
        self._retriever = retriever
        self._expander = expander or QueryExpander()
        self.good_enough = good_enough
        self.threshold = threshold
        self._max_variants = max_variants
        self._top_k = top_k

    def applies_to(self, step, context) -> bool:
        return self._retriever is not None

    def resolve(self, step: Step, query: str, context: ResolutionContext) -> Outcome:
        variants = self._expander.expand(step.action, step.target, step.details)
        best: Optional[Candidate] = None

        for variant in variants[: self._max_variants]:
            try:
                matches = self._retriever.query_methods(
                    variant.query,
                    top_k=self._top_k,
                    min_confidence=0.0,
                    screen=context.current_screen,
                    platform=context.platform,
                )
            except Exception as e:
                logger.warning(f"Semantic search unavailable for '{variant.query}': {e}")
                continue

            if not matches:
                continue
            top = max(matches, key=lambda m: m.confidence)
            if best is None or top.confidence > best.confidence:
                best = match_to_candidate(top)
            if best.confidence >= self.good_enough:
                logger.debug(f"Variant '{variant.query}' ({variant.source.value}) good enough: {best.confidence:.2f}")
                break

        if best is not None and best.confidence >= self.threshold:
            return Outcome.accept(best, ResolutionSource.HYBRID_RAG, learn=True)
        return Outcome.proceed(best_partial=best)
