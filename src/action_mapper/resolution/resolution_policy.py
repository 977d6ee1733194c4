"""
Resolution policy for strategy escalation.

Implements the cascade: learned pattern -> intelligent selection ->
composite -> atomic -> semantic search -> reasoning fallback -> unmapped.
"""
import logging
from typing import List, Optional, Tuple

from .strategy import Decision, Outcome, ResolutionContext, ResolutionStrategy
from ..models import Candidate, Step

logger = logging.getLogger(__name__)


class ResolutionPolicy:
    """
    Runs strategies in order until one accepts or declares the step unmapped.

    Strategies that do not apply to a step are skipped. The best partial
    match seen along the way is kept for the final unmapped outcome.
    """

    def __init__(self, strategies: List[ResolutionStrategy]):
        """
        :param strategies: Strategies to try in order
        """
        if not strategies:
            raise ValueError("At least one strategy must be provided")
        self._strategies = list(strategies)

    @property
    def strategy_names(self) -> List[str]:
        return [s.name for s in self._strategies]

    def resolve(
        self,
        step: Step,
        query: str,
        context: ResolutionContext,
    ) -> Tuple[Outcome, Optional[str]]:
        """
        Resolve one step.

        :return: (final outcome, name of the deciding strategy or None if exhausted)
        """
        best_partial: Optional[Candidate] = None

        for strategy in self._strategies:
            if not strategy.applies_to(step, context):
                continue

            outcome = strategy.resolve(step, query, context)
            logger.debug(f"{strategy.name} -> {outcome.decision.value} for '{query}'")

            if outcome.decision == Decision.ACCEPT:
                return outcome, strategy.name

            if outcome.candidate is not None and (
                best_partial is None or outcome.candidate.confidence > best_partial.confidence
            ):
                best_partial = outcome.candidate

            if outcome.decision == Decision.UNMAPPED:
                return Outcome.unmapped(
                    outcome.reason or "Unmapped",
                    best_partial=best_partial,
                    create_new=outcome.create_new,
                    reasoning=outcome.reasoning,
                ), strategy.name

        return Outcome.unmapped("No strategy produced a confident match", best_partial=best_partial), None
