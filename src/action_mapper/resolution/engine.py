"""
Resolution engine: one step in, one ResolutionResult out.
"""
import logging
import threading
from collections import Counter
from typing import Any, Dict, Optional

from .candidate_gatherer import build_query
from .method_naming import suggest_method
from .resolution_policy import ResolutionPolicy
from .strategy import Decision, Outcome, ResolutionContext
from ..knowledge.writer import LearnedMappingEvent, LearningWriter
from ..models import Step
from ..schemas import ResolutionResult, ResolutionStatus

logger = logging.getLogger(__name__)


class ResolutionEngine:
    """
    Drives the strategy cascade for a single step.

    Holds no per-request state: the context arrives with every call and the
    step is never modified, only copied with its provenance stamped.
    Write-back is handed to the LearningWriter and never blocks or raises.
    """

    def __init__(
        self,
        policy: ResolutionPolicy,
        writer: Optional[LearningWriter] = None,
        enable_write_back: bool = True,
    ):
        """
        :param policy: Ordered strategy cascade
        :param writer: Background writer for learned mappings
        :param enable_write_back: Disable to resolve without learning
        """
        self._policy = policy
        self._writer = writer
        self._enable_write_back = enable_write_back
        self._stats_lock = threading.Lock()
        self._by_source: Counter = Counter()
        self._stats = {"resolved": 0, "unmapped": 0, "write_backs": 0}

    @property
    def policy(self) -> ResolutionPolicy:
        return self._policy

    def resolve(self, step: Step, context: Optional[ResolutionContext] = None) -> ResolutionResult:
        context = context or ResolutionContext()
        query = build_query(step)

        if not query:
            return self._unmapped(step, query, Outcome.unmapped("Step has no action"), context)

        outcome, strategy_name = self._policy.resolve(step, query, context)

        if outcome.decision != Decision.ACCEPT:
            logger.info(f"Unmapped '{query}': {outcome.reason}")
            return self._unmapped(step, query, outcome, context)

        candidate = outcome.candidate
        logger.info(
            f"Resolved '{query}' -> {candidate.class_name}.{candidate.method_name} "
            f"via {outcome.source.value} ({candidate.confidence:.2f})"
        )
        if outcome.learn:
            self._write_back(step, outcome, context)

        self._record(outcome.source.value)
        return ResolutionResult(
            step=step.with_provenance(outcome.source.value),
            status=ResolutionStatus.FOUND,
            search_query=query,
            chosen_candidate=candidate,
            source=outcome.source,
            reasoning=outcome.reasoning,
        )

    def get_stats(self) -> Dict[str, Any]:
        with self._stats_lock:
            stats = {**self._stats, "by_source": dict(self._by_source)}
        stats["strategies"] = self._policy.strategy_names
        if self._writer is not None:
            stats["writer"] = self._writer.get_stats()
        return stats

    def _unmapped(
        self,
        step: Step,
        query: str,
        outcome: Outcome,
        context: ResolutionContext,
    ) -> ResolutionResult:
        suggestion = suggest_method(step.action, step.target, context.platform)
        self._record(None)
        return ResolutionResult(
            step=step,
            status=ResolutionStatus.UNMAPPED,
            search_query=query,
            reason=outcome.reason,
            best_partial=outcome.candidate,
            suggested_class=suggestion.class_name,
            suggested_method=suggestion.method_name,
            create_new=outcome.create_new,
            reasoning=outcome.reasoning,
        )

    def _write_back(self, step: Step, outcome: Outcome, context: ResolutionContext) -> None:
        if not self._enable_write_back or self._writer is None:
            return
        event = LearnedMappingEvent(
            step=step,
            candidate=outcome.candidate,
            source=outcome.source.value,
            platform=context.platform,
            brand=context.brand,
        )
        try:
            queued = self._writer.submit(event)
        except Exception as e:
            logger.warning(f"Could not queue write-back for '{step.action}': {e}")
            return
        if queued:
            with self._stats_lock:
                self._stats["write_backs"] += 1

    def _record(self, source: Optional[str]) -> None:
        with self._stats_lock:
            if source is None:
                self._stats["unmapped"] += 1
            else:
                self._stats["resolved"] += 1
                self._by_source[source] += 1
