"""
Intelligent selection: gather every candidate, let a ranker choose.
"""
import logging
from dataclasses import replace
from typing import List, Optional, Tuple

from .candidate_gatherer import CandidateGatherer
from .strategy import Outcome, ResolutionContext, ResolutionStrategy
from ..exceptions import RankerResponseError
from ..models import Candidate, CandidateSource, CandidateStep, Step
from ..schemas import ResolutionSource
from ..tools.ranker_tool import Ranker, RankerDecision, RankerResponse, SelectedMethod

logger = logging.getLogger(__name__)

DEFAULT_SELECT_CONFIDENCE = 0.85
DEFAULT_COMPOSITE_CONFIDENCE = 0.9


def _find(
    candidates: List[Candidate],
    method_name: str,
    class_name: Optional[str] = None,
    composite: Optional[bool] = None,
) -> Optional[Candidate]:
    """Match on (class, method) when the ranker named a class, else on method alone."""
    wanted = method_name.lower()
    wanted_class = class_name.lower() if class_name else None
    for candidate in candidates:
        if candidate.method_name.lower() != wanted:
            continue
        if wanted_class and candidate.class_name.lower() != wanted_class:
            continue
        if composite is None or candidate.is_composite == composite:
            return candidate
    return None


def _label(selected: SelectedMethod) -> str:
    if selected.class_name:
        return f"{selected.class_name}.{selected.method_name}"
    return selected.method_name


def resolve_selection(
    response: RankerResponse,
    candidates: List[Candidate],
) -> Tuple[Optional[Candidate], Optional[ResolutionSource], Optional[str]]:
    """
    Map a SELECT response back onto real candidates.

    :return: (candidate, source, None) or (None, None, hallucinated name)
    """
    for selected in response.selected_methods:
        if _find(candidates, selected.method_name, selected.class_name) is None:
            return None, None, _label(selected)

    head = response.selected_methods[0]
    first = _find(candidates, head.method_name, head.class_name)

    # snake_case atomic names are usually composites learned as atomics
    if not first.is_composite and "_" in first.method_name:
        composite = _find(candidates, first.method_name, composite=True)
        if composite is not None:
            logger.info(f"Using composite version of {first.method_name}")
            first = composite

    if first.is_composite:
        confidence = response.confidence if response.confidence is not None else DEFAULT_COMPOSITE_CONFIDENCE
        return first.with_confidence(confidence), ResolutionSource.INTELLIGENT_SELECTION_COMPOSITE, None

    confidence = response.confidence if response.confidence is not None else DEFAULT_SELECT_CONFIDENCE
    chosen = first.with_confidence(confidence)

    if len(response.selected_methods) > 1:
        steps = []
        for order, selected in enumerate(response.selected_methods, start=1):
            match = _find(candidates, selected.method_name, selected.class_name)
            steps.append(CandidateStep(
                method_name=match.method_name,
                class_name=match.class_name,
                order=order,
                reason=selected.reason,
                parameters=list(match.parameters),
            ))
        chosen = replace(chosen, is_composite=True, composite_steps=steps)
        logger.info(f"Ranker chain: {' -> '.join(s.method_name for s in steps)}")

    return chosen, ResolutionSource.INTELLIGENT_SELECTION, None


class IntelligentSelectionStrategy(ResolutionStrategy):
    """
    Terminal stage when a ranker is available.

    Outcomes:
    - ranker selects real candidate(s) -> accept
    - nothing gathered, CREATE_NEW, or a hallucinated name -> unmapped (create_new)
    - malformed ranker reply -> unmapped
    - ranker unreachable -> continue, so the fallback stages still run
    """

    name = "intelligent_selection"

    def __init__(self, gatherer: CandidateGatherer, ranker: Ranker):
        self._gatherer = gatherer
        self._ranker = ranker

    def resolve(self, step: Step, query: str, context: ResolutionContext) -> Outcome:
        candidates = self._gatherer.gather(step, context)
        if not candidates:
            logger.info(f"No candidates for '{query}', marking as missing")
            return Outcome.unmapped("No candidates found", create_new=True)

        best_partial = candidates[0]
        try:
            response = self._ranker.select(step, candidates, context.to_dict())
        except RankerResponseError as e:
            logger.warning(f"Malformed ranker response for '{query}': {e}")
            return Outcome.unmapped("Malformed ranker response", best_partial=best_partial)
        except Exception as e:
            logger.warning(f"Ranker unavailable for '{query}': {e}")
            return Outcome.proceed(best_partial=best_partial, reason="ranker unavailable")

        if response.decision == RankerDecision.CREATE_NEW:
            return Outcome.unmapped(
                "No suitable method among candidates",
                best_partial=best_partial,
                create_new=True,
                reasoning=response.reasoning,
            )

        chosen, source, hallucinated = resolve_selection(response, candidates)
        if chosen is None:
            logger.warning(f"Ranker selected '{hallucinated}' which is not among the candidates")
            return Outcome.unmapped(
                f"Suggested method '{hallucinated}' not found in codebase",
                best_partial=best_partial,
                create_new=True,
                reasoning=response.reasoning,
            )

        # Only methods found by semantic search are new to the knowledge store
        learn = not chosen.is_composite and chosen.source == CandidateSource.HYBRID_SEARCH
        return Outcome.accept(chosen, source, learn=learn, reasoning=response.reasoning)
