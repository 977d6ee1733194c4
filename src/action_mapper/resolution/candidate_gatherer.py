"""
Concurrent candidate gathering.

Fans out composite search, atomic search and one semantic query per
expanded variant, then merges everything into one ranked list.
"""
import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .query_expander import QueryExpander
from .strategy import ResolutionContext
from ..knowledge.base import AtomicFilters, KnowledgeStore
from ..models import Candidate, CandidateSource, Step
from ..schemas import MethodMatch
from ..tools.retriever_tool import SemanticRetriever
from ..utils.naming import normalize_phrase

logger = logging.getLogger(__name__)


def build_query(step: Step) -> str:
    return " ".join(p for p in (normalize_phrase(step.action), normalize_phrase(step.target)) if p)


def match_to_candidate(match: MethodMatch) -> Candidate:
    return Candidate(
        method_name=match.method_name,
        class_name=match.class_name,
        confidence=match.confidence,
        source=CandidateSource.HYBRID_SEARCH,
        file=match.file,
        parameters=list(match.parameters),
        javadoc=match.javadoc,
    )


def _names(candidate: Candidate) -> set:
    return {n.lower() for n in (candidate.action_name, candidate.method_name) if n}


def merge_candidates(candidates: Iterable[Candidate]) -> List[Candidate]:
    """
    Deduplicate candidates.

    Key is (class_name, method_name) case-insensitively; a duplicate keeps
    the first position and the higher confidence. An atomic candidate whose
    action name or method name matches a composite action name is dropped
    in favour of the composite.
    Merging an already merged list returns it unchanged.
    """
    candidates = list(candidates)
    composite_names = {
        (c.action_name or c.method_name).lower() for c in candidates if c.is_composite
    }

    merged: Dict[tuple, Candidate] = {}
    for candidate in candidates:
        if not candidate.is_composite and _names(candidate) & composite_names:
            continue
        key = candidate.dedup_key()
        existing = merged.get(key)
        if existing is None or candidate.confidence > existing.confidence:
            merged[key] = candidate
    return list(merged.values())


def rank_candidates(
    candidates: List[Candidate],
    preferred_screen_class: Optional[str] = None,
    boost: float = 0.1,
) -> List[Candidate]:
    """Stable sort by confidence plus the preferred-screen boost."""
    def score(candidate: Candidate) -> float:
        bonus = boost if preferred_screen_class and candidate.class_name == preferred_screen_class else 0.0
        return candidate.confidence + bonus

    return sorted(candidates, key=score, reverse=True)


class CandidateGatherer:
    """
    Collects candidates for one step from every available source.

    A failing or slow source is logged and skipped; an empty list is a
    valid result.
    """

    def __init__(
        self,
        store: Optional[KnowledgeStore] = None,
        retriever: Optional[SemanticRetriever] = None,
        expander: Optional[QueryExpander] = None,
        timeout_seconds: float = 10.0,
        max_variants: int = 5,
        semantic_top_k: int = 5,
        max_candidates: int = 15,
        preferred_screen_boost: float = 0.1,
        max_workers: int = 8,
    ):
        """
        :param store: Knowledge store for composite and atomic search
        :param retriever: Semantic method retriever
        :param expander: Query expander for the semantic variants
        :param timeout_seconds: Bound on the whole fan-out; late sources are dropped
        :param max_variants: Expanded variants sent to the retriever
        :param semantic_top_k: Matches requested per semantic query
        :param max_candidates: Length cap on the ranked list
        :param preferred_screen_boost: Ranking bonus for the preferred screen class
        """
        self._store = store
        self._retriever = retriever
        self._expander = expander or QueryExpander()
        self._timeout = timeout_seconds
        self._max_variants = max_variants
        self._semantic_top_k = semantic_top_k
        self._max_candidates = max_candidates
        self._boost = preferred_screen_boost
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="gather")

    def gather(self, step: Step, context: ResolutionContext) -> List[Candidate]:
        query = build_query(step)
        if not query:
            return []

        tasks = self._build_tasks(step, query, context)
        futures = [(label, self._executor.submit(fn)) for label, fn in tasks]
        done, not_done = wait([f for _, f in futures], timeout=self._timeout)

        collected: List[Candidate] = []
        for label, future in futures:
            if future in not_done:
                future.cancel()
                logger.warning(f"Candidate source '{label}' timed out after {self._timeout}s")
                continue
            try:
                collected.extend(future.result())
            except Exception as e:
                logger.warning(f"Candidate source '{label}' unavailable: {e}")

        ranked = rank_candidates(merge_candidates(collected), context.preferred_screen_class, self._boost)
        logger.debug(f"Gathered {len(ranked)} candidates for '{query}'")
        return ranked[: self._max_candidates]

    def close(self) -> None:
        self._executor.shutdown(wait=False)

    def _build_tasks(
        self,
        step: Step,
        query: str,
        context: ResolutionContext,
    ) -> List[Tuple[str, Callable[[], List[Candidate]]]]:
        # Composite first so composites win position ties after merging
        tasks: List[Tuple[str, Callable[[], List[Candidate]]]] = []

        if self._store is not None:
            store = self._store
            filters = AtomicFilters(platform=context.platform, brand=context.brand)
            tasks.append(("composite", lambda: store.find_composite_action(query, 3).matches))
            tasks.append(("atomic", lambda: store.find_atomic_action(query, filters, 5).matches))

        if self._retriever is not None:
            variants = self._expander.expand(step.action, step.target, step.details)
            for variant in variants[: self._max_variants]:
                tasks.append((f"semantic:{variant.query}", self._semantic_task(variant.query, context)))

        return tasks

    def _semantic_task(self, text: str, context: ResolutionContext) -> Callable[[], List[Candidate]]:
        retriever = self._retriever

        def run() -> List[Candidate]:
            matches = retriever.query_methods(
                text,
                top_k=self._semantic_top_k,
                min_confidence=0.0,
                screen=context.current_screen,
                platform=context.platform,
            )
            return [match_to_candidate(m) for m in matches]

        return run
