"""
Factory for creating the resolution engine.

Assembles the strategy cascade from config and whatever collaborators
are available.
"""
from typing import List, Optional

from .candidate_gatherer import CandidateGatherer
from .engine import ResolutionEngine
from .intelligent_selection import IntelligentSelectionStrategy
from .knowledge_strategies import AtomicActionStrategy, CompositeActionStrategy
from .learned_pattern_strategy import LearnedPatternStrategy
from .query_expander import QueryExpander
from .reasoning_fallback_strategy import ReasoningFallbackStrategy
from .resolution_policy import ResolutionPolicy
from .semantic_search_strategy import SemanticSearchStrategy
from .strategy import ResolutionStrategy
from .vocabulary_builder import ActionVocabulary
from ..config import ActionMapperConfig
from ..knowledge.base import KnowledgeStore
from ..knowledge.writer import LearningWriter
from ..tools.ranker_tool import Ranker, ReasoningBackend
from ..tools.retriever_tool import SemanticRetriever


def build_strategies(
    config: ActionMapperConfig,
    store: Optional[KnowledgeStore] = None,
    retriever: Optional[SemanticRetriever] = None,
    ranker: Optional[Ranker] = None,
    reasoning_backend: Optional[ReasoningBackend] = None,
    vocabulary: Optional[ActionVocabulary] = None,
) -> List[ResolutionStrategy]:
    """
    Build the ordered cascade.

    With a ranker, learned patterns only serve prerequisite steps and the
    ranker is the terminal stage for every step it can answer. The direct
    lookups after it run only when the ranker itself is unreachable.

    :param config: ActionMapperConfig instance
    :param store: Knowledge store
    :param retriever: Semantic method retriever
    :param ranker: Candidate ranker
    :param reasoning_backend: Legacy free-form fallback
    :param vocabulary: Synonym tables for query expansion
    :return: Strategies in cascade order
    """
    expander = QueryExpander(vocabulary)
    use_ranker = ranker is not None and config.enable_intelligent_selection

    strategies: List[ResolutionStrategy] = [
        LearnedPatternStrategy(
            store,
            threshold=config.learned_pattern_threshold,
            prerequisites_only=use_ranker,
        ),
    ]

    if use_ranker:
        gatherer = CandidateGatherer(
            store=store,
            retriever=retriever,
            expander=expander,
            timeout_seconds=config.gather_timeout_seconds,
            max_variants=config.max_semantic_variants,
            semantic_top_k=config.semantic_top_k,
            max_candidates=config.candidate_top_k,
            preferred_screen_boost=config.preferred_screen_boost,
        )
        strategies.append(IntelligentSelectionStrategy(gatherer, ranker))

    strategies.extend([
        CompositeActionStrategy(store, threshold=config.composite_threshold),
        AtomicActionStrategy(store, threshold=config.atomic_threshold),
        SemanticSearchStrategy(
            retriever,
            expander=expander,
            good_enough=config.semantic_good_enough,
            threshold=config.confidence_threshold,
            max_variants=config.max_semantic_variants,
            top_k=config.semantic_top_k,
        ),
    ])

    if config.enable_llm_fallback and reasoning_backend is not None:
        strategies.append(ReasoningFallbackStrategy(reasoning_backend))

    return strategies


def create_resolution_engine(
    config: Optional[ActionMapperConfig] = None,
    store: Optional[KnowledgeStore] = None,
    retriever: Optional[SemanticRetriever] = None,
    ranker: Optional[Ranker] = None,
    reasoning_backend: Optional[ReasoningBackend] = None,
    writer: Optional[LearningWriter] = None,
    vocabulary: Optional[ActionVocabulary] = None,
) -> ResolutionEngine:
    """
    Factory function to create a configured ResolutionEngine.

    :param config: ActionMapperConfig instance (defaults used if None)
    :param writer: Background writer; None disables write-back
    :return: ResolutionEngine
    """
    config = config or ActionMapperConfig()
    strategies = build_strategies(config, store, retriever, ranker, reasoning_backend, vocabulary)
    return ResolutionEngine(
        policy=ResolutionPolicy(strategies),
        writer=writer,
        enable_write_back=config.enable_write_back,
    )
