"""
Step resolution layer.

Turns a decomposed test step into a concrete page-object method through an
ordered cascade of strategies.

Key components:
- QueryExpander: prioritized search variants for a step
- CandidateGatherer: concurrent fan-out over every candidate source
- ResolutionStrategy / Outcome: one cascade stage and its decision
- ResolutionPolicy: runs stages in order until one decides
- ResolutionEngine: thresholds, naming hints and write-back around the policy
"""
from .vocabulary_builder import ActionVocabulary, VocabularyBuilder, default_vocabulary
from .query_expander import QueryExpander, QueryVariant, VariantSource
from .method_naming import MethodSuggestion, generate_method_name, infer_screen_class, suggest_method
from .strategy import Decision, Outcome, ResolutionContext, ResolutionStrategy
from .candidate_gatherer import CandidateGatherer, build_query, merge_candidates, rank_candidates
from .learned_pattern_strategy import LearnedPatternStrategy
from .intelligent_selection import IntelligentSelectionStrategy, resolve_selection
from .knowledge_strategies import AtomicActionStrategy, CompositeActionStrategy
from .semantic_search_strategy import SemanticSearchStrategy
from .reasoning_fallback_strategy import ReasoningFallbackStrategy
from .resolution_policy import ResolutionPolicy
from .engine import ResolutionEngine
from .resolver_factory import build_strategies, create_resolution_engine

__all__ = [
    "ActionVocabulary",
    "VocabularyBuilder",
    "default_vocabulary",
    "QueryExpander",
    "QueryVariant",
    "VariantSource",
    "MethodSuggestion",
    "generate_method_name",
    "infer_screen_class",
    "suggest_method",
    "Decision",
    "Outcome",
    "ResolutionContext",
    "ResolutionStrategy",
    "CandidateGatherer",
    "build_query",
    "merge_candidates",
    "rank_candidates",
    "LearnedPatternStrategy",
    "IntelligentSelectionStrategy",
    "resolve_selection",
    "AtomicActionStrategy",
    "CompositeActionStrategy",
    "SemanticSearchStrategy",
    "ReasoningFallbackStrategy",
    "ResolutionPolicy",
    "ResolutionEngine",
    "build_strategies",
    "create_resolution_engine",
]
