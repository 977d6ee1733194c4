"""
Knowledge layer: the action knowledge store, repository indexing and the
background learning writer.
"""
from .base import AtomicFilters, KnowledgeStore
from .collections import FuzzyCollection, RecordCollection, VectorCollection, create_collection
from .action_store import ActionKnowledgeStore
from .indexer import extract_keywords, index_methods, to_atomic_action
from .writer import (
    LearnedMappingEvent,
    LearningWriter,
    PatternLearnedEvent,
    build_learned_action,
    canonical_action_id,
)

__all__ = [
    "AtomicFilters",
    "KnowledgeStore",
    "RecordCollection",
    "FuzzyCollection",
    "VectorCollection",
    "create_collection",
    "ActionKnowledgeStore",
    "extract_keywords",
    "index_methods",
    "to_atomic_action",
    "LearnedMappingEvent",
    "LearningWriter",
    "PatternLearnedEvent",
    "build_learned_action",
    "canonical_action_id",
]
