"""
Action knowledge store.

Four layers of knowledge, each in its own collection:

1. atomic_actions       - single page-object methods (indexed or learned)
2. composite_actions    - fixed multi-step macros
3. user_terminology     - user vocabulary taught at runtime
4. learned_patterns     - step phrases learned from earlier scenarios

Records are kept in memory, scored by a RecordCollection backend and
persisted as one JSON file per collection.
"""
import json
import logging
import re
import threading
import uuid
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .base import AtomicFilters, KnowledgeStore
from .collections import RecordCollection, create_collection
from ..models import (
    AtomicAction,
    Candidate,
    CandidateSource,
    CandidateStep,
    CompositeAction,
    LearnedPattern,
    Step,
    UserTerm,
)
from ..resolution.vocabulary_builder import ActionVocabulary, VocabularyBuilder, default_vocabulary
from ..schemas import SearchResult
from ..utils.naming import normalize_phrase

logger = logging.getLogger(__name__)

ATOMIC = "atomic_actions"
COMPOSITE = "composite_actions"
TERMINOLOGY = "user_terminology"
LEARNED = "learned_patterns"

_RECORD_TYPES = {
    ATOMIC: AtomicAction,
    COMPOSITE: CompositeAction,
    TERMINOLOGY: UserTerm,
    LEARNED: LearnedPattern,
}

COMPOSITE_CLASS_NAME = "CompositeAction"

# Terminology must be a near-exact hit before it is trusted
TERMINOLOGY_MATCH_THRESHOLD = 0.8
TERM_FALLBACK_THRESHOLD = 0.4


def _slug(text: Optional[str]) -> str:
    return re.sub(r"[^a-z0-9_]", "_", (text or "").lower())


class ActionKnowledgeStore(KnowledgeStore):
    """
    In-process knowledge store with JSON persistence.

    Safe for one writer thread alongside concurrent readers: every mutation
    and every file write happens under a single lock.
    """

    def __init__(
        self,
        storage_dir: Optional[str] = None,
        embedding_model=None,
        vocabulary: Optional[ActionVocabulary] = None,
    ):
        """
        :param storage_dir: Directory for the per-collection JSON files; None keeps everything in memory
        :param embedding_model: LangChain Embeddings; enables FAISS-backed collections
        :param vocabulary: Synonym tables used for search-phrase generation
        """
        self._storage_dir = Path(storage_dir) if storage_dir else None
        self._embedding_model = embedding_model
        self._vocabulary = vocabulary or default_vocabulary()
        self._lock = threading.RLock()
        self._collections: Dict[str, RecordCollection] = {
            name: create_collection(name, embedding_model) for name in _RECORD_TYPES
        }

        if self._storage_dir:
            self._storage_dir.mkdir(parents=True, exist_ok=True)
            self._load_all()

    @property
    def backend(self) -> str:
        return "faiss" if self._embedding_model is not None else "keyword"

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load_all(self) -> None:
        for name, record_type in _RECORD_TYPES.items():
            path = self._storage_dir / f"{name}.json"
            if not path.exists():
                continue
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                for item in data.get("records", []):
                    self._collections[name].upsert(record_type.from_dict(item))
                logger.info(f"Loaded {len(self._collections[name])} records into {name}")
            except (OSError, ValueError, TypeError) as e:
                logger.warning(f"Error loading knowledge file {path}: {e}")

    def _save(self, name: str) -> None:
        if not self._storage_dir:
            return
        path = self._storage_dir / f"{name}.json"
        payload = {
            "collection": name,
            "updated_at": datetime.now().isoformat(),
            "records": [r.to_dict() for r in self._collections[name].records()],
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def _put(self, name: str, record: Any) -> None:
        with self._lock:
            self._collections[name].upsert(record)
            self._save(name)

    def _touch(self, name: str, record_id: str, **updates) -> None:
        """Update bookkeeping fields without re-indexing the record text."""
        with self._lock:
            collection = self._collections[name]
            record = collection.get(record_id)
            if record is None:
                return
            record.usage_count = (record.usage_count or 0) + 1
            for key, value in updates.items():
                setattr(record, key, value)
            collection.replace(record)
            self._save(name)

    # ------------------------------------------------------------------
    # Layer 1: atomic actions
    # ------------------------------------------------------------------

    def add_atomic_action(self, record: AtomicAction) -> bool:
        self._put(ATOMIC, record)
        logger.debug(f"Stored atomic action {record.id}: {record.class_name}.{record.method_name}")
        return True

    def add_atomic_actions(self, records: Iterable[AtomicAction]) -> int:
        """Bulk insert used by repository indexing; saves once."""
        count = 0
        with self._lock:
            for record in records:
                self._collections[ATOMIC].upsert(record)
                count += 1
            self._save(ATOMIC)
        return count

    def get_atomic_action(self, action_id: str) -> Optional[AtomicAction]:
        return self._collections[ATOMIC].get(action_id)

    def find_atomic_action(self, query, filters=None, top_k=5):
        filters = filters or AtomicFilters()
        with self._lock:
            hits = self._collections[ATOMIC].search(normalize_phrase(query), top_k, filters.matches)
        matches = [self._atomic_candidate(record, score) for record, score in hits]
        return SearchResult(found=bool(matches), matches=matches, query=query)

    def enrich_keywords(self, action_id: str, keywords: Iterable[str]) -> List[str]:
        with self._lock:
            record = self._collections[ATOMIC].get(action_id)
            if record is None:
                raise KeyError(f"Atomic action not found: {action_id}")
            merged = list(dict.fromkeys([*record.keywords, *keywords]))
            record.keywords = merged
            self._collections[ATOMIC].upsert(record)
            self._save(ATOMIC)
        return merged

    def increment_usage(self, action_id: str) -> None:
        self._touch(ATOMIC, action_id)

    @staticmethod
    def _atomic_candidate(record: AtomicAction, score: float) -> Candidate:
        return Candidate(
            method_name=record.method_name,
            class_name=record.class_name,
            confidence=score,
            source=CandidateSource.KNOWLEDGE_BASE,
            file=record.file,
            parameters=list(record.parameters),
            action_name=record.action_name,
            description=record.description,
        )

    # ------------------------------------------------------------------
    # Layer 2: composite actions
    # ------------------------------------------------------------------

    def add_composite_action(self, record: CompositeAction) -> bool:
        self._put(COMPOSITE, record)
        logger.debug(f"Stored composite action {record.id}: {record.action_name}")
        return True

    def get_composite_action(self, composite_id: str) -> Optional[CompositeAction]:
        return self._collections[COMPOSITE].get(composite_id)

    def find_composite_action(self, query, top_k=3):
        with self._lock:
            hits = self._collections[COMPOSITE].search(normalize_phrase(query), top_k)
        matches = [self._composite_candidate(record, score) for record, score in hits]
        return SearchResult(found=bool(matches), matches=matches, query=query)

    @staticmethod
    def _composite_candidate(record: CompositeAction, score: float) -> Candidate:
        steps = [
            CandidateStep(
                method_name=s.method_name or s.atomic_action,
                class_name=s.class_name or "",
                order=s.order,
                description=s.description,
            )
            for s in sorted(record.steps, key=lambda s: s.order)
        ]
        return Candidate(
            method_name=record.action_name,
            class_name=COMPOSITE_CLASS_NAME,
            confidence=score,
            source=CandidateSource.COMPOSITE_ACTION,
            is_composite=True,
            composite_steps=steps,
            action_name=record.action_name,
            description=record.description,
        )

    def expand_composite_action(self, composite_id: str) -> Dict[str, Any]:
        """
        Map each macro step to a concrete atomic action.

        Steps without a match are flagged ``unmapped`` so a curator can
        add the missing method.
        """
        composite = self.get_composite_action(composite_id)
        if composite is None:
            raise KeyError(f"Composite action not found: {composite_id}")

        expanded = []
        for step in sorted(composite.steps, key=lambda s: s.order):
            entry = {
                "order": step.order,
                "atomicAction": step.atomic_action,
                "parameters": dict(step.parameters),
                "conditional": step.conditional,
            }
            if step.method_name and step.class_name:
                entry.update(methodName=step.method_name, className=step.class_name)
            else:
                result = self.find_atomic_action(
                    step.atomic_action,
                    AtomicFilters(target_screen=composite.target_screen),
                    top_k=1,
                )
                if result.found:
                    entry.update(
                        methodName=result.best.method_name,
                        className=result.best.class_name,
                        confidence=result.best.confidence,
                    )
                else:
                    entry["unmapped"] = True
            expanded.append(entry)

        return {
            "compositeAction": composite.action_name,
            "expandedSteps": expanded,
            "hasUnmappedSteps": any(e.get("unmapped") for e in expanded),
        }

    # ------------------------------------------------------------------
    # Layer 3: user terminology
    # ------------------------------------------------------------------

    def learn_from_user(
        self,
        user_term: str,
        expands_to: List[str],
        context: str = "",
        synonyms: Optional[List[str]] = None,
    ) -> UserTerm:
        term = normalize_phrase(user_term)
        if not term:
            raise ValueError("user_term must not be empty")
        record = UserTerm(
            id=f"term_{uuid.uuid4().hex[:12]}",
            user_term=term,
            expands_to=list(expands_to),
            synonyms=list(synonyms or []),
            context=context,
        )
        self._put(TERMINOLOGY, record)
        logger.info(f"Learned new terminology: '{term}' -> {record.expands_to}")
        return record

    def add_synonym(self, term_id: str, synonym: str) -> List[str]:
        with self._lock:
            record = self._collections[TERMINOLOGY].get(term_id)
            if record is None:
                raise KeyError(f"Term not found: {term_id}")
            record.synonyms = list(dict.fromkeys([*record.synonyms, synonym]))
            self._collections[TERMINOLOGY].upsert(record)
            self._save(TERMINOLOGY)
            return list(record.synonyms)

    def translate_user_term(self, text: str) -> Dict[str, Any]:
        """
        Translate user vocabulary into known actions.

        Falls back to atomic-action search when no taught term is close enough.
        """
        with self._lock:
            hits = self._collections[TERMINOLOGY].search(normalize_phrase(text), top_k=1)

        if hits and hits[0][1] >= TERMINOLOGY_MATCH_THRESHOLD:
            record, score = hits[0]
            self._touch(TERMINOLOGY, record.id, last_used_at=datetime.now().isoformat())
            return {
                "found": True,
                "userTerm": record.user_term,
                "expandsTo": list(record.expands_to),
                "synonyms": list(record.synonyms),
                "confidence": score,
                "source": "learned_terminology",
            }

        atomic = self.find_atomic_action(text, top_k=1)
        if atomic.found and atomic.best.confidence >= TERM_FALLBACK_THRESHOLD:
            return {
                "found": True,
                "expandsTo": [atomic.best.action_name or atomic.best.method_name],
                "confidence": atomic.best.confidence,
                "source": "atomic_action_match",
            }

        return {"found": False, "userInput": text}

    def user_terms(self) -> List[UserTerm]:
        return self._collections[TERMINOLOGY].records()

    def build_vocabulary(self) -> ActionVocabulary:
        """Default vocabulary extended with every taught term."""
        return VocabularyBuilder().add_user_terms(self.user_terms()).build()

    # ------------------------------------------------------------------
    # Layer 4: learned patterns
    # ------------------------------------------------------------------

    def generate_search_phrases(
        self,
        action: str,
        target: Optional[str] = None,
        details: Optional[str] = None,
    ) -> List[str]:
        """
        Phrases a future step might use for the same intent.

        >>> store.generate_search_phrases("click", "play_button")
        ['click play_button', 'tap play_button', ..., 'click play button']
        """
        base = " ".join(p for p in (action, target) if p)
        phrases = [base]
        if details:
            phrases.append(f"{base} {details}")
        for synonym in self._vocabulary.action_synonyms(action):
            phrases.append(" ".join(p for p in (synonym, target) if p))
        clean_target = (target or "").replace("_", " ")
        if clean_target != (target or ""):
            phrases.append(f"{action} {clean_target}")
        return list(dict.fromkeys(phrases))

    def learn_action_patterns(
        self,
        steps: Iterable[Step],
        context: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, List[str]]:
        """
        Store main steps as reusable phrase patterns.

        Prerequisite steps are skipped; they are handled by the navigation
        planner rather than by phrase reuse.

        :param steps: Steps of a completed scenario
        :param context: Optional {"platform", "brand", "primary_screen"}
        :return: {"learned": [...pattern ids], "skipped": [...actions]}
        """
        context = context or {}
        learned, skipped = [], []
        for step in steps:
            if step.is_prerequisite:
                skipped.append(step.action)
                continue
            pattern = self.add_learned_pattern(step, context)
            learned.append(pattern.id)
        if learned:
            logger.info(f"Learned {len(learned)} new action patterns")
        return {"learned": learned, "skipped": skipped}

    def add_learned_pattern(
        self,
        step: Step,
        context: Optional[Dict[str, Any]] = None,
        method_name: Optional[str] = None,
        class_name: Optional[str] = None,
        confidence: float = 1.0,
    ) -> LearnedPattern:
        """Append a pattern; existing patterns for the same phrase are kept."""
        context = context or {}
        screen = context.get("primary_screen") or context.get("screen")
        if not screen and step.target:
            screen = re.sub(r"_screen$", "", step.target)
        phrases = self.generate_search_phrases(step.action, step.target, step.details)
        pattern = LearnedPattern(
            id=f"pattern_{_slug(step.action)}_{_slug(step.target)}_{uuid.uuid4().hex[:8]}",
            phrase=phrases[0],
            action=step.action,
            target=step.target,
            details=step.details,
            confidence=confidence,
            screen=screen,
            platform=context.get("platform"),
            brand=context.get("brand"),
            method_name=method_name,
            class_name=class_name,
            phrases=phrases,
        )
        self._put(LEARNED, pattern)
        return pattern

    def find_learned_pattern(self, phrase, context=None):
        context = context or {}
        filters = AtomicFilters(platform=context.get("platform"), brand=context.get("brand"))
        with self._lock:
            hits = self._collections[LEARNED].search(
                normalize_phrase(phrase), top_k=10, predicate=filters.matches
            )

        # Highest score first; among equal scores the freshest pattern wins
        hits.sort(key=lambda pair: (pair[1], pair[0].created_at), reverse=True)

        matches = []
        for record, score in hits:
            if not record.method_name:
                continue
            matches.append(Candidate(
                method_name=record.method_name,
                class_name=record.class_name or "",
                confidence=score,
                source=CandidateSource.LEARNED_PATTERN,
                action_name=record.action,
                description=record.phrase,
            ))

        if matches:
            best_id = next(r.id for r, _ in hits if r.method_name == matches[0].method_name)
            self._touch(LEARNED, best_id)
        return SearchResult(found=bool(matches), matches=matches[:3], query=phrase)

    def get_learned_patterns(self, limit: int = 100) -> List[LearnedPattern]:
        patterns = sorted(
            self._collections[LEARNED].records(),
            key=lambda p: p.created_at,
            reverse=True,
        )
        return patterns[:limit]

    def get_learned_pattern_stats(self) -> Dict[str, Any]:
        patterns = self._collections[LEARNED].records()
        return {
            "totalPatterns": len(patterns),
            "totalUsage": sum(p.usage_count for p in patterns),
            "byAction": dict(Counter(p.action or "unknown" for p in patterns)),
            "byScreen": dict(Counter(p.screen for p in patterns if p.screen)),
        }

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def get_stats(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "collections": {name: len(c) for name, c in self._collections.items()},
        }

    def clear_all(self) -> None:
        with self._lock:
            for name in _RECORD_TYPES:
                self._collections[name] = create_collection(name, self._embedding_model)
                self._save(name)
        logger.info("Cleared all knowledge collections")
