from typing import Any, Dict, List, Optional, Sequence

from .config import ActionMapperConfig
from .exceptions import ServiceNotInitializedError
from .knowledge import ActionKnowledgeStore, LearningWriter
from .models import Step, UserTerm
from .navigation import NavigationOptions, NavigationPlanner, PrerequisitePlan
from .orchestration import MappingPipeline, PipelineOptions
from .resolution import ResolutionContext, ResolutionEngine, create_resolution_engine
from .schemas import MappingReport, ResolutionResult
from .tools import Ranker, ReasoningBackend, SemanticRetriever


class ActionMapperService:
    """
    Facade over the action mapping subsystem.
    The ONLY entry point for the HTTP and evaluation layers.
    """

    def __init__(self, config: ActionMapperConfig):
        """
        Composition root.
        Collaborators are injected through the setters, then warmup() wires
        the engine and pipeline from whatever is available.
        """
        self.config = config

        self._store: Optional[ActionKnowledgeStore] = None
        self._retriever: Optional[SemanticRetriever] = None
        self._ranker: Optional[Ranker] = None
        self._reasoning_backend: Optional[ReasoningBackend] = None
        self._writer: Optional[LearningWriter] = None
        self._planner = NavigationPlanner()

        self._engine: Optional[ResolutionEngine] = None
        self._pipeline: Optional[MappingPipeline] = None

    # ----------------------------
    # Cold-start / Warmup
    # ----------------------------
    def warmup(self) -> None:
        """
        Build the resolution engine and pipeline.

        Safe to call again after injecting new collaborators.
        """
        vocabulary = self._store.build_vocabulary() if self._store is not None else None
        self._engine = create_resolution_engine(
            config=self.config,
            store=self._store,
            retriever=self._retriever,
            ranker=self._ranker,
            reasoning_backend=self._reasoning_backend,
            writer=self._writer,
            vocabulary=vocabulary,
        )
        self._pipeline = MappingPipeline(
            engine=self._engine,
            planner=self._planner,
            writer=self._writer,
            record_patterns=self.config.record_patterns,
        )

    @property
    def is_ready(self) -> bool:
        return self._pipeline is not None

    # ----------------------------
    # Mapping
    # ----------------------------
    def map_steps(self, steps: Sequence[Step], options: Optional[PipelineOptions] = None) -> MappingReport:
        """
        Map a scenario of steps to page-object methods.

        :raises ServiceNotInitializedError: If warmup() has not run
        :raises EmptyScenarioError: If no steps are given
        """
        if not self._pipeline:
            raise ServiceNotInitializedError("Service is not initialized.")
        return self._pipeline.run(steps, options)

    def resolve_step(self, step: Step, context: Optional[ResolutionContext] = None) -> ResolutionResult:
        if not self._engine:
            raise ServiceNotInitializedError("Service is not initialized.")
        return self._engine.resolve(step, context)

    # ----------------------------
    # Navigation
    # ----------------------------
    def plan_navigation(
        self,
        mappings: Sequence[ResolutionResult] = (),
        options: Optional[NavigationOptions] = None,
    ) -> PrerequisitePlan:
        return self._planner.build_prerequisites(mappings, options)

    def shortest_path(self, from_screen: str, to_screen: str) -> List[str]:
        return self._planner.shortest_path(from_screen, to_screen)

    # ----------------------------
    # Knowledge base
    # ----------------------------
    def learn_terminology(
        self,
        user_term: str,
        expands_to: List[str],
        context: str = "",
        synonyms: Optional[List[str]] = None,
    ) -> UserTerm:
        """
        Teach the store a user phrase and rebuild the engine so query
        expansion picks it up.
        """
        store = self._require_store()
        term = store.learn_from_user(user_term, expands_to, context=context, synonyms=synonyms)
        if self._engine is not None:
            self.warmup()
        return term

    def translate_user_term(self, text: str) -> Dict[str, Any]:
        return self._require_store().translate_user_term(text)

    def get_stats(self) -> Dict[str, Any]:
        stats: Dict[str, Any] = {"ready": self.is_ready, "navigation": self._planner.get_stats()}
        if self._store is not None:
            stats["knowledge_base"] = self._store.get_stats()
            stats["learned_patterns"] = self._store.get_learned_pattern_stats()
        if self._engine is not None:
            stats["engine"] = self._engine.get_stats()
        return stats

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait for queued write-backs; True if the queue drained."""
        if self._writer is None:
            return True
        return self._writer.flush(timeout)

    def shutdown(self) -> None:
        if self._writer is not None:
            self._writer.close()
        close = getattr(self._ranker, "close", None)
        if callable(close):
            close()

    # ----------------------------
    # Dependency injection setters
    # ----------------------------
    def set_knowledge_store(self, store: ActionKnowledgeStore) -> None:
        """Inject the knowledge store."""
        self._store = store

    def set_retriever(self, retriever: SemanticRetriever) -> None:
        """Inject the semantic method retriever."""
        self._retriever = retriever

    def set_ranker(self, ranker: Ranker) -> None:
        """Inject the candidate ranker."""
        self._ranker = ranker

    def set_reasoning_backend(self, backend: ReasoningBackend) -> None:
        self._reasoning_backend = backend

    def set_learning_writer(self, writer: LearningWriter) -> None:
        self._writer = writer

    def _require_store(self) -> ActionKnowledgeStore:
        if self._store is None:
            raise ServiceNotInitializedError("Knowledge store is not initialized.")
        return self._store
