"""
Public application facade for the action mapper.

This is the single stable entry point for the library.
All internal structure can change freely, but this API remains stable.
"""
import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .agent import LLMRanker
from .config import ActionMapperConfig
from .data_loader import PageObjectLoader
from .exceptions import ServiceNotInitializedError
from .knowledge_factory import create_knowledge_store, create_learning_writer
from .llm_factory import get_llm_instance
from .models import Step, UserTerm
from .navigation import NavigationOptions, PrerequisitePlan
from .orchestration import PipelineOptions
from .retriever_factory import create_embedding_model, create_retriever
from .schemas import MappingReport, ResolutionResult
from .service import ActionMapperService

logger = logging.getLogger(__name__)


class ActionMapperApp:
    """
    Public application facade for the action mapper.

    All dependency wiring and factory usage is encapsulated here.

    Usage:
        config = ActionMapperConfig(...)
        app = ActionMapperApp(config)
        app.initialize()
        report = app.map_steps([Step(action="play", target="episode")])
    """

    def __init__(self, config: ActionMapperConfig):
        """
        :param config: ActionMapperConfig instance
        """
        self._config = config
        self._service: Optional[ActionMapperService] = None

    @property
    def config(self) -> ActionMapperConfig:
        return self._config

    def initialize(self) -> None:
        """
        Initialize the service and wire all dependencies.

        This method:
        - Resolves relative paths against the project directory
        - Mines the page-object repository if one is configured
        - Creates the knowledge store and the learning writer
        - Creates the semantic retriever when embeddings are available
        - Creates the LLM ranker when intelligent selection is enabled
        - Warms up the service

        Call this once before using map_steps().
        """
        if self._service:
            return

        self._config = self._resolve_paths(self._config)
        config = self._config

        methods = None
        if config.page_object_repo_path:
            methods = PageObjectLoader(config.page_object_repo_path).load_methods()

        service = ActionMapperService(config)

        store = create_knowledge_store(config, methods=methods)
        service.set_knowledge_store(store)

        writer = create_learning_writer(store, config)
        if writer is not None:
            service.set_learning_writer(writer)

        embedding_model = create_embedding_model(config.embedding_provider)
        if embedding_model is not None and (
            os.path.exists(config.faiss_index_path) or config.page_object_repo_path
        ):
            service.set_retriever(create_retriever(config=config, embedding_model=embedding_model))
        else:
            logger.warning("Semantic retriever disabled: no embeddings or method index available")

        if config.enable_intelligent_selection or config.enable_llm_fallback:
            llm = get_llm_instance(provider=config.llm_provider, model=config.llm_model)
            ranker = LLMRanker(llm, timeout_seconds=config.ranker_timeout_seconds)
            if config.enable_intelligent_selection:
                service.set_ranker(ranker)
            if config.enable_llm_fallback:
                service.set_reasoning_backend(ranker)

        service.warmup()
        self._service = service

    def map_steps(self, steps: Sequence[Step], options: Optional[PipelineOptions] = None) -> MappingReport:
        """
        Map a scenario of steps to page-object methods.

        :param steps: Ordered scenario steps
        :param options: Platform, brand and navigation options
        :return: MappingReport
        :raises ServiceNotInitializedError: If initialize() has not been called
        """
        return self._require_service().map_steps(steps, options)

    def plan_navigation(
        self,
        mappings: Sequence[ResolutionResult] = (),
        options: Optional[NavigationOptions] = None,
    ) -> PrerequisitePlan:
        return self._require_service().plan_navigation(mappings, options)

    def shortest_path(self, from_screen: str, to_screen: str) -> List[str]:
        return self._require_service().shortest_path(from_screen, to_screen)

    def learn_terminology(
        self,
        user_term: str,
        expands_to: List[str],
        context: str = "",
        synonyms: Optional[List[str]] = None,
    ) -> UserTerm:
        return self._require_service().learn_terminology(user_term, expands_to, context, synonyms)

    def get_stats(self) -> Dict[str, Any]:
        return self._require_service().get_stats()

    def shutdown(self) -> None:
        if self._service:
            self._service.shutdown()
            self._service = None

    def _require_service(self) -> ActionMapperService:
        if not self._service:
            raise ServiceNotInitializedError("App not initialized. Call initialize() first.")
        return self._service

    @staticmethod
    def _resolve_paths(config: ActionMapperConfig) -> ActionMapperConfig:
        """Relative paths resolve against the project directory, not the caller's CWD."""
        project_dir = Path(__file__).parent.parent.parent

        def resolve(path: Optional[str]) -> Optional[str]:
            if path and not os.path.isabs(path):
                return str(project_dir / path)
            return path

        return replace(
            config,
            knowledge_base_dir=resolve(config.knowledge_base_dir),
            faiss_index_path=resolve(config.faiss_index_path) or str(project_dir / "method_vectorstore"),
            page_object_repo_path=resolve(config.page_object_repo_path),
        )
