import logging
from typing import List, Optional

from .retriever_tool import SemanticRetriever  # protocol
from ..models import clamp_confidence
from ..schemas import MethodMatch
from ..utils.naming import screen_from_class
from ..vector_store import MethodVectorStore

logger = logging.getLogger(__name__)


class MethodRetriever(SemanticRetriever):
    """
    Semantic search over indexed page-object methods.

    Implements the SemanticRetriever protocol on top of MethodVectorStore.
    Platform acts as a filter; screen only reorders hits on the same screen
    ahead of equally scored hits elsewhere.
    """

    def __init__(self, vector_store: MethodVectorStore, k: int = 5, fetch_multiplier: int = 3):
        """
        :param vector_store: MethodVectorStore instance (must be initialized)
        :param k: Default number of results to return
        :param fetch_multiplier: Over-fetch factor so filtering still leaves k results
        """
        if not vector_store.is_initialized():
            raise RuntimeError(
                "MethodVectorStore must be initialized (call build() or load()) "
                "before creating MethodRetriever"
            )
        self._vector_store = vector_store
        self._default_k = k
        self._fetch_multiplier = fetch_multiplier

    def query_methods(
        self,
        text: str,
        top_k: int = None,
        min_confidence: float = 0.0,
        screen: Optional[str] = None,
        platform: Optional[str] = None,
    ) -> List[MethodMatch]:
        top_k = top_k or self._default_k
        hits = self._vector_store.search_with_scores(text, k=top_k * self._fetch_multiplier)

        matches: List[MethodMatch] = []
        for document, score in hits:
            metadata = document.metadata
            method_platform = metadata.get("platform")
            if platform and method_platform and method_platform.lower() != platform.lower():
                continue
            confidence = clamp_confidence(score)
            if confidence < min_confidence:
                continue
            matches.append(MethodMatch(
                method_name=metadata["method_name"],
                class_name=metadata["class_name"],
                confidence=confidence,
                parameters=list(metadata.get("parameters") or []),
                file=metadata.get("file"),
                javadoc=metadata.get("javadoc"),
            ))

        if screen:
            wanted = screen.lower()
            matches.sort(
                key=lambda m: (m.confidence, (screen_from_class(m.class_name) or "") == wanted),
                reverse=True,
            )
        else:
            matches.sort(key=lambda m: m.confidence, reverse=True)

        logger.debug(f"Semantic query '{text}' -> {len(matches)} matches")
        return matches[:top_k]
