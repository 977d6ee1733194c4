"""
Record collections behind the action knowledge store.

A collection holds records keyed by id and scores them against a free-text
query. Two backends are provided:

- FuzzyCollection: keyword scoring with rapidfuzz, no external services
- VectorCollection: FAISS similarity over an Embeddings model
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple

from langchain_core.documents import Document
from langchain_community.vectorstores import FAISS
from rapidfuzz import fuzz, process
from rapidfuzz.utils import default_process

from ..models import clamp_confidence

logger = logging.getLogger(__name__)

Predicate = Callable[[Any], bool]
ScoredRecord = Tuple[Any, float]


def keyword_score(query: str, text: str) -> float:
    """
    Token-set similarity weighted by how many query words the text contains.

    "play episode" vs "select episode" scores about half of
    "play episode" vs "play the next episode".
    """
    query_tokens = set(default_process(query or "").split())
    text_tokens = set(default_process(text or "").split())
    if not query_tokens or not text_tokens:
        return 0.0
    coverage = len(query_tokens & text_tokens) / len(query_tokens)
    similarity = fuzz.token_set_ratio(query, text, processor=default_process) / 100.0
    return clamp_confidence(similarity * coverage)


class RecordCollection(ABC):
    """Records keyed by id plus a scoring search."""

    def __init__(self, name: str):
        self.name = name
        self._records: Dict[str, Any] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: str) -> bool:
        return record_id in self._records

    def get(self, record_id: str) -> Optional[Any]:
        return self._records.get(record_id)

    def records(self) -> List[Any]:
        return list(self._records.values())

    def upsert(self, record: Any) -> None:
        self._records[record.id] = record
        self._index(record)

    def replace(self, record: Any) -> None:
        """Swap metadata for an existing record without touching its text."""
        self._records[record.id] = record

    @abstractmethod
    def _index(self, record: Any) -> None:
        pass

    @abstractmethod
    def search(
        self,
        query: str,
        top_k: int = 5,
        predicate: Optional[Predicate] = None,
    ) -> List[ScoredRecord]:
        """
        :return: (record, confidence) pairs, best first, confidence in [0, 1]
        """
        pass


class FuzzyCollection(RecordCollection):
    """Keyword-scored collection using rapidfuzz."""

    def __init__(self, name: str, min_score: float = 0.0):
        super().__init__(name)
        self._min_score = min_score
        self._texts: Dict[str, str] = {}

    def _index(self, record: Any) -> None:
        self._texts[record.id] = record.document_text()

    def search(self, query, top_k=5, predicate=None):
        if not query or not self._texts:
            return []

        choices = {
            record_id: text
            for record_id, text in self._texts.items()
            if predicate is None or predicate(self._records[record_id])
        }
        scored = process.extract(
            query,
            choices,
            scorer=lambda q, text, **_: keyword_score(q, text) * 100.0,
            limit=None,
        )

        results = []
        for _, score, record_id in scored:
            confidence = clamp_confidence(score / 100.0)
            if confidence <= self._min_score:
                continue
            results.append((self._records[record_id], confidence))
        return results[:top_k]


class VectorCollection(RecordCollection):
    """
    FAISS-backed collection.

    The index is created lazily on first insert because FAISS cannot be
    built from an empty document list.
    """

    def __init__(self, name: str, embedding_model, min_score: float = 0.0, fetch_multiplier: int = 4):
        super().__init__(name)
        self._embedding_model = embedding_model
        self._min_score = min_score
        self._fetch_multiplier = fetch_multiplier
        self._vectorstore: Optional[FAISS] = None

    def _index(self, record: Any) -> None:
        document = Document(
            page_content=record.document_text(),
            metadata={"id": record.id, "collection": self.name},
        )
        if self._vectorstore is None:
            self._vectorstore = FAISS.from_documents(
                documents=[document],
                embedding=self._embedding_model,
                ids=[record.id],
            )
            return
        if record.id in self._vectorstore.index_to_docstore_id.values():
            self._vectorstore.delete([record.id])
        self._vectorstore.add_documents([document], ids=[record.id])

    def search(self, query, top_k=5, predicate=None):
        if not query or self._vectorstore is None:
            return []

        fetch_k = min(len(self._records), top_k * self._fetch_multiplier)
        hits = self._vectorstore.similarity_search_with_relevance_scores(query, k=fetch_k)

        results = []
        for document, score in hits:
            record = self._records.get(document.metadata.get("id"))
            if record is None:
                continue
            if predicate is not None and not predicate(record):
                continue
            confidence = clamp_confidence(score)
            if confidence <= self._min_score:
                continue
            results.append((record, confidence))
        results.sort(key=lambda pair: pair[1], reverse=True)
        return results[:top_k]


def create_collection(name: str, embedding_model=None, min_score: float = 0.0) -> RecordCollection:
    """Vector collection when an embedding model is available, fuzzy otherwise."""
    if embedding_model is not None:
        return VectorCollection(name, embedding_model, min_score=min_score)
    logger.debug(f"Collection '{name}' using keyword scoring (no embedding model)")
    return FuzzyCollection(name, min_score=min_score)
