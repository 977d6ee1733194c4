from typing import List, Optional, Tuple
from langchain_core.documents import Document
from langchain_community.vectorstores import FAISS


class MethodVectorStore:
    def __init__(self, embedding_model, index_path: Optional[str] = None):
        self._embedding_model = embedding_model
        self._index_path = index_path
        self._vectorstore: Optional[FAISS] = None

    def is_initialized(self) -> bool:
        return self._vectorstore is not None

    def build(self, documents: List[Document]) -> None:
        if not documents:
            raise ValueError("Cannot build vector store with empty documents.")
        self._vectorstore = FAISS.from_documents(
            documents=documents,
            embedding=self._embedding_model
            )
        if self._index_path:
            self._vectorstore.save_local(self._index_path)

    def load(self) -> None:
        if not self._index_path:
            raise ValueError("Cannot load vector store without an index path.")
        self._vectorstore = FAISS.load_local(
            self._index_path,
            self._embedding_model,
            allow_dangerous_deserialization=True
        )

    def build_or_load(self, documents: List[Document]) -> None:
        try:
            self.load()
        except (OSError, RuntimeError, ValueError):
            self.build(documents)

    def add_documents(self, documents: List[Document]) -> None:
        """Append newly indexed methods; builds the index on first use."""
        if not documents:
            return
        if self._vectorstore is None:
            self.build(documents)
            return
        self._vectorstore.add_documents(documents)
        if self._index_path:
            self._vectorstore.save_local(self._index_path)

    def search_with_scores(self, query: str, k: int = 5) -> List[Tuple[Document, float]]:
        """Documents with relevance scores (higher is better)."""
        return self.get_langchain_vectorstore().similarity_search_with_relevance_scores(query, k=k)

    def get_langchain_vectorstore(self) -> FAISS:
        if not self._vectorstore:
            raise RuntimeError("Vector store not initialized.")
        return self._vectorstore
