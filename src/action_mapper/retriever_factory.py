import logging
import os
from typing import Optional

from .canonicalizer import build_documents
from .config import ActionMapperConfig
from .config_validator import get_required_env
from .data_loader import PageObjectLoader
from .tools.method_retriever import MethodRetriever
from .vector_store import MethodVectorStore

logger = logging.getLogger(__name__)


def create_embedding_model(provider: str):
    """
    Build the embedding model for the semantic method index.

    :param provider: 'openai' or 'none'
    :return: LangChain Embeddings, or None when embeddings are disabled
    """
    provider = (provider or "openai").lower()

    if provider == "openai":
        from langchain_openai import OpenAIEmbeddings

        api_key = get_required_env(
            "OPENAI_API_KEY",
            description="OpenAI API key for embeddings (get from https://platform.openai.com/api-keys)"
        )
        return OpenAIEmbeddings(api_key=api_key)
    elif provider == "none":
        return None
    else:
        raise ValueError(f"Unknown embedding provider: {provider}")


def create_retriever(
    config: Optional[ActionMapperConfig] = None,
    embedding_model=None,
    vector_store: Optional[MethodVectorStore] = None,
) -> MethodRetriever:
    """
    Factory function to create a configured MethodRetriever instance.

    Handles:
    - Embedding model creation
    - Vector store initialization
    - Index building from the page-object repository if needed
    - Retriever creation

    :param config: ActionMapperConfig instance
    :param embedding_model: Embedding model instance (created from config if None)
    :param vector_store: Pre-initialized MethodVectorStore (optional)
    :return: Configured MethodRetriever instance
    """
    config = config or ActionMapperConfig()

    if vector_store is None:
        if embedding_model is None:
            embedding_model = create_embedding_model(config.embedding_provider)
        if embedding_model is None:
            raise ValueError("Semantic retriever requires an embedding provider")

        index_path = config.faiss_index_path
        if not index_path:
            raise ValueError(
                "FAISS index path must be provided via config.faiss_index_path "
                "or VECTOR_STORE_PATH env var"
            )

        vector_store = MethodVectorStore(embedding_model=embedding_model, index_path=index_path)

        if os.path.exists(index_path):
            vector_store.load()
        else:
            if not config.page_object_repo_path:
                raise ValueError("Cannot build index: page_object_repo_path not provided in config")
            methods = PageObjectLoader(config.page_object_repo_path).load_methods()
            logger.info(f"Building method index from {len(methods)} page-object methods")
            vector_store.build(build_documents(methods))

    return MethodRetriever(vector_store=vector_store, k=config.semantic_top_k)
