import logging
from typing import Iterable, Optional

from .config import ActionMapperConfig
from .knowledge import ActionKnowledgeStore, LearningWriter, index_methods
from .models import PageObjectMethod

logger = logging.getLogger(__name__)


def create_knowledge_store(
    config: Optional[ActionMapperConfig] = None,
    embedding_model=None,
    methods: Optional[Iterable[PageObjectMethod]] = None,
) -> ActionKnowledgeStore:
    """
    Factory function to create the action knowledge store.

    Handles:
    - Loading persisted collections from the knowledge base directory
    - Extending the search vocabulary with learned user terminology
    - Indexing page-object methods into the atomic-action layer

    :param config: ActionMapperConfig instance
    :param embedding_model: Optional embeddings for FAISS-backed collections
    :param methods: Page-object methods to index (skipped if None)
    :return: Ready ActionKnowledgeStore
    """
    config = config or ActionMapperConfig()
    store = ActionKnowledgeStore(storage_dir=config.knowledge_base_dir, embedding_model=embedding_model)

    if methods is not None:
        index_methods(store, methods, store.build_vocabulary())

    logger.info(f"Knowledge store ready ({store.backend}): {store.get_stats()['collections']}")
    return store


def create_learning_writer(store: ActionKnowledgeStore, config: Optional[ActionMapperConfig] = None) -> Optional[LearningWriter]:
    """
    Background writer for learned mappings, or None when nothing is learned.
    """
    config = config or ActionMapperConfig()
    if not config.enable_write_back and not config.record_patterns:
        return None
    return LearningWriter(store)
