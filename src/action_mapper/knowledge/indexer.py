"""
Turns mined page-object methods into atomic-action records.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from ..models import AtomicAction, PageObjectMethod
from ..resolution.vocabulary_builder import ActionVocabulary, default_vocabulary
from ..utils.naming import camel_to_snake, screen_from_class, split_camel_case

logger = logging.getLogger(__name__)


def extract_keywords(method_name: str, vocabulary: Optional[ActionVocabulary] = None) -> List[str]:
    """
    "clickPlayButton" -> ["click", "play", "button", "tap", "press", ...]

    Words shorter than three characters are dropped before synonym expansion.
    """
    vocabulary = vocabulary or default_vocabulary()
    words = [w for w in split_camel_case(method_name) if len(w) > 2]
    return vocabulary.expand_keywords(words)


def method_id(method: PageObjectMethod) -> str:
    parts = ["method", method.platform, method.brand, method.class_name, method.method_name]
    return "_".join(p for p in parts if p)


def to_atomic_action(
    method: PageObjectMethod,
    vocabulary: Optional[ActionVocabulary] = None,
) -> AtomicAction:
    return AtomicAction(
        id=method_id(method),
        action_name=camel_to_snake(method.method_name),
        method_name=method.method_name,
        class_name=method.class_name,
        file=method.relative_path or method.file,
        target_screen=screen_from_class(method.class_name),
        platform=method.platform,
        brand=method.brand,
        keywords=extract_keywords(method.method_name, vocabulary),
        description=method.javadoc,
        source="indexed",
        parameters=list(method.parameters),
        return_type=method.return_type,
        confidence=0.8,
    )


def index_methods(
    store,
    methods: Iterable[PageObjectMethod],
    vocabulary: Optional[ActionVocabulary] = None,
) -> Dict[str, Any]:
    """
    Upsert mined methods into the atomic-action layer.

    :param store: ActionKnowledgeStore (anything with add_atomic_actions)
    :param methods: Methods from PageObjectLoader
    :return: {"methodsFound", "actionsCreated"}
    """
    methods = list(methods)
    records = [to_atomic_action(m, vocabulary) for m in methods]
    created = store.add_atomic_actions(records)
    logger.info(f"Indexed {created} atomic actions from {len(methods)} methods")
    return {"methodsFound": len(methods), "actionsCreated": created}
