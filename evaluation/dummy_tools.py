from typing import List, Optional

from action_mapper.schemas import MethodMatch
from action_mapper.utils.naming import split_camel_case

from evaluation.cases import EVAL_METHODS


class DummyRetriever:
    """
    Keyword-overlap retriever standing in for the FAISS method index.

    Confidence is the share of query words found in the method's name and
    class, so evaluation runs are deterministic and offline.
    """

    def __init__(self, methods=EVAL_METHODS):
        self._methods = list(methods)

    def query_methods(
        self,
        text: str,
        top_k: int = 5,
        min_confidence: float = 0.0,
        screen: Optional[str] = None,
        platform: Optional[str] = None,
    ) -> List[MethodMatch]:
        words = set(text.lower().split())
        if not words:
            return []

        matches = []
        for class_name, method_name, parameters in self._methods:
            vocabulary = set(split_camel_case(method_name)) | set(split_camel_case(class_name))
            confidence = len(words & vocabulary) / len(words)
            if confidence > 0 and confidence >= min_confidence:
                matches.append(MethodMatch(
                    method_name=method_name,
                    class_name=class_name,
                    confidence=round(confidence, 3),
                    parameters=list(parameters),
                ))
        matches.sort(key=lambda m: m.confidence, reverse=True)
        return matches[:top_k]
