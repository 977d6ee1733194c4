from .retriever_tool import SemanticRetriever
from .method_retriever import MethodRetriever
from .ranker_tool import (
    FallbackAnswer,
    Ranker,
    RankerDecision,
    RankerResponse,
    ReasoningBackend,
    SelectedMethod,
)

__all__ = [
    "SemanticRetriever",
    "MethodRetriever",
    "Ranker",
    "RankerDecision",
    "RankerResponse",
    "ReasoningBackend",
    "SelectedMethod",
    "FallbackAnswer",
]
