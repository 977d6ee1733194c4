from typing import Protocol, List, Optional
from ..schemas import MethodMatch


class SemanticRetriever(Protocol):
    """Protocol for semantic search over indexed page-object methods."""
    def query_methods(
        self,
        text: str,
        top_k: int = 5,
        min_confidence: float = 0.0,
        screen: Optional[str] = None,
        platform: Optional[str] = None,
    ) -> List[MethodMatch]:
        ...
