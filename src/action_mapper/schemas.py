from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .models import Candidate, Step


class ResolutionStatus(str, Enum):
    FOUND = "found"
    UNMAPPED = "unmapped"


class ResolutionSource(str, Enum):
    LEARNED_PATTERN = "learned_pattern"
    INTELLIGENT_SELECTION = "intelligent_selection"
    INTELLIGENT_SELECTION_COMPOSITE = "intelligent_selection_composite"
    COMPOSITE_ACTION = "composite_action"
    ATOMIC_ACTION = "atomic_action"
    HYBRID_RAG = "hybrid_rag"
    LLM_FALLBACK = "llm_fallback"


@dataclass(frozen=True)
class SearchResult:
    """
    Normalized answer from any knowledge store lookup.

    Every collection returns this shape, best match first.
    """
    found: bool
    matches: List[Candidate] = field(default_factory=list)
    query: str = ""

    @property
    def best(self) -> Optional[Candidate]:
        return self.matches[0] if self.matches else None

    @classmethod
    def empty(cls, query: str = "") -> "SearchResult":
        return cls(found=False, matches=[], query=query)


@dataclass(frozen=True)
class MethodMatch:
    """One hit from the semantic method index."""
    method_name: str
    class_name: str
    confidence: float
    parameters: List[str] = field(default_factory=list)
    file: Optional[str] = None
    javadoc: Optional[str] = None


@dataclass(frozen=True)
class ResolutionResult:
    step: Step
    status: ResolutionStatus
    search_query: str
    chosen_candidate: Optional[Candidate] = None
    source: Optional[ResolutionSource] = None
    reason: Optional[str] = None
    best_partial: Optional[Candidate] = None
    suggested_class: Optional[str] = None
    suggested_method: Optional[str] = None
    create_new: bool = False
    reasoning: Optional[str] = None

    @property
    def is_found(self) -> bool:
        return self.status == ResolutionStatus.FOUND

    @property
    def confidence(self) -> float:
        return self.chosen_candidate.confidence if self.chosen_candidate else 0.0

    @property
    def method_name(self) -> Optional[str]:
        return self.chosen_candidate.method_name if self.chosen_candidate else None

    @property
    def class_name(self) -> Optional[str]:
        return self.chosen_candidate.class_name if self.chosen_candidate else None

    def to_dict(self) -> dict:
        result: Dict[str, Any] = {
            **self.step.to_dict(),
            "status": self.status.value,
            "searchQuery": self.search_query,
        }
        if self.source:
            result["source"] = self.source.value
        if self.chosen_candidate:
            candidate = self.chosen_candidate
            result.update({
                "methodName": candidate.method_name,
                "className": candidate.class_name,
                "file": candidate.file,
                "parameters": list(candidate.parameters),
                "confidence": round(candidate.confidence, 3),
                "isComposite": candidate.is_composite,
            })
            if candidate.composite_steps:
                result["compositeSteps"] = [
                    {"methodName": s.method_name, "className": s.class_name, "order": s.order}
                    for s in candidate.composite_steps
                ]
        if self.reason:
            result["reason"] = self.reason
        if self.reasoning:
            result["reasoning"] = self.reasoning
        if self.best_partial:
            result["bestMatch"] = {
                "methodName": self.best_partial.method_name,
                "className": self.best_partial.class_name,
                "confidence": round(self.best_partial.confidence, 3),
            }
        if self.suggested_method:
            result["suggestedClass"] = self.suggested_class
            result["suggestedMethod"] = self.suggested_method
            result["createNew"] = self.create_new
        return result


@dataclass(frozen=True)
class MappingStatistics:
    total: int
    mapped: int
    unmapped: int
    mapping_rate: float
    average_confidence: float

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "mapped": self.mapped,
            "unmapped": self.unmapped,
            "mappingRate": f"{self.mapping_rate:.1f}%",
            "averageConfidence": round(self.average_confidence, 2),
        }


@dataclass
class MappingReport:
    mappings: List[ResolutionResult]
    unmapped: List[ResolutionResult]
    statistics: MappingStatistics
    imports: List[str] = field(default_factory=list)
    platform: Optional[str] = None
    brand: Optional[str] = None
    prerequisites: Optional[Any] = None
    latency_ms: Optional[int] = None

    def to_dict(self) -> dict:
        result = {
            "mappings": [m.to_dict() for m in self.mappings],
            "unmapped": [u.to_dict() for u in self.unmapped],
            "statistics": self.statistics.to_dict(),
            "imports": list(self.imports),
            "platform": self.platform,
            "brand": self.brand,
        }
        if self.prerequisites is not None:
            result["prerequisites"] = self.prerequisites.to_dict()
        if self.latency_ms is not None:
            result["latencyMs"] = self.latency_ms
        return result
