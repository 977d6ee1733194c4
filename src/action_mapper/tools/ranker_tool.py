from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

from ..models import Candidate, Step


class RankerDecision(str, Enum):
    SELECT = "SELECT"
    CREATE_NEW = "CREATE_NEW"


@dataclass(frozen=True)
class SelectedMethod:
    method_name: str
    class_name: Optional[str] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class RankerResponse:
    """
    Structured answer from a ranker.

    selected_methods is in execution order; more than one entry means the
    step needs a chain of calls.
    """
    decision: RankerDecision
    selected_methods: List[SelectedMethod] = field(default_factory=list)
    confidence: Optional[float] = None
    reasoning: Optional[str] = None


@dataclass(frozen=True)
class FallbackAnswer:
    """Answer from a free-form reasoning backend (no candidate list)."""
    found: bool
    method_name: Optional[str] = None
    class_name: Optional[str] = None
    confidence: float = 0.0
    parameters: List[str] = field(default_factory=list)
    reasoning: Optional[str] = None


class Ranker(Protocol):
    """Picks the best candidate(s) for a step, or declares that none fit."""
    def select(
        self,
        step: Step,
        candidates: List[Candidate],
        context: Dict[str, Any],
    ) -> RankerResponse:
        ...


class ReasoningBackend(Protocol):
    """Resolves a step with no candidate structure at all."""
    def reason(self, step: Step, context: Dict[str, Any]) -> FallbackAnswer:
        ...
