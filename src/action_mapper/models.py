from dataclasses import dataclass, field, fields, asdict, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class SourceHint(str, Enum):
    NONE = "none"
    PRECONDITION = "precondition"


class CandidateSource(str, Enum):
    LEARNED_PATTERN = "learned_pattern"
    KNOWLEDGE_BASE = "knowledge_base"
    HYBRID_SEARCH = "hybrid_search"
    COMPOSITE_ACTION = "composite_action"


def clamp_confidence(value: Optional[float], default: float = 0.0) -> float:
    """Coerce a raw score from any backend into [0.0, 1.0]."""
    if value is None:
        return default
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    return max(0.0, min(1.0, value))


def _now() -> str:
    return datetime.now().isoformat()


def _from_dict(cls, data: Dict[str, Any]):
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in known})


@dataclass(frozen=True)
class Step:
    """One decomposed test step, e.g. action="play", target="episode"."""
    action: str
    target: Optional[str] = None
    details: Optional[str] = None
    is_prerequisite: bool = False
    source_hint: SourceHint = SourceHint.NONE
    original_source: Optional[str] = None

    def with_provenance(self, source: str) -> "Step":
        """Copy of this step stamped with the strategy that resolved it."""
        return replace(self, original_source=source)

    def to_dict(self) -> dict:
        result = asdict(self)
        result["source_hint"] = self.source_hint.value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Step":
        data = dict(data)
        data["source_hint"] = SourceHint(data.get("source_hint") or SourceHint.NONE.value)
        return _from_dict(cls, data)


@dataclass(frozen=True)
class CandidateStep:
    """One call inside a composite chain."""
    method_name: str
    class_name: str
    order: int = 0
    description: Optional[str] = None
    reason: Optional[str] = None
    parameters: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Candidate:
    """
    A ranked method suggestion produced while resolving a single step.

    Never persisted directly; only accepted resolutions are written back.
    """
    method_name: str
    class_name: str
    confidence: float
    source: CandidateSource
    file: Optional[str] = None
    parameters: List[str] = field(default_factory=list)
    is_composite: bool = False
    composite_steps: List[CandidateStep] = field(default_factory=list)
    action_name: Optional[str] = None
    description: Optional[str] = None
    javadoc: Optional[str] = None

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be between 0.0 and 1.0, got {self.confidence}")

    def dedup_key(self) -> tuple:
        return (self.class_name.lower(), self.method_name.lower())

    def with_confidence(self, confidence: float) -> "Candidate":
        return replace(self, confidence=clamp_confidence(confidence))


@dataclass
class AtomicAction:
    id: str
    action_name: str
    method_name: str
    class_name: str
    file: Optional[str] = None
    target_screen: Optional[str] = None
    platform: Optional[str] = None
    brand: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    description: Optional[str] = None
    source: str = "indexed"
    parameters: List[str] = field(default_factory=list)
    return_type: str = "void"
    confidence: float = 0.8
    usage_count: int = 0
    created_at: str = field(default_factory=_now)

    def document_text(self) -> str:
        parts = [
            self.action_name.replace("_", " "),
            self.method_name,
            self.class_name,
            self.platform,
            self.brand,
            *self.keywords,
            self.target_screen,
        ]
        return " ".join(p for p in parts if p)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AtomicAction":
        return _from_dict(cls, data)


@dataclass
class CompositeStep:
    order: int
    atomic_action: str
    parameters: Dict[str, Any] = field(default_factory=dict)
    conditional: bool = False
    method_name: Optional[str] = None
    class_name: Optional[str] = None
    description: Optional[str] = None


@dataclass
class CompositeAction:
    id: str
    action_name: str
    description: str = ""
    steps: List[CompositeStep] = field(default_factory=list)
    prerequisites: List[str] = field(default_factory=list)
    target_screen: Optional[str] = None
    usage_count: int = 0
    created_at: str = field(default_factory=_now)

    def document_text(self) -> str:
        chain = " then ".join(s.atomic_action.replace("_", " ") for s in self.steps)
        return f"{self.action_name.replace('_', ' ')} {self.description} {chain}".strip()

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompositeAction":
        data = dict(data)
        data["steps"] = [
            s if isinstance(s, CompositeStep) else _from_dict(CompositeStep, s)
            for s in data.get("steps") or []
        ]
        return _from_dict(cls, data)


@dataclass
class LearnedPattern:
    id: str
    phrase: str
    action: str
    target: Optional[str] = None
    details: Optional[str] = None
    confidence: float = 1.0
    screen: Optional[str] = None
    platform: Optional[str] = None
    brand: Optional[str] = None
    method_name: Optional[str] = None
    class_name: Optional[str] = None
    phrases: List[str] = field(default_factory=list)
    usage_count: int = 0
    source: str = "ai_learned"
    created_at: str = field(default_factory=_now)

    def document_text(self) -> str:
        return " ".join(self.phrases or [self.phrase])

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LearnedPattern":
        return _from_dict(cls, data)


@dataclass
class UserTerm:
    id: str
    user_term: str
    expands_to: List[str] = field(default_factory=list)
    synonyms: List[str] = field(default_factory=list)
    context: str = ""
    usage_count: int = 1
    confidence: float = 1.0
    created_at: str = field(default_factory=_now)
    last_used_at: str = field(default_factory=_now)

    def document_text(self) -> str:
        return " ".join(p for p in [self.user_term, *self.synonyms, self.context] if p)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserTerm":
        return _from_dict(cls, data)


@dataclass
class PageObjectMethod:
    """A public method mined from a page-object source file."""
    class_name: str
    method_name: str
    return_type: str = "void"
    parameters: List[str] = field(default_factory=list)
    file: Optional[str] = None
    relative_path: Optional[str] = None
    platform: Optional[str] = None
    brand: Optional[str] = None
    javadoc: Optional[str] = None
