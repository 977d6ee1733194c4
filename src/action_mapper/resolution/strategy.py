"""
Core abstractions for the resolution cascade.

Each strategy looks at one step and answers accept, continue or unmapped.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .method_naming import MethodSuggestion
from ..models import Candidate, Step
from ..schemas import ResolutionSource


class Decision(str, Enum):
    ACCEPT = "accept"
    CONTINUE = "continue"
    UNMAPPED = "unmapped"


@dataclass(frozen=True)
class ResolutionContext:
    """
    Per-step screen and platform context.

    Built fresh for every step by the pipeline; strategies only read it.
    """
    platform: Optional[str] = None
    brand: Optional[str] = None
    preferred_screen_class: Optional[str] = None
    current_screen: Optional[str] = None
    screen_path: Tuple[str, ...] = field(default_factory=tuple)
    full_scenario: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "platform": self.platform,
            "brand": self.brand,
            "preferred_screen_class": self.preferred_screen_class,
            "current_screen": self.current_screen,
            "screen_path": list(self.screen_path),
            "full_scenario": self.full_scenario,
        }


@dataclass(frozen=True)
class Outcome:
    """
    Immutable answer from one strategy.

    Attributes:
        decision: accept, continue to the next strategy, or stop as unmapped
        candidate: The accepted candidate, or the best partial match otherwise
        source: Resolution source stamped on an accepted result
        learn: Accepted result should be written back to the knowledge store
        create_new: Unmapped because the method does not exist yet
    """
    decision: Decision
    candidate: Optional[Candidate] = None
    source: Optional[ResolutionSource] = None
    reason: Optional[str] = None
    reasoning: Optional[str] = None
    suggestion: Optional[MethodSuggestion] = None
    learn: bool = False
    create_new: bool = False

    @classmethod
    def accept(
        cls,
        candidate: Candidate,
        source: ResolutionSource,
        learn: bool = False,
        reasoning: Optional[str] = None,
    ) -> "Outcome":
        return cls(Decision.ACCEPT, candidate=candidate, source=source, learn=learn, reasoning=reasoning)

    @classmethod
    def proceed(cls, best_partial: Optional[Candidate] = None, reason: Optional[str] = None) -> "Outcome":
        return cls(Decision.CONTINUE, candidate=best_partial, reason=reason)

    @classmethod
    def unmapped(
        cls,
        reason: str,
        best_partial: Optional[Candidate] = None,
        create_new: bool = False,
        reasoning: Optional[str] = None,
    ) -> "Outcome":
        return cls(
            Decision.UNMAPPED,
            candidate=best_partial,
            reason=reason,
            create_new=create_new,
            reasoning=reasoning,
        )


class ResolutionStrategy(ABC):
    """
    One stage of the resolution cascade.

    Implementations must not raise: collaborator failures become CONTINUE
    (or UNMAPPED for a terminal stage).
    """

    name: str = "strategy"

    def applies_to(self, step: Step, context: ResolutionContext) -> bool:
        return True

    @abstractmethod
    def resolve(self, step: Step, query: str, context: ResolutionContext) -> Outcome:
        """
        :param step: Step being resolved
        :param query: Normalized "{action} {target}" search text
        :param context: Screen and platform context
        :return: Outcome for this stage
        """
        pass
