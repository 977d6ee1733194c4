"""
Knowledge store contract.

Every lookup returns a normalized SearchResult so call sites never care
which backend answered.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..models import AtomicAction
from ..schemas import SearchResult


@dataclass(frozen=True)
class AtomicFilters:
    """Optional metadata filters for atomic-action search."""
    target_screen: Optional[str] = None
    platform: Optional[str] = None
    brand: Optional[str] = None

    def matches(self, record: Any) -> bool:
        """
        A filter excludes a record only when both sides are set and differ.

        Records without platform/brand metadata are treated as shared.
        """
        for attr in ("target_screen", "platform", "brand"):
            wanted = getattr(self, attr)
            actual = getattr(record, attr, None)
            if wanted and actual and wanted.lower() != actual.lower():
                return False
        return True


class KnowledgeStore(ABC):
    """
    Read-mostly store of atomic actions, composite actions and learned patterns.

    Implementations may raise on backend failure; resolution code treats
    any exception as "no result".
    """

    @abstractmethod
    def find_atomic_action(
        self,
        query: str,
        filters: Optional[AtomicFilters] = None,
        top_k: int = 5,
    ) -> SearchResult:
        """
        Search single page-object methods.

        :param query: Free-text phrase, e.g. "play episode"
        :param filters: Optional screen/platform/brand filters
        :param top_k: Maximum number of matches
        :return: SearchResult of Candidate objects, best first
        """
        pass

    @abstractmethod
    def find_composite_action(self, query: str, top_k: int = 3) -> SearchResult:
        """Search multi-step macros; matches carry composite_steps."""
        pass

    @abstractmethod
    def find_learned_pattern(
        self,
        phrase: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> SearchResult:
        """
        Search previously learned step phrases.

        :param phrase: Step phrase
        :param context: Optional {"platform", "brand", "screen"} filters
        """
        pass

    @abstractmethod
    def add_atomic_action(self, record: AtomicAction) -> bool:
        """Upsert an atomic action; returns True on success."""
        pass
