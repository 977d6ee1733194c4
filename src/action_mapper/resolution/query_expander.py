"""
Query expansion for step resolution.

Turns one {action, target} pair into a prioritized list of search phrases,
most specific first.
"""
from dataclasses import dataclass
from enum import Enum
from itertools import islice, product
from typing import List, Optional

from .vocabulary_builder import ActionVocabulary, default_vocabulary
from ..utils.naming import camel_to_words, normalize_phrase, to_camel_case


class VariantSource(str, Enum):
    METHOD_PATTERN = "method_pattern"
    ORIGINAL = "original"
    ACTION_SYNONYM = "action_synonym"
    TARGET_SYNONYM = "target_synonym"
    COMBINED_SYNONYM = "combined_synonym"
    CAMEL_CASE = "camel_case"


@dataclass(frozen=True)
class QueryVariant:
    query: str
    source: VariantSource
    priority: int


class QueryExpander:
    """
    Expands a step into search variants.

    Priority order:
    1. curated method-name patterns for "{action} {target}"
    2. the literal query
    3. single synonym substitutions (action or target)
    4. bounded action x target synonym cross-product
    5. a camel-cased variant, as a method name would read
    """

    def __init__(self, vocabulary: Optional[ActionVocabulary] = None, cross_product_limit: int = 3):
        """
        :param vocabulary: Synonym and method-pattern tables
        :param cross_product_limit: Synonyms taken from each side for the cross-product
        """
        self._vocabulary = vocabulary or default_vocabulary()
        self._limit = cross_product_limit

    @property
    def vocabulary(self) -> ActionVocabulary:
        return self._vocabulary

    def expand(
        self,
        action: Optional[str],
        target: Optional[str] = None,
        details: Optional[str] = None,
    ) -> List[QueryVariant]:
        """
        Build the variant list for one step.

        :param action: Step action, e.g. "play"
        :param target: Step target, e.g. "episode"
        :param details: Free-text details; not searched, kept for signature parity
        :return: Variants deduplicated by lower-cased text, ascending priority
        """
        action = normalize_phrase(action)
        target = normalize_phrase(target)
        original = " ".join(p for p in (action, target) if p)
        if not original:
            return []

        variants: List[QueryVariant] = []

        for method_name in self._vocabulary.method_patterns(original):
            variants.append(QueryVariant(camel_to_words(method_name), VariantSource.METHOD_PATTERN, 1))

        variants.append(QueryVariant(original, VariantSource.ORIGINAL, 2))

        action_synonyms = self._vocabulary.action_synonyms(action)
        target_synonyms = self._vocabulary.target_synonyms(target) if target else ()

        for synonym in action_synonyms:
            variants.append(QueryVariant(_join(synonym, target), VariantSource.ACTION_SYNONYM, 3))
        for synonym in target_synonyms:
            variants.append(QueryVariant(_join(action, synonym), VariantSource.TARGET_SYNONYM, 3))

        combos = product(action_synonyms[: self._limit], target_synonyms[: self._limit])
        for action_syn, target_syn in islice(combos, self._limit * self._limit):
            variants.append(QueryVariant(_join(action_syn, target_syn), VariantSource.COMBINED_SYNONYM, 4))

        camel = to_camel_case(original)
        if camel:
            variants.append(QueryVariant(camel, VariantSource.CAMEL_CASE, 5))

        return _dedupe(variants)


def _join(*parts: str) -> str:
    return " ".join(p for p in parts if p)


def _dedupe(variants: List[QueryVariant]) -> List[QueryVariant]:
    seen = set()
    unique = []
    # Stable sort keeps insertion order within a priority
    for variant in sorted(variants, key=lambda v: v.priority):
        key = variant.query.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(variant)
    return unique
