"""
Vocabulary builder for query expansion.

Builds the immutable synonym and method-pattern tables used by the
QueryExpander and by keyword extraction during indexing.
"""
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..models import UserTerm
from ..utils.naming import normalize_phrase


DEFAULT_ACTION_SYNONYMS: Dict[str, List[str]] = {
    "click": ["tap", "press", "select", "hit"],
    "verify": ["check", "assert", "validate", "confirm", "ensure"],
    "wait": ["pause", "delay", "sleep", "hold"],
    "navigate": ["go", "open", "visit", "goto"],
    "enter": ["type", "input", "fill", "write"],
    "scroll": ["swipe", "drag", "slide"],
    "play": ["start", "begin", "launch", "initiate"],
    "stop": ["pause", "halt", "end", "terminate"],
    "get": ["fetch", "retrieve", "obtain", "read"],
    "set": ["update", "modify", "change", "configure"],
    "login": ["signin", "authenticate", "logon"],
    "logout": ["signout", "logoff", "disconnect"],
    "search": ["find", "lookup", "query", "filter"],
    "close": ["dismiss", "hide", "remove", "exit"],
    "seek": ["skip", "fast forward", "jump"],
    "restart": ["replay", "start over"],
    "resume": ["continue", "unpause"],
}

DEFAULT_TARGET_SYNONYMS: Dict[str, List[str]] = {
    "episode": ["show", "content", "video"],
    "show": ["series", "content", "title"],
    "video": ["playback", "player", "stream"],
    "player": ["video player", "playback"],
    "progress bar": ["seek bar", "scrubber", "timeline"],
    "button": ["control", "icon"],
    "home": ["home screen", "landing page"],
    "settings": ["preferences", "options"],
    "search": ["search bar", "search box"],
    "login": ["sign in", "authentication"],
    "menu": ["navigation", "drawer"],
    "live": ["live tv", "channel"],
    "profile": ["account", "user"],
}

# "{action} {target}" -> method names known to implement that phrase
DEFAULT_METHOD_PATTERNS: Dict[str, List[str]] = {
    "play episode": ["openShowFromBrandFeedSection", "selectEpisode"],
    "play video": ["waitForVideoLoaded", "playVideo"],
    "pause video": ["pauseVideo", "pressPause"],
    "restart episode": ["clickRestartButton"],
    "resume episode": ["clickResumeButton"],
    "open show": ["openShowFromBrandFeedSection"],
    "select episode": ["selectEpisode"],
    "verify progress bar": ["isProgressBarDisplayed", "verifyProgressBar"],
    "verify player": ["verifyVideoIsPlaying", "isPlayerDisplayed"],
    "navigate home": ["navigateToHome", "launchAppAndNavigateToHomeScreen"],
    "go back": ["back", "backFromPlayer"],
    "seek forward": ["seekForwardToPosition"],
    "search content": ["searchFor", "enterSearchText"],
    "login user": ["login"],
}


class ActionVocabulary:
    """
    Read-only synonym tables and method-name patterns.

    Built once at startup and shared across requests without locking.
    """

    def __init__(
        self,
        action_synonyms: Mapping[str, Iterable[str]],
        target_synonyms: Mapping[str, Iterable[str]],
        method_patterns: Mapping[str, Iterable[str]],
    ):
        self._action_synonyms = MappingProxyType(
            {normalize_phrase(k): tuple(v) for k, v in action_synonyms.items()}
        )
        self._target_synonyms = MappingProxyType(
            {normalize_phrase(k): tuple(v) for k, v in target_synonyms.items()}
        )
        self._method_patterns = MappingProxyType(
            {normalize_phrase(k): tuple(v) for k, v in method_patterns.items()}
        )

    def action_synonyms(self, action: Optional[str]) -> Tuple[str, ...]:
        return self._action_synonyms.get(normalize_phrase(action), ())

    def target_synonyms(self, target: Optional[str]) -> Tuple[str, ...]:
        return self._target_synonyms.get(normalize_phrase(target), ())

    def method_patterns(self, phrase: Optional[str]) -> Tuple[str, ...]:
        return self._method_patterns.get(normalize_phrase(phrase), ())

    def expand_keywords(self, words: Iterable[str]) -> List[str]:
        """Words plus their action synonyms, order preserved, no duplicates."""
        expanded: List[str] = []
        for word in words:
            for term in (word, *self.action_synonyms(word)):
                if term not in expanded:
                    expanded.append(term)
        return expanded


class VocabularyBuilder:
    """
    Builds an ActionVocabulary from the curated defaults plus learned terminology.

    A learned user term that is itself a known action extends that action's
    synonyms; anything else extends the target synonyms.
    """

    def __init__(
        self,
        action_synonyms: Optional[Mapping[str, Iterable[str]]] = None,
        target_synonyms: Optional[Mapping[str, Iterable[str]]] = None,
        method_patterns: Optional[Mapping[str, Iterable[str]]] = None,
    ):
        self._action_synonyms = {
            k: list(v) for k, v in (action_synonyms or DEFAULT_ACTION_SYNONYMS).items()
        }
        self._target_synonyms = {
            k: list(v) for k, v in (target_synonyms or DEFAULT_TARGET_SYNONYMS).items()
        }
        self._method_patterns = {
            k: list(v) for k, v in (method_patterns or DEFAULT_METHOD_PATTERNS).items()
        }

    def add_user_terms(self, terms: Iterable[UserTerm]) -> "VocabularyBuilder":
        for term in terms:
            key = normalize_phrase(term.user_term)
            if not key:
                continue
            related = [normalize_phrase(s) for s in (*term.synonyms, *term.expands_to)]
            related = [r for r in related if r and r != key]
            table = (
                self._action_synonyms
                if key in self._action_synonyms
                else self._target_synonyms
            )
            bucket = table.setdefault(key, [])
            for word in related:
                if word not in bucket:
                    bucket.append(word)
        return self

    def add_method_pattern(self, phrase: str, method_names: Iterable[str]) -> "VocabularyBuilder":
        bucket = self._method_patterns.setdefault(normalize_phrase(phrase), [])
        for name in method_names:
            if name not in bucket:
                bucket.append(name)
        return self

    def build(self) -> ActionVocabulary:
        return ActionVocabulary(
            action_synonyms=self._action_synonyms,
            target_synonyms=self._target_synonyms,
            method_patterns=self._method_patterns,
        )


def default_vocabulary() -> ActionVocabulary:
    return VocabularyBuilder().build()
