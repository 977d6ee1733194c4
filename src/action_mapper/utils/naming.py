"""
Identifier helpers shared by query expansion, indexing and method naming.
"""
import re
from typing import List, Optional

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_WORD_SPLIT = re.compile(r"[\s_\-]+")
_JAVA_METHOD = re.compile(r"^[a-z][a-zA-Z0-9]*$")


def normalize_phrase(text: Optional[str]) -> str:
    """Lower-case, underscores to spaces, collapsed whitespace."""
    if not text:
        return ""
    return " ".join(_WORD_SPLIT.split(text.strip().lower())).strip()


def split_camel_case(name: str) -> List[str]:
    """
    "clickPlayButton" -> ["click", "play", "button"]
    """
    if not name:
        return []
    spaced = _CAMEL_BOUNDARY.sub(" ", name)
    return [w.lower() for w in _WORD_SPLIT.split(spaced) if w]


def camel_to_words(name: str) -> str:
    return " ".join(split_camel_case(name))


def to_camel_case(text: str, capitalize_first: bool = False) -> str:
    """
    "play  episode" -> "playEpisode" (or "PlayEpisode").
    """
    words = [w for w in _WORD_SPLIT.split(text or "") if w]
    if not words:
        return ""
    parts = [w[:1].upper() + w[1:].lower() for w in words]
    if not capitalize_first:
        parts[0] = words[0].lower()
    return "".join(parts)


def camel_to_snake(name: str) -> str:
    """"clickPlayButton" -> "click_play_button"."""
    return "_".join(split_camel_case(name))


def is_java_method_name(name: Optional[str]) -> bool:
    """True for plain camelCase identifiers such as "selectEpisode"."""
    return bool(name) and bool(_JAVA_METHOD.match(name))


def screen_from_class(class_name: Optional[str]) -> Optional[str]:
    """"PlayerScreen" -> "player", "EpisodePickerScreen" -> "episode_picker"."""
    if not class_name:
        return None
    match = re.match(r"^(\w+?)(Screen|Page)$", class_name)
    base = match.group(1) if match else class_name
    return camel_to_snake(base) or None
