"""
Static screen navigation graph.

Adjacency lists are ordered: when two shortest paths exist, the one through
the earlier neighbour wins.
"""
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from ..utils.naming import to_camel_case

ENTRY_SCREEN = "app_launch"

SCREEN_GRAPH: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "app_launch": ("splash", "login", "home"),
    "splash": ("login", "home"),
    "login": ("home", "profile", "onboarding"),
    "onboarding": ("home",),
    "home": ("search", "browse", "profile", "settings", "content", "live"),
    "browse": ("content", "category", "home"),
    "search": ("content", "search_results", "home"),
    "search_results": ("content", "search"),
    "content": ("player", "series", "episode_picker", "home"),
    "series": ("episode_picker", "player", "content"),
    "episode_picker": ("player", "series"),
    "player": ("home", "content", "series"),
    "live": ("player", "channel_guide", "home"),
    "channel_guide": ("live", "player"),
    "profile": ("settings", "home", "account"),
    "settings": ("profile", "home", "account"),
    "account": ("settings", "login"),
})

SCREEN_CLASS_MAP: Mapping[str, str] = MappingProxyType({
    "login": "LoginScreen",
    "home": "HomeScreen",
    "browse": "BrowseScreen",
    "search": "SearchScreen",
    "content": "ContentScreen",
    "player": "PlayerScreen",
    "series": "SeriesScreen",
    "episode_picker": "EpisodePickerScreen",
    "live": "LiveScreen",
    "channel_guide": "ChannelGuideScreen",
    "profile": "ProfileScreen",
    "settings": "SettingsScreen",
    "account": "AccountScreen",
    "onboarding": "OnboardingScreen",
    "splash": "SplashScreen",
})


def neighbours(screen: str) -> Tuple[str, ...]:
    return SCREEN_GRAPH.get(screen, ())


def is_known_screen(screen: Optional[str]) -> bool:
    if not screen:
        return False
    return screen in SCREEN_GRAPH or any(screen in targets for targets in SCREEN_GRAPH.values())


def class_for_screen(screen: str) -> str:
    """
    "episode_picker" -> "EpisodePickerScreen".

    Screens missing from the class map get a derived name.
    """
    return SCREEN_CLASS_MAP.get(screen) or f"{to_camel_case(screen, capitalize_first=True)}Screen"
