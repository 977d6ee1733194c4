"""
Naming hints for steps that could not be resolved.

Produces a suggested screen class and method name so an unmapped result
tells the knowledge-base curator where the missing method should live.
These are conventions only and never count as a resolution.
"""
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..utils.naming import to_camel_case

# Ordered: first keyword hit wins
CTV_SCREEN_KEYWORDS: Sequence[Tuple[Tuple[str, ...], str]] = (
    (("player", "video", "playback"), "PlayerScreen"),
    (("home", "landing"), "HomeScreen"),
    (("search",), "SearchScreen"),
    (("settings", "preference"), "SettingsScreen"),
    (("profile",), "ProfileScreen"),
    (("container", "details"), "ContainerScreen"),
    (("episode", "show"), "ContentScreen"),
)

WEB_PAGE_KEYWORDS: Sequence[Tuple[Tuple[str, ...], str]] = (
    (("login", "auth"), "LoginPage"),
    (("home",), "HomePage"),
    (("search",), "SearchPage"),
    (("cart", "checkout"), "CartPage"),
    (("product", "detail"), "ProductPage"),
)

ACTION_PREFIXES = {
    "verify": "is",
    "check": "is",
    "assert": "is",
    "navigate": "navigateTo",
    "go": "navigateTo",
    "scroll": "scrollTo",
    "wait": "waitFor",
    "search": "searchFor",
}


@dataclass(frozen=True)
class MethodSuggestion:
    class_name: str
    method_name: str


def infer_screen_class(target: Optional[str], platform: Optional[str] = None) -> str:
    """
    Map a step target to the page-object class it most likely belongs to.

    :param target: Step target, e.g. "video player"
    :param platform: Platform hint; "ctv" uses the screen table, anything else the page table
    :return: Class name such as "PlayerScreen" or "BasePage"
    """
    target_lower = (target or "").lower()
    is_ctv = (platform or "").lower() == "ctv"
    table = CTV_SCREEN_KEYWORDS if is_ctv else WEB_PAGE_KEYWORDS

    for keywords, class_name in table:
        if any(keyword in target_lower for keyword in keywords):
            return class_name

    # Player vocabulary is universal even outside CTV
    if not is_ctv and any(k in target_lower for k in ("player", "video", "playback")):
        return "PlayerScreen"

    return "BaseScreen" if is_ctv else "BasePage"


def generate_method_name(action: Optional[str], target: Optional[str]) -> str:
    """
    "verify", "progress bar" -> "isProgressBar"
    "navigate", "settings" -> "navigateToSettings"
    """
    action_key = (action or "").strip().lower()
    prefix = ACTION_PREFIXES.get(action_key) or to_camel_case(action_key) or "perform"
    return prefix + to_camel_case(target or "element", capitalize_first=True)


def suggest_method(
    action: Optional[str],
    target: Optional[str],
    platform: Optional[str] = None,
) -> MethodSuggestion:
    return MethodSuggestion(
        class_name=infer_screen_class(target, platform),
        method_name=generate_method_name(action, target),
    )
