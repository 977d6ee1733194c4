"""
Fixed content-navigation macros for connected-TV (CTV) tests.

A CTV test that plays or inspects an episode cannot reach the player through
the generic screen graph; it has to open a show from the brand feed and pick
an episode with thread-safe test data. These macros encode that sequence.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

DEFAULT_SEEK_SECONDS = 10
MIN_SEEK_SECONDS = 10
DEFAULT_SEEK_RATIO = 6

SEEK_METHOD = "seekForwardToPosition"


@dataclass(frozen=True)
class MacroStep:
    method: str
    class_name: str
    params: Tuple[str, ...] = ()
    comment: Optional[str] = None


@dataclass(frozen=True)
class ContentPattern:
    name: str
    steps: Tuple[MacroStep, ...]
    test_data_setup: str
    item_setup: str
    cleanup: str
    imports: Tuple[str, ...] = field(default_factory=tuple)


_TEST_DATA_SETUP = (
    "TestData data = TestUtils.getDataWithSkip("
    "TestDataProvider::getThreadSafeEpisodeWithoutContinuousPlayback);"
)
_ITEM_SETUP = "Item item = TestDataProvider.getBrandFeedEpisodeItem(data);"
_CLEANUP = "TestDataProvider.removeThreadSafeEpisode(data);"
_IMPORTS = ("TestData", "Item", "TestDataProvider", "TestUtils")

_LAUNCH = MacroStep("launchAppAndNavigateToHomeScreen", "BaseTest")
_OPEN_SHOW = MacroStep("openShowFromBrandFeedSection", "HomeScreen", ("data", "item"))
_SELECT_EPISODE = MacroStep(
    "selectEpisode",
    "ContainerScreen",
    ("item", "data.getEpisodeIndex()", "data.getSeasonIndex()"),
)
_WAIT_FOR_VIDEO = MacroStep("waitForVideoLoaded", "PlayerScreen")
_SEEK = MacroStep(
    SEEK_METHOD,
    "PlayerScreen",
    (str(DEFAULT_SEEK_SECONDS),),
    "// Adjust seek time as needed for test requirements",
)


def _pattern(name: str, *steps: MacroStep) -> ContentPattern:
    return ContentPattern(
        name=name,
        steps=steps,
        test_data_setup=_TEST_DATA_SETUP,
        item_setup=_ITEM_SETUP,
        cleanup=_CLEANUP,
        imports=_IMPORTS,
    )


CONTENT_PATTERNS: Mapping[str, ContentPattern] = MappingProxyType({
    "container_screen": _pattern("container_screen", _LAUNCH, _OPEN_SHOW),
    "player_screen": _pattern("player_screen", _LAUNCH, _OPEN_SHOW, _SELECT_EPISODE, _WAIT_FOR_VIDEO),
    "play_episode": _pattern("play_episode", _LAUNCH, _OPEN_SHOW, _SELECT_EPISODE, _WAIT_FOR_VIDEO),
    "player_with_progress": _pattern(
        "player_with_progress", _LAUNCH, _OPEN_SHOW, _SELECT_EPISODE, _WAIT_FOR_VIDEO, _SEEK
    ),
})

CONTENT_SCREEN_MARKERS = ("player", "container", "content", "episode", "series")
CONTENT_METHOD_MARKERS = ("player", "episode", "restart", "playback")
CONTENT_CLASS_MARKERS = ("player", "container")
PLAYBACK_METHOD_MARKERS = ("video", "playback", "player", "seek", "restart", "pause")
WATCH_PROGRESS_KEYWORDS = ("restart", "resume", "continue watching", "watch history", "saved position")


def seek_seconds_for(
    playback_seconds: Optional[float] = None,
    seek_ratio: Optional[float] = None,
    fast_seek_seconds: Optional[int] = None,
) -> Tuple[int, str]:
    """
    Seek time for the player_with_progress macro.

    A known playback duration is scaled down by the seek ratio, never below
    MIN_SEEK_SECONDS. Otherwise an explicit fast seek wins over the default.

    :return: (seconds, comment for the seek step)
    """
    ratio = seek_ratio or DEFAULT_SEEK_RATIO
    if playback_seconds:
        seconds = max(int(round(playback_seconds / ratio)), MIN_SEEK_SECONDS)
        return seconds, (
            f"// Seek {seconds}s to simulate {int(playback_seconds)}s watch progress "
            f"(ratio 1:{ratio:g})"
        )
    if fast_seek_seconds is not None:
        return int(fast_seek_seconds), f"// Seek to {int(fast_seek_seconds)}s watch progress"
    return DEFAULT_SEEK_SECONDS, _SEEK.comment


def pattern_classes(pattern: ContentPattern) -> List[str]:
    return [step.class_name for step in pattern.steps]
