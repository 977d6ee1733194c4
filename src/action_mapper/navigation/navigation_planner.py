"""
Navigation planner.

Computes what a test must do before its first mapped action: the shortest
screen path from app launch to the target screen, the setup sequence, the
navigation calls along the path, imports and test data needs.
"""
import logging
from collections import Counter, deque
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from .content_patterns import (
    CONTENT_CLASS_MARKERS,
    CONTENT_METHOD_MARKERS,
    CONTENT_PATTERNS,
    CONTENT_SCREEN_MARKERS,
    PLAYBACK_METHOD_MARKERS,
    SEEK_METHOD,
    WATCH_PROGRESS_KEYWORDS,
    seek_seconds_for,
)
from .plan import NavigationStep, PrerequisitePlan, SetupStep, TestDataRequirement
from .screen_graph import ENTRY_SCREEN, SCREEN_CLASS_MAP, SCREEN_GRAPH, class_for_screen, is_known_screen
from ..schemas import ResolutionResult
from ..utils.naming import screen_from_class, to_camel_case

logger = logging.getLogger(__name__)

DEFAULT_TARGET_SCREEN = "home"
SETUP_SCREENS = frozenset({"app_launch", "splash", "login", "home"})
BASE_IMPORTS = ("BaseTest", "org.testng.annotations.Test")
CONTENT_BASE_IMPORTS = (
    "BaseTest",
    "org.testng.annotations.Test",
    "org.testng.annotations.Factory",
    "SoftAssert",
)
CONTENT_SCREEN_IMPORTS = ("HomeScreen", "ContainerScreen", "PlayerScreen")


@dataclass(frozen=True)
class NavigationOptions:
    """
    Per-request planning options.

    :param target_screen: Explicit target; inferred from the mappings when None
    :param playback_seconds: Watch progress to simulate for restart/resume tests
    :param seek_ratio: Playback-to-seek ratio applied to playback_seconds
    :param fast_seek_seconds: Explicit seek time when no playback duration is known
    """
    platform: Optional[str] = None
    brand: Optional[str] = None
    include_login: bool = True
    target_screen: Optional[str] = None
    playback_seconds: Optional[float] = None
    seek_ratio: Optional[float] = None
    fast_seek_seconds: Optional[int] = None

    @property
    def is_ctv(self) -> bool:
        return (self.platform or "").lower() == "ctv"


def shortest_path(from_screen: str, to_screen: str, graph=SCREEN_GRAPH) -> List[str]:
    """
    Breadth-first shortest path between two screens.

    Ties are broken by adjacency order. An unreachable target yields the
    direct two-element path so callers always get a usable answer.

    :param from_screen: Start screen
    :param to_screen: Target screen
    :return: Screens from start to target, inclusive
    """
    start = from_screen.lower()
    goal = to_screen.lower()
    if start == goal:
        return [start]

    queue = deque([[start]])
    visited = {start}
    while queue:
        path = queue.popleft()
        for neighbour in graph.get(path[-1], ()):
            if neighbour == goal:
                return path + [neighbour]
            if neighbour not in visited:
                visited.add(neighbour)
                queue.append(path + [neighbour])

    logger.debug(f"No path from {start} to {goal}; using direct path")
    return [start, goal]


def _found(mappings: Iterable[ResolutionResult]) -> List[ResolutionResult]:
    return [m for m in mappings or [] if m.is_found]


def _method(mapping: ResolutionResult) -> str:
    return (mapping.method_name or "").lower()


def _class(mapping: ResolutionResult) -> str:
    return (mapping.class_name or "").lower()


def infer_target_screen(mappings: Sequence[ResolutionResult]) -> Optional[str]:
    """
    Most common screen among the resolved mappings.

    The screen comes from the mapped class when it is a graph screen, else
    from the step target when that is one. Ties go to the first seen.
    """
    found = _found(mappings)
    if not found:
        return None

    counts: Counter = Counter()
    for mapping in found:
        screen = screen_from_class(mapping.class_name)
        if not is_known_screen(screen):
            target = (mapping.step.target or "").strip().lower().replace(" ", "_")
            screen = target if is_known_screen(target) else None
        if screen:
            counts[screen] += 1

    if not counts:
        return DEFAULT_TARGET_SCREEN
    return counts.most_common(1)[0][0]


def needs_content_navigation(target_screen: Optional[str], mappings: Sequence[ResolutionResult]) -> bool:
    target = (target_screen or "").lower()
    if any(marker in target for marker in CONTENT_SCREEN_MARKERS):
        return True
    for mapping in _found(mappings):
        method, class_name = _method(mapping), _class(mapping)
        if any(marker in method for marker in CONTENT_METHOD_MARKERS):
            return True
        if any(marker in class_name for marker in CONTENT_CLASS_MARKERS):
            return True
    return False


def mappings_require_playback(mappings: Sequence[ResolutionResult]) -> bool:
    return any(
        any(marker in _method(m) for marker in PLAYBACK_METHOD_MARKERS)
        for m in _found(mappings)
    )


def mappings_require_watch_progress(mappings: Sequence[ResolutionResult]) -> bool:
    """Restart/resume scenarios need the video watched for a while first."""
    for mapping in _found(mappings):
        method = _method(mapping)
        action = (mapping.step.action or "").lower()
        for keyword in WATCH_PROGRESS_KEYWORDS:
            if keyword.replace(" ", "") in method or keyword in action:
                return True
    return False


def collect_imports(mappings: Sequence[ResolutionResult], navigation_path: Sequence[str]) -> List[str]:
    imports: Dict[str, None] = dict.fromkeys(BASE_IMPORTS)
    for screen in navigation_path:
        if screen != ENTRY_SCREEN:
            imports.setdefault(class_for_screen(screen))
    for mapping in _found(mappings):
        if mapping.class_name:
            imports.setdefault(mapping.class_name)
    return list(imports)


def build_setup_sequence(navigation_path: Sequence[str], include_login: bool) -> List[SetupStep]:
    """
    launch -> login (when requested and the path reaches login or home)
    -> wait for home.
    """
    steps = [SetupStep(1, "launchApp", "BaseTest", [], "Launch the application")]

    if include_login and ("login" in navigation_path or "home" in navigation_path):
        steps.append(SetupStep(
            len(steps) + 1,
            "login",
            "LoginScreen",
            ["testData.getValidUser()"],
            "Login with valid credentials",
        ))

    if "home" in navigation_path:
        steps.append(SetupStep(
            len(steps) + 1,
            "waitForHomeScreen",
            "HomeScreen",
            [],
            "Wait for home screen to load",
        ))
    return steps


def build_navigation_steps(navigation_path: Sequence[str]) -> List[NavigationStep]:
    remaining = [s for s in navigation_path if s not in SETUP_SCREENS]
    return [
        NavigationStep(
            order=i,
            screen=screen,
            class_name=class_for_screen(screen),
            method=f"navigateTo{to_camel_case(screen, capitalize_first=True)}",
            description=f"Navigate to {screen.replace('_', ' ')} screen",
        )
        for i, screen in enumerate(remaining, start=1)
    ]


def identify_test_data_needs(
    mappings: Sequence[ResolutionResult],
    setup_sequence: Sequence[SetupStep],
) -> List[TestDataRequirement]:
    """
    Test data the mapped methods and the setup need, one entry per type.
    """
    requirements: List[TestDataRequirement] = []

    if any(s.method == "login" for s in setup_sequence):
        requirements.append(TestDataRequirement(
            "user_credentials", "testData.getValidUser()", "Valid user credentials for login"
        ))

    for mapping in _found(mappings):
        action = mapping.step.action or ""
        action_label = to_camel_case(action, capitalize_first=True)
        for param in mapping.chosen_candidate.parameters:
            if "String" in param:
                requirements.append(TestDataRequirement(
                    "string", f"test{action_label}Data", f"String data for {action}", context=action
                ))
            elif "int" in param or "seconds" in param:
                requirements.append(TestDataRequirement(
                    "duration", "waitDuration", "Wait duration in seconds", context=action
                ))

        action_lower = action.lower()
        if "search" in action_lower:
            requirements.append(TestDataRequirement("search_term", "searchQuery", "Search query string"))
        if "select" in action_lower or "content" in action_lower:
            requirements.append(TestDataRequirement("content_data", "contentTitle", "Content title or identifier"))

    seen = set()
    unique = []
    for requirement in requirements:
        if requirement.type not in seen:
            seen.add(requirement.type)
            unique.append(requirement)
    return unique


class NavigationPlanner:
    """
    Builds PrerequisitePlans over a read-only screen graph.

    Stateless between calls: every per-request input arrives in
    NavigationOptions.
    """

    def __init__(self, graph=SCREEN_GRAPH):
        self._graph = graph

    def shortest_path(self, from_screen: str, to_screen: str) -> List[str]:
        return shortest_path(from_screen, to_screen, self._graph)

    def build_prerequisites(
        self,
        mappings: Sequence[ResolutionResult],
        options: Optional[NavigationOptions] = None,
    ) -> PrerequisitePlan:
        """
        Plan the prerequisites for a mapped scenario.

        On CTV, a test that needs content navigation gets a fixed content
        macro instead of the graph path.

        :param mappings: Resolution results, unmapped ones are ignored
        :param options: Per-request options
        :return: PrerequisitePlan
        """
        options = options or NavigationOptions()
        target = (options.target_screen or infer_target_screen(mappings) or DEFAULT_TARGET_SCREEN).lower()
        logger.info(f"Building prerequisites for target screen: {target}, platform: {options.platform}")

        if options.is_ctv and needs_content_navigation(target, mappings):
            return self._content_plan(target, mappings, options)

        path = self.shortest_path(ENTRY_SCREEN, target)
        setup = build_setup_sequence(path, options.include_login)
        return PrerequisitePlan(
            target_screen=target,
            imports=collect_imports(mappings, path),
            setup_sequence=setup,
            navigation_to_target=build_navigation_steps(path),
            test_data_requirements=identify_test_data_needs(mappings, setup),
            screen_chain=[SCREEN_CLASS_MAP.get(screen, screen) for screen in path],
            navigation_path=path,
            platform=options.platform,
            brand=options.brand,
        )

    def get_stats(self) -> dict:
        return {
            "screens": sorted({s for targets in self._graph.values() for s in targets} | set(self._graph)),
            "graphNodes": len(self._graph),
        }

    def _content_plan(
        self,
        target: str,
        mappings: Sequence[ResolutionResult],
        options: NavigationOptions,
    ) -> PrerequisitePlan:
        if mappings_require_watch_progress(mappings):
            pattern_key = "player_with_progress"
        elif "player" in target or mappings_require_playback(mappings):
            pattern_key = "player_screen"
        else:
            pattern_key = "container_screen"
        pattern = CONTENT_PATTERNS[pattern_key]
        logger.info(f"Using content navigation pattern {pattern_key} for target: {target}")

        seek_seconds, seek_comment = seek_seconds_for(
            options.playback_seconds, options.seek_ratio, options.fast_seek_seconds
        )
        setup = []
        for order, step in enumerate(pattern.steps, start=1):
            if step.method == SEEK_METHOD:
                params, comment = [str(seek_seconds)], seek_comment
            else:
                params, comment = list(step.params), step.comment
            setup.append(SetupStep(order, step.method, step.class_name, params, f"{step.method} call", comment))

        imports: Dict[str, None] = dict.fromkeys(CONTENT_BASE_IMPORTS + pattern.imports + CONTENT_SCREEN_IMPORTS)
        for mapping in _found(mappings):
            if mapping.class_name:
                imports.setdefault(mapping.class_name)

        return PrerequisitePlan(
            target_screen=target,
            imports=list(imports),
            setup_sequence=setup,
            navigation_to_target=[],
            test_data_requirements=[TestDataRequirement(
                "episode_data",
                description="Thread-safe episode test data",
                setup=pattern.test_data_setup,
                item_setup=pattern.item_setup,
                cleanup=pattern.cleanup,
            )],
            screen_chain=[step.class_name for step in pattern.steps],
            platform=options.platform,
            brand=options.brand,
            content_pattern=pattern_key,
        )
