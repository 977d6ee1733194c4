"""
Tests for the screen graph and the navigation planner.
"""
import pytest

from action_mapper.models import Candidate, CandidateSource, Step
from action_mapper.navigation import (
    CONTENT_PATTERNS,
    SCREEN_GRAPH,
    NavigationOptions,
    NavigationPlanner,
    build_setup_sequence,
    class_for_screen,
    identify_test_data_needs,
    infer_target_screen,
    is_known_screen,
    needs_content_navigation,
    seek_seconds_for,
    shortest_path,
)
from action_mapper.schemas import ResolutionResult, ResolutionSource, ResolutionStatus


def _mapped(action, target, method, class_name, parameters=()):
    return ResolutionResult(
        step=Step(action, target),
        status=ResolutionStatus.FOUND,
        search_query=f"{action} {target}",
        chosen_candidate=Candidate(
            method, class_name, 0.9, CandidateSource.KNOWLEDGE_BASE, parameters=list(parameters)
        ),
        source=ResolutionSource.ATOMIC_ACTION,
    )


def _unmapped(action, target):
    return ResolutionResult(step=Step(action, target), status=ResolutionStatus.UNMAPPED, search_query=action)


@pytest.fixture
def planner():
    return NavigationPlanner()


class TestShortestPath:
    """Tests for breadth-first shortest paths."""

    def test_home_to_player(self):
        """Test that ties follow adjacency order."""
        assert shortest_path("home", "player") == ["home", "content", "player"]

    def test_same_screen(self):
        """Test that a screen is its own one-element path."""
        assert shortest_path("home", "home") == ["home"]

    def test_unreachable_target(self):
        """Test that an unknown target yields the direct path."""
        assert shortest_path("login", "unknown_screen") == ["login", "unknown_screen"]

    def test_case_insensitive(self):
        """Test that screen names are matched case-insensitively."""
        assert shortest_path("HOME", "Settings") == ["home", "settings"]

    def test_from_app_launch(self):
        """Test that home is one hop from launch."""
        assert shortest_path("app_launch", "home") == ["app_launch", "home"]
        assert shortest_path("app_launch", "episode_picker") == ["app_launch", "home", "content", "episode_picker"]

    def test_paths_are_shortest(self):
        """Test that no edge skips a screen of the returned path."""
        path = shortest_path("account", "player")

        assert path[0] == "account" and path[-1] == "player"
        for current, nxt in zip(path, path[1:]):
            assert nxt in SCREEN_GRAPH[current]
        assert len(path) == 5

    def test_custom_graph(self):
        """Test that a planner can run over another graph."""
        planner = NavigationPlanner({"a": ("b",), "b": ("c",)})

        assert planner.shortest_path("a", "c") == ["a", "b", "c"]


class TestScreenGraph:
    """Tests for graph helpers."""

    def test_known_screens(self):
        """Test that both keys and neighbour-only screens are known."""
        assert is_known_screen("home")
        assert is_known_screen("category")
        assert not is_known_screen("base_test")
        assert not is_known_screen(None)

    def test_class_for_screen(self):
        """Test that unmapped screens get a derived class name."""
        assert class_for_screen("episode_picker") == "EpisodePickerScreen"
        assert class_for_screen("search_results") == "SearchResultsScreen"


class TestTargetInference:
    """Tests for infer_target_screen."""

    def test_most_common_screen(self):
        """Test that the screen most mappings point at wins."""
        mappings = [
            _mapped("pause", "video", "pauseVideo", "PlayerScreen"),
            _mapped("seek", "forward", "seekForwardToPosition", "PlayerScreen"),
            _mapped("open", "settings", "openSettings", "SettingsScreen"),
        ]

        assert infer_target_screen(mappings) == "player"

    def test_falls_back_to_step_target(self):
        """Test that the step target is used when the class is not a screen."""
        mappings = [_mapped("open", "settings", "openMenu", "BaseTest")]

        assert infer_target_screen(mappings) == "settings"

    def test_defaults_to_home(self):
        """Test that mappings without any screen default to home."""
        assert infer_target_screen([_mapped("launch", "app", "launchApp", "BaseTest")]) == "home"

    def test_no_mappings(self):
        """Test that nothing resolved gives no target."""
        assert infer_target_screen([_unmapped("toggle", "pip")]) is None


class TestStandardPlan:
    """Tests for graph-based prerequisite plans."""

    def test_settings_plan(self, planner):
        """Test the full plan for a settings scenario."""
        plan = planner.build_prerequisites(
            [_mapped("toggle", "autoplay", "toggleAutoplay", "SettingsScreen")],
            NavigationOptions(platform="web"),
        )

        assert plan.navigation_path == ["app_launch", "home", "settings"]
        assert [(s.order, s.method) for s in plan.setup_sequence] == [
            (1, "launchApp"),
            (2, "login"),
            (3, "waitForHomeScreen"),
        ]
        assert [(s.order, s.method, s.class_name) for s in plan.navigation_to_target] == [
            (1, "navigateToSettings", "SettingsScreen"),
        ]
        assert plan.imports == ["BaseTest", "org.testng.annotations.Test", "HomeScreen", "SettingsScreen"]
        assert plan.screen_chain == ["app_launch", "HomeScreen", "SettingsScreen"]
        assert not plan.uses_content_pattern

    def test_without_login(self):
        """Test that login can be left out and orders stay sequential."""
        setup = build_setup_sequence(["app_launch", "home"], include_login=False)

        assert [(s.order, s.method) for s in setup] == [(1, "launchApp"), (2, "waitForHomeScreen")]

    def test_inferred_player_target_off_ctv(self, planner):
        """Test that off CTV the player is reached through the graph."""
        plan = planner.build_prerequisites([_mapped("pause", "video", "pauseVideo", "PlayerScreen")])

        assert plan.target_screen == "player"
        assert [s.screen for s in plan.navigation_to_target] == ["content", "player"]
        assert plan.navigation_to_target[0].method == "navigateToContent"

    def test_explicit_target_wins(self, planner):
        """Test that an explicit target overrides inference."""
        plan = planner.build_prerequisites(
            [_mapped("pause", "video", "pauseVideo", "PlayerScreen")],
            NavigationOptions(target_screen="Profile"),
        )

        assert plan.target_screen == "profile"
        assert plan.navigation_path == ["app_launch", "login", "profile"]

    def test_unmapped_steps_are_ignored(self, planner):
        """Test that unresolved steps do not influence the plan."""
        plan = planner.build_prerequisites([_unmapped("verify", "player")])

        assert plan.target_screen == "home"

    def test_to_dict(self, planner):
        """Test the serialized plan layout."""
        data = planner.build_prerequisites([], NavigationOptions(target_screen="search")).to_dict()

        assert data["targetScreen"] == "search"
        assert set(data["prerequisites"]) == {"imports", "setupSequence", "navigationToTarget", "testDataRequirements"}
        assert data["navigationPath"] == ["app_launch", "home", "search"]
        assert "contentPattern" not in data

    def test_stats(self, planner):
        """Test that planner stats describe the graph."""
        stats = planner.get_stats()

        assert stats["graphNodes"] == len(SCREEN_GRAPH)
        assert "category" in stats["screens"]


class TestTestDataNeeds:
    """Tests for identify_test_data_needs."""

    def test_needs_from_parameters_and_actions(self):
        """Test that parameter types and actions imply test data."""
        setup = build_setup_sequence(["app_launch", "home"], include_login=True)
        mappings = [
            _mapped("search", "content", "searchFor", "SearchScreen", ["String query"]),
            _mapped("wait", "player", "waitForVideoLoaded", "PlayerScreen", ["int seconds"]),
            _mapped("select", "show", "selectShow", "HomeScreen"),
        ]

        needs = identify_test_data_needs(mappings, setup)

        assert [n.type for n in needs] == ["user_credentials", "string", "search_term", "duration", "content_data"]
        assert needs[1].variable == "testSearchData"

    def test_one_entry_per_type(self):
        """Test that requirements are deduplicated by type."""
        mappings = [
            _mapped("search", "show", "searchFor", "SearchScreen"),
            _mapped("search", "movie", "searchFor", "SearchScreen"),
        ]

        assert [n.type for n in identify_test_data_needs(mappings, [])] == ["search_term"]


class TestContentNavigation:
    """Tests for CTV content macros."""

    def test_needs_content_navigation(self):
        """Test that content screens or content methods trigger the macro."""
        assert needs_content_navigation("player", [])
        assert needs_content_navigation("home", [_mapped("restart", "episode", "clickRestartButton", "HomeScreen")])
        assert not needs_content_navigation("settings", [_mapped("open", "settings", "openSettings", "SettingsScreen")])

    def test_ctv_player_uses_macro(self, planner):
        """Test that a CTV player scenario replaces the graph path with the player macro."""
        plan = planner.build_prerequisites(
            [_mapped("verify", "video", "waitForVideoLoaded", "PlayerScreen")],
            NavigationOptions(platform="ctv", brand="pplus"),
        )

        assert plan.content_pattern == "player_screen"
        assert [s.method for s in plan.setup_sequence] == [
            "launchAppAndNavigateToHomeScreen",
            "openShowFromBrandFeedSection",
            "selectEpisode",
            "waitForVideoLoaded",
        ]
        assert plan.navigation_to_target == []
        assert plan.navigation_path == []
        assert plan.test_data_requirements[0].type == "episode_data"
        assert plan.imports[:4] == ["BaseTest", "org.testng.annotations.Test", "org.testng.annotations.Factory", "SoftAssert"]
        assert plan.to_dict()["contentPattern"] == "player_screen"

    def test_ctv_restart_uses_watch_progress(self, planner):
        """Test that restart scenarios get a seek to simulate watch progress."""
        plan = planner.build_prerequisites(
            [_mapped("restart", "episode", "clickRestartButton", "PlayerScreen")],
            NavigationOptions(platform="ctv", playback_seconds=120),
        )

        assert plan.content_pattern == "player_with_progress"
        seek = plan.setup_sequence[-1]
        assert seek.method == "seekForwardToPosition"
        assert seek.params == ["20"]
        assert "120s" in seek.comment

    def test_ctv_container_target(self, planner):
        """Test that a non-player content target only opens the show."""
        plan = planner.build_prerequisites(
            [_mapped("select", "episode", "selectEpisode", "ContainerScreen")],
            NavigationOptions(platform="ctv", target_screen="container"),
        )

        assert plan.content_pattern == "container_screen"
        assert len(plan.setup_sequence) == len(CONTENT_PATTERNS["container_screen"].steps)

    def test_ctv_non_content_target_uses_graph(self, planner):
        """Test that CTV scenarios outside content still use the graph."""
        plan = planner.build_prerequisites(
            [_mapped("open", "settings", "openSettings", "SettingsScreen")],
            NavigationOptions(platform="ctv"),
        )

        assert plan.content_pattern is None
        assert plan.navigation_path == ["app_launch", "home", "settings"]


class TestSeekSeconds:
    """Tests for seek_seconds_for."""

    def test_ratio_applied(self):
        """Test that playback time is scaled by the ratio."""
        assert seek_seconds_for(120)[0] == 20
        assert seek_seconds_for(120, seek_ratio=4)[0] == 30

    def test_minimum_seek(self):
        """Test that short playback never seeks below the minimum."""
        assert seek_seconds_for(30)[0] == 10

    def test_fast_seek(self):
        """Test that an explicit fast seek is used without a playback time."""
        assert seek_seconds_for(fast_seek_seconds=45)[0] == 45

    def test_default(self):
        """Test the default seek."""
        assert seek_seconds_for() == (10, "// Adjust seek time as needed for test requirements")
