"""
Tests for the scenario mapping pipeline.
"""
import pytest
from unittest.mock import Mock

from action_mapper.config import ActionMapperConfig
from action_mapper.exceptions import EmptyScenarioError
from action_mapper.knowledge import ActionKnowledgeStore, PatternLearnedEvent
from action_mapper.models import AtomicAction, Candidate, CandidateSource, CandidateStep, Step
from action_mapper.navigation import NavigationPlanner
from action_mapper.orchestration import (
    MappingPipeline,
    PipelineOptions,
    advance_context,
    collect_mapping_imports,
    compute_statistics,
)
from action_mapper.resolution import ResolutionContext, create_resolution_engine
from action_mapper.schemas import ResolutionResult, ResolutionSource, ResolutionStatus


def _found(step, method, class_name, confidence=0.8, source=ResolutionSource.ATOMIC_ACTION, **kwargs):
    return ResolutionResult(
        step=step,
        status=ResolutionStatus.FOUND,
        search_query=step.action,
        chosen_candidate=Candidate(method, class_name, confidence, CandidateSource.KNOWLEDGE_BASE, **kwargs),
        source=source,
    )


def _missing(step):
    return ResolutionResult(step=step, status=ResolutionStatus.UNMAPPED, search_query=step.action)


@pytest.fixture
def steps():
    return [Step("open", "show"), Step("toggle", "pip"), Step("pause", "video")]


@pytest.fixture
def engine(steps):
    engine = Mock()
    engine.resolve.side_effect = [
        _found(steps[0], "openShowFromBrandFeedSection", "HomeScreen", 0.8),
        _missing(steps[1]),
        _found(steps[2], "pauseVideo", "PlayerScreen", 0.6),
    ]
    return engine


class TestAdvanceContext:
    """Tests for advance_context."""

    def test_found_result_moves_screen(self):
        """Test that a resolved step becomes the current and preferred screen."""
        context = advance_context(ResolutionContext(platform="ctv"), _found(Step("pause"), "pauseVideo", "PlayerScreen"))

        assert context.preferred_screen_class == "PlayerScreen"
        assert context.current_screen == "player"
        assert context.screen_path == ("player",)
        assert context.platform == "ctv"

    def test_same_screen_not_repeated(self):
        """Test that staying on a screen does not grow the path."""
        context = ResolutionContext(current_screen="player", screen_path=("player",))

        advanced = advance_context(context, _found(Step("seek"), "seekForwardToPosition", "PlayerScreen"))

        assert advanced.screen_path == ("player",)

    def test_unmapped_and_non_screen_classes_keep_context(self):
        """Test that misses and non-screen classes leave the context alone."""
        context = ResolutionContext(current_screen="home")

        assert advance_context(context, _missing(Step("toggle", "pip"))) is context
        assert advance_context(context, _found(Step("launch"), "launchApp", "BaseTest")) is context
        assert advance_context(context, _found(Step("play"), "play_episode", "CompositeAction")) is context


class TestStatistics:
    """Tests for compute_statistics and imports."""

    def test_statistics(self, steps):
        """Test that rate and average cover mapped steps only."""
        stats = compute_statistics([
            _found(steps[0], "a", "HomeScreen", 0.8),
            _missing(steps[1]),
            _found(steps[2], "b", "PlayerScreen", 0.6),
        ])

        assert (stats.total, stats.mapped, stats.unmapped) == (3, 2, 1)
        assert stats.average_confidence == pytest.approx(0.7)
        assert stats.to_dict()["mappingRate"] == "66.7%"

    def test_empty_statistics(self):
        """Test that no results give zero rates."""
        stats = compute_statistics([])

        assert stats.mapping_rate == 0.0
        assert stats.average_confidence == 0.0

    def test_imports_expand_composites(self):
        """Test that composite chains contribute their classes."""
        chain = [
            CandidateStep("openShowFromBrandFeedSection", "HomeScreen", order=1),
            CandidateStep("selectEpisode", "ContainerScreen", order=2),
        ]
        results = [
            _found(Step("play"), "play_episode", "CompositeAction", is_composite=True, composite_steps=chain),
            _found(Step("pause"), "pauseVideo", "PlayerScreen"),
            _missing(Step("toggle")),
        ]

        assert collect_mapping_imports(results) == ["ContainerScreen", "HomeScreen", "PlayerScreen"]


class TestMappingPipeline:
    """Tests for MappingPipeline.run."""

    def test_empty_scenario_raises(self, engine):
        """Test that an empty scenario is rejected."""
        with pytest.raises(EmptyScenarioError):
            MappingPipeline(engine).run([])

    def test_report(self, engine, steps):
        """Test that the report splits mapped and unmapped steps."""
        report = MappingPipeline(engine).run(steps, PipelineOptions(platform="ctv", brand="pplus"))

        assert [m.method_name for m in report.mappings] == ["openShowFromBrandFeedSection", "pauseVideo"]
        assert [u.step.action for u in report.unmapped] == ["toggle"]
        assert report.statistics.mapped == 2
        assert report.imports == ["HomeScreen", "PlayerScreen"]
        assert report.prerequisites is None
        assert report.to_dict()["platform"] == "ctv"

    def test_context_flows_between_steps(self, engine, steps):
        """Test that each step sees the screen the previous mapped step landed on."""
        MappingPipeline(engine).run(steps, PipelineOptions(platform="ctv"))

        contexts = [call.args[1] for call in engine.resolve.call_args_list]
        assert contexts[0].current_screen is None
        assert contexts[1].preferred_screen_class == "HomeScreen"
        # An unmapped step leaves the context unchanged
        assert contexts[2] == contexts[1]
        assert all(c.platform == "ctv" for c in contexts)

    def test_prerequisites_built_with_planner(self, engine, steps):
        """Test that a planner adds prerequisites for the mapped steps."""
        report = MappingPipeline(engine, planner=NavigationPlanner()).run(steps, PipelineOptions(platform="web"))

        assert report.prerequisites.target_screen in ("home", "player")
        assert "prerequisites" in report.to_dict()

    def test_prerequisites_can_be_skipped(self, engine, steps):
        """Test that prerequisites are optional per request."""
        report = MappingPipeline(engine, planner=NavigationPlanner()).run(
            steps, PipelineOptions(build_prerequisites=False)
        )

        assert report.prerequisites is None

    def test_patterns_recorded(self, steps):
        """Test that resolved steps are recorded as patterns unless they came from one."""
        engine = Mock()
        engine.resolve.side_effect = [
            _found(steps[0], "openShowFromBrandFeedSection", "HomeScreen"),
            _found(steps[2], "pauseVideo", "PlayerScreen", source=ResolutionSource.LEARNED_PATTERN),
        ]
        writer = Mock()

        MappingPipeline(engine, writer=writer, record_patterns=True).run([steps[0], steps[2]])

        assert writer.submit.call_count == 1
        event = writer.submit.call_args.args[0]
        assert isinstance(event, PatternLearnedEvent)
        assert event.context["screen"] == "home"

    def test_patterns_not_recorded_by_default(self, engine, steps):
        """Test that pattern recording is off unless asked for."""
        writer = Mock()

        MappingPipeline(engine, writer=writer).run(steps)

        writer.submit.assert_not_called()

    def test_end_to_end_with_real_engine(self):
        """Test a scenario through a real engine and store."""
        store = ActionKnowledgeStore(storage_dir=None)
        store.add_atomic_actions([
            AtomicAction(id="a1", action_name="pause_video", method_name="pauseVideo",
                         class_name="PlayerScreen", keywords=["pause", "video"]),
            AtomicAction(id="a2", action_name="seek_forward", method_name="seekForwardToPosition",
                         class_name="PlayerScreen", keywords=["seek", "forward"]),
        ])
        engine = create_resolution_engine(ActionMapperConfig(), store=store)
        pipeline = MappingPipeline(engine, planner=NavigationPlanner())

        report = pipeline.run([Step("pause", "video"), Step("seek", "forward"), Step("toggle", "pip")])

        assert report.statistics.mapped == 2
        assert report.unmapped[0].suggested_method == "togglePip"
        assert report.prerequisites.target_screen == "player"
