"""
Tests for background write-back of learned mappings.
"""
import pytest
from unittest.mock import Mock

from action_mapper.knowledge import (
    ActionKnowledgeStore,
    LearnedMappingEvent,
    LearningWriter,
    PatternLearnedEvent,
    build_learned_action,
    canonical_action_id,
)
from action_mapper.models import Candidate, CandidateSource, Step


@pytest.fixture
def step():
    return Step("play", "episode")


@pytest.fixture
def candidate():
    return Candidate(
        method_name="openShowFromBrandFeedSection",
        class_name="HomeScreen",
        confidence=0.55,
        source=CandidateSource.HYBRID_SEARCH,
        parameters=["TestData data", "Item item"],
    )


@pytest.fixture
def store():
    return ActionKnowledgeStore(storage_dir=None)


class TestCanonicalId:
    """Tests for canonical_action_id."""

    def test_id_is_stable(self, step, candidate):
        """Test that the same mapping always yields the same id."""
        assert canonical_action_id(step, candidate) == canonical_action_id(Step("Play", "Episode"), candidate)

    def test_id_format(self, step, candidate):
        """Test that the id is prefixed with the action slug and a short hash."""
        action_id = canonical_action_id(step, candidate)

        assert action_id.startswith("learned_play_")
        assert len(action_id.rsplit("_", 1)[1]) == 12

    def test_different_method_different_id(self, step, candidate):
        """Test that another method for the same step gets its own id."""
        other = Candidate("selectEpisode", "ContainerScreen", 0.5, CandidateSource.HYBRID_SEARCH)

        assert canonical_action_id(step, candidate) != canonical_action_id(step, other)

    def test_build_learned_action(self, step, candidate):
        """Test that a learned record keeps the step phrase and the method."""
        record = build_learned_action(step, candidate, "hybrid_rag", platform="ctv", brand="pplus")

        assert record.action_name == "play"
        assert record.target_screen == "home"
        assert record.keywords == ["play", "episode"]
        assert record.source == "learned_from_hybrid_rag"
        assert record.parameters == ["TestData data", "Item item"]
        assert record.confidence == 0.55


class TestLearningWriter:
    """Tests for LearningWriter."""

    def test_event_is_applied(self, store, step, candidate):
        """Test that a submitted mapping lands in the store."""
        writer = LearningWriter(store)

        assert writer.submit(LearnedMappingEvent(step, candidate, "hybrid_rag", platform="ctv"))
        assert writer.flush(timeout=5)
        writer.close()

        record = store.get_atomic_action(canonical_action_id(step, candidate))
        assert record.method_name == "openShowFromBrandFeedSection"
        assert writer.get_stats()["written"] == 1

    def test_repeat_discovery_replaces(self, store, step, candidate):
        """Test that learning the same mapping twice keeps one record."""
        writer = LearningWriter(store)
        writer.submit(LearnedMappingEvent(step, candidate, "hybrid_rag"))
        writer.submit(LearnedMappingEvent(step, candidate.with_confidence(0.7), "intelligent_selection"))
        writer.flush(timeout=5)
        writer.close()

        assert store.get_stats()["collections"]["atomic_actions"] == 1
        assert store.get_atomic_action(canonical_action_id(step, candidate)).confidence == 0.7

    def test_composite_is_rejected(self, store, step, candidate):
        """Test that composite chains are never written back."""
        writer = LearningWriter(store, start=False)
        composite = Candidate("play_episode", "CompositeAction", 0.9, CandidateSource.COMPOSITE_ACTION, is_composite=True)

        assert not writer.submit(LearnedMappingEvent(step, composite, "composite_action"))
        assert writer.get_stats()["rejected"] == 1

    def test_non_method_name_is_rejected(self, store, step):
        """Test that names that are not plain camelCase methods are rejected."""
        writer = LearningWriter(store, start=False)
        odd = Candidate("play_episode", "HomeScreen", 0.9, CandidateSource.HYBRID_SEARCH)

        assert not writer.submit(LearnedMappingEvent(step, odd, "hybrid_rag"))

    def test_backlog_full_drops(self, store, step, candidate):
        """Test that submissions beyond the backlog are dropped, not blocked."""
        writer = LearningWriter(store, max_pending=1, start=False)

        assert writer.submit(LearnedMappingEvent(step, candidate, "hybrid_rag"))
        assert not writer.submit(LearnedMappingEvent(step, candidate, "hybrid_rag"))
        assert writer.get_stats()["dropped"] == 1
        assert writer.get_stats()["pending"] == 1

    def test_store_failure_is_counted(self, step, candidate):
        """Test that a failing store write is logged and counted."""
        failing_store = Mock()
        failing_store.add_atomic_action.side_effect = Exception("disk full")
        writer = LearningWriter(failing_store)

        writer.submit(LearnedMappingEvent(step, candidate, "hybrid_rag"))
        assert writer.flush(timeout=5)
        writer.close()

        assert writer.get_stats()["failed"] == 1

    def test_pattern_event(self, store, candidate):
        """Test that a main step is recorded as a learned pattern."""
        writer = LearningWriter(store)
        writer.submit(PatternLearnedEvent(Step("play", "episode"), candidate, {"platform": "ctv", "screen": "home"}))
        writer.flush(timeout=5)
        writer.close()

        pattern = store.get_learned_patterns()[0]
        assert pattern.method_name == "openShowFromBrandFeedSection"
        assert pattern.screen == "home"

    def test_prerequisite_pattern_is_rejected(self, store, candidate):
        """Test that prerequisite steps are not recorded as patterns."""
        writer = LearningWriter(store, start=False)

        assert not writer.submit(PatternLearnedEvent(Step("launch", "app", is_prerequisite=True), candidate))

    def test_close_stops_thread(self, store):
        """Test that close stops the worker thread."""
        writer = LearningWriter(store)
        assert writer.is_running

        writer.close()

        assert not writer.is_running
