"""
Tests for the LLM ranker and its output parser.
"""
import time

import pytest
from concurrent.futures import TimeoutError as FutureTimeoutError
from unittest.mock import Mock
from langchain_core.messages import AIMessage

from action_mapper.agent import LLMRanker, RankerOutputParser
from action_mapper.agent.prompts import format_candidates, system_prompt_for
from action_mapper.exceptions import RankerResponseError
from action_mapper.models import Candidate, CandidateSource, CandidateStep, Step
from action_mapper.tools import RankerDecision


@pytest.fixture
def candidates():
    return [
        Candidate("openShowFromBrandFeedSection", "HomeScreen", 0.55, CandidateSource.HYBRID_SEARCH,
                  parameters=["TestData data", "Item item"]),
        Candidate("selectEpisode", "ContainerScreen", 0.5, CandidateSource.KNOWLEDGE_BASE),
    ]


class TestRankerOutputParser:
    """Tests for RankerOutputParser."""

    def test_parse_fenced_json(self):
        """Test that JSON inside a markdown fence is parsed."""
        text = """Here you go:
```json
{"decision": "SELECT", "selectedMethods": [{"methodName": "selectEpisode", "className": "ContainerScreen"}],
 "confidence": 0.92, "reasoning": "matches"}
```"""

        response = RankerOutputParser.parse(text)

        assert response.decision == RankerDecision.SELECT
        assert response.selected_methods[0].method_name == "selectEpisode"
        assert response.confidence == 0.92

    def test_parse_create_new(self):
        """Test that CREATE_NEW needs no selected methods."""
        response = RankerOutputParser.parse('{"decision": "create_new", "reasoning": "no PIP methods"}')

        assert response.decision == RankerDecision.CREATE_NEW
        assert response.selected_methods == []

    def test_confidence_is_clamped(self):
        """Test that out-of-range confidence is clamped into [0, 1]."""
        response = RankerOutputParser.parse(
            '{"decision": "SELECT", "selectedMethods": [{"methodName": "a"}], "confidence": 7}'
        )

        assert response.confidence == 1.0

    def test_unknown_decision_raises(self):
        """Test that an unknown decision is a malformed response."""
        with pytest.raises(RankerResponseError):
            RankerOutputParser.parse('{"decision": "MAYBE"}')

    def test_select_without_methods_raises(self):
        """Test that SELECT with nothing selected is a malformed response."""
        with pytest.raises(RankerResponseError):
            RankerOutputParser.parse('{"decision": "SELECT", "selectedMethods": [{"reason": "no name"}]}')

    def test_empty_response_raises(self):
        """Test that an empty reply is a malformed response."""
        with pytest.raises(RankerResponseError):
            RankerOutputParser.parse("   ")

    def test_prose_create_new(self):
        """Test that prose declaring no match becomes CREATE_NEW."""
        response = RankerOutputParser.parse("None of these fit, so CREATE_NEW.")

        assert response.decision == RankerDecision.CREATE_NEW

    def test_prose_candidate_name(self):
        """Test that prose naming a candidate becomes a lower-confidence SELECT."""
        response = RankerOutputParser.parse("I would use selectEpisode here.", ["openShow", "selectEpisode"])

        assert response.selected_methods[0].method_name == "selectEpisode"
        assert response.confidence == 0.7

    def test_prose_without_signal_raises(self):
        """Test that prose with no usable signal is a malformed response."""
        with pytest.raises(RankerResponseError):
            RankerOutputParser.parse("Let me think about it.", ["selectEpisode"])

    def test_parse_fallback(self):
        """Test that a found fallback answer keeps its method."""
        answer = RankerOutputParser.parse_fallback(
            '{"found": true, "methodName": "openSettings", "className": "SettingsScreen", "confidence": 0.6}'
        )

        assert answer.found
        assert answer.method_name == "openSettings"

    def test_parse_fallback_incomplete(self):
        """Test that a found answer without a class is not found."""
        assert not RankerOutputParser.parse_fallback('{"found": true, "methodName": "openSettings"}').found
        assert not RankerOutputParser.parse_fallback("not json at all").found


class TestPrompts:
    """Tests for prompt helpers."""

    def test_ctv_system_prompt(self):
        """Test that CTV adds remote-control guidance."""
        assert "REMOTE CONTROL" in system_prompt_for("ctv")
        assert "REMOTE CONTROL" not in system_prompt_for("web")

    def test_format_candidates(self, candidates):
        """Test that candidates are numbered with class and score."""
        text = format_candidates(candidates)

        assert "1. openShowFromBrandFeedSection\n   Class: HomeScreen" in text
        assert "Params: TestData data, Item item" in text
        assert "Score: 50%" in text

    def test_format_composite(self):
        """Test that composites list their chain."""
        composite = Candidate(
            "play_episode", "CompositeAction", 0.8, CandidateSource.COMPOSITE_ACTION,
            is_composite=True,
            composite_steps=[CandidateStep("openShowFromBrandFeedSection", "HomeScreen", order=1)],
        )

        text = format_candidates([composite])

        assert "[COMPOSITE] play_episode" in text
        assert "Step 1: HomeScreen.openShowFromBrandFeedSection()" in text


class TestLLMRanker:
    """Tests for LLMRanker."""

    def test_select(self, candidates):
        """Test that the model reply is parsed into a decision."""
        llm = Mock()
        llm.invoke.return_value = AIMessage(
            content='{"decision": "SELECT", "selectedMethods": [{"methodName": "openShowFromBrandFeedSection"}]}'
        )
        ranker = LLMRanker(llm, timeout_seconds=5)

        response = ranker.select(Step("play", "episode"), candidates, {"platform": "ctv", "current_screen": "home"})
        ranker.close()

        assert response.decision == RankerDecision.SELECT
        messages = llm.invoke.call_args.args[0]
        assert "REMOTE CONTROL" in messages[0].content
        assert "Current Screen: home" in messages[1].content
        assert "2. selectEpisode" in messages[1].content

    def test_timeout_propagates(self, candidates):
        """Test that a slow model surfaces as a timeout."""
        llm = Mock()
        llm.invoke.side_effect = lambda messages: time.sleep(1)
        ranker = LLMRanker(llm, timeout_seconds=0.05)

        with pytest.raises(FutureTimeoutError):
            ranker.select(Step("play", "episode"), candidates, {})
        ranker.close()

    def test_reason(self):
        """Test that the reasoning fallback parses the model reply."""
        llm = Mock()
        llm.invoke.return_value = AIMessage(content='{"found": false}')
        ranker = LLMRanker(llm)

        assert not ranker.reason(Step("toggle", "pip"), {}).found
        ranker.close()
