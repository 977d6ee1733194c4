"""
Tests for query expansion and the vocabulary tables behind it.
"""
import pytest

from action_mapper.models import UserTerm
from action_mapper.resolution import (
    QueryExpander,
    VariantSource,
    VocabularyBuilder,
    default_vocabulary,
)


@pytest.fixture
def expander():
    return QueryExpander()


class TestQueryExpander:
    """Tests for QueryExpander.expand."""

    def test_method_patterns_come_first(self, expander):
        """Test that curated method-name patterns lead the variant list."""
        variants = expander.expand("play", "episode")

        assert variants[0].query == "open show from brand feed section"
        assert variants[0].source == VariantSource.METHOD_PATTERN
        assert variants[1].query == "select episode"
        assert variants[2].query == "play episode"
        assert variants[2].source == VariantSource.ORIGINAL

    def test_priorities_are_ascending(self, expander):
        """Test that variants are ordered most specific first."""
        variants = expander.expand("play", "episode")
        priorities = [v.priority for v in variants]

        assert priorities == sorted(priorities)

    def test_camel_case_variant_is_last(self, expander):
        """Test that the method-name style variant closes the list."""
        variants = expander.expand("play", "episode")

        assert variants[-1].query == "playEpisode"
        assert variants[-1].source == VariantSource.CAMEL_CASE

    def test_synonym_substitutions(self, expander):
        """Test that action and target synonyms are each substituted once."""
        queries = [v.query for v in expander.expand("play", "episode")]

        assert "start episode" in queries
        assert "play show" in queries

    def test_no_duplicate_queries(self, expander):
        """Test that variants are unique case-insensitively."""
        queries = [v.query.lower() for v in expander.expand("play", "episode")]

        assert len(queries) == len(set(queries))

    def test_cross_product_is_bounded(self):
        """Test that the synonym cross-product respects the limit."""
        expander = QueryExpander(cross_product_limit=1)
        combined = [
            v.query for v in expander.expand("play", "episode")
            if v.source == VariantSource.COMBINED_SYNONYM
        ]

        assert combined == ["start show"]

    def test_action_without_target(self, expander):
        """Test that a step with only an action still expands."""
        variants = expander.expand("login")

        assert variants[0].query == "login"
        assert "signin" in [v.query for v in variants]

    def test_empty_step_has_no_variants(self, expander):
        """Test that an empty action and target produce nothing."""
        assert expander.expand("", None) == []
        assert expander.expand(None, "  ") == []

    def test_input_is_normalized(self, expander):
        """Test that case and underscores do not change the expansion."""
        assert expander.expand("Play", "EPISODE") == expander.expand("play", "episode")
        assert expander.expand("click", "play_button")[0].query == "click play button"


class TestVocabularyBuilder:
    """Tests for building vocabularies from defaults and taught terms."""

    def test_default_tables(self):
        """Test that the default vocabulary knows core synonyms."""
        vocabulary = default_vocabulary()

        assert "tap" in vocabulary.action_synonyms("click")
        assert "show" in vocabulary.target_synonyms("episode")
        assert vocabulary.method_patterns("pause video") == ("pauseVideo", "pressPause")

    def test_user_term_extends_action_synonyms(self):
        """Test that a taught term naming a known action extends that action."""
        term = UserTerm(id="t1", user_term="play", synonyms=["stream"])
        vocabulary = VocabularyBuilder().add_user_terms([term]).build()

        assert "stream" in vocabulary.action_synonyms("play")
        assert "stream episode" in [v.query for v in QueryExpander(vocabulary).expand("play", "episode")]

    def test_user_term_extends_target_synonyms(self):
        """Test that an unknown taught term becomes a target synonym entry."""
        term = UserTerm(id="t2", user_term="pip", expands_to=["picture in picture"])
        vocabulary = VocabularyBuilder().add_user_terms([term]).build()

        assert vocabulary.target_synonyms("pip") == ("picture in picture",)
        assert vocabulary.action_synonyms("pip") == ()

    def test_vocabulary_is_read_only(self):
        """Test that a built vocabulary cannot be changed by later builder calls."""
        builder = VocabularyBuilder()
        vocabulary = builder.build()
        builder.add_method_pattern("open settings", ["openSettings"])

        assert vocabulary.method_patterns("open settings") == ()
        assert builder.build().method_patterns("open settings") == ("openSettings",)

    def test_expand_keywords(self):
        """Test that keyword expansion keeps order and drops duplicates."""
        keywords = default_vocabulary().expand_keywords(["click", "play", "click"])

        assert keywords[:2] == ["click", "tap"]
        assert keywords.count("click") == 1
        assert "start" in keywords
