"""
Tests for TF-IDF Weight Calculator

Tests IDF table construction and normalized TF-IDF document scoring.
"""

import pytest
import sys
import math
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from selection.agents import AgentProfile
from selection.tfidf import TfidfWeightCalculator, split_words


@pytest.fixture
def three_agents():
    """Each agent has one unique token plus one shared by all"""
    return [
        AgentProfile(name="alpha", description="shared"),
        AgentProfile(name="beta", description="shared"),
        AgentProfile(name="gamma", description="shared"),
    ]


class TestSplitWords:
    """Test tokenization"""

    def test_splits_on_separators(self):
        assert split_words("code-review, unit_tests!") == ["code", "review", "unit", "tests"]

    def test_drops_empty_fragments(self):
        assert split_words("  hello ...  world  ") == ["hello", "world"]

    def test_empty_text(self):
        assert split_words("") == []


class TestIdf:
    """Test IDF table"""

    def test_pool_statistics(self, three_agents):
        calculator = TfidfWeightCalculator(three_agents)

        assert calculator.total_documents == 3
        assert calculator.vocabulary_size == 4

    def test_token_in_every_document_has_negative_idf(self, three_agents):
        calculator = TfidfWeightCalculator(three_agents)

        assert calculator.get_idf_score("shared") == pytest.approx(math.log(3 / 4))
        assert calculator.get_idf_score("shared") < 0

    def test_unique_token_has_highest_idf(self, three_agents):
        calculator = TfidfWeightCalculator(three_agents)

        unique = calculator.get_idf_score("alpha")
        assert unique == pytest.approx(math.log(3 / 2))
        assert unique > calculator.get_idf_score("shared")

    def test_unseen_token_is_zero(self, three_agents):
        calculator = TfidfWeightCalculator(three_agents)
        assert calculator.get_idf_score("missing") == 0.0

    def test_lookup_is_case_insensitive(self, three_agents):
        calculator = TfidfWeightCalculator(three_agents)
        assert calculator.get_idf_score("ALPHA") == calculator.get_idf_score("alpha")

    def test_document_frequency_counts_documents_not_occurrences(self):
        agents = [
            AgentProfile(name="one", description="repeat repeat repeat"),
            AgentProfile(name="two", description="other"),
            AgentProfile(name="three", description="other"),
        ]
        calculator = TfidfWeightCalculator(agents)
        assert calculator.get_idf_score("repeat") == pytest.approx(math.log(3 / 2))

    def test_empty_pool(self):
        calculator = TfidfWeightCalculator([])
        assert calculator.total_documents == 0
        assert calculator.vocabulary_size == 0


class TestTfidfScore:
    """Test normalized document scoring"""

    def test_single_token_score_is_term_frequency(self, three_agents):
        calculator = TfidfWeightCalculator(three_agents)

        # "alpha shared": tf(alpha) = 1/2, normalized by idf(alpha)
        score = calculator.calculate_tfidf_score({"alpha"}, "alpha shared")
        assert score == pytest.approx(0.5)

    def test_absent_token_scores_zero(self, three_agents):
        calculator = TfidfWeightCalculator(three_agents)
        assert calculator.calculate_tfidf_score({"alpha"}, "beta shared") == 0.0

    def test_empty_query(self, three_agents):
        calculator = TfidfWeightCalculator(three_agents)
        assert calculator.calculate_tfidf_score(set(), "alpha shared") == 0.0

    def test_blank_document(self, three_agents):
        calculator = TfidfWeightCalculator(three_agents)
        assert calculator.calculate_tfidf_score({"alpha"}, "   ") == 0.0
        assert calculator.calculate_tfidf_score({"alpha"}, "") == 0.0

    def test_unseen_tokens_give_zero_denominator(self, three_agents):
        calculator = TfidfWeightCalculator(three_agents)
        assert calculator.calculate_tfidf_score({"unknown"}, "unknown words") == 0.0

    def test_relevant_document_scores_higher(self, three_agents):
        calculator = TfidfWeightCalculator(three_agents)

        relevant = calculator.calculate_tfidf_score({"alpha", "beta"}, "alpha shared")
        irrelevant = calculator.calculate_tfidf_score({"alpha", "beta"}, "gamma shared")
        assert relevant > irrelevant
