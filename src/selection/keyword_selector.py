"""
Keyword Agent Selector

Scores agents by keyword overlap between the query and each agent's
capabilities, tags, description and name, then boosts the result with TF-IDF
relevance against the agent pool.
"""

from typing import Dict, Iterable, List, Optional, Set, Tuple
import asyncio
import logging
import math
import threading

from observability.metrics import record_selection, selection_latency, track_time
from observability.tracing import create_span

from .agents import AgentProfile
from .base import AgentSelector, validate_agents, validate_query, validate_unit_interval
from .exceptions import InvalidArgumentError
from .normalizer import KeywordNormalizer
from .results import AgentScore, SelectionResult, rank_scores
from .stopwords import get_default_stopwords
from .tfidf import TfidfWeightCalculator, split_words

logger = logging.getLogger(__name__)

# Field weights (sum to 1.0)
CAPABILITY_WEIGHT = 0.5
TAG_WEIGHT = 0.35
DESCRIPTION_WEIGHT = 0.1
NAME_WEIGHT = 0.05

# TF-IDF can raise a base score by up to 30%
TFIDF_BOOST_FACTOR = 0.3
TFIDF_REASON_THRESHOLD = 0.05

FALLBACK_CONFIDENCE = 0.5
DEFAULT_CACHE_SIZE = 1000


class KeywordAgentSelector(AgentSelector):
    """
    Lexical agent selector.

    Field weights: capabilities 0.50, tags 0.35, description 0.10, name 0.05.
    The TF-IDF table is built from the first non-empty pool this selector
    sees and is reused until clear_cache(), even if later calls pass a
    different pool.
    """

    name = "keyword"

    def __init__(
        self,
        minimum_confidence_threshold: float = 0.3,
        fallback_agent: Optional[AgentProfile] = None,
        cache_size: int = DEFAULT_CACHE_SIZE,
        normalizer: Optional[KeywordNormalizer] = None,
    ):
        """
        Initialize keyword selector.

        Args:
            minimum_confidence_threshold: Minimum score to accept a match (0-1)
            fallback_agent: Agent used when no match reaches the threshold
            cache_size: Maximum number of cached keyword extractions
            normalizer: Keyword normalizer (a fresh one by default)
        """
        self.minimum_confidence_threshold = validate_unit_interval(
            minimum_confidence_threshold, "minimum_confidence_threshold"
        )
        if cache_size <= 0:
            raise InvalidArgumentError(f"cache_size must be positive, got {cache_size}")

        self.fallback_agent = fallback_agent
        self.cache_size = cache_size
        self._normalizer = normalizer or KeywordNormalizer()
        self._stopwords = get_default_stopwords()

        self._tfidf_calculator: Optional[TfidfWeightCalculator] = None
        self._keyword_cache: Dict[str, Set[str]] = {}
        self._cache_lock = threading.Lock()

    @track_time(selection_latency, selector="keyword")
    async def select_agent(
        self, query: str, agents: Iterable[AgentProfile]
    ) -> SelectionResult:
        validate_query(query)
        agents = validate_agents(agents)

        with create_span("keyword.select_agent", {"agent_count": len(agents)}) as span:
            result, outcome = await asyncio.to_thread(self._select, query, agents)

            record_selection(self.name, result, outcome)
            span.set_attribute("selected_agent", result.selected_name or "")
            return result

    async def score_agents(
        self, query: str, agents: Iterable[AgentProfile]
    ) -> List[AgentScore]:
        validate_query(query)
        agents = validate_agents(agents)
        return await asyncio.to_thread(self._score_agents, query, agents)

    def clear_cache(self) -> None:
        """Drop cached keyword extractions and the TF-IDF table"""
        with self._cache_lock:
            self._keyword_cache.clear()
            self._tfidf_calculator = None
        logger.info("Keyword selector cache cleared")

    @property
    def cached_keyword_count(self) -> int:
        with self._cache_lock:
            return len(self._keyword_cache)

    @property
    def tfidf_calculator(self) -> Optional[TfidfWeightCalculator]:
        return self._tfidf_calculator

    def _select(self, query: str, agents: List[AgentProfile]) -> Tuple[SelectionResult, str]:
        if not agents:
            return SelectionResult.empty(), "empty"

        if len(agents) == 1:
            return SelectionResult.single(agents[0]), "single"

        scores = self._score_agents(query, agents)
        best = scores[0]

        if best.score >= self.minimum_confidence_threshold:
            logger.info(f"Keyword selection: {best.agent.name} (score={best.score:.3f})")
            return (
                SelectionResult(
                    selected_agent=best.agent,
                    confidence_score=best.score,
                    selection_reason=f"Matched on: {', '.join(best.reasons)}",
                    all_scores=scores,
                ),
                "matched",
            )

        if self.fallback_agent is not None:
            logger.warning(
                f"No confident keyword match (best={best.score:.3f}), "
                f"using fallback agent {self.fallback_agent.name}"
            )
            return (
                SelectionResult(
                    selected_agent=self.fallback_agent,
                    confidence_score=FALLBACK_CONFIDENCE,
                    selection_reason=(
                        f"No confident match found (best: {best.score:.2f}), "
                        f"using fallback agent"
                    ),
                    all_scores=scores,
                ),
                "fallback",
            )

        logger.warning(f"Low confidence keyword match: {best.agent.name} (score={best.score:.3f})")
        return (
            SelectionResult(
                selected_agent=best.agent,
                confidence_score=best.score,
                selection_reason=f"Low confidence match: {', '.join(best.reasons)}",
                all_scores=scores,
            ),
            "low_confidence",
        )

    def _score_agents(self, query: str, agents: List[AgentProfile]) -> List[AgentScore]:
        query_words = self._extract_keywords(query.lower())

        with self._cache_lock:
            if self._tfidf_calculator is None and agents:
                self._tfidf_calculator = TfidfWeightCalculator(agents)
            tfidf_calculator = self._tfidf_calculator

        scores = [self._score_agent(agent, query_words, tfidf_calculator) for agent in agents]
        return rank_scores(scores)

    def _score_agent(
        self,
        agent: AgentProfile,
        query_words: Set[str],
        tfidf_calculator: Optional[TfidfWeightCalculator],
    ) -> AgentScore:
        reasons: List[str] = []

        capability_score = self._score_keywords(query_words, agent.capabilities, "capability", reasons)
        tag_score = self._score_keywords(query_words, agent.tags, "tag", reasons)
        description_score = self._score_text(query_words, agent.description.lower(), "description", reasons)
        name_score = self._score_text(query_words, agent.name.lower(), "name", reasons)

        base_score = (
            capability_score * CAPABILITY_WEIGHT
            + tag_score * TAG_WEIGHT
            + description_score * DESCRIPTION_WEIGHT
            + name_score * NAME_WEIGHT
        )

        final_score = base_score
        if tfidf_calculator is not None and query_words:
            tfidf_score = tfidf_calculator.calculate_tfidf_score(query_words, agent.document_text)
            tfidf_boost = tfidf_score * TFIDF_BOOST_FACTOR
            final_score = base_score * (1.0 + tfidf_boost)

            if tfidf_boost > TFIDF_REASON_THRESHOLD:
                reasons.append(f"TF-IDF relevance boost: {tfidf_boost:.0%}")

        final_score = min(max(final_score, 0.0), 1.0)

        logger.debug(
            f"Scored {agent.name}: capability={capability_score:.3f}, tag={tag_score:.3f}, "
            f"description={description_score:.3f}, name={name_score:.3f}, final={final_score:.3f}"
        )

        return AgentScore(agent=agent, score=final_score, reasons=reasons)

    @staticmethod
    def _score_keywords(
        query_words: Set[str], keywords: Iterable[str], category: str, reasons: List[str]
    ) -> float:
        """
        Score query tokens against a list of agent keywords.

        A keyword hits on an exact token match or a substring match in either
        direction where the shorter side has at least 3 characters.
        """
        keywords = list(keywords)
        if not keywords:
            return 0.0

        matched_keywords = []
        for keyword in keywords:
            keyword_lower = keyword.lower()
            if keyword_lower in query_words or any(
                (keyword_lower in word and len(keyword_lower) >= 3)
                or (word in keyword_lower and len(word) >= 3)
                for word in query_words
            ):
                matched_keywords.append(keyword)

        if not matched_keywords:
            return 0.0

        reasons.append(f"{category} matches: {', '.join(matched_keywords)}")

        # Geometric mean stops agents with very few keywords from scoring
        # as high as agents that cover more of the query
        matches = len(matched_keywords)
        agent_coverage = matches / len(keywords)
        query_coverage = matches / max(len(query_words), 1)
        return math.sqrt(agent_coverage * query_coverage)

    def _score_text(
        self, query_words: Set[str], text: str, category: str, reasons: List[str]
    ) -> float:
        matches = query_words & self._extract_keywords(text)
        if not matches:
            return 0.0

        reasons.append(f"{category} keyword matches: {len(matches)}")
        return len(matches) / max(len(query_words), 1)

    def _extract_keywords(self, text: str) -> Set[str]:
        with self._cache_lock:
            cached = self._keyword_cache.get(text)
            if cached is not None:
                return cached

        words = {
            self._normalizer.normalize(word)
            for word in (w.lower() for w in split_words(text))
            if len(word) > 2 and word not in self._stopwords
        }

        with self._cache_lock:
            if len(self._keyword_cache) < self.cache_size:
                self._keyword_cache[text] = words

        return words
