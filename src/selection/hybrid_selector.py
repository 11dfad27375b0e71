"""
Hybrid Agent Selector

Runs the keyword and embedding selectors concurrently and combines their
per-agent scores with a normalized weighted sum.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple
import asyncio
import logging
import math

from observability.metrics import record_selection, selection_latency, track_time
from observability.tracing import create_span

from .agents import AgentProfile
from .base import AgentSelector, validate_agents, validate_query
from .embedding_selector import EmbeddingAgentSelector
from .exceptions import InvalidArgumentError
from .keyword_selector import KeywordAgentSelector
from .results import AgentScore, SelectionResult, rank_scores

logger = logging.getLogger(__name__)


@dataclass
class HybridSelectorConfig:
    """Weights for the hybrid selector (normalized by the selector)"""

    keyword_weight: float = 0.4
    embedding_weight: float = 0.6

    @classmethod
    def balanced(cls) -> "HybridSelectorConfig":
        return cls(keyword_weight=0.5, embedding_weight=0.5)

    @classmethod
    def keyword_focused(cls) -> "HybridSelectorConfig":
        return cls(keyword_weight=0.7, embedding_weight=0.3)

    @classmethod
    def embedding_focused(cls) -> "HybridSelectorConfig":
        return cls(keyword_weight=0.3, embedding_weight=0.7)


class HybridAgentSelector(AgentSelector):
    """
    Weighted combination of lexical and semantic selection.

    hybrid(agent) = w_k * keyword(agent) + w_e * embedding(agent),
    with w_k + w_e = 1 after normalization.
    """

    name = "hybrid"

    def __init__(
        self,
        keyword_selector: KeywordAgentSelector,
        embedding_selector: EmbeddingAgentSelector,
        keyword_weight: float = 0.4,
        embedding_weight: float = 0.6,
    ):
        """
        Initialize hybrid selector.

        Args:
            keyword_selector: Lexical selector
            embedding_selector: Semantic selector
            keyword_weight: Relative weight of keyword scores (>= 0)
            embedding_weight: Relative weight of embedding scores (>= 0)

        Raises:
            InvalidArgumentError: If a weight is negative, not finite, or both are zero
        """
        if keyword_selector is None or embedding_selector is None:
            raise InvalidArgumentError("Both keyword and embedding selectors are required")

        if keyword_weight is None or embedding_weight is None:
            raise InvalidArgumentError("Weights must not be None")
        if not (math.isfinite(keyword_weight) and math.isfinite(embedding_weight)):
            raise InvalidArgumentError(
                f"Weights must be finite, got keyword={keyword_weight}, embedding={embedding_weight}"
            )
        if keyword_weight < 0 or embedding_weight < 0:
            raise InvalidArgumentError("Weights must be non-negative")

        total_weight = keyword_weight + embedding_weight
        if total_weight == 0:
            raise InvalidArgumentError("At least one weight must be greater than zero")

        self.keyword_selector = keyword_selector
        self.embedding_selector = embedding_selector
        self.keyword_weight = keyword_weight / total_weight
        self.embedding_weight = embedding_weight / total_weight

    @classmethod
    def from_config(
        cls,
        keyword_selector: KeywordAgentSelector,
        embedding_selector: EmbeddingAgentSelector,
        config: HybridSelectorConfig,
    ) -> "HybridAgentSelector":
        return cls(
            keyword_selector,
            embedding_selector,
            keyword_weight=config.keyword_weight,
            embedding_weight=config.embedding_weight,
        )

    @track_time(selection_latency, selector="hybrid")
    async def select_agent(
        self, query: str, agents: Iterable[AgentProfile]
    ) -> SelectionResult:
        validate_query(query)
        agents = validate_agents(agents)

        if not agents:
            result = SelectionResult.empty()
            record_selection(self.name, result, "empty")
            return result

        if len(agents) == 1:
            result = SelectionResult.single(agents[0])
            record_selection(self.name, result, "single")
            return result

        with create_span("hybrid.select_agent", {"agent_count": len(agents)}) as span:
            keyword_result, embedding_result = await asyncio.gather(
                self.keyword_selector.select_agent(query, agents),
                self.embedding_selector.select_agent(query, agents),
            )

            keyword_scores = self._scores_by_name(keyword_result)
            embedding_scores = self._scores_by_name(embedding_result)

            hybrid_scores: Dict[str, Tuple[AgentProfile, float]] = {}
            for agent in agents:
                keyword_score = keyword_scores.get(agent.key, 0.0)
                embedding_score = embedding_scores.get(agent.key, 0.0)
                hybrid_score = (
                    self.keyword_weight * keyword_score
                    + self.embedding_weight * embedding_score
                )
                hybrid_scores[agent.key] = (agent, hybrid_score)

            all_scores = rank_scores(
                [
                    AgentScore(agent=agent, score=score, reasons=[f"Hybrid: {score:.1%}"])
                    for agent, score in hybrid_scores.values()
                ]
            )
            best = all_scores[0]
            runner_up = all_scores[1] if len(all_scores) > 1 else None

            result = SelectionResult(
                selected_agent=best.agent,
                confidence_score=best.score,
                selection_reason=self._build_selection_reason(
                    best, runner_up, keyword_result, embedding_result
                ),
                all_scores=all_scores,
            )

            record_selection(self.name, result, "matched")
            span.set_attribute("selected_agent", best.agent.name)
            span.set_attribute("keyword_agent", keyword_result.selected_name or "none")
            span.set_attribute("embedding_agent", embedding_result.selected_name or "none")

            logger.info(
                f"Hybrid selection: {best.agent.name} (score={best.score:.3f}, "
                f"keyword={keyword_result.selected_name}, embedding={embedding_result.selected_name})"
            )
            return result

    async def score_agents(
        self, query: str, agents: Iterable[AgentProfile]
    ) -> List[AgentScore]:
        result = await self.select_agent(query, agents)
        return result.all_scores

    @staticmethod
    def _scores_by_name(result: SelectionResult) -> Dict[str, float]:
        scores: Dict[str, float] = {}
        for scored in result.all_scores:
            scores.setdefault(scored.agent.key, scored.score)
        return scores

    def _build_selection_reason(
        self,
        best: AgentScore,
        runner_up: Optional[AgentScore],
        keyword_result: SelectionResult,
        embedding_result: SelectionResult,
    ) -> str:
        keyword_agent = keyword_result.selected_name or "none"
        embedding_agent = embedding_result.selected_name or "none"

        lines = [
            f"Hybrid selection: '{best.agent.name}' with {best.score:.1%} confidence.",
            f"  Keyword ({self.keyword_weight:.0%}): '{keyword_agent}' "
            f"({keyword_result.confidence_score:.1%})",
            f"  Embedding ({self.embedding_weight:.0%}): '{embedding_agent}' "
            f"({embedding_result.confidence_score:.1%})",
        ]

        if keyword_agent.lower() == embedding_agent.lower() == best.agent.key:
            lines.append("  Both selectors agreed on this agent.")
        else:
            lines.append("  Selectors disagreed, hybrid score determined final choice.")

        if runner_up is not None:
            lines.append(f"  Runner-up: '{runner_up.agent.name}' ({runner_up.score:.1%})")

        return "\n".join(lines)
