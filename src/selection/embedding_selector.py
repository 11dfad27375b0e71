"""
Embedding Agent Selector

Selects agents by cosine similarity between a query embedding and a cached
embedding of each agent's document text.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence
import asyncio
import logging

import numpy as np

from observability.metrics import (
    embedding_batch_requests_total,
    embedding_cache_operations_total,
    embedding_cache_size,
    record_selection,
    selection_latency,
    track_time,
)
from observability.tracing import create_span

from .agents import AgentProfile
from .base import AgentSelector, validate_agents, validate_query
from .exceptions import EmbeddingProviderError, InvalidArgumentError
from .results import AgentScore, SelectionResult, rank_scores
from .vector_similarity import cosine_similarity, normalize

logger = logging.getLogger(__name__)


class EmbeddingProvider(ABC):
    """
    Source of text embeddings.

    Implementations wrap a local model or a remote embedding API. Vectors
    returned for one provider must all have `dimensions` entries.
    """

    @abstractmethod
    async def embed(self, text: str) -> Sequence[float]:
        """Generate an embedding for one text"""

    @abstractmethod
    async def embed_batch(self, texts: List[str]) -> List[Sequence[float]]:
        """Generate embeddings for several texts, in input order"""

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Length of the vectors this provider returns"""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Name of the embedding model (diagnostics only)"""


@dataclass(frozen=True)
class AgentEmbedding:
    """Cached embedding of one agent's document text"""

    agent_name: str
    vector: np.ndarray  # unit length, or all zeros
    generated_at: datetime


class EmbeddingAgentSelector(AgentSelector):
    """
    Semantic agent selector.

    Agent embeddings are generated lazily in one batch per cache miss set and
    kept until clear_cache(). Query embeddings are never cached.
    """

    name = "embedding"

    def __init__(self, embedding_provider: EmbeddingProvider):
        """
        Initialize embedding selector.

        Args:
            embedding_provider: Provider used for agent and query embeddings
        """
        if embedding_provider is None:
            raise InvalidArgumentError("embedding_provider must not be None")

        self.embedding_provider = embedding_provider
        self._agent_embeddings: Dict[str, AgentEmbedding] = {}
        self._cache_lock = asyncio.Lock()

    @track_time(selection_latency, selector="embedding")
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

        with create_span(
            "embedding.select_agent",
            {"agent_count": len(agents), "model": self.embedding_provider.model_name},
        ) as span:
            embeddings = await self._ensure_agent_embeddings(agents)

            query_embedding = await self.embedding_provider.embed(query)

            scores = []
            for agent in agents:
                similarity = cosine_similarity(query_embedding, embeddings[agent.key].vector)
                normalized_score = self._normalize_score(similarity)
                scores.append(
                    AgentScore(
                        agent=agent,
                        score=normalized_score,
                        reasons=[f"Semantic similarity: {normalized_score:.1%}"],
                    )
                )

            scores = rank_scores(scores)
            best = scores[0]

            result = SelectionResult(
                selected_agent=best.agent,
                confidence_score=best.score,
                selection_reason=self._build_selection_reason(best, scores),
                all_scores=scores,
            )

            record_selection(self.name, result, "matched")
            span.set_attribute("selected_agent", best.agent.name)

            logger.info(f"Embedding selection: {best.agent.name} (similarity={best.score:.3f})")
            return result

    async def score_agents(
        self, query: str, agents: Iterable[AgentProfile]
    ) -> List[AgentScore]:
        result = await self.select_agent(query, agents)
        return result.all_scores

    async def warmup_cache(self, agents: Iterable[AgentProfile]) -> None:
        """
        Pre-compute embeddings for agents, e.g. at application startup.

        Args:
            agents: Agents to embed
        """
        agents = validate_agents(agents)
        await self._ensure_agent_embeddings(agents)
        logger.info(f"Embedding cache warmed: {len(self._agent_embeddings)} agents cached")

    def clear_cache(self) -> None:
        """Drop all cached agent embeddings"""
        dropped = len(self._agent_embeddings)
        self._agent_embeddings.clear()
        embedding_cache_size.dec(dropped)
        logger.info("Embedding cache cleared")

    @property
    def cached_agent_names(self) -> List[str]:
        return [entry.agent_name for entry in self._agent_embeddings.values()]

    def get_cached_embedding(self, agent_name: str) -> Optional[AgentEmbedding]:
        return self._agent_embeddings.get(agent_name.lower())

    async def _ensure_agent_embeddings(
        self, agents: List[AgentProfile]
    ) -> Dict[str, AgentEmbedding]:
        """
        Make sure every agent has an embedding.

        Returns a snapshot keyed by agent key, so callers keep working
        vectors even if clear_cache() runs while they await the provider.
        """
        snapshot = self._snapshot(agents)
        missing = self._missing_agents(agents, snapshot)
        embedding_cache_operations_total.labels(result="hit").inc(len(snapshot))
        if not missing:
            return snapshot

        async with self._cache_lock:
            # Another task may have filled the cache while we waited
            snapshot = self._snapshot(agents)
            missing = self._missing_agents(agents, snapshot)
            if not missing:
                return snapshot

            embedding_cache_operations_total.labels(result="miss").inc(len(missing))
            texts = [agent.document_text for agent in missing]

            embedding_batch_requests_total.inc()
            embeddings = await self.embedding_provider.embed_batch(texts)

            if len(embeddings) != len(missing):
                raise EmbeddingProviderError(
                    f"Provider {self.embedding_provider.model_name} returned "
                    f"{len(embeddings)} embeddings for {len(missing)} texts"
                )

            generated_at = datetime.now(timezone.utc)
            for agent, embedding in zip(missing, embeddings):
                entry = AgentEmbedding(
                    agent_name=agent.name,
                    vector=normalize(embedding),
                    generated_at=generated_at,
                )
                if agent.key not in self._agent_embeddings:
                    embedding_cache_size.inc()
                self._agent_embeddings[agent.key] = entry
                snapshot[agent.key] = entry

            logger.debug(f"Cached embeddings for {len(missing)} agents")
            return snapshot

    def _snapshot(self, agents: List[AgentProfile]) -> Dict[str, AgentEmbedding]:
        snapshot = {}
        for agent in agents:
            cached = self._agent_embeddings.get(agent.key)
            if cached is not None:
                snapshot[agent.key] = cached
        return snapshot

    @staticmethod
    def _missing_agents(
        agents: List[AgentProfile], snapshot: Dict[str, AgentEmbedding]
    ) -> List[AgentProfile]:
        missing = []
        seen = set()
        for agent in agents:
            if agent.key not in snapshot and agent.key not in seen:
                seen.add(agent.key)
                missing.append(agent)
        return missing

    @staticmethod
    def _normalize_score(similarity: float) -> float:
        # Negative similarity is treated as no match
        return max(0.0, similarity)

    @staticmethod
    def _build_selection_reason(best: AgentScore, scores: List[AgentScore]) -> str:
        reason = (
            f"Selected '{best.agent.name}' with {best.score:.1%} confidence "
            f"based on semantic similarity."
        )
        if len(scores) > 1:
            runner_up = scores[1]
            reason += f" Runner-up: '{runner_up.agent.name}' ({runner_up.score:.1%})."
        return reason
