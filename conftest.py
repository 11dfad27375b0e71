"""
Pytest configuration for agent selection tests.

Puts src/ on the path and provides sample agents and a deterministic
embedding provider.
"""

import asyncio
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

sys.path.insert(0, str(Path(__file__).parent / "src"))

from selection.agents import AgentProfile  # noqa: E402
from selection.embedding_selector import EmbeddingProvider  # noqa: E402


class FakeEmbeddingProvider(EmbeddingProvider):
    """
    Deterministic embedding provider for tests.

    Each axis term contributes one dimension: the vector for a text counts
    how often each axis term occurs in it (case-insensitive substring count).
    Exact texts can be pinned to specific vectors with `overrides`.
    """

    def __init__(
        self,
        axes: List[str],
        overrides: Optional[Dict[str, Sequence[float]]] = None,
        delay: float = 0.0,
    ):
        self.axes = [axis.lower() for axis in axes]
        self.overrides = overrides or {}
        self.delay = delay
        self.embed_calls: List[str] = []
        self.batch_calls: List[List[str]] = []
        self.fail_with: Optional[Exception] = None
        self.batch_started = asyncio.Event()

    @property
    def dimensions(self) -> int:
        return len(self.axes)

    @property
    def model_name(self) -> str:
        return "fake-axis-embedder"

    def vector_for(self, text: str) -> List[float]:
        if text in self.overrides:
            return list(self.overrides[text])
        lowered = text.lower()
        return [float(lowered.count(axis)) for axis in self.axes]

    async def embed(self, text: str) -> Sequence[float]:
        self.embed_calls.append(text)
        if self.fail_with is not None:
            raise self.fail_with
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.vector_for(text)

    async def embed_batch(self, texts: List[str]) -> List[Sequence[float]]:
        self.batch_calls.append(list(texts))
        self.batch_started.set()
        if self.fail_with is not None:
            raise self.fail_with
        if self.delay:
            await asyncio.sleep(self.delay)
        return [self.vector_for(text) for text in texts]


@pytest.fixture
def make_provider():
    """Factory for fake embedding providers"""
    return FakeEmbeddingProvider


@pytest.fixture
def coding_agent():
    return AgentProfile(
        name="coding-agent",
        description="Generates and reviews source code",
        capabilities=["code-generation", "code-review"],
        tags=["coding", "development"],
    )


@pytest.fixture
def writing_agent():
    return AgentProfile(
        name="writing-agent",
        description="Drafts articles and blog posts",
        capabilities=["content-writing", "copy-editing"],
        tags=["writing", "content"],
    )


@pytest.fixture
def database_agent():
    return AgentProfile(
        name="database-agent",
        description="Designs schemas and tunes SQL queries",
        capabilities=["sql-optimization", "schema-design"],
        tags=["database", "sql"],
    )


@pytest.fixture
def sample_agents(coding_agent, writing_agent, database_agent):
    """Three agents with distinct domains"""
    return [coding_agent, writing_agent, database_agent]
