"""
Agent Selection Module

Routes a natural-language request to the best-suited agent using keyword,
embedding or hybrid scoring, and keeps multi-turn conversations on a stable
agent.
"""

from .agents import AgentProfile, AgentRegistry
from .results import AgentScore, SelectionResult
from .base import AgentSelector
from .exceptions import (
    SelectionError,
    InvalidArgumentError,
    DimensionMismatchError,
    AgentNotFoundError,
    EmbeddingProviderError,
)
from .normalizer import KeywordNormalizer
from .tfidf import TfidfWeightCalculator
from .keyword_selector import KeywordAgentSelector
from .embedding_selector import EmbeddingProvider, EmbeddingAgentSelector, AgentEmbedding
from .hybrid_selector import HybridAgentSelector, HybridSelectorConfig
from .stickiness import StickinessRouter, RoutingDecision, apply_stickiness
from .config import SelectionSettings, SelectionStrategy, build_selector, build_router
from . import vector_similarity

__all__ = [
    "AgentProfile",
    "AgentRegistry",
    "AgentScore",
    "SelectionResult",
    "AgentSelector",
    "SelectionError",
    "InvalidArgumentError",
    "DimensionMismatchError",
    "AgentNotFoundError",
    "EmbeddingProviderError",
    "KeywordNormalizer",
    "TfidfWeightCalculator",
    "KeywordAgentSelector",
    "EmbeddingProvider",
    "EmbeddingAgentSelector",
    "AgentEmbedding",
    "HybridAgentSelector",
    "HybridSelectorConfig",
    "StickinessRouter",
    "RoutingDecision",
    "apply_stickiness",
    "SelectionSettings",
    "SelectionStrategy",
    "build_selector",
    "build_router",
    "vector_similarity",
]
