"""
Selection Configuration

Settings for building selectors and the stickiness router, with defaults and
environment variable overrides.
"""

import os
import math
import logging
from typing import Optional
from enum import Enum
from dataclasses import dataclass

from .agents import AgentProfile, AgentRegistry
from .base import AgentSelector, validate_unit_interval
from .embedding_selector import EmbeddingAgentSelector, EmbeddingProvider
from .exceptions import InvalidArgumentError
from .hybrid_selector import HybridAgentSelector
from .keyword_selector import KeywordAgentSelector
from .stickiness import StickinessRouter

logger = logging.getLogger(__name__)


class SelectionStrategy(Enum):
    """Which selector to build"""

    KEYWORD = "keyword"
    EMBEDDING = "embedding"
    HYBRID = "hybrid"


@dataclass
class SelectionSettings:
    """
    Agent selection settings.

    Attributes:
        strategy: Selector to build
        minimum_confidence_threshold: Keyword match acceptance threshold
        keyword_weight: Hybrid weight for keyword scores
        embedding_weight: Hybrid weight for embedding scores
        stickiness_threshold: Score margin required to switch agents mid-conversation
        keyword_cache_size: Maximum cached keyword extractions per selector
    """

    strategy: SelectionStrategy = SelectionStrategy.HYBRID
    minimum_confidence_threshold: float = 0.3
    keyword_weight: float = 0.4
    embedding_weight: float = 0.6
    stickiness_threshold: float = 0.2
    keyword_cache_size: int = 1000

    def validate(self) -> "SelectionSettings":
        """Check ranges; returns self for chaining"""
        validate_unit_interval(self.minimum_confidence_threshold, "minimum_confidence_threshold")
        validate_unit_interval(self.stickiness_threshold, "stickiness_threshold")
        if not (math.isfinite(self.keyword_weight) and math.isfinite(self.embedding_weight)):
            raise InvalidArgumentError("Weights must be finite numbers")
        if self.keyword_weight < 0 or self.embedding_weight < 0:
            raise InvalidArgumentError("Weights must be non-negative")
        if self.keyword_weight + self.embedding_weight == 0:
            raise InvalidArgumentError("At least one weight must be greater than zero")
        if self.keyword_cache_size <= 0:
            raise InvalidArgumentError("keyword_cache_size must be positive")
        return self

    @classmethod
    def from_env(cls) -> "SelectionSettings":
        """Create settings from environment variables"""
        try:
            settings = cls(
                strategy=SelectionStrategy(os.getenv("SELECTION_STRATEGY", "hybrid").lower()),
                minimum_confidence_threshold=float(os.getenv("SELECTION_MIN_CONFIDENCE", "0.3")),
                keyword_weight=float(os.getenv("SELECTION_KEYWORD_WEIGHT", "0.4")),
                embedding_weight=float(os.getenv("SELECTION_EMBEDDING_WEIGHT", "0.6")),
                stickiness_threshold=float(os.getenv("SELECTION_STICKINESS_THRESHOLD", "0.2")),
                keyword_cache_size=int(os.getenv("SELECTION_KEYWORD_CACHE_SIZE", "1000")),
            )
        except ValueError as e:
            raise InvalidArgumentError(f"Invalid selection setting in environment: {e}") from e

        return settings.validate()


def build_selector(
    settings: Optional[SelectionSettings] = None,
    embedding_provider: Optional[EmbeddingProvider] = None,
    fallback_agent: Optional[AgentProfile] = None,
) -> AgentSelector:
    """
    Build the selector described by the settings.

    Args:
        settings: Selection settings (defaults if None)
        embedding_provider: Required for embedding and hybrid strategies
        fallback_agent: Keyword selector fallback agent

    Returns:
        Configured selector
    """
    settings = (settings or SelectionSettings()).validate()

    keyword_selector = KeywordAgentSelector(
        minimum_confidence_threshold=settings.minimum_confidence_threshold,
        fallback_agent=fallback_agent,
        cache_size=settings.keyword_cache_size,
    )

    if settings.strategy == SelectionStrategy.KEYWORD:
        logger.info("Built keyword selector")
        return keyword_selector

    if embedding_provider is None:
        raise InvalidArgumentError(
            f"Strategy '{settings.strategy.value}' requires an embedding provider"
        )

    embedding_selector = EmbeddingAgentSelector(embedding_provider)
    if settings.strategy == SelectionStrategy.EMBEDDING:
        logger.info(f"Built embedding selector (model={embedding_provider.model_name})")
        return embedding_selector

    logger.info(
        f"Built hybrid selector (keyword={settings.keyword_weight}, "
        f"embedding={settings.embedding_weight}, model={embedding_provider.model_name})"
    )
    return HybridAgentSelector(
        keyword_selector,
        embedding_selector,
        keyword_weight=settings.keyword_weight,
        embedding_weight=settings.embedding_weight,
    )


def build_router(
    selector: AgentSelector,
    settings: Optional[SelectionSettings] = None,
    registry: Optional[AgentRegistry] = None,
) -> StickinessRouter:
    """Build a stickiness router using the configured threshold"""
    settings = (settings or SelectionSettings()).validate()
    return StickinessRouter(
        selector, registry=registry, stickiness_threshold=settings.stickiness_threshold
    )
