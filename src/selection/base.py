"""
Agent Selector Interface

Common contract and argument validation shared by the keyword, embedding and
hybrid selectors.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List

from .agents import AgentProfile
from .exceptions import InvalidArgumentError
from .results import AgentScore, SelectionResult


def validate_query(query: str) -> None:
    """Reject None, non-string, empty and whitespace-only queries"""
    if query is None:
        raise InvalidArgumentError("Query must not be None")
    if not isinstance(query, str):
        raise InvalidArgumentError(f"Query must be a string, got {type(query).__name__}")
    if not query.strip():
        raise InvalidArgumentError("Query must not be empty or whitespace")


def validate_agents(agents: Iterable[AgentProfile]) -> List[AgentProfile]:
    """Reject a None pool and materialize it as a list"""
    if agents is None:
        raise InvalidArgumentError("Agent collection must not be None")
    return list(agents)


def validate_unit_interval(value: float, name: str) -> float:
    """Check that a threshold lies in [0, 1]"""
    if value is None or not 0.0 <= value <= 1.0:
        raise InvalidArgumentError(f"{name} must be between 0 and 1, got {value}")
    return float(value)


class AgentSelector(ABC):
    """Selects the most appropriate agent for a query"""

    #: Short label used in metrics and spans
    name: str = "selector"

    @abstractmethod
    async def select_agent(
        self, query: str, agents: Iterable[AgentProfile]
    ) -> SelectionResult:
        """
        Select the best agent for the query.

        Args:
            query: User request
            agents: Candidate agents

        Returns:
            SelectionResult with the chosen agent and every agent's score
        """

    @abstractmethod
    async def score_agents(
        self, query: str, agents: Iterable[AgentProfile]
    ) -> List[AgentScore]:
        """
        Score every candidate agent.

        Args:
            query: User request
            agents: Candidate agents

        Returns:
            Scores sorted highest first
        """
