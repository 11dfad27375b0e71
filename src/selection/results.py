"""
Selection Results

Scored agents and the outcome of a selection call.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .agents import AgentProfile

NO_AGENTS_REASON = "No agents available"


@dataclass
class AgentScore:
    """Agent with a confidence score and the reasons behind it"""

    agent: AgentProfile
    score: float  # 0.0 - 1.0
    reasons: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "agent": self.agent.name,
            "score": self.score,
            "reasons": list(self.reasons),
        }


@dataclass
class SelectionResult:
    """
    Outcome of selecting an agent.

    selected_agent is None only when the agent pool was empty.
    all_scores is sorted by score, highest first.
    """

    selected_agent: Optional[AgentProfile]
    confidence_score: float
    selection_reason: str
    all_scores: List[AgentScore] = field(default_factory=list)

    @property
    def selected_name(self) -> Optional[str]:
        return self.selected_agent.name if self.selected_agent else None

    def score_for(self, agent_name: str) -> Optional[float]:
        """Look up an agent's score by case-insensitive name"""
        key = agent_name.lower()
        for scored in self.all_scores:
            if scored.agent.key == key:
                return scored.score
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "selected_agent": self.selected_name,
            "confidence_score": self.confidence_score,
            "selection_reason": self.selection_reason,
            "all_scores": [s.to_dict() for s in self.all_scores],
        }

    @classmethod
    def empty(cls) -> "SelectionResult":
        return cls(
            selected_agent=None,
            confidence_score=0.0,
            selection_reason=NO_AGENTS_REASON,
            all_scores=[],
        )

    @classmethod
    def single(cls, agent: AgentProfile) -> "SelectionResult":
        return cls(
            selected_agent=agent,
            confidence_score=1.0,
            selection_reason=f"Only agent available: {agent.name}",
            all_scores=[AgentScore(agent=agent, score=1.0)],
        )


def rank_scores(scores: List[AgentScore]) -> List[AgentScore]:
    """Sort by score descending; ties keep their input order"""
    return sorted(scores, key=lambda s: s.score, reverse=True)
