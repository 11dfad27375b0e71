"""
Stickiness Router

Keeps a conversation on the agent chosen in the previous turn unless another
agent outscores it by more than a configured margin.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional
import logging

from observability.metrics import record_routing_decision
from observability.tracing import create_span

from .agents import AgentProfile, AgentRegistry, find_agent
from .base import AgentSelector, validate_agents, validate_query, validate_unit_interval
from .exceptions import AgentNotFoundError, InvalidArgumentError
from .results import AgentScore

logger = logging.getLogger(__name__)

DEFAULT_STICKINESS_THRESHOLD = 0.2

FORCED = "forced"
FIRST_TURN = "first_turn"
KEPT = "kept"
SWITCHED = "switched"
EMPTY = "empty"


@dataclass
class RoutingDecision:
    """Agent chosen for a conversation turn and why"""

    agent: Optional[AgentProfile]
    decision: str  # forced, first_turn, kept, switched, empty
    delta: Optional[float] = None  # best score - incumbent score
    scores: List[AgentScore] = field(default_factory=list)

    @property
    def agent_name(self) -> Optional[str]:
        return self.agent.name if self.agent else None

    @property
    def switched(self) -> bool:
        return self.decision == SWITCHED


def apply_stickiness(
    scores: List[AgentScore],
    previous_agent_name: Optional[str],
    stickiness_threshold: float = DEFAULT_STICKINESS_THRESHOLD,
) -> RoutingDecision:
    """
    Decide between the incumbent agent and the top-ranked agent.

    The incumbent is kept when best_score - incumbent_score <= threshold.
    An incumbent missing from the ranking always loses to the top agent.

    Args:
        scores: Current turn's scores, highest first
        previous_agent_name: Agent used in the previous turn (None on first turn)
        stickiness_threshold: Margin a challenger must exceed to take over

    Returns:
        RoutingDecision
    """
    validate_unit_interval(stickiness_threshold, "stickiness_threshold")

    if not scores:
        return RoutingDecision(agent=None, decision=EMPTY, scores=[])

    best = scores[0]

    if not previous_agent_name:
        return RoutingDecision(agent=best.agent, decision=FIRST_TURN, scores=scores)

    previous_key = previous_agent_name.lower()
    incumbent = next((s for s in scores if s.agent.key == previous_key), None)

    if incumbent is None:
        logger.info(
            f"Previous agent {previous_agent_name} not in current ranking, "
            f"switching to {best.agent.name}"
        )
        return RoutingDecision(agent=best.agent, decision=SWITCHED, scores=scores)

    delta = best.score - incumbent.score

    if delta <= stickiness_threshold:
        logger.debug(
            f"Keeping {incumbent.agent.name}: delta={delta:.3f} <= {stickiness_threshold:.3f}"
        )
        return RoutingDecision(agent=incumbent.agent, decision=KEPT, delta=delta, scores=scores)

    logger.info(
        f"Switching {incumbent.agent.name} -> {best.agent.name}: "
        f"delta={delta:.3f} > {stickiness_threshold:.3f}"
    )
    return RoutingDecision(agent=best.agent, decision=SWITCHED, delta=delta, scores=scores)


class StickinessRouter:
    """
    Conversation-aware routing on top of any agent selector.

    Forced agent names bypass scoring. Otherwise the selector's ranking is
    combined with the previous turn's agent via apply_stickiness().
    """

    def __init__(
        self,
        selector: AgentSelector,
        registry: Optional[AgentRegistry] = None,
        stickiness_threshold: float = DEFAULT_STICKINESS_THRESHOLD,
    ):
        """
        Initialize router.

        Args:
            selector: Selector producing the per-turn ranking
            registry: Agent registry used when no pool is passed explicitly
            stickiness_threshold: Default switching margin (0-1)
        """
        if selector is None:
            raise InvalidArgumentError("selector must not be None")

        self.selector = selector
        self.registry = registry
        self.stickiness_threshold = validate_unit_interval(
            stickiness_threshold, "stickiness_threshold"
        )

    async def route(
        self,
        query: str,
        agents: Optional[Iterable[AgentProfile]] = None,
        previous_agent_name: Optional[str] = None,
        stickiness_threshold: Optional[float] = None,
        forced_agent_name: Optional[str] = None,
    ) -> RoutingDecision:
        """
        Route one conversation turn.

        Args:
            query: User request
            agents: Candidate agents (defaults to the registry's agents)
            previous_agent_name: Agent used in the previous turn
            stickiness_threshold: Per-call override of the switching margin
            forced_agent_name: Skip scoring and use this agent

        Returns:
            RoutingDecision

        Raises:
            InvalidArgumentError: Invalid query, pool or threshold
            AgentNotFoundError: forced_agent_name is not registered
        """
        validate_query(query)
        threshold = self.stickiness_threshold
        if stickiness_threshold is not None:
            threshold = validate_unit_interval(stickiness_threshold, "stickiness_threshold")
        pool = self._resolve_pool(agents)

        with create_span(
            "router.route",
            {
                "selector": self.selector.name,
                "previous_agent": previous_agent_name,
                "forced_agent": forced_agent_name,
            },
        ) as span:
            if forced_agent_name:
                decision = RoutingDecision(
                    agent=self._find_forced(pool, forced_agent_name), decision=FORCED
                )
            else:
                scores = await self.selector.score_agents(query, pool)
                decision = apply_stickiness(scores, previous_agent_name, threshold)

            record_routing_decision(decision.decision)
            span.set_attribute("decision", decision.decision)
            span.set_attribute("agent", decision.agent_name or "")

            logger.info(f"Routed to {decision.agent_name} ({decision.decision})")
            return decision

    async def resolve_agent(
        self,
        query: str,
        agents: Optional[Iterable[AgentProfile]] = None,
        previous_agent_name: Optional[str] = None,
        stickiness_threshold: Optional[float] = None,
        forced_agent_name: Optional[str] = None,
    ) -> Optional[AgentProfile]:
        """Route one turn and return only the chosen agent (None for an empty pool)"""
        decision = await self.route(
            query,
            agents,
            previous_agent_name=previous_agent_name,
            stickiness_threshold=stickiness_threshold,
            forced_agent_name=forced_agent_name,
        )
        return decision.agent

    def _resolve_pool(self, agents: Optional[Iterable[AgentProfile]]) -> List[AgentProfile]:
        if agents is None and self.registry is not None:
            return self.registry.get_all()
        return validate_agents(agents)

    def _find_forced(self, pool: List[AgentProfile], name: str) -> AgentProfile:
        agent = find_agent(pool, name)
        if agent is None and self.registry is not None:
            agent = self.registry.get(name)
        if agent is None:
            raise AgentNotFoundError(name)
        return agent
