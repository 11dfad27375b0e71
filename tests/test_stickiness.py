"""
Tests for Stickiness Router

Tests incumbent retention, switching margins, forced routing and registry
backed agent pools.
"""

import pytest
import sys
from pathlib import Path
from typing import Dict, List

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from selection.agents import AgentProfile, AgentRegistry
from selection.base import AgentSelector
from selection.exceptions import AgentNotFoundError, InvalidArgumentError
from selection.results import AgentScore, SelectionResult, rank_scores
from selection.stickiness import (
    StickinessRouter,
    RoutingDecision,
    apply_stickiness,
    FORCED,
    FIRST_TURN,
    KEPT,
    SWITCHED,
    EMPTY,
)


class StaticSelector(AgentSelector):
    """Selector returning preset scores, for exercising routing decisions"""

    name = "static"

    def __init__(self, scores: Dict[str, float]):
        self.scores = scores
        self.calls = 0

    async def score_agents(self, query, agents) -> List[AgentScore]:
        self.calls += 1
        return rank_scores(
            [AgentScore(agent=a, score=self.scores.get(a.name, 0.0)) for a in agents]
        )

    async def select_agent(self, query, agents) -> SelectionResult:
        scores = await self.score_agents(query, agents)
        if not scores:
            return SelectionResult.empty()
        return SelectionResult(
            selected_agent=scores[0].agent,
            confidence_score=scores[0].score,
            selection_reason="static",
            all_scores=scores,
        )


@pytest.fixture
def agents():
    return [
        AgentProfile(name="planner"),
        AgentProfile(name="coder"),
        AgentProfile(name="reviewer"),
    ]


def scored(agents, values):
    """Build a ranked score list from {name: score}"""
    return rank_scores([AgentScore(agent=a, score=values[a.name]) for a in agents])


class TestApplyStickiness:
    """Test the pure stickiness decision"""

    def test_first_turn_takes_best(self, agents):
        scores = scored(agents, {"planner": 0.2, "coder": 0.9, "reviewer": 0.5})

        decision = apply_stickiness(scores, None)

        assert decision.agent_name == "coder"
        assert decision.decision == FIRST_TURN
        assert decision.delta is None

    def test_keeps_incumbent_within_threshold(self, agents):
        scores = scored(agents, {"planner": 0.7, "coder": 0.8, "reviewer": 0.1})

        decision = apply_stickiness(scores, "planner", 0.2)

        assert decision.agent_name == "planner"
        assert decision.decision == KEPT
        assert decision.delta == pytest.approx(0.1)
        assert not decision.switched

    def test_switches_beyond_threshold(self, agents):
        scores = scored(agents, {"planner": 0.3, "coder": 0.95, "reviewer": 0.1})

        decision = apply_stickiness(scores, "planner", 0.2)

        assert decision.agent_name == "coder"
        assert decision.decision == SWITCHED
        assert decision.switched
        assert decision.delta == pytest.approx(0.65)

    def test_delta_equal_to_threshold_keeps(self, agents):
        """The comparison is inclusive: delta == threshold keeps the incumbent"""
        scores = scored(agents, {"planner": 0.5, "coder": 0.75, "reviewer": 0.0})

        decision = apply_stickiness(scores, "planner", 0.25)

        assert decision.agent_name == "planner"
        assert decision.decision == KEPT
        assert decision.delta == 0.25

    def test_delta_just_over_threshold_switches(self, agents):
        scores = scored(agents, {"planner": 0.5, "coder": 0.75, "reviewer": 0.0})

        decision = apply_stickiness(scores, "planner", 0.125)

        assert decision.agent_name == "coder"
        assert decision.decision == SWITCHED

    def test_incumbent_already_best(self, agents):
        scores = scored(agents, {"planner": 0.9, "coder": 0.8, "reviewer": 0.1})

        decision = apply_stickiness(scores, "planner", 0.0)

        assert decision.agent_name == "planner"
        assert decision.decision == KEPT
        assert decision.delta == 0.0

    def test_previous_agent_name_case_insensitive(self, agents):
        scores = scored(agents, {"planner": 0.7, "coder": 0.8, "reviewer": 0.1})

        decision = apply_stickiness(scores, "PLANNER", 0.2)

        assert decision.agent_name == "planner"

    def test_missing_incumbent_switches(self, agents):
        scores = scored(agents, {"planner": 0.1, "coder": 0.2, "reviewer": 0.3})

        decision = apply_stickiness(scores, "retired-agent", 1.0)

        assert decision.agent_name == "reviewer"
        assert decision.decision == SWITCHED
        assert decision.delta is None

    def test_empty_scores(self):
        decision = apply_stickiness([], "planner")

        assert decision.agent is None
        assert decision.decision == EMPTY

    @pytest.mark.parametrize("threshold", [-0.01, 1.01])
    def test_threshold_out_of_range(self, agents, threshold):
        scores = scored(agents, {"planner": 0.1, "coder": 0.2, "reviewer": 0.3})

        with pytest.raises(InvalidArgumentError):
            apply_stickiness(scores, "planner", threshold)


class TestRouterInitialization:
    """Test router construction"""

    def test_selector_required(self):
        with pytest.raises(InvalidArgumentError):
            StickinessRouter(None)

    def test_threshold_validated(self):
        with pytest.raises(InvalidArgumentError):
            StickinessRouter(StaticSelector({}), stickiness_threshold=2.0)

    def test_default_threshold(self):
        router = StickinessRouter(StaticSelector({}))
        assert router.stickiness_threshold == 0.2


class TestRouting:
    """Test conversation routing"""

    @pytest.mark.asyncio
    async def test_first_turn(self, agents):
        router = StickinessRouter(StaticSelector({"planner": 0.4, "coder": 0.9}))

        decision = await router.route("start a project", agents)

        assert isinstance(decision, RoutingDecision)
        assert decision.agent_name == "coder"
        assert decision.decision == FIRST_TURN
        assert [s.agent.name for s in decision.scores][0] == "coder"

    @pytest.mark.asyncio
    async def test_conversation_stays_with_incumbent(self, agents):
        selector = StaticSelector({"planner": 0.7, "coder": 0.8})
        router = StickinessRouter(selector, stickiness_threshold=0.2)

        decision = await router.route("next step", agents, previous_agent_name="planner")

        assert decision.agent_name == "planner"
        assert decision.decision == KEPT

    @pytest.mark.asyncio
    async def test_conversation_switches_on_large_gap(self, agents):
        router = StickinessRouter(StaticSelector({"planner": 0.3, "coder": 0.95}))

        decision = await router.route("write the code", agents, previous_agent_name="planner")

        assert decision.agent_name == "coder"
        assert decision.decision == SWITCHED

    @pytest.mark.asyncio
    async def test_per_call_threshold_override(self, agents):
        router = StickinessRouter(StaticSelector({"planner": 0.3, "coder": 0.7}))

        kept = await router.route(
            "next", agents, previous_agent_name="planner", stickiness_threshold=0.5
        )
        switched = await router.route("next", agents, previous_agent_name="planner")

        assert kept.agent_name == "planner"
        assert switched.agent_name == "coder"

    @pytest.mark.asyncio
    async def test_invalid_per_call_threshold(self, agents):
        router = StickinessRouter(StaticSelector({}))

        with pytest.raises(InvalidArgumentError):
            await router.route("next", agents, stickiness_threshold=-1.0)

    @pytest.mark.asyncio
    async def test_forced_agent_bypasses_scoring(self, agents):
        selector = StaticSelector({"planner": 0.1, "coder": 0.9})
        router = StickinessRouter(selector)

        decision = await router.route(
            "anything", agents, previous_agent_name="coder", forced_agent_name="Reviewer"
        )

        assert decision.agent_name == "reviewer"
        assert decision.decision == FORCED
        assert selector.calls == 0

    @pytest.mark.asyncio
    async def test_forced_agent_not_found(self, agents):
        router = StickinessRouter(StaticSelector({}))

        with pytest.raises(AgentNotFoundError) as exc_info:
            await router.route("anything", agents, forced_agent_name="ghost")

        assert exc_info.value.agent_name == "ghost"
        assert "ghost" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_forced_agent_resolved_from_registry(self, agents):
        registry = AgentRegistry()
        registry.register(AgentProfile(name="auditor"))
        router = StickinessRouter(StaticSelector({}), registry=registry)

        decision = await router.route("audit", agents, forced_agent_name="auditor")

        assert decision.agent_name == "auditor"
        assert decision.decision == FORCED

    @pytest.mark.asyncio
    async def test_registry_supplies_default_pool(self, agents):
        registry = AgentRegistry()
        for agent in agents:
            registry.register(agent)
        router = StickinessRouter(StaticSelector({"reviewer": 0.9}), registry=registry)

        decision = await router.route("review this")

        assert decision.agent_name == "reviewer"
        assert len(decision.scores) == 3

    @pytest.mark.asyncio
    async def test_no_pool_and_no_registry(self):
        router = StickinessRouter(StaticSelector({}))

        with pytest.raises(InvalidArgumentError):
            await router.route("hello")

    @pytest.mark.asyncio
    async def test_empty_pool(self):
        router = StickinessRouter(StaticSelector({}))

        decision = await router.route("hello", [], previous_agent_name="planner")

        assert decision.agent is None
        assert decision.decision == EMPTY

    @pytest.mark.asyncio
    async def test_invalid_query_rejected_even_when_forced(self, agents):
        router = StickinessRouter(StaticSelector({}))

        with pytest.raises(InvalidArgumentError):
            await router.route("   ", agents, forced_agent_name="planner")

    @pytest.mark.asyncio
    async def test_resolve_agent(self, agents):
        router = StickinessRouter(StaticSelector({"coder": 0.9}))

        agent = await router.resolve_agent("build it", agents)

        assert agent.name == "coder"
