"""
Agent Profiles

Defines the agent record every selector scores, and an in-memory registry for
looking agents up by name.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import logging
import threading

from .exceptions import AgentNotFoundError, InvalidArgumentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AgentProfile:
    """
    Capability profile of a routable agent.

    Only name, description, capabilities and tags take part in scoring;
    metadata is carried along for callers.
    """

    # Identity (unique, compared case-insensitively)
    name: str

    description: str = ""

    # Weight-critical short tags, e.g. ("code-generation", "code-review")
    capabilities: Tuple[str, ...] = ()

    # Categorization, e.g. ("coding", "development")
    tags: Tuple[str, ...] = ()

    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidArgumentError("Agent name must be a non-empty string")

        # Accept lists from callers but store immutable tuples
        object.__setattr__(self, "capabilities", tuple(self.capabilities))
        object.__setattr__(self, "tags", tuple(self.tags))

    @property
    def key(self) -> str:
        """Case-insensitive identity key"""
        return self.name.lower()

    @property
    def document_text(self) -> str:
        """Name, description, capabilities and tags joined for text scoring"""
        parts = [self.name, self.description]
        parts.extend(self.capabilities)
        parts.extend(self.tags)
        return " ".join(parts)

    def has_capability(self, capability: str) -> bool:
        return capability.lower() in (c.lower() for c in self.capabilities)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "name": self.name,
            "description": self.description,
            "capabilities": list(self.capabilities),
            "tags": list(self.tags),
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AgentProfile":
        """Create from dictionary"""
        return cls(
            name=data["name"],
            description=data.get("description", ""),
            capabilities=tuple(data.get("capabilities", ())),
            tags=tuple(data.get("tags", ())),
            metadata=dict(data.get("metadata", {})),
        )


class AgentRegistry:
    """
    Thread-safe registry of agent profiles keyed by case-insensitive name.
    """

    def __init__(self):
        self._agents: Dict[str, AgentProfile] = {}
        self._lock = threading.Lock()

    def register(self, agent: AgentProfile) -> None:
        """
        Register an agent.

        Args:
            agent: Agent profile to register

        Raises:
            InvalidArgumentError: If an agent with the same name exists
        """
        if agent is None:
            raise InvalidArgumentError("Agent must not be None")

        with self._lock:
            if agent.key in self._agents:
                raise InvalidArgumentError(f"Agent '{agent.name}' is already registered.")
            self._agents[agent.key] = agent

        logger.info(f"Registered agent {agent.name} with capabilities: {list(agent.capabilities)}")

    def unregister(self, name: str) -> None:
        """Remove an agent if present"""
        with self._lock:
            removed = self._agents.pop(self._key(name), None)

        if removed is None:
            logger.warning(f"Attempted to unregister unknown agent: {name}")
        else:
            logger.info(f"Unregistered agent {removed.name}")

    def get(self, name: str) -> Optional[AgentProfile]:
        """Get an agent by name (None if not registered)"""
        with self._lock:
            return self._agents.get(self._key(name))

    def require(self, name: str) -> AgentProfile:
        """Get an agent by name or raise AgentNotFoundError"""
        agent = self.get(name)
        if agent is None:
            raise AgentNotFoundError(name)
        return agent

    def contains(self, name: str) -> bool:
        return self.get(name) is not None

    def list_names(self) -> List[str]:
        with self._lock:
            return [agent.name for agent in self._agents.values()]

    def get_all(self) -> List[AgentProfile]:
        """Get all agents in registration order"""
        with self._lock:
            return list(self._agents.values())

    def count(self) -> int:
        with self._lock:
            return len(self._agents)

    def clear(self) -> None:
        with self._lock:
            self._agents.clear()

    def get_stats(self) -> Dict[str, Any]:
        """Get registry statistics"""
        agents = self.get_all()
        return {
            "total_agents": len(agents),
            "capabilities": len({c.lower() for a in agents for c in a.capabilities}),
            "tags": len({t.lower() for a in agents for t in a.tags}),
        }

    @staticmethod
    def _key(name: str) -> str:
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgumentError("Agent name must be a non-empty string")
        return name.lower()


def find_agent(agents: List[AgentProfile], name: str) -> Optional[AgentProfile]:
    """Find an agent in a pool by case-insensitive name"""
    key = name.lower()
    for agent in agents:
        if agent.key == key:
            return agent
    return None
