"""
Selection Errors

Exception hierarchy raised by the selectors, the similarity math and the
stickiness router.
"""


class SelectionError(Exception):
    """Base class for agent selection errors"""


class InvalidArgumentError(SelectionError, ValueError):
    """Raised before any work is done when an argument is invalid"""


class DimensionMismatchError(InvalidArgumentError):
    """Raised when two vectors do not have the same length"""

    def __init__(self, left: int, right: int):
        super().__init__(
            f"Vectors must have the same dimensions (dimension mismatch): "
            f"got {left} and {right}"
        )
        self.left = left
        self.right = right


class AgentNotFoundError(SelectionError, LookupError):
    """Raised when a named agent is not registered"""

    def __init__(self, agent_name: str, message: str = None):
        super().__init__(message or f"Agent '{agent_name}' not found.")
        self.agent_name = agent_name


class EmbeddingProviderError(SelectionError):
    """Raised when an embedding provider violates its contract"""
