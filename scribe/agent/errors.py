"""Errors that end an agent turn"""


class AgentError(Exception):
    """Base class for turn-terminating agent failures"""

    kind = "internal"


class IterationLimitExceeded(AgentError):
    """The model kept requesting tools past the iteration bound"""

    kind = "iteration_limit"

    def __init__(self, limit: int):
        super().__init__(
            f"Tool iteration limit reached: the model requested more than {limit} tool calls in one turn"
        )
        self.limit = limit
