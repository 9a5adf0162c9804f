"""Error kinds raised by the offloading model.

None of these are retried: each one points at a configuration or modelling
problem and is meant to reach the caller.
"""


class OffloadingError(Exception):
    """Base class for every error raised by ``stoch_offload``."""


class InvalidConfigurationError(OffloadingError, ValueError):
    """Malformed capacities or out-of-range probabilities."""


class UnknownSymbolError(OffloadingError, KeyError):
    """A transition references a parameter symbol with no supplied value."""

    def __init__(self, symbol):
        super().__init__(symbol)
        self.symbol = symbol

    def __str__(self) -> str:
        return f"No value supplied for symbol {self.symbol}"


class InvalidStateError(OffloadingError, ValueError):
    """A state does not belong to the chain's state set."""


class InvalidTransitionError(OffloadingError, ValueError):
    """A (source, action) pair is not part of the chain."""


class InfeasiblePolicyError(OffloadingError):
    """No stationary policy satisfies the power budget."""

    def __init__(self, budget: float, message: str = ""):
        super().__init__(f"No policy satisfies power budget eta={budget}. {message}".strip())
        self.budget = budget


class PolicySolverError(OffloadingError, RuntimeError):
    """The LP solver stopped without an optimal or infeasible verdict."""
