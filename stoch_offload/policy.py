from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Sequence, Tuple

from .models import Action, ActionKind, UserEquipmentState

Distribution = Dict[Action, float]


class Policy(ABC):
    """Anything that maps a state to a distribution over its legal actions."""
    name: str = "policy"

    @abstractmethod
    def distribution_for(self, state: UserEquipmentState, legal_actions: Sequence[Action]) -> Distribution: ...

    def __str__(self) -> str:
        return self.name


class DeterministicPolicy(Policy):
    """Baseline policy: one action per state, returned as a one-hot distribution."""
    preference: Tuple[ActionKind, ...] = ()

    def action_for(self, state: UserEquipmentState, legal_actions: Sequence[Action]) -> Action:
        for kind in self.preference:
            candidates = [a for a in legal_actions if a.kind is kind]
            if candidates:
                # longest source queue(s) first, lowest index on ties
                return min(
                    candidates,
                    key=lambda a: (-sum(state.queue_lengths[q] for q in a.source_queues()), a.source_queues()),
                )
        return Action.no_operation()

    def distribution_for(self, state: UserEquipmentState, legal_actions: Sequence[Action]) -> Distribution:
        return {self.action_for(state, legal_actions): 1.0}


class LocalOnlyPolicy(DeterministicPolicy):
    name = "local_only"
    preference = (ActionKind.ADD_TO_CPU,)


class TransmitOnlyPolicy(DeterministicPolicy):
    name = "transmit_only"
    preference = (ActionKind.ADD_TO_TRANSMISSION_UNIT,)


class GreedyOffloadFirstPolicy(DeterministicPolicy):
    name = "greedy_offload_first"
    preference = (
        ActionKind.ADD_TO_BOTH_UNITS,
        ActionKind.ADD_TO_TRANSMISSION_UNIT,
        ActionKind.ADD_TO_CPU,
    )


class GreedyLocalFirstPolicy(DeterministicPolicy):
    name = "greedy_local_first"
    preference = (
        ActionKind.ADD_TO_BOTH_UNITS,
        ActionKind.ADD_TO_CPU,
        ActionKind.ADD_TO_TRANSMISSION_UNIT,
    )


ALL_BASELINES: Dict[str, DeterministicPolicy] = {
    p.name: p
    for p in (LocalOnlyPolicy(), TransmitOnlyPolicy(), GreedyOffloadFirstPolicy(), GreedyLocalFirstPolicy())
}


class StochasticPolicy(Policy):
    """
    Randomized stationary policy produced by the LP.

    States that carry no stationary mass under the LP solution have no
    entry; there the policy is uniform over the legal actions.
    """
    name = "stochastic"

    def __init__(
        self,
        table: Mapping[UserEquipmentState, Mapping[Action, float]],
        eta: float,
        expected_delay_cost: Optional[float] = None,
        expected_power: Optional[float] = None,
    ):
        # plain dicts so the policy pickles across worker processes
        self._table = {s: dict(d) for s, d in table.items()}
        self.eta = eta
        self.expected_delay_cost = expected_delay_cost
        self.expected_power = expected_power

    @property
    def table(self) -> Mapping[UserEquipmentState, Mapping[Action, float]]:
        return MappingProxyType(self._table)

    def distribution_for(self, state: UserEquipmentState, legal_actions: Sequence[Action]) -> Distribution:
        entry = self._table.get(state)
        if entry is not None:
            return dict(entry)
        p = 1.0 / len(legal_actions)
        return {a: p for a in legal_actions}

    def __repr__(self) -> str:
        return f"StochasticPolicy(eta={self.eta}, states={len(self._table)})"
