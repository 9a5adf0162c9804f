"""
Symbolic discrete-time Markov chain of the UE.

`DTMCCreator` walks every (state, legal action) pair once and records, for
each stochastic outcome, an edge labelled with the product of symbols giving
its likelihood. The chain depends only on the structural
`StateManagerConfig`; parameter values come in later through
`transition_calculator`.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

import numpy as np
from scipy import linalg

from .config import StateManagerConfig
from .models import Action, UserEquipmentState, UserEquipmentStateManager
from .symbols import ParameterSymbol

logger = logging.getLogger(__name__)

SymbolProduct = Tuple[ParameterSymbol, ...]


@dataclass(frozen=True)
class SymbolicEdge:
    destination: UserEquipmentState
    symbols: SymbolProduct


class DiscreteTimeMarkovChain:
    """Read-only multigraph: (source, action) -> edges."""

    def __init__(
        self,
        states: Tuple[UserEquipmentState, ...],
        edges: Dict[Tuple[UserEquipmentState, Action], Tuple[SymbolicEdge, ...]],
        state_manager: UserEquipmentStateManager,
    ):
        self.states = states
        self.state_set = frozenset(states)
        self.state_manager = state_manager
        self._edges = dict(edges)

        actions: Dict[UserEquipmentState, List[Action]] = {s: [] for s in states}
        for source, action in edges:
            actions[source].append(action)
        self._actions = {s: tuple(a) for s, a in actions.items()}

    def __contains__(self, state: UserEquipmentState) -> bool:
        return state in self.state_set

    def actions(self, state: UserEquipmentState) -> Tuple[Action, ...]:
        return self._actions[state]

    def edges(self, source: UserEquipmentState, action: Action) -> Tuple[SymbolicEdge, ...]:
        return self._edges[(source, action)]

    def has_pair(self, source: UserEquipmentState, action: Action) -> bool:
        return (source, action) in self._edges

    def pairs(self):
        return self._edges.keys()

    @property
    def number_of_edges(self) -> int:
        return sum(len(e) for e in self._edges.values())


class DTMCCreator:
    def __init__(self, config: StateManagerConfig):
        self.config = config
        self.state_manager = UserEquipmentStateManager(config)

    def create(self) -> DiscreteTimeMarkovChain:
        states = self.state_manager.all_states()
        edges: Dict[Tuple[UserEquipmentState, Action], Tuple[SymbolicEdge, ...]] = {}

        for source in states:
            for action in self.state_manager.legal_actions(source):
                admitted = self.state_manager.admit(source, action)
                edges[(source, action)] = tuple(
                    SymbolicEdge(self.state_manager.next_state(admitted, outcome), symbols)
                    for outcome, symbols in self.state_manager.outcomes(admitted)
                )

        chain = DiscreteTimeMarkovChain(states, edges, self.state_manager)
        logger.debug(
            "Built DTMC: %d states, %d state/action pairs, %d edges",
            len(states), len(edges), chain.number_of_edges,
        )
        return chain


def stationary_distribution(P: np.ndarray) -> np.ndarray:
    """
    Solve pi = pi P with sum(pi) = 1 in the least-squares sense. Unique for
    unichain P; otherwise one of the stationary distributions.
    """
    n = P.shape[0]
    A = np.vstack([P.T - np.eye(n), np.ones((1, n))])
    b = np.zeros(n + 1)
    b[-1] = 1.0
    pi, *_ = linalg.lstsq(A, b)
    pi = np.clip(np.real(pi), 0.0, None)
    return pi / pi.sum()


def gain_and_bias(P: np.ndarray, cost: np.ndarray) -> Tuple[float, np.ndarray]:
    """
    Average cost g and relative values h of a unichain policy:

        g + h = cost + P h,    h[0] = 0
    """
    n = P.shape[0]
    A = np.zeros((n + 1, n + 1))
    A[:n, :n] = np.eye(n) - P
    A[:n, n] = 1.0
    A[n, 0] = 1.0
    b = np.append(cost, 0.0)
    solution, *_ = linalg.lstsq(A, b)
    return float(solution[n]), solution[:n]
