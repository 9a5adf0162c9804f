"""
Numeric resolution of the symbolic chain.

Several physical outcomes may land on the same destination (a dropped
arrival on a full queue, for instance). Their edges are kept apart in the
chain and *summed* here, never overwritten.
"""

from typing import Dict, Mapping, Tuple

from .dtmc import DiscreteTimeMarkovChain, SymbolProduct
from .exceptions import InvalidStateError, InvalidTransitionError, UnknownSymbolError
from .models import Action, UserEquipmentState
from .symbols import ParameterSymbol

ResolvedChain = Dict[Tuple[UserEquipmentState, Action], Dict[UserEquipmentState, float]]


class IndependentTransitionCalculator:
    def __init__(self, symbol_mapping: Mapping[ParameterSymbol, float], chain: DiscreteTimeMarkovChain):
        self.symbol_mapping = dict(symbol_mapping)
        self.chain = chain

    def _product(self, symbols: SymbolProduct) -> float:
        value = 1.0
        for symbol in symbols:
            try:
                value *= self.symbol_mapping[symbol]
            except KeyError:
                raise UnknownSymbolError(symbol) from None
        return value

    def _check_pair(self, source: UserEquipmentState, action: Action) -> None:
        if source not in self.chain:
            raise InvalidStateError(f"Source state {source} is not in the chain")
        if not self.chain.has_pair(source, action):
            raise InvalidTransitionError(f"Action {action} is not available in state {source}")

    def get_independent_transition_fraction(
        self,
        source: UserEquipmentState,
        dest: UserEquipmentState,
        action: Action,
    ) -> float:
        """
        Probability of moving from `source` to `dest` under `action`.

        Returns 0.0 when `dest` is a valid state that no edge reaches.
        """
        self._check_pair(source, action)
        if dest not in self.chain:
            raise InvalidStateError(f"Destination state {dest} is not in the chain")

        return float(sum(
            self._product(edge.symbols)
            for edge in self.chain.edges(source, action)
            if edge.destination == dest
        ))

    def transition_distribution(self, source: UserEquipmentState, action: Action) -> Dict[UserEquipmentState, float]:
        """All reachable destinations of (source, action) with aliased edges merged."""
        self._check_pair(source, action)
        distribution: Dict[UserEquipmentState, float] = {}
        for edge in self.chain.edges(source, action):
            distribution[edge.destination] = distribution.get(edge.destination, 0.0) + self._product(edge.symbols)
        return distribution

    def resolve(self) -> ResolvedChain:
        return {
            (source, action): self.transition_distribution(source, action)
            for source, action in self.chain.pairs()
        }
