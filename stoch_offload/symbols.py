"""
Parameter symbols used to label DTMC transitions.

A symbol is a pure token: it never carries a number. Numbers are attached
later through a ``{ParameterSymbol: float}`` mapping, so one chain can be
resolved against many parameter values.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .config import OffloadingSystemConfig


class SymbolKind(Enum):
    ALPHA = "Alpha"
    ALPHA_C = "AlphaC"
    BETA = "Beta"
    BETA_C = "BetaC"
    GAMMA = "Gamma"
    GAMMA_C = "GammaC"


@dataclass(frozen=True)
class ParameterSymbol:
    kind: SymbolKind
    queue_index: Optional[int] = None

    def __str__(self) -> str:
        if self.queue_index is None:
            return self.kind.value
        return f"{self.kind.value}[{self.queue_index}]"

    @classmethod
    def alpha(cls, queue_index: int = 0) -> "ParameterSymbol":
        return cls(SymbolKind.ALPHA, queue_index)

    @classmethod
    def alpha_c(cls, queue_index: int = 0) -> "ParameterSymbol":
        return cls(SymbolKind.ALPHA_C, queue_index)


BETA = ParameterSymbol(SymbolKind.BETA)
BETA_C = ParameterSymbol(SymbolKind.BETA_C)
GAMMA = ParameterSymbol(SymbolKind.GAMMA)
GAMMA_C = ParameterSymbol(SymbolKind.GAMMA_C)


def symbol_mapping(config: OffloadingSystemConfig) -> Dict[ParameterSymbol, float]:
    """Values of every symbol the chain of `config` can reference."""
    mapping = {
        BETA: config.beta,
        BETA_C: 1.0 - config.beta,
        GAMMA: config.gamma,
        GAMMA_C: 1.0 - config.gamma,
    }
    for i, a in enumerate(config.alpha):
        mapping[ParameterSymbol.alpha(i)] = a
        mapping[ParameterSymbol.alpha_c(i)] = 1.0 - a
    return mapping
