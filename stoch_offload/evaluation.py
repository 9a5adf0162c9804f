"""
Exact long-run evaluation of a policy on the resolved DTMC.

The policy-weighted transition matrix is built from the same resolved table
the LP uses, and its stationary distribution gives the average delay and
power without simulation noise.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import OffloadingSystemConfig
from .dtmc import DiscreteTimeMarkovChain, DTMCCreator, stationary_distribution
from .models import delay_cost
from .policy import Policy
from .symbols import symbol_mapping
from .transition_calculator import IndependentTransitionCalculator


@dataclass
class PolicyEvaluation:
    average_delay: float
    average_queue_length: float
    average_power: float
    stationary: np.ndarray


def evaluate_policy(
    config: OffloadingSystemConfig,
    policy: Policy,
    chain: Optional[DiscreteTimeMarkovChain] = None,
) -> PolicyEvaluation:
    if chain is None:
        chain = DTMCCreator(config.get_state_manager_config()).create()
    manager = chain.state_manager
    calculator = IndependentTransitionCalculator(symbol_mapping(config), chain)

    states = chain.states
    index = {s: i for i, s in enumerate(states)}
    n = len(states)
    P = np.zeros((n, n))
    delay = np.zeros(n)
    power = np.zeros(n)

    for s in states:
        i = index[s]
        for action, weight in policy.distribution_for(s, chain.actions(s)).items():
            if weight <= 0.0:
                continue
            for dest, p in calculator.transition_distribution(s, action).items():
                P[i, index[dest]] += weight * p
            delay[i] += weight * delay_cost(s, action, config.t_rx)
            power[i] += weight * manager.power(manager.admit(s, action))

    pi = stationary_distribution(P)
    queue = np.array([s.total_queue_length for s in states], dtype=float)
    return PolicyEvaluation(
        average_delay=float(pi @ delay) / float(sum(config.alpha)),
        average_queue_length=float(pi @ queue),
        average_power=float(pi @ power),
        stationary=pi,
    )
