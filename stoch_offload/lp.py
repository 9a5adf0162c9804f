"""
lp.py

Constrained-MDP linear program over the resolved DTMC.

Variables are the stationary state/action frequencies x(s, a) >= 0 of the
legal pairs. Constraints:

    sum_a x(s', a) = sum_{s, a} x(s, a) P(s' | s, a)    for every state s'
    sum x = 1
    sum x(s, a) * power(s, a) <= eta

Objective: minimise sum x(s, a) * delay_cost(s, a). The randomized policy is
pi(a | s) = x(s, a) / sum_b x(s, b); states the LP leaves unvisited are completed
by policy iteration (`improve_policy`).
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy import sparse
from scipy.optimize import linprog

from .config import OffloadingSystemConfig, ParameterRange
from .dtmc import DiscreteTimeMarkovChain, DTMCCreator, gain_and_bias
from .exceptions import InfeasiblePolicyError, InvalidConfigurationError, PolicySolverError
from .models import Action, UserEquipmentState, delay_cost
from .policy import StochasticPolicy
from .symbols import symbol_mapping
from .transition_calculator import IndependentTransitionCalculator, ResolvedChain
from .workers import map_in_pool

logger = logging.getLogger(__name__)

Pair = Tuple[UserEquipmentState, Action]

# HiGHS rejects feasibility tolerances outside this window
MIN_TOLERANCE = 1e-10
MAX_TOLERANCE = 1e-7

IMPROVEMENT_TOLERANCE = 1e-12
MAX_POLICY_ITERATIONS = 100


@dataclass
class LPSolution:
    occupation: Dict[Pair, float]
    objective: float
    power: float
    power_price: float = 0.0


def solver_tolerance(precision: int) -> float:
    return float(np.clip(10.0 ** -(precision + 2), MIN_TOLERANCE, MAX_TOLERANCE))


def solve_occupation_measure_lp(
    transitions: ResolvedChain,
    delay_costs: Dict[Pair, float],
    power_costs: Dict[Pair, float],
    budget: float,
    tolerance: float = MAX_TOLERANCE,
) -> LPSolution:
    """
    LP oracle: numeric transition table + cost tables + budget -> optimal
    state/action frequencies. Raises `InfeasiblePolicyError` when no policy
    meets the budget.
    """
    pairs: List[Pair] = list(transitions.keys())
    states = sorted({s for s, _ in pairs} | {d for dist in transitions.values() for d in dist}, key=_state_key)
    state_index = {s: i for i, s in enumerate(states)}
    n_states, n_vars = len(states), len(pairs)

    rows, cols, vals = [], [], []
    for k, (source, action) in enumerate(pairs):
        rows.append(state_index[source])
        cols.append(k)
        vals.append(1.0)
        for dest, p in transitions[(source, action)].items():
            rows.append(state_index[dest])
            cols.append(k)
            vals.append(-p)
        # normalisation row
        rows.append(n_states)
        cols.append(k)
        vals.append(1.0)
    A_eq = sparse.csr_matrix((vals, (rows, cols)), shape=(n_states + 1, n_vars))
    b_eq = np.zeros(n_states + 1)
    b_eq[-1] = 1.0

    c = np.array([delay_costs[p] for p in pairs])
    power = np.array([power_costs[p] for p in pairs])

    res = linprog(
        c,
        A_ub=power.reshape(1, -1),
        b_ub=np.array([budget]),
        A_eq=A_eq,
        b_eq=b_eq,
        bounds=(0.0, None),
        method="highs",
        options={
            "primal_feasibility_tolerance": tolerance,
            "dual_feasibility_tolerance": tolerance,
        },
    )

    if res.status == 2:
        raise InfeasiblePolicyError(budget, res.message)
    if not res.success:
        raise PolicySolverError(f"LP solver failed (status {res.status}): {res.message}")

    x = np.clip(res.x, 0.0, None)
    return LPSolution(
        occupation={p: float(v) for p, v in zip(pairs, x)},
        objective=float(res.fun),
        power=float(power @ x),
        # shadow price of the budget row, <= 0
        power_price=float(min(res.ineqlin.marginals[0], 0.0)),
    )


def _state_key(state: UserEquipmentState):
    return (state.queue_lengths, state.tu_state, state.cpu_state)


def _rounded_distribution(weights: Dict[Action, float], precision: int) -> Dict[Action, float]:
    mass = sum(weights.values())
    rounded = {a: round(w / mass, precision) for a, w in weights.items()}
    rounded = {a: p for a, p in rounded.items() if p > 0.0}
    if not rounded:
        # every action rounded away, keep the heaviest one
        return {max(weights, key=weights.get): 1.0}
    total = sum(rounded.values())
    return {a: p / total for a, p in rounded.items()}


def improve_policy(
    table: Dict[UserEquipmentState, Dict[Action, float]],
    transitions: ResolvedChain,
    costs: Dict[Pair, float],
    refine: Sequence[UserEquipmentState],
    max_iterations: int = MAX_POLICY_ITERATIONS,
) -> Dict[UserEquipmentState, Dict[Action, float]]:
    """
    Policy iteration restricted to the states in `refine`; every other row
    of `table` stays as it is. States missing from `table` start uniform.

    A refined state switches to argmin_a cost(s, a) + sum P(s'|s, a) h(s')
    only when that beats its current row by more than
    IMPROVEMENT_TOLERANCE, so ties keep the current choice.
    """
    actions: Dict[UserEquipmentState, List[Action]] = {}
    for state, action in transitions:
        actions.setdefault(state, []).append(action)
    states = sorted(actions, key=_state_key)
    index = {s: i for i, s in enumerate(states)}
    rows = {
        s: dict(table[s]) if s in table else {a: 1.0 / len(actions[s]) for a in actions[s]}
        for s in states
    }

    n = len(states)
    for iteration in range(max_iterations):
        P = np.zeros((n, n))
        cost = np.zeros(n)
        for s, row in rows.items():
            i = index[s]
            for a, w in row.items():
                cost[i] += w * costs[(s, a)]
                for dest, p in transitions[(s, a)].items():
                    P[i, index[dest]] += w * p
        _, h = gain_and_bias(P, cost)

        changed = 0
        for s in refine:
            q = {
                a: costs[(s, a)] + sum(p * h[index[d]] for d, p in transitions[(s, a)].items())
                for a in actions[s]
            }
            current = sum(w * q[a] for a, w in rows[s].items())
            best = min(actions[s], key=q.get)
            if q[best] < current - IMPROVEMENT_TOLERANCE * (1.0 + abs(current)):
                rows[s] = {best: 1.0}
                changed += 1
        logger.debug("Policy iteration %d: %d state(s) changed", iteration, changed)
        if not changed:
            break
    else:
        logger.warning("Policy iteration did not settle after %d iterations", max_iterations)
    return rows


def policy_from_occupation(
    solution: LPSolution,
    transitions: ResolvedChain,
    delay_costs: Dict[Pair, float],
    power_costs: Dict[Pair, float],
    eta: float,
    precision: int,
) -> StochasticPolicy:
    """
    Normalise per state; probabilities are rounded to `precision` decimals.

    States whose LP mass is below the solver tolerance carry no usable
    frequencies. Their action comes from `improve_policy` on the Lagrangian
    cost delay - power_price * power, with the LP rows held fixed. When the
    budget has slack the LP is a plain average-delay MDP and every state is
    refined on delay alone.
    """
    tolerance = solver_tolerance(precision)
    by_state: Dict[UserEquipmentState, Dict[Action, float]] = {}
    for (state, action), x in solution.occupation.items():
        by_state.setdefault(state, {})[action] = x

    table = {
        state: _rounded_distribution(weights, precision)
        for state, weights in by_state.items()
        if sum(weights.values()) > tolerance
    }

    if solution.power < eta - tolerance:
        refine = list(by_state)
        costs = delay_costs
    else:
        refine = [s for s in by_state if s not in table]
        costs = {p: delay_costs[p] - solution.power_price * power_costs[p] for p in delay_costs}
    if refine:
        table = improve_policy(table, transitions, costs, refine)

    return StochasticPolicy(
        table,
        eta=eta,
        expected_delay_cost=solution.objective,
        expected_power=solution.power,
    )


def check_precision(precision: int) -> None:
    if not isinstance(precision, (int, np.integer)) or precision < 1:
        raise InvalidConfigurationError(f"precision must be an integer >= 1, got {precision}")


class OptimalPolicyFinder:
    """
    Build -> resolve once for a configuration, then solve the LP for any
    number of budgets.
    """

    def __init__(self, config: OffloadingSystemConfig, chain: Optional[DiscreteTimeMarkovChain] = None):
        self.config = config
        manager_config = config.get_state_manager_config()
        if chain is None:
            chain = DTMCCreator(manager_config).create()
        elif chain.state_manager.config != manager_config:
            raise InvalidConfigurationError("Chain was built for a different state space")
        self.chain = chain
        self.state_manager = chain.state_manager

        calculator = IndependentTransitionCalculator(symbol_mapping(config), chain)
        self.transitions: ResolvedChain = calculator.resolve()
        self.delay_costs = {
            (s, a): delay_cost(s, a, config.t_rx) for s, a in self.transitions
        }
        self.power_costs = {
            (s, a): self.state_manager.power(self.state_manager.admit(s, a)) for s, a in self.transitions
        }

    def find_for_budget(self, eta: float, precision: int) -> StochasticPolicy:
        check_precision(precision)
        return _solve_budget((self.transitions, self.delay_costs, self.power_costs, eta, precision))

    @classmethod
    def find_optimal_policy_for_given_eta(
        cls,
        config: OffloadingSystemConfig,
        precision: int,
        chain: Optional[DiscreteTimeMarkovChain] = None,
    ) -> StochasticPolicy:
        """Optimal policy under the budget of `config` (eta, or p_max if unset)."""
        return cls(config, chain).find_for_budget(config.power_budget, precision)


def _solve_budget(args) -> StochasticPolicy:
    transitions, delay_costs, power_costs, eta, precision = args
    solution = solve_occupation_measure_lp(
        transitions, delay_costs, power_costs, eta, tolerance=solver_tolerance(precision)
    )
    logger.info(
        "LP solved for eta=%.4f: %d variables, delay cost=%.6f, power=%.4f",
        eta, len(transitions), solution.objective, solution.power,
    )
    return policy_from_occupation(solution, transitions, delay_costs, power_costs, eta, precision)


class RangedOptimalPolicyFinder:

    @staticmethod
    def find_optimal_policy_for_given_eta(config: OffloadingSystemConfig, precision: int) -> StochasticPolicy:
        return OptimalPolicyFinder.find_optimal_policy_for_given_eta(config, precision)

    @staticmethod
    def find_optimal_policies_for_eta_range(
        config: OffloadingSystemConfig,
        eta_range: ParameterRange,
        precision: int,
        num_workers: int = 1,
    ) -> List[StochasticPolicy]:
        """One policy per eta of `eta_range`, in the same order."""
        check_precision(precision)
        etas = eta_range.values()
        for eta in etas:
            if eta < 0.0:
                raise InvalidConfigurationError(f"eta must be >= 0, got {eta}")

        finder = OptimalPolicyFinder(config)
        worker_args = [
            (finder.transitions, finder.delay_costs, finder.power_costs, eta, precision)
            for eta in etas
        ]
        return map_in_pool(_solve_budget, worker_args, num_workers)
