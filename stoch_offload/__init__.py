"""
stoch_offload
=============

Stochastic computation-offloading policies for a single user equipment:

- `OffloadingSystemConfig` and friends – immutable configuration
- `UserEquipmentState`, `Action`, `all_states` – state/action model
- `DTMCCreator` – symbolic Markov chain over the state space
- `IndependentTransitionCalculator` – symbol values -> transition probabilities
- `OptimalPolicyFinder`, `RangedOptimalPolicyFinder` – LP-optimal policies
- `Simulator` – tick-by-tick policy replay
- `RangedAlphaTester` – alpha sweeps against the baselines
"""

from .EnvConfig import EnvConfig  # noqa: F401
from .config import (  # noqa: F401
    Constant,
    EnvironmentParameters,
    Linspace,
    OffloadingSystemConfig,
    ParameterRange,
    UserEquipmentComponentsConfig,
    UserEquipmentConfig,
    UserEquipmentStateConfig,
)
from .exceptions import (  # noqa: F401
    InfeasiblePolicyError,
    InvalidConfigurationError,
    InvalidStateError,
    InvalidTransitionError,
    OffloadingError,
    PolicySolverError,
    UnknownSymbolError,
)
from .symbols import ParameterSymbol, symbol_mapping  # noqa: F401
from .models import (  # noqa: F401
    Action,
    ActionKind,
    UserEquipmentState,
    UserEquipmentStateManager,
    all_states,
)
from .dtmc import DTMCCreator, DiscreteTimeMarkovChain  # noqa: F401
from .transition_calculator import IndependentTransitionCalculator  # noqa: F401
from .policy import (  # noqa: F401
    ALL_BASELINES,
    GreedyLocalFirstPolicy,
    GreedyOffloadFirstPolicy,
    LocalOnlyPolicy,
    Policy,
    StochasticPolicy,
    TransmitOnlyPolicy,
)
from .lp import OptimalPolicyFinder, RangedOptimalPolicyFinder  # noqa: F401
from .sim import SimulationResult, Simulator  # noqa: F401
from .evaluation import evaluate_policy  # noqa: F401
from .ranged_tester import RangedAlphaTester  # noqa: F401
from .scenario_config import ALL_SCENARIOS, get_scenario, list_scenarios  # noqa: F401
