"""
Process pool used by the parameter sweeps.

Sweep points share nothing, so each one runs as an independent call in its
own process; results come back in input order as return values.
"""

import logging
import multiprocessing as mp
from typing import Callable, List, Sequence, TypeVar

from .exceptions import InvalidConfigurationError

logger = logging.getLogger(__name__)

A = TypeVar("A")
R = TypeVar("R")


def map_in_pool(func: Callable[[A], R], worker_args: Sequence[A], num_workers: int = 1) -> List[R]:
    """
    `[func(a) for a in worker_args]`, on a "spawn" pool when `num_workers` > 1.

    `func` must be a module-level function so spawned workers can import it.
    """
    if num_workers < 1:
        raise InvalidConfigurationError(f"num_workers must be >= 1, got {num_workers}")
    if num_workers == 1 or len(worker_args) <= 1:
        return [func(a) for a in worker_args]

    processes = min(num_workers, len(worker_args))
    logger.info("Dispatching %d sweep points to %d workers", len(worker_args), processes)
    ctx = mp.get_context("spawn")
    with ctx.Pool(processes=processes) as pool:
        return pool.map(func, worker_args)
