"""
Optimizer lifecycle shared by the object-style optimizers.

An optimizer is configured with a heterogeneous bundle of configuration items
(objective, start point, goal, bounds, budgets, plus algorithm specific items)
passed to ``optimize``.  Items left out of a later call keep the value from
the previous call.
"""
import enum
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

import numpy as np

from simplexsolver.optimizers.exceptions import (
    InvalidConfigurationError,
    TooManyEvaluationsError,
    TooManyIterationsError,
)


class GoalType(enum.Enum):
    MINIMIZE = "minimize"
    MAXIMIZE = "maximize"


@dataclass(frozen=True)
class ObjectiveFunction:
    fun: Callable[[np.ndarray], float]


@dataclass(frozen=True)
class InitialGuess:
    point: Sequence[float]


@dataclass(frozen=True)
class SimpleBounds:
    lower: Sequence[float]
    upper: Sequence[float]

    @classmethod
    def unbounded(cls, dim: int) -> "SimpleBounds":
        return cls(lower=[-np.inf] * dim, upper=[np.inf] * dim)


@dataclass(frozen=True)
class MaxEval:
    max_eval: int

    def __post_init__(self):
        if self.max_eval <= 0:
            raise InvalidConfigurationError(f"max_eval must be positive, got {self.max_eval}")

    @classmethod
    def unlimited(cls) -> "MaxEval":
        return cls(np.iinfo(np.int64).max)


@dataclass(frozen=True)
class MaxIter:
    max_iter: int

    def __post_init__(self):
        if self.max_iter <= 0:
            raise InvalidConfigurationError(f"max_iter must be positive, got {self.max_iter}")

    @classmethod
    def unlimited(cls) -> "MaxIter":
        return cls(np.iinfo(np.int64).max)


class Incrementor:
    """Counter that raises once it would go past ``max_count``."""

    def __init__(self, max_count: int, error: type):
        self.max_count = max_count
        self.count = 0
        self._error = error

    def increment(self) -> None:
        if self.count >= self.max_count:
            raise self._error(self.max_count)
        self.count += 1

    def reset(self) -> None:
        self.count = 0


class CountingObjective:
    """
    Wraps the raw objective so that every call is charged to the evaluation
    budget.  Raises ``TooManyEvaluationsError`` before calling ``fun`` once the
    budget is spent.
    """

    def __init__(self, fun: Callable[[np.ndarray], float], counter: Incrementor):
        self.fun = fun
        self.counter = counter

    def __call__(self, x: np.ndarray) -> float:
        self.counter.increment()
        return float(self.fun(x))

    @property
    def evaluations(self) -> int:
        return self.counter.count


class BaseOptimizer:
    """
    Parses the configuration bundle and owns the evaluation and iteration
    budgets.  Subclasses implement ``_do_optimize`` and may extend
    ``_parse_item`` and ``item_types`` for their own configuration items.
    """
    item_types: tuple[type, ...] = (ObjectiveFunction, InitialGuess, GoalType, SimpleBounds, MaxEval, MaxIter)

    def __init__(self, checker: Optional[Any] = None):
        self.convergence_checker = checker
        self.goal_type = GoalType.MINIMIZE
        self.start_point: Optional[np.ndarray] = None
        self.lower_bound: Optional[np.ndarray] = None
        self.upper_bound: Optional[np.ndarray] = None
        self._fun: Optional[Callable[[np.ndarray], float]] = None
        self._evaluations = Incrementor(MaxEval.unlimited().max_eval, TooManyEvaluationsError)
        self._iterations = Incrementor(MaxIter.unlimited().max_iter, TooManyIterationsError)

    @property
    def evaluations(self) -> int:
        return self._evaluations.count

    @property
    def iterations(self) -> int:
        return self._iterations.count

    @property
    def max_evaluations(self) -> int:
        return self._evaluations.max_count

    @property
    def max_iterations(self) -> int:
        return self._iterations.max_count

    def optimize(self, *optim_data):
        # Reject the whole bundle before any item is applied
        for item in optim_data:
            if not isinstance(item, self.item_types):
                raise InvalidConfigurationError(f"Unsupported configuration item: {item!r}")
        for item in optim_data:
            self._parse_item(item)
        self._evaluations.reset()
        self._iterations.reset()
        self._check_parameters()
        return self._do_optimize()

    def _parse_item(self, item: Any) -> None:
        if isinstance(item, ObjectiveFunction):
            self._fun = item.fun
        elif isinstance(item, InitialGuess):
            self.start_point = np.array(item.point, dtype=float)
        elif isinstance(item, GoalType):
            self.goal_type = item
        elif isinstance(item, SimpleBounds):
            self.lower_bound = np.array(item.lower, dtype=float)
            self.upper_bound = np.array(item.upper, dtype=float)
        elif isinstance(item, MaxEval):
            self._evaluations = Incrementor(item.max_eval, TooManyEvaluationsError)
        elif isinstance(item, MaxIter):
            self._iterations = Incrementor(item.max_iter, TooManyIterationsError)
        else:
            raise InvalidConfigurationError(f"Unsupported configuration item: {item!r}")

    def _check_parameters(self) -> None:
        if self._fun is None:
            raise InvalidConfigurationError("No objective function supplied")
        if self.start_point is None:
            raise InvalidConfigurationError("No initial guess supplied")
        if self.start_point.ndim != 1 or self.start_point.size == 0:
            raise InvalidConfigurationError("Initial guess must be a non-empty 1-d sequence")
        for bound in (self.lower_bound, self.upper_bound):
            if bound is not None and bound.shape != self.start_point.shape:
                raise InvalidConfigurationError(
                    f"Bound has {bound.size} entries, initial guess has {self.start_point.size}")

    def _counting_objective(self) -> CountingObjective:
        return CountingObjective(self._fun, self._evaluations)

    def _increment_iteration_count(self) -> None:
        self._iterations.increment()

    def _do_optimize(self):
        raise NotImplementedError
