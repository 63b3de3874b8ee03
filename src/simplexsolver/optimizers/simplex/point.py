import math
from dataclasses import dataclass, field
from typing import Callable

import numpy as np

from simplexsolver.optimizers.base import GoalType


@dataclass(frozen=True, eq=False)
class PointValuePair:
    """
    Immutable vertex: a read-only coordinate array and its objective value.
    ``value`` is nan until the point has been evaluated.
    """
    point: np.ndarray
    value: float = field(default=math.nan)

    def __post_init__(self):
        coords = np.array(self.point, dtype=float)
        coords.setflags(write=False)
        object.__setattr__(self, "point", coords)
        object.__setattr__(self, "value", float(self.value))

    @property
    def is_evaluated(self) -> bool:
        return not math.isnan(self.value)

    @property
    def dimension(self) -> int:
        return self.point.size

    def evaluated(self, fun: Callable[[np.ndarray], float]) -> "PointValuePair":
        return PointValuePair(self.point, fun(self.point))

    def __repr__(self):
        return f"PointValuePair(point={self.point.tolist()}, value={self.value!r})"


@dataclass(frozen=True)
class PointComparator:
    """
    Orders points best-first for the given goal.  Unevaluated (nan) values
    rank worst under both goals; equal values compare equal.
    """
    goal: GoalType = GoalType.MINIMIZE

    @property
    def is_minimizing(self) -> bool:
        return self.goal is GoalType.MINIMIZE

    def __call__(self, a: PointValuePair, b: PointValuePair) -> int:
        a_nan, b_nan = math.isnan(a.value), math.isnan(b.value)
        if a_nan or b_nan:
            return int(a_nan) - int(b_nan)
        sign = 1 if self.is_minimizing else -1
        if a.value < b.value:
            return -sign
        if a.value > b.value:
            return sign
        return 0


def make_comparator(goal: GoalType = GoalType.MINIMIZE) -> PointComparator:
    return PointComparator(goal)
