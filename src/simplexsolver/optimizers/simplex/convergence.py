"""
Stopping tests.

A checker compares the vertex at one index of the previous simplex with the
vertex at the same index of the current one.  The driver only stops once every
index passes.
"""
from typing import Optional, Protocol

import numpy as np

from simplexsolver.optimizers.exceptions import InvalidConfigurationError
from simplexsolver.optimizers.simplex.point import PointValuePair


class ConvergenceChecker(Protocol):
    def converged(self, iteration: int, previous: PointValuePair, current: PointValuePair) -> bool:
        ...


class _ToleranceChecker:
    """
    Shared threshold handling.  A difference passes when it is within ``rel``
    times the larger magnitude, or within ``abs``.  With ``max_iter`` set, every
    pair passes from that iteration on.
    """

    def __init__(self, rel: float, abs: float, max_iter: Optional[int] = None):
        if rel < 0 or abs < 0:
            raise InvalidConfigurationError(f"Tolerances must be non-negative, got rel={rel}, abs={abs}")
        if max_iter is not None and max_iter <= 0:
            raise InvalidConfigurationError(f"max_iter must be positive, got {max_iter}")
        self.rel = rel
        self.abs = abs
        self.max_iter = max_iter

    def _within(self, p, c) -> bool:
        p = np.asarray(p, dtype=float)
        c = np.asarray(c, dtype=float)
        diff = np.abs(p - c)
        size = np.maximum(np.abs(p), np.abs(c))
        return bool(np.all((diff <= size * self.rel) | (diff <= self.abs)))

    def _iteration_limit_reached(self, iteration: int) -> bool:
        return self.max_iter is not None and iteration >= self.max_iter

    def converged(self, iteration: int, previous: PointValuePair, current: PointValuePair) -> bool:
        if self._iteration_limit_reached(iteration):
            return True
        return self._compare(previous, current)

    def _compare(self, previous: PointValuePair, current: PointValuePair) -> bool:
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}(rel={self.rel!r}, abs={self.abs!r}, max_iter={self.max_iter!r})"


class SimpleValueChecker(_ToleranceChecker):
    """Converged when the objective values agree."""

    def _compare(self, previous, current):
        return self._within(previous.value, current.value)


class SimplePointChecker(_ToleranceChecker):
    """Converged when every coordinate agrees."""

    def _compare(self, previous, current):
        return self._within(previous.point, current.point)


class PointValueChecker(_ToleranceChecker):
    """Converged when both the objective values and every coordinate agree."""

    def _compare(self, previous, current):
        return self._within(previous.value, current.value) and self._within(previous.point, current.point)
