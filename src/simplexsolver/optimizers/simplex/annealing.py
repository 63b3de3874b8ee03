"""
Simulated-annealing perturbation for the simplex search.

While active, the policy proposes a random alternative for a vertex by moving
it a random fraction of the mean displacement toward the other vertices, and
accepts or rejects it with the Metropolis rule.
"""
import math
from typing import Callable, Optional

import numpy as np

from simplexsolver.optimizers.exceptions import InvalidConfigurationError
from simplexsolver.optimizers.simplex.point import PointValuePair

TemperatureSchedule = Callable[[int], float]


def constant_schedule(temperature: float) -> TemperatureSchedule:
    if temperature <= 0:
        raise InvalidConfigurationError(f"temperature must be positive, got {temperature}")
    return lambda iteration: temperature


def exponential_schedule(initial_temp: float, alpha: float) -> TemperatureSchedule:
    """T(k) = initial_temp * alpha**k"""
    if initial_temp <= 0:
        raise InvalidConfigurationError(f"initial_temp must be positive, got {initial_temp}")
    if not 0 < alpha <= 1:
        raise InvalidConfigurationError(f"alpha must lie in (0, 1], got {alpha}")
    return lambda iteration: initial_temp * alpha ** iteration


def linear_schedule(initial_temp: float, horizon: int) -> TemperatureSchedule:
    """Falls linearly from initial_temp, reaching zero one step past the horizon."""
    if initial_temp <= 0:
        raise InvalidConfigurationError(f"initial_temp must be positive, got {initial_temp}")
    if horizon < 0:
        raise InvalidConfigurationError(f"horizon must be non-negative, got {horizon}")
    return lambda iteration: initial_temp * max(0.0, 1.0 - iteration / (horizon + 1))


def logarithmic_schedule(initial_temp: float) -> TemperatureSchedule:
    """T(k) = initial_temp / log(k + e)"""
    if initial_temp <= 0:
        raise InvalidConfigurationError(f"initial_temp must be positive, got {initial_temp}")
    return lambda iteration: initial_temp / math.log(iteration + math.e)


class SimulatedAnnealing:
    """
    Metropolis acceptance policy with a finite horizon.

    Parameters
    ----------
    iteration_horizon : int
        Last iteration (inclusive) at which the policy applies.
    temperature : Callable[[int], float]
        Temperature as a function of the iteration number.
    seed : int, optional
        Seed for a fresh ``numpy.random.Generator``; ignored when ``rng`` is given.
    rng : numpy.random.Generator, optional
        Source of uniform draws.  Only its ``random()`` method is used.
    """

    def __init__(self,
                 iteration_horizon: int,
                 temperature: TemperatureSchedule,
                 seed: Optional[int] = None,
                 rng: Optional[np.random.Generator] = None):
        if iteration_horizon < 0:
            raise InvalidConfigurationError(f"iteration_horizon must be non-negative, got {iteration_horizon}")
        self.iteration_horizon = iteration_horizon
        self.temperature = temperature
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.n_accepted = 0
        self.n_rejected = 0

    def is_active(self, iteration: int) -> bool:
        return iteration <= self.iteration_horizon

    def _next_uniform(self) -> float:
        return float(self.rng.random())

    def alternative(self, simplex, index: int, fun: Callable[[np.ndarray], float]) -> PointValuePair:
        """
        Perturb vertex ``index``: each coordinate moves by ``(u - 0.5)`` times the
        mean offset of the other vertices from it, with one draw ``u`` per
        coordinate.
        """
        points = simplex.points
        x = points[index].point
        offsets = [p.point - x for i, p in enumerate(points) if i != index]
        mean_displacement = np.mean(offsets, axis=0)

        candidate = np.array([x[j] + (self._next_uniform() - 0.5) * mean_displacement[j]
                              for j in range(x.size)])
        return PointValuePair(candidate, fun(candidate))

    def accept(self, current_value: float, candidate_value: float, minimize: bool, iteration: int) -> bool:
        if not self.is_active(iteration):
            return False

        delta = candidate_value - current_value
        if (delta < 0) if minimize else (delta > 0):
            self.n_accepted += 1
            return True

        temperature = self.temperature(iteration)
        u = self._next_uniform()
        accepted = temperature > 0 and u < math.exp(-abs(delta) / temperature)
        if accepted:
            self.n_accepted += 1
        else:
            self.n_rejected += 1
        return accepted

    def __repr__(self):
        return (f"SimulatedAnnealing(iteration_horizon={self.iteration_horizon}, "
                f"n_accepted={self.n_accepted}, n_rejected={self.n_rejected})")
