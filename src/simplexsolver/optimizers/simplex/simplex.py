"""
Simplex geometry for direct search.

A ``Simplex`` holds n+1 vertices in n dimensions and delegates one geometric
update per ``iterate`` call to a step strategy chosen at construction:

* ``NelderMeadStep``: reflect / expand / contract / shrink, replacing the worst
  vertex one at a time.
* ``MultiDirectionalStep``: reflect, expand or contract every non-best vertex
  through the best one simultaneously (Torczon's multi-directional search).

After ``evaluate`` and after every ``iterate``, vertex 0 is the best vertex
under the comparator in use.
"""
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Callable, Optional, Sequence

import numpy as np

from simplexsolver.optimizers.exceptions import InvalidConfigurationError
from simplexsolver.optimizers.simplex.point import PointComparator, PointValuePair

Objective = Callable[[np.ndarray], float]


@dataclass(frozen=True)
class NelderMeadStep:
    """
    Nelder-Mead update.

    Parameters
    ----------
    rho : float
        Reflection coefficient.
    khi : float
        Expansion coefficient.
    gamma : float
        Contraction coefficient.
    sigma : float
        Shrinkage coefficient.
    """
    rho: float = 1.0
    khi: float = 2.0
    gamma: float = 0.5
    sigma: float = 0.5

    def __post_init__(self):
        if self.rho <= 0:
            raise InvalidConfigurationError(f"rho must be positive, got {self.rho}")
        if self.khi <= 1 or self.khi <= self.rho:
            raise InvalidConfigurationError(f"khi must exceed 1 and rho, got {self.khi}")
        if not 0 < self.gamma < 1:
            raise InvalidConfigurationError(f"gamma must lie in (0, 1), got {self.gamma}")
        if not 0 < self.sigma < 1:
            raise InvalidConfigurationError(f"sigma must lie in (0, 1), got {self.sigma}")

    def iterate(self, simplex: "Simplex", fun: Objective, comparator: PointComparator) -> None:
        n = simplex.dimension
        best = simplex.get_point(0)
        second_best = simplex.get_point(n - 1)
        worst = simplex.get_point(n)
        x_worst = worst.point

        # Centroid of all vertices but the worst
        centroid = np.mean([p.point for p in simplex.points[:n]], axis=0)

        x_r = centroid + self.rho * (centroid - x_worst)
        reflected = PointValuePair(x_r, fun(x_r))

        if comparator(best, reflected) <= 0 and comparator(reflected, second_best) < 0:
            simplex.replace_worst_point(reflected, comparator)
            return

        if comparator(reflected, best) < 0:
            x_e = centroid + self.khi * (x_r - centroid)
            expanded = PointValuePair(x_e, fun(x_e))
            if comparator(expanded, reflected) < 0:
                simplex.replace_worst_point(expanded, comparator)
            else:
                simplex.replace_worst_point(reflected, comparator)
            return

        if comparator(reflected, worst) < 0:
            # Outside contraction
            x_c = centroid + self.gamma * (x_r - centroid)
            contracted = PointValuePair(x_c, fun(x_c))
            if comparator(contracted, reflected) <= 0:
                simplex.replace_worst_point(contracted, comparator)
                return
        else:
            # Inside contraction
            x_c = centroid - self.gamma * (centroid - x_worst)
            contracted = PointValuePair(x_c, fun(x_c))
            if comparator(contracted, worst) < 0:
                simplex.replace_worst_point(contracted, comparator)
                return

        # Shrink toward the best vertex
        x_best = best.point
        for i in range(1, n + 1):
            x_i = x_best + self.sigma * (simplex.get_point(i).point - x_best)
            simplex.set_point(i, PointValuePair(x_i))
        simplex.evaluate(fun, comparator)


@dataclass(frozen=True)
class MultiDirectionalStep:
    """
    Multi-directional search update.

    Contraction pulls every non-best vertex toward the best one,
    ``x0 + gamma * (xi - x0)``, as in Torczon's method.  Apache Commons Math
    contracts on the reflected side instead (``x0 + gamma * (x0 - xi)``); that
    variant is not reproduced here.

    Parameters
    ----------
    khi : float
        Expansion coefficient.
    gamma : float
        Contraction coefficient.
    """
    khi: float = 2.0
    gamma: float = 0.5

    def __post_init__(self):
        if self.khi <= 1:
            raise InvalidConfigurationError(f"khi must exceed 1, got {self.khi}")
        if not 0 < self.gamma < 1:
            raise InvalidConfigurationError(f"gamma must lie in (0, 1), got {self.gamma}")

    def iterate(self, simplex: "Simplex", fun: Objective, comparator: PointComparator) -> None:
        original = simplex.points
        best = original[0]

        reflected = self._transform(simplex, original, 1.0, fun, comparator)
        if comparator(reflected, best) < 0:
            reflected_points = simplex.points
            expanded = self._transform(simplex, original, self.khi, fun, comparator)
            if comparator(reflected, expanded) <= 0:
                simplex.set_points(reflected_points)
            return

        self._transform(simplex, original, -self.gamma, fun, comparator)

    @staticmethod
    def _transform(simplex: "Simplex", original: Sequence[PointValuePair], coeff: float,
                   fun: Objective, comparator: PointComparator) -> PointValuePair:
        """Move every non-best vertex to x0 + coeff * (x0 - xi) and evaluate the new ones."""
        x0 = original[0].point
        transformed = [original[0]]
        transformed.extend(PointValuePair(x0 + coeff * (x0 - p.point)) for p in original[1:])
        simplex.set_points(transformed)
        simplex.evaluate(fun, comparator)
        return simplex.get_point(0)


SimplexStep = NelderMeadStep | MultiDirectionalStep


class Simplex:
    """
    Working geometry of the direct search.

    The initial layout is fixed at construction, by exactly one of:

    * ``n`` (with optional ``side_length``, default 1.0): vertex i is offset by
      ``side_length`` along coordinates ``0 .. i-1``;
    * ``steps``: vertex i is offset by ``steps[0 .. i-1]``;
    * ``reference``: n+1 vertices whose offsets from the first one are reused.

    ``side_length`` is rejected alongside ``steps`` or ``reference``.
    ``build`` anchors the layout at a start point.
    """

    def __init__(self,
                 n: Optional[int] = None,
                 side_length: Optional[float] = None,
                 *,
                 steps: Optional[Sequence[float]] = None,
                 reference: Optional[Sequence[Sequence[float]]] = None,
                 step: Optional[SimplexStep] = None):
        given = sum(arg is not None for arg in (n, steps, reference))
        if given != 1:
            raise InvalidConfigurationError("Specify exactly one of n, steps or reference")
        if side_length is not None and n is None:
            raise InvalidConfigurationError("side_length only applies to a layout given by n")

        if reference is not None:
            self._start_configuration = self._configuration_from_reference(reference)
        else:
            if steps is None:
                if n < 1:
                    raise InvalidConfigurationError(f"Dimension must be at least 1, got {n}")
                side_length = 1.0 if side_length is None else side_length
                if side_length <= 0:
                    raise InvalidConfigurationError(f"side_length must be positive, got {side_length}")
                steps = [side_length] * n
            self._start_configuration = self._configuration_from_steps(steps)

        self.step = step if step is not None else NelderMeadStep()
        self._vertices: list[PointValuePair] = []

    @staticmethod
    def _configuration_from_steps(steps: Sequence[float]) -> np.ndarray:
        steps = np.asarray(steps, dtype=float)
        if steps.ndim != 1 or steps.size == 0:
            raise InvalidConfigurationError("steps must be a non-empty 1-d sequence")
        if np.any(steps == 0):
            raise InvalidConfigurationError("steps must not contain zeros")
        # Row i holds the offset of vertex i+1: the first i+1 steps
        return np.tril(np.tile(steps, (steps.size, 1)))

    @staticmethod
    def _configuration_from_reference(reference: Sequence[Sequence[float]]) -> np.ndarray:
        try:
            ref = np.array(reference, dtype=float)
        except ValueError as e:
            raise InvalidConfigurationError(f"Reference simplex is ragged: {e}") from e
        if ref.ndim != 2 or ref.shape[0] < 2:
            raise InvalidConfigurationError("Reference simplex needs at least two vertices")
        if ref.shape[0] != ref.shape[1] + 1:
            raise InvalidConfigurationError(
                f"Reference simplex in {ref.shape[1]} dimensions needs {ref.shape[1] + 1} vertices, "
                f"got {ref.shape[0]}")
        for i in range(1, ref.shape[0]):
            for j in range(i):
                if np.array_equal(ref[i], ref[j]):
                    raise InvalidConfigurationError(f"Reference vertices {j} and {i} are equal")
        offsets = ref[1:] - ref[0]
        if np.linalg.matrix_rank(offsets) < offsets.shape[1]:
            raise InvalidConfigurationError("Reference simplex is degenerate")
        return offsets

    @property
    def dimension(self) -> int:
        return self._start_configuration.shape[1]

    @property
    def size(self) -> int:
        return self.dimension + 1

    def get_size(self) -> int:
        return self.size

    @property
    def points(self) -> list[PointValuePair]:
        return list(self._vertices)

    def get_points(self) -> list[PointValuePair]:
        return self.points

    def get_point(self, index: int) -> PointValuePair:
        self._check_index(index)
        return self._vertices[index]

    def set_point(self, index: int, point: PointValuePair) -> None:
        self._check_index(index)
        self._check_dimension(point)
        self._vertices[index] = point

    def set_points(self, points: Sequence[PointValuePair]) -> None:
        if len(points) != self.size:
            raise InvalidConfigurationError(f"Expected {self.size} vertices, got {len(points)}")
        for point in points:
            self._check_dimension(point)
        self._vertices = list(points)

    def build(self, start_point: Sequence[float]) -> None:
        start = np.asarray(start_point, dtype=float)
        if start.shape != (self.dimension,):
            raise InvalidConfigurationError(
                f"Simplex has dimension {self.dimension}, start point has shape {start.shape}")
        self._vertices = [PointValuePair(start)]
        self._vertices.extend(PointValuePair(start + offset) for offset in self._start_configuration)

    def evaluate(self, fun: Objective, comparator: PointComparator) -> None:
        self._vertices = [p if p.is_evaluated else p.evaluated(fun) for p in self._vertices]
        self._order(comparator)

    def iterate(self, fun: Objective, comparator: PointComparator) -> None:
        # set_point may have displaced the best vertex
        self._order(comparator)
        self.step.iterate(self, fun, comparator)

    def replace_worst_point(self, point: PointValuePair, comparator: PointComparator) -> None:
        """Insert ``point`` at its rank among the first n vertices, dropping the worst."""
        n = self.dimension
        for i in range(n):
            if comparator(self._vertices[i], point) > 0:
                self._vertices[i], point = point, self._vertices[i]
        self._vertices[n] = point

    def _order(self, comparator: PointComparator) -> None:
        self._vertices.sort(key=cmp_to_key(comparator))

    def _check_index(self, index: int) -> None:
        if not self._vertices:
            raise InvalidConfigurationError("Simplex has not been built")
        if not 0 <= index < self.size:
            raise IndexError(f"Vertex index {index} out of range [0, {self.size})")

    def _check_dimension(self, point: PointValuePair) -> None:
        if point.dimension != self.dimension:
            raise InvalidConfigurationError(
                f"Vertex has dimension {point.dimension}, simplex has {self.dimension}")

    def __repr__(self):
        return f"Simplex(dimension={self.dimension}, step={self.step!r}, vertices={self._vertices!r})"
