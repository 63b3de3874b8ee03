"""
Simplex direct-search driver with optional simulated-annealing perturbation.

Usage::

    optimizer = SimplexOptimizer(PointValueChecker(1e-10, 1e-10))
    best = optimizer.optimize(ObjectiveFunction(f), InitialGuess([0.0, 0.0]),
                              GoalType.MINIMIZE, MaxEval(1000), Simplex(2))

The result is the best point observed during the whole run.  Once annealing is
active this may no longer be a vertex of the live simplex, since an accepted
perturbation can overwrite the best vertex with a worse one.
"""
from typing import Optional

from simplexsolver.optimizers.base import BaseOptimizer
from simplexsolver.optimizers.exceptions import InvalidConfigurationError, UnsupportedConstraintError
from simplexsolver.optimizers.simplex.annealing import SimulatedAnnealing
from simplexsolver.optimizers.simplex.convergence import ConvergenceChecker, SimpleValueChecker
from simplexsolver.optimizers.simplex.observers import NullObserver, OptimizationObserver
from simplexsolver.optimizers.simplex.point import PointComparator, PointValuePair, make_comparator
from simplexsolver.optimizers.simplex.simplex import Simplex


class SimplexOptimizer(BaseOptimizer):
    """
    Besides the common configuration items, ``optimize`` accepts a ``Simplex``
    (required) and a ``SimulatedAnnealing`` policy (optional).  Bounds are not
    supported.

    Parameters
    ----------
    checker : ConvergenceChecker, optional
        Stopping test applied to every vertex pair.
    rel, abs : float, optional
        Shorthand for ``SimpleValueChecker(rel, abs)`` when no checker is given.
    observer : OptimizationObserver, optional
        Receives progress events.
    """
    item_types = BaseOptimizer.item_types + (Simplex, SimulatedAnnealing)

    def __init__(self,
                 checker: Optional[ConvergenceChecker] = None,
                 rel: Optional[float] = None,
                 abs: Optional[float] = None,
                 observer: Optional[OptimizationObserver] = None):
        if checker is None:
            if rel is None or abs is None:
                raise InvalidConfigurationError("Give either a convergence checker or both rel and abs")
            checker = SimpleValueChecker(rel, abs)
        super().__init__(checker)
        self.observer = observer if observer is not None else NullObserver()
        self.simplex: Optional[Simplex] = None
        self.annealing: Optional[SimulatedAnnealing] = None

    def _parse_item(self, item):
        if isinstance(item, Simplex):
            self.simplex = item
        elif isinstance(item, SimulatedAnnealing):
            self.annealing = item
        else:
            super()._parse_item(item)

    def _check_parameters(self):
        if self.simplex is None:
            raise InvalidConfigurationError("No simplex supplied")
        if self.lower_bound is not None or self.upper_bound is not None:
            raise UnsupportedConstraintError("SimplexOptimizer does not support bounds")
        super()._check_parameters()

    def _do_optimize(self) -> PointValuePair:
        fun = self._counting_objective()
        comparator = make_comparator(self.goal_type)
        simplex = self.simplex

        simplex.build(self.start_point)
        simplex.evaluate(fun, comparator)
        best = simplex.get_point(0)
        self.observer.on_start(simplex)

        previous: list[PointValuePair] = []
        while True:
            iteration = self.iterations
            if iteration > 0 and self._converged(iteration, previous, simplex.points):
                self.observer.on_converged(iteration, best)
                return best

            previous = simplex.points
            simplex.iterate(fun, comparator)
            best = self._better(best, simplex.get_point(0), comparator)

            if self.annealing is not None and self.annealing.is_active(iteration):
                best = self._anneal(iteration, simplex, best, fun, comparator)

            self.observer.on_iteration(iteration, simplex, best)
            self._increment_iteration_count()

    def _converged(self, iteration, previous, current) -> bool:
        return all(self.convergence_checker.converged(iteration, p, c) for p, c in zip(previous, current))

    def _anneal(self, iteration, simplex, best, fun, comparator: PointComparator) -> PointValuePair:
        current = simplex.get_point(0)
        candidate = self.annealing.alternative(simplex, 0, fun)
        accepted = self.annealing.accept(current.value, candidate.value, comparator.is_minimizing, iteration)
        self.observer.on_annealing(iteration, current, candidate, accepted)
        if accepted:
            simplex.set_point(0, candidate)
            best = self._better(best, candidate, comparator)
        return best

    @staticmethod
    def _better(best: PointValuePair, point: PointValuePair, comparator: PointComparator) -> PointValuePair:
        return point if comparator(point, best) < 0 else best
