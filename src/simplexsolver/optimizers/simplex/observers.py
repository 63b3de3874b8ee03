"""
Telemetry for the simplex driver.  The driver never prints; it reports to an
observer instead.
"""
import logging
from dataclasses import dataclass, field
from typing import Protocol

from simplexsolver.optimizers.simplex.point import PointValuePair

logger = logging.getLogger("simplexsolver.optimizers.simplex")


class OptimizationObserver(Protocol):
    def on_start(self, simplex) -> None: ...

    def on_iteration(self, iteration: int, simplex, best: PointValuePair) -> None: ...

    def on_annealing(self, iteration: int, current: PointValuePair, candidate: PointValuePair,
                     accepted: bool) -> None: ...

    def on_converged(self, iteration: int, best: PointValuePair) -> None: ...


class NullObserver:
    def on_start(self, simplex):
        pass

    def on_iteration(self, iteration, simplex, best):
        pass

    def on_annealing(self, iteration, current, candidate, accepted):
        pass

    def on_converged(self, iteration, best):
        pass


class LoggingObserver:
    """Forwards driver events to the ``simplexsolver.optimizers.simplex`` logger."""

    def __init__(self, level: int = logging.DEBUG):
        self.level = level

    def on_start(self, simplex):
        logger.log(self.level, "Initial simplex: dimension=%d, best value=%r",
                   simplex.dimension, simplex.get_point(0).value)

    def on_iteration(self, iteration, simplex, best):
        logger.log(self.level, "Iteration %d: vertex 0 value=%r, best value=%r",
                   iteration, simplex.get_point(0).value, best.value)

    def on_annealing(self, iteration, current, candidate, accepted):
        logger.log(self.level, "Iteration %d: annealing %s candidate value=%r against %r",
                   iteration, "accepted" if accepted else "rejected", candidate.value, current.value)

    def on_converged(self, iteration, best):
        logger.info("Converged after %d iterations: best value=%r at %s",
                    iteration, best.value, best.point.tolist())


@dataclass
class HistoryObserver:
    """Keeps the best value after every iteration and every annealing decision."""
    best_values: list[float] = field(default_factory=list)
    annealing_decisions: list[tuple[int, float, float, bool]] = field(default_factory=list)
    converged_at: int | None = None

    def on_start(self, simplex):
        self.best_values.clear()
        self.annealing_decisions.clear()
        self.converged_at = None

    def on_iteration(self, iteration, simplex, best):
        self.best_values.append(best.value)

    def on_annealing(self, iteration, current, candidate, accepted):
        self.annealing_decisions.append((iteration, current.value, candidate.value, accepted))

    def on_converged(self, iteration, best):
        self.converged_at = iteration

    @property
    def n_accepted(self) -> int:
        return sum(1 for *_, accepted in self.annealing_decisions if accepted)
