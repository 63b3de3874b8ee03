from .point import PointValuePair, PointComparator, make_comparator
from .simplex import Simplex, NelderMeadStep, MultiDirectionalStep
from .convergence import ConvergenceChecker, SimpleValueChecker, SimplePointChecker, PointValueChecker
from .annealing import (
    SimulatedAnnealing,
    constant_schedule,
    exponential_schedule,
    linear_schedule,
    logarithmic_schedule,
)
from .observers import OptimizationObserver, NullObserver, LoggingObserver, HistoryObserver
from .optimizer import SimplexOptimizer
from .minimize import minimize_nelder_mead, minimize_multidirectional, minimize_annealed_simplex

__all__ = [
    'minimize_nelder_mead',
    'minimize_multidirectional',
    'minimize_annealed_simplex',
]
