import numpy as np
from typing import Callable, Annotated, Optional
from simplexsolver.utils import Interval
from simplexsolver.optimizers.base import GoalType, InitialGuess, MaxEval, ObjectiveFunction
from simplexsolver.optimizers.simplex.annealing import SimulatedAnnealing, exponential_schedule
from simplexsolver.optimizers.simplex.convergence import SimpleValueChecker
from simplexsolver.optimizers.simplex.observers import LoggingObserver
from simplexsolver.optimizers.simplex.optimizer import SimplexOptimizer
from simplexsolver.optimizers.simplex.simplex import MultiDirectionalStep, NelderMeadStep, Simplex


def _run(fun, initial_guess, simplex, checker, max_eval, annealing=None) -> np.ndarray:
    x0 = np.asarray(initial_guess, dtype=float)
    optim_data = [ObjectiveFunction(fun), InitialGuess(x0), GoalType.MINIMIZE, simplex,
                  MaxEval(max_eval) if max_eval is not None else MaxEval.unlimited()]
    if annealing is not None:
        optim_data.append(annealing)
    best = SimplexOptimizer(checker, observer=LoggingObserver()).optimize(*optim_data)
    return np.array(best.point)


def minimize_nelder_mead(
    fun: Callable[[np.ndarray], float],
    initial_guess: np.ndarray,
    side_length: Annotated[float, Interval(low=0.05, high=5.0, log=True)] = 1.0,
    rho: Annotated[float, Interval(low=0.5, high=1.5, step=0.1, log=False)] = 1.0,
    gamma: Annotated[float, Interval(low=0.2, high=0.8, step=0.05, log=False)] = 0.5,
    khi: float = 2.0,
    sigma: float = 0.5,
    rtol: float = 1e-10,
    atol: float = 1e-12,
    max_iter: int = 5000,
    max_eval: Optional[int] = None
) -> np.ndarray:
    """
    Nelder-Mead simplex search.

    Parameters
    ----------
    fun : Callable[[np.ndarray], float]
        Objective to minimize.
    initial_guess : np.ndarray
        Starting point; becomes the first vertex of the simplex.
    side_length : float
        Edge length of the initial simplex.
    rho, khi, gamma, sigma : float
        Reflection, expansion, contraction and shrink coefficients.
    rtol, atol : float
        Relative and absolute tolerance on vertex values between iterations.
    max_iter : int
        Iteration after which the search is declared converged.
    max_eval : int, optional
        Evaluation budget; exceeding it raises ``TooManyEvaluationsError``.

    Returns
    -------
    np.ndarray
        Best point found.
    """
    simplex = Simplex(len(initial_guess), side_length,
                      step=NelderMeadStep(rho=rho, khi=khi, gamma=gamma, sigma=sigma))
    checker = SimpleValueChecker(rtol, atol, max_iter=max_iter)
    return _run(fun, initial_guess, simplex, checker, max_eval)


def minimize_multidirectional(
    fun: Callable[[np.ndarray], float],
    initial_guess: np.ndarray,
    side_length: Annotated[float, Interval(low=0.05, high=5.0, log=True)] = 1.0,
    khi: Annotated[float, Interval(low=1.2, high=3.0, step=0.1, log=False)] = 2.0,
    gamma: Annotated[float, Interval(low=0.2, high=0.8, step=0.05, log=False)] = 0.5,
    rtol: float = 1e-10,
    atol: float = 1e-12,
    max_iter: int = 5000,
    max_eval: Optional[int] = None
) -> np.ndarray:
    """
    Multi-directional simplex search: every non-best vertex is reflected,
    expanded or contracted through the best one at each iteration.

    Returns
    -------
    np.ndarray
        Best point found.
    """
    simplex = Simplex(len(initial_guess), side_length, step=MultiDirectionalStep(khi=khi, gamma=gamma))
    checker = SimpleValueChecker(rtol, atol, max_iter=max_iter)
    return _run(fun, initial_guess, simplex, checker, max_eval)


def minimize_annealed_simplex(
    fun: Callable[[np.ndarray], float],
    initial_guess: np.ndarray,
    side_length: Annotated[float, Interval(low=0.05, high=5.0, log=True)] = 1.0,
    initial_temp: Annotated[float, Interval(low=0.01, high=100.0, log=True)] = 1.0,
    alpha: Annotated[float, Interval(low=0.8, high=0.99, step=0.01, log=False)] = 0.95,
    iteration_horizon: Annotated[int, Interval(low=10, high=500, step=10, log=False)] = 100,
    rtol: float = 1e-10,
    atol: float = 1e-12,
    max_iter: int = 5000,
    max_eval: Optional[int] = None,
    seed: int = None
) -> np.ndarray:
    """
    Nelder-Mead search whose best vertex is perturbed by simulated annealing
    for the first ``iteration_horizon`` iterations.

    Parameters
    ----------
    fun : Callable[[np.ndarray], float]
        Objective to minimize.
    initial_guess : np.ndarray
        Starting point.
    side_length : float
        Edge length of the initial simplex.
    initial_temp : float
        Temperature at iteration 0.
    alpha : float
        Multiplicative cooling factor per iteration.
    iteration_horizon : int
        Last iteration at which annealing is applied.
    rtol, atol : float
        Relative and absolute tolerance on vertex values between iterations.
    max_iter : int
        Iteration after which the search is declared converged.
    max_eval : int, optional
        Evaluation budget; exceeding it raises ``TooManyEvaluationsError``.
    seed : int, optional
        RNG seed for reproducibility.

    Returns
    -------
    np.ndarray
        Best point observed during the run.
    """
    simplex = Simplex(len(initial_guess), side_length)
    annealing = SimulatedAnnealing(iteration_horizon, exponential_schedule(initial_temp, alpha), seed=seed)
    checker = SimpleValueChecker(rtol, atol, max_iter=max_iter)
    return _run(fun, initial_guess, simplex, checker, max_eval, annealing=annealing)
