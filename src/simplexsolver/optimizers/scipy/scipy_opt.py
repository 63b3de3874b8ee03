import numpy as np
from typing import Callable, Annotated
from scipy.optimize import minimize as _scipy_minimize
from simplexsolver.utils import Interval


def minimize_scipy_nelder_mead(
    fun: Callable[[np.ndarray], float],
    initial_guess: np.ndarray,
    side_length: Annotated[float, Interval(low=0.05, high=5.0, log=True)] = 1.0,
    adaptive: bool = False,
    xatol: float = 1e-10,
    fatol: float = 1e-12,
    maxiter: int = 5000
) -> np.ndarray:
    """
    SciPy Nelder-Mead wrapper, kept as a reference point for benchmarks.

    Parameters
    ----------
    fun : Callable[[np.ndarray], float]
        Objective to minimize.
    initial_guess : np.ndarray
        Starting point (shape (n_dim,)).
    side_length : float
        Edge length of the initial simplex, laid out like ``Simplex(n, side_length)``.
    adaptive : bool
        Use dimension-dependent coefficients.
    xatol, fatol : float
        Absolute tolerances on the simplex spread in x and f.
    maxiter : int
        Maximum number of iterations.

    Returns
    -------
    np.ndarray
        Estimated minimizer.
    """
    x0 = np.asarray(initial_guess, dtype=float)
    n = x0.size
    initial_simplex = np.vstack([x0, x0 + np.tril(np.full((n, n), side_length))])

    res = _scipy_minimize(
        fun,
        x0,
        method="Nelder-Mead",
        options={
            "initial_simplex": initial_simplex,
            "adaptive": adaptive,
            "xatol": xatol,
            "fatol": fatol,
            "maxiter": maxiter,
        }
    )

    return np.asarray(res.x)
