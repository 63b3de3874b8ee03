import numpy as np
from inspect import signature
from typing import Callable, Annotated, get_origin, get_args
from simplexsolver.function_generators import fun_nonlinear as fun_generator


class Interval:
    """
    Tunable range of a hyperparameter, attached with typing.Annotated and read by
    the Optuna tuner in ``evaluator``.
    ``step`` is a grid spacing; it cannot be combined with ``log=True``, which also
    needs a positive lower end.
    """
    def __init__(self, low: int | float, high: int | float, step: int | float | None=None, log: bool=False):
        if not low < high:
            raise ValueError(f"Interval needs low < high, got [{low}, {high}]")
        if log and (step is not None or low <= 0):
            raise ValueError("A log-scaled interval needs low > 0 and no step")
        if step is not None and step <= 0:
            raise ValueError(f"step must be positive, got {step}")
        self.low = low
        self.high = high
        self.step = step
        self.log = log

    def __contains__(self, value) -> bool:
        return self.low <= value <= self.high

    def __repr__(self):
        return f"Interval(low={self.low}, high={self.high}, step={self.step}, log={self.log})"


def tunable_parameters(optimizer: Callable) -> dict[str, Interval]:
    """Interval-annotated hyperparameters of a ``minimize_*`` function, by name."""
    tunables = {}
    for name, param in signature(optimizer).parameters.items():
        if get_origin(param.annotation) is Annotated:
            meta = get_args(param.annotation)[1]
            if isinstance(meta, Interval):
                tunables[name] = meta
    return tunables


def check_optimizer_annotations(optimizer: Callable):
    tunables = tunable_parameters(optimizer)
    if not tunables:
        raise ValueError(f"{optimizer.__name__} has no Annotated parameters with Interval")

    # Untuned runs use the defaults, so they must be inside the tuning range
    params = signature(optimizer).parameters
    for name, interval in tunables.items():
        if params[name].default not in interval:
            raise ValueError(f"{optimizer.__name__}: default {name}={params[name].default} outside {interval}")


def check_optimizer_function(optimizer: Callable, func_name: str = 'rastrigin', n_dims: int = 5):
    test_func, optimum_x = fun_generator.get_function_and_optimum(func_name, n_dims=n_dims)
    x0 = np.zeros(n_dims)
    result_x = optimizer(fun=test_func, initial_guess=x0)
    assert isinstance(result_x, np.ndarray), f"Didn't return numpy array"
    assert result_x.shape == (n_dims,), f"Returned shape {result_x.shape}, expected ({n_dims},)"
    assert np.all(np.isfinite(result_x)), f"Returned non-finite values in x estimate"

    result_f = test_func(result_x)
    assert np.isfinite(result_f), f"Produced solution with non-finite function value"

    # A direct search never returns something worse than where it started
    assert result_f <= test_func(x0), f"Result is worse than the initial guess"
