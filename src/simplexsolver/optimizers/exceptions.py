"""
Error hierarchy shared by the optimizers in this package.

Every error is fatal to a run: nothing is retried and no partial result is
returned.
"""
from typing import Optional


class OptimizationError(Exception):
    """Base class for all optimizer errors."""


class InvalidConfigurationError(OptimizationError, ValueError):
    """Structurally invalid setup, raised before any evaluation happens."""


class UnsupportedConstraintError(OptimizationError):
    """Constraints were supplied to an algorithm that cannot honor them."""


class BudgetExhaustedError(OptimizationError, RuntimeError):
    """An evaluation or iteration budget was exceeded."""

    what = "budget"

    def __init__(self, max_count: int, message: Optional[str] = None):
        self.max_count = max_count
        super().__init__(message or f"{self.what} budget of {max_count} exhausted")


class TooManyEvaluationsError(BudgetExhaustedError):
    what = "evaluation"


class TooManyIterationsError(BudgetExhaustedError):
    what = "iteration"
