from .scipy_opt import minimize_scipy_nelder_mead

__all__ = ['minimize_scipy_nelder_mead']
