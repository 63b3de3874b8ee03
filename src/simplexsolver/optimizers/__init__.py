# Import all optimizers from subdirectories
from .simplex import *
from .scipy import *

# Combine all __all__ lists from subdirectories
__all__ = []

# Add simplex optimizers
from simplexsolver.optimizers.simplex import __all__ as simplex_all
__all__.extend(simplex_all)

# Add the SciPy reference implementation
from simplexsolver.optimizers.scipy import __all__ as scipy_all
__all__.extend(scipy_all)

# Create a mapping of optimizer names to functions
OPTIMIZERS = {}

# Build the mapping from the imported functions
for name in __all__:
    if name.startswith('minimize_'):
        OPTIMIZERS[name] = globals()[name]

# Now you can import any optimizer like:
# from simplexsolver.optimizers import minimize_nelder_mead, minimize_annealed_simplex
# Or access the mapping: from simplexsolver.optimizers import OPTIMIZERS
