"""
Method-of-lines discretisation of the 2D Brusselator on a periodic grid.

The package exposes:

- Grid2D: periodic ``N x N`` grid on the unit square
- BrusselatorParameters: rate constants, diffusion and grid spacing
- Forcing: switched-on disc source term for the ``U`` equation
- Brusselator2DEvaluator: in-place right-hand-side kernel
- BrusselatorProblem: ``solve_ivp`` wrapper with sparse Jacobian support
- find_steady_state: Newton-Krylov steady states with ILU preconditioning
"""

from .errors import BrusselatorError, InvalidParameter, LinearSolveError, ShapeMismatch
from .grid import Grid2D, wrap_index
from .parameters import BrusselatorParameters
from .forcing import Forcing
from .evaluator import Brusselator2DEvaluator, periodic_laplacian
from .ic import InitialCondition2D, reference_initial_state
from .sparse_ops import (
    build_periodic_1d_second_difference,
    build_periodic_2d_laplacian,
    jacobian_sparsity,
)
from .jacobian import assemble_jacobian
from .linalg import ilu_preconditioner, newton_matrix, solve_linear, thomas_solve
from .problem import BrusselatorProblem
from .steady import find_steady_state
from .json_loader import build_problem_from_dict, load_from_json
from .dataset import ParameterRange, ParameterSampler, generate_dataset

__all__ = [
    "BrusselatorError",
    "InvalidParameter",
    "LinearSolveError",
    "ShapeMismatch",
    "Grid2D",
    "wrap_index",
    "BrusselatorParameters",
    "Forcing",
    "Brusselator2DEvaluator",
    "periodic_laplacian",
    "InitialCondition2D",
    "reference_initial_state",
    "build_periodic_1d_second_difference",
    "build_periodic_2d_laplacian",
    "jacobian_sparsity",
    "assemble_jacobian",
    "ilu_preconditioner",
    "newton_matrix",
    "solve_linear",
    "thomas_solve",
    "BrusselatorProblem",
    "find_steady_state",
    "build_problem_from_dict",
    "load_from_json",
    "ParameterRange",
    "ParameterSampler",
    "generate_dataset",
]
